"""
WebSocket endpoint for dashboard events.

    /ws?token=<access token>

The token is checked before the handshake is accepted; a bad or missing
token closes the socket with 4401. Clients may send {"event": "ping"}.
"""
import json
import logging
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session
from app.auth import user_from_token
from app.dependencies import get_db, get_hub
from app.errors import AppError
from app.realtime.hub import ConnectionHub

logger = logging.getLogger(__name__)

router = APIRouter()

AUTH_FAILED = 4401

@router.websocket("/ws")
async def dashboard_events(
    websocket: WebSocket,
    db: Session = Depends(get_db),
    hub: ConnectionHub = Depends(get_hub)
):
    token = websocket.query_params.get("token")
    if not token:
        auth_header = websocket.headers.get("authorization", "")
        if auth_header.lower().startswith("bearer "):
            token = auth_header[7:]
    if not token:
        await websocket.close(code=AUTH_FAILED, reason="Authentication error")
        return

    try:
        user = user_from_token(db, token)
    except AppError as e:
        logger.info(f"Rejected realtime connection: {e.message}")
        await websocket.close(code=AUTH_FAILED, reason="Authentication error")
        return
    user_id, role = user.id, user.role
    # Release the pooled connection; the socket may stay open for hours
    db.close()

    await websocket.accept()
    group = await hub.register(websocket, user_id, role)
    if group is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    logger.info(f"User connected: {user_id} ({group})")

    try:
        await websocket.send_json({"event": "connected", "data": {"userId": user_id, "group": group}})
        while True:
            raw = await websocket.receive_text()
            try:
                message = json.loads(raw)
            except ValueError:
                continue
            if isinstance(message, dict) and message.get("event") == "ping":
                await websocket.send_json({"event": "pong", "data": None})
    except WebSocketDisconnect:
        pass
    finally:
        await hub.unregister(websocket)
        logger.info(f"User disconnected: {user_id}")
