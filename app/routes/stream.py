import logging
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app.auth import create_stream_token, decode_token, get_current_user
from app.dependencies import get_db, get_stream_client
from app.db.models.user import User
from app.db.schemas.common import Envelope, ok
from app.db.schemas.stream import StreamSession, StreamTokenCheck, StreamUrls
from app.errors import ExternalServiceFailure, Unauthorized, ValidationError
from app.routes.cameras import get_accessible_camera
from app.services.go2rtc import Go2RTCClient

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/stream",
    tags=["stream"]
)

@router.get("/{camera_id}", response_model=Envelope[StreamSession])
async def get_stream(
    camera_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    streams: Go2RTCClient = Depends(get_stream_client)
):
    """
    Make sure the camera's stream exists on go2rtc and hand back
    playback URLs plus a short-lived stream token.
    """
    camera = get_accessible_camera(db, user, camera_id)

    if not await streams.is_available():
        raise ExternalServiceFailure(
            "Streaming service is not available. Please ensure go2rtc is running.",
            code="STREAM_SERVER_UNAVAILABLE"
        )

    source = camera.stream_url or camera.ip_address
    if not source:
        raise ValidationError(
            "Camera does not have a stream URL configured. Please add an RTSP URL.",
            code="NO_STREAM_SOURCE"
        )

    stream_id = camera.id
    ready = streams.is_ready(await streams.get_stream_info(stream_id))
    if not ready:
        logger.info(f"Registering stream {stream_id} with source {source}")
        await streams.add_stream(stream_id, source)
        ready = await streams.wait_for_stream_ready(stream_id)
        if not ready:
            logger.warning(f"Stream {stream_id} registered but not ready yet")

    token = create_stream_token(camera.id, user.id, camera.store_id)
    return ok(StreamSession(
        camera_id=camera.id,
        stream_id=stream_id,
        ready=ready,
        token=token,
        urls=StreamUrls(**streams.generate_stream_urls(stream_id)),
    ))

@router.get("/{camera_id}/validate", response_model=Envelope[StreamTokenCheck])
def validate_stream_token(camera_id: str, token: str = Query(...)):
    """Checks a stream token handed out by GET /api/stream/{camera_id}"""
    payload = decode_token(token)
    if payload.get("type") != "stream" or payload.get("cameraId") != camera_id:
        raise Unauthorized("Token does not grant access to this camera")
    return ok(StreamTokenCheck(valid=True, camera_id=camera_id, store_id=payload.get("storeId")))
