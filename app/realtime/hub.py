"""
Realtime fan-out for dashboard WebSocket connections.

Connections are grouped by principal:

    client:<user_id>  every browser tab of one store owner
    admin             every connected administrator

Events are JSON frames ``{"event": <name>, "data": <payload>}``:

    alert:new       full alert object
    alert:resolved  alert id
    siren:status    {"storeId", "status"}
    camera:status   {"cameraId", "status"}

Delivery is best effort. A connection that fails a send is dropped from
every group; clients re-poll the REST API after reconnecting.
"""
import asyncio
import json
import logging
from typing import Any, Dict, Optional, Protocol, Set

from fastapi import WebSocket
from fastapi.encoders import jsonable_encoder

from app.db.models.enums import UserRole

logger = logging.getLogger(__name__)

ADMIN_GROUP = "admin"


def client_group(user_id: str) -> str:
    return f"client:{user_id}"


def group_for(user_id: str, role: UserRole) -> Optional[str]:
    if role == UserRole.ADMIN:
        return ADMIN_GROUP
    if role == UserRole.CLIENT and user_id:
        return client_group(user_id)
    return None


class FanoutChannel(Protocol):
    """What the alert lifecycle needs from the realtime layer."""

    async def emit_to_client(self, user_id: str, event: str, payload: Any) -> int:
        ...

    async def emit_to_admins(self, event: str, payload: Any) -> int:
        ...


class ConnectionHub:
    def __init__(self) -> None:
        self._groups: Dict[str, Set[WebSocket]] = {}
        self._lock = asyncio.Lock()

    async def register(self, websocket: WebSocket, user_id: str, role: UserRole) -> Optional[str]:
        """Place an authenticated connection in its group; returns the group name."""
        group = group_for(user_id, role)
        if group is None:
            return None
        async with self._lock:
            self._groups.setdefault(group, set()).add(websocket)
        logger.info(f"Realtime connection registered in {group}")
        return group

    async def unregister(self, websocket: WebSocket) -> None:
        async with self._lock:
            for group in list(self._groups):
                members = self._groups[group]
                members.discard(websocket)
                if not members:
                    del self._groups[group]

    def connection_count(self, group: Optional[str] = None) -> int:
        if group is not None:
            return len(self._groups.get(group, ()))
        return sum(len(members) for members in self._groups.values())

    async def emit(self, group: str, event: str, payload: Any) -> int:
        """Send one event to every connection in a group; returns deliveries."""
        async with self._lock:
            connections = list(self._groups.get(group, ()))
        if not connections:
            return 0

        message = json.dumps({"event": event, "data": jsonable_encoder(payload)})
        failed = []
        delivered = 0
        for websocket in connections:
            try:
                await websocket.send_text(message)
                delivered += 1
            except Exception as e:
                logger.warning(f"Dropping realtime connection in {group} after failed send of {event}: {e}")
                failed.append(websocket)

        for websocket in failed:
            await self.unregister(websocket)
        return delivered

    async def emit_to_client(self, user_id: str, event: str, payload: Any) -> int:
        return await self.emit(client_group(user_id), event, payload)

    async def emit_to_admins(self, event: str, payload: Any) -> int:
        return await self.emit(ADMIN_GROUP, event, payload)

    async def emit_to_all(self, event: str, payload: Any) -> int:
        async with self._lock:
            groups = list(self._groups)
        delivered = 0
        for group in groups:
            delivered += await self.emit(group, event, payload)
        return delivered


# Process-wide registry; one per worker
hub = ConnectionHub()


def get_hub() -> ConnectionHub:
    return hub
