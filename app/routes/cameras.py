from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging
from app.auth import get_current_user, is_admin
from app.dependencies import get_db, get_hub, get_stream_client
from app.db.crud import camera as camera_crud
from app.db.crud import store as store_crud
from app.db.models.camera import Camera
from app.db.models.user import User
from app.db.schemas.camera import CameraCreate, CameraOut, CameraStatusUpdate
from app.db.schemas.common import Envelope, ok
from app.errors import AppError, Conflict, Forbidden, NotFound, ValidationError
from app.realtime.hub import ConnectionHub
from app.services.go2rtc import Go2RTCClient, validate_stream_url

# Configure logging
logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/cameras",
    tags=["cameras"]
)

def get_accessible_camera(db: Session, user: User, camera_id: str) -> Camera:
    """Camera lookup with the ownership check clients are subject to"""
    camera = camera_crud.get_camera(db, camera_id)
    if camera is None:
        raise NotFound("Camera not found")
    if not is_admin(user) and camera.store.user_id != user.id:
        raise Forbidden("Access denied to this camera")
    return camera

@router.get("/", response_model=Envelope[List[CameraOut]])
def list_cameras(
    store_id: Optional[str] = Query(None, alias="storeId"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user)
):
    """
    List cameras ordered by position
    """
    if not is_admin(user):
        store = store_crud.get_store_by_user(db, user.id)
        if store is None:
            return ok([])
        store_id = store.id
    return ok([CameraOut.model_validate(c) for c in camera_crud.get_cameras(db, store_id=store_id)])

@router.post("/", response_model=Envelope[CameraOut], status_code=status.HTTP_201_CREATED)
async def create_camera(
    camera: CameraCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    streams: Go2RTCClient = Depends(get_stream_client)
):
    """
    Add a camera to a store and register its stream with go2rtc.
    Registration failures do not fail the request; the stream is
    registered again on first playback.
    """
    valid, source_url, error = validate_stream_url(camera.rtsp_url)
    if not valid:
        raise ValidationError(
            error,
            code="INVALID_RTSP_URL",
            details=[{"field": "rtspUrl", "message": error}]
        )

    if is_admin(user):
        if not camera.store_id:
            raise ValidationError("storeId is required when adding cameras as an admin", code="STORE_ID_REQUIRED")
        store = store_crud.get_store(db, camera.store_id)
        if store is None:
            raise NotFound("Store not found")
    else:
        store = store_crud.get_store_by_user(db, user.id)
        if store is None:
            raise ValidationError("Store setup is required before adding cameras", code="STORE_NOT_CONFIGURED")
        if camera.store_id and camera.store_id != store.id:
            raise Forbidden("You are not allowed to add cameras to this store")

    if camera_crud.find_duplicate(db, store.id, source_url):
        raise Conflict("A camera with this RTSP URL already exists", code="CAMERA_EXISTS")

    position = camera.position if camera.position is not None else camera_crud.next_position(db, store.id)
    db_camera = camera_crud.create_camera(db, store_id=store.id, source_url=source_url, position=position)

    try:
        await streams.add_stream(db_camera.id, source_url)
    except AppError as e:
        logger.error(f"Failed to register camera {db_camera.id} with go2rtc: {e.message}")

    return ok(CameraOut.model_validate(db_camera))

@router.get("/{camera_id}", response_model=Envelope[CameraOut])
def get_camera(
    camera_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user)
):
    """
    Get a specific camera by ID
    """
    return ok(CameraOut.model_validate(get_accessible_camera(db, user, camera_id)))

@router.patch("/{camera_id}/status", response_model=Envelope[CameraOut])
async def update_camera_status(
    camera_id: str,
    update: CameraStatusUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    hub: ConnectionHub = Depends(get_hub)
):
    """
    Update a camera's health status and tell connected dashboards
    """
    camera = get_accessible_camera(db, user, camera_id)
    owner_id = camera.store.user_id
    db_camera = camera_crud.update_camera_status(db, camera.id, update.status)

    payload = {"cameraId": db_camera.id, "status": db_camera.status.value}
    try:
        await hub.emit_to_client(owner_id, "camera:status", payload)
        await hub.emit_to_admins("camera:status", payload)
    except Exception as e:
        logger.error(f"Failed to emit camera:status for {camera_id}: {e}")

    return ok(CameraOut.model_validate(db_camera))

@router.delete("/{camera_id}", response_model=Envelope[dict])
async def delete_camera(
    camera_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    streams: Go2RTCClient = Depends(get_stream_client)
):
    """
    Delete a camera
    """
    camera = get_accessible_camera(db, user, camera_id)

    # Stream removal is best effort; remove_stream never raises
    await streams.remove_stream(camera.id)

    camera_crud.delete_camera(db, camera_id=camera.id)
    return ok({"id": camera_id})
