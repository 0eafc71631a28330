import logging
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from app.auth import get_current_user, hash_password, require_admin, require_client
from app.dependencies import get_db, get_stream_client
from app.db.crud import store as store_crud
from app.db.crud import user as user_crud
from app.db.models.enums import UserRole
from app.db.models.user import User
from app.db.schemas.common import Envelope, MessageOut, ok
from app.db.schemas.store import StoreSetup, StoreUpdate, StoreWithCameras
from app.db.schemas.user import CreateClientRequest, UpdateUserRequest, UserWithStore
from app.errors import Conflict, NotFound, ValidationError
from app.services.go2rtc import Go2RTCClient, validate_stream_url

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/users",
    tags=["users"]
)

def _validated_sources(urls: List[str]) -> List[str]:
    sources = []
    details = []
    for index, url in enumerate(urls):
        valid, normalized, error = validate_stream_url(url)
        if valid:
            sources.append(normalized)
        else:
            details.append({"field": f"cameraIPs.{index}", "message": error})
    if details:
        raise ValidationError("Invalid camera stream URL", details=details)
    return sources

@router.get("/me", response_model=Envelope[UserWithStore])
def me(user: User = Depends(get_current_user)):
    return ok(UserWithStore.model_validate(user))

@router.post("/setup", response_model=Envelope[StoreWithCameras], status_code=status.HTTP_201_CREATED)
def setup_store(
    data: StoreSetup,
    db: Session = Depends(get_db),
    user: User = Depends(require_client)
):
    """Client onboarding: create the store and its first cameras"""
    if store_crud.get_store_by_user(db, user.id):
        raise Conflict("Store already set up for this user", code="STORE_EXISTS")
    store = store_crud.create_store(
        db,
        user_id=user.id,
        name=data.store_name,
        address=data.address,
        latitude=data.latitude,
        longitude=data.longitude,
        police_number=data.police_number,
        camera_urls=_validated_sources(data.camera_ips),
    )
    logger.info(f"Store {store.id} set up for client {user.id} with {len(store.cameras)} cameras")
    return ok(StoreWithCameras.model_validate(store))

@router.put("/store", response_model=Envelope[StoreWithCameras])
def update_store(
    data: StoreUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_client)
):
    """Update the address or police contact of the caller's store"""
    store = store_crud.get_store_by_user(db, user.id)
    if store is None:
        raise NotFound("Store not found for this user")
    store = store_crud.update_store(
        db,
        store,
        name=data.store_name,
        address=data.address,
        latitude=data.latitude,
        longitude=data.longitude,
        police_number=data.police_number,
    )
    return ok(StoreWithCameras.model_validate(store))

@router.get("/list", response_model=Envelope[List[UserWithStore]])
def list_clients(
    search: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return ok([UserWithStore.model_validate(u) for u in user_crud.list_clients(db, search=search)])

@router.post("/", response_model=Envelope[UserWithStore], status_code=status.HTTP_201_CREATED)
def create_client(
    data: CreateClientRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Create a client account together with its store and cameras"""
    if user_crud.get_user_by_email_or_phone(db, data.email, data.phone):
        raise Conflict("User with this email or phone already exists", code="USER_EXISTS")
    sources = _validated_sources(data.camera_ips)
    user = user_crud.create_user(
        db,
        email=data.email,
        phone=data.phone,
        password_hash=hash_password(data.password),
        role=UserRole.CLIENT,
    )
    store_crud.create_store(
        db,
        user_id=user.id,
        name=data.store_name,
        address=data.address,
        latitude=data.latitude,
        longitude=data.longitude,
        police_number=data.police_number,
        camera_urls=sources,
    )
    db.refresh(user)
    logger.info(f"Admin {admin.id} created client {user.id}")
    return ok(UserWithStore.model_validate(user))

@router.put("/{user_id}", response_model=Envelope[UserWithStore])
def update_user(
    user_id: str,
    data: UpdateUserRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Update a user's credentials and, for clients, their store details"""
    user = user_crud.get_user(db, user_id)
    if user is None:
        raise NotFound("User not found")
    if user_crud.find_other_user(db, user.id, email=data.email, phone=data.phone):
        raise Conflict("User with this email or phone already exists", code="USER_EXISTS")

    if data.store is not None:
        store = store_crud.get_store_by_user(db, user.id)
        if store is None:
            raise NotFound("Store not found for this user")
        store_crud.update_store(
            db,
            store,
            name=data.store.name,
            address=data.store.address,
            police_number=data.store.police_number,
        )

    user = user_crud.update_user(
        db,
        user,
        email=data.email,
        phone=data.phone,
        password_hash=hash_password(data.password) if data.password else None,
    )
    return ok(UserWithStore.model_validate(user))

@router.delete("/{user_id}", response_model=Envelope[MessageOut])
async def delete_user(
    user_id: str,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
    streams: Go2RTCClient = Depends(get_stream_client)
):
    """Delete a user; their store, cameras, alerts and siren history go with it"""
    user = user_crud.get_user(db, user_id)
    if user is None:
        raise NotFound("User not found")
    camera_ids = [camera.id for camera in user.store.cameras] if user.store else []

    user_crud.delete_user(db, user.id)

    # Stream removal is best effort; remove_stream never raises
    for camera_id in camera_ids:
        await streams.remove_stream(camera_id)
    logger.info(f"Admin {admin.id} deleted user {user_id} and {len(camera_ids)} camera streams")
    return ok(MessageOut(message="User deleted successfully"))
