from sqlalchemy.orm import Session
from typing import List, Optional
from app.db.models.store import Store
from app.db.models.camera import Camera
from app.db.models.enums import CameraStatus

def get_store(db: Session, store_id: str) -> Optional[Store]:
    return db.query(Store).filter(Store.id == store_id).first()

def get_store_by_user(db: Session, user_id: str) -> Optional[Store]:
    return db.query(Store).filter(Store.user_id == user_id).first()

def create_store(
    db: Session,
    user_id: str,
    name: str,
    address: str,
    latitude: float,
    longitude: float,
    police_number: str,
    camera_urls: List[str],
    commit: bool = True
) -> Store:
    """Create a store with its initial cameras, positioned in the order given."""
    db_store = Store(
        user_id=user_id,
        name=name,
        address=address,
        latitude=latitude,
        longitude=longitude,
        police_number=police_number,
    )
    db_store.cameras = [
        Camera(ip_address=url, stream_url=url, position=index, status=CameraStatus.INACTIVE)
        for index, url in enumerate(camera_urls)
    ]
    db.add(db_store)
    if commit:
        db.commit()
        db.refresh(db_store)
    return db_store

def update_store(db: Session, db_store: Store, **fields) -> Store:
    for field, value in fields.items():
        if value is not None:
            setattr(db_store, field, value)
    db.commit()
    db.refresh(db_store)
    return db_store
