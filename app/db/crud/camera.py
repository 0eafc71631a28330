from sqlalchemy.orm import Session
from typing import List, Optional
from app.db.models.camera import Camera
from app.db.models.enums import CameraStatus

def create_camera(db: Session, store_id: str, source_url: str, position: int, status: CameraStatus = CameraStatus.ACTIVE) -> Camera:
    db_camera = Camera(
        store_id=store_id,
        ip_address=source_url,
        stream_url=source_url,
        position=position,
        status=status,
    )
    db.add(db_camera)
    db.commit()
    db.refresh(db_camera)
    return db_camera

def get_cameras(db: Session, store_id: Optional[str] = None) -> List[Camera]:
    query = db.query(Camera)
    if store_id is not None:
        query = query.filter(Camera.store_id == store_id)
    return query.order_by(Camera.position.asc()).all()

def get_camera(db: Session, camera_id: str) -> Optional[Camera]:
    return db.query(Camera).filter(Camera.id == camera_id).first()

def find_duplicate(db: Session, store_id: str, source_url: str) -> Optional[Camera]:
    return db.query(Camera).filter(
        Camera.store_id == store_id,
        (Camera.ip_address == source_url) | (Camera.stream_url == source_url)
    ).first()

def next_position(db: Session, store_id: str) -> int:
    """max(existing positions) + 1, or 0 for a store without cameras."""
    positions = [row.position or 0 for row in db.query(Camera.position).filter(Camera.store_id == store_id)]
    if not positions:
        return 0
    return max(positions) + 1

def update_camera_status(db: Session, camera_id: str, status: CameraStatus) -> Optional[Camera]:
    db_camera = get_camera(db, camera_id)
    if not db_camera:
        return None
    db_camera.status = status
    db.commit()
    db.refresh(db_camera)
    return db_camera

def delete_camera(db: Session, camera_id: str) -> bool:
    db_camera = get_camera(db, camera_id)
    if not db_camera:
        return False

    db.delete(db_camera)
    db.commit()
    return True
