from sqlalchemy.orm import Session
from typing import List, Optional
from app.db.models.siren_log import SirenLog
from app.db.models.enums import SirenAction

def latest_action(db: Session, store_id: str) -> Optional[SirenLog]:
    """Newest siren row for a store; every siren status read goes through here."""
    return db.query(SirenLog).filter(
        SirenLog.store_id == store_id
    ).order_by(SirenLog.timestamp.desc()).first()

def append(db: Session, store_id: str, action: SirenAction, triggered_by: str, alert_id: Optional[str] = None) -> SirenLog:
    db_log = SirenLog(store_id=store_id, action=action, triggered_by=triggered_by, alert_id=alert_id)
    db.add(db_log)
    db.commit()
    db.refresh(db_log)
    return db_log

def get_logs(db: Session, store_id: str, limit: int = 50) -> List[SirenLog]:
    return db.query(SirenLog).filter(
        SirenLog.store_id == store_id
    ).order_by(SirenLog.timestamp.desc()).limit(limit).all()
