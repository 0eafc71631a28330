from sqlalchemy.orm import Session, joinedload
from typing import List, Optional
from datetime import datetime
from app.db.models.alert import Alert
from app.db.models.siren_log import SirenLog
from app.db.models.store import Store
from app.db.models.enums import AlertStatus, DetectionType, SirenAction

def get_alert(db: Session, alert_id: str) -> Optional[Alert]:
    return db.query(Alert).options(joinedload(Alert.store).joinedload(Store.user)).filter(Alert.id == alert_id).first()

def get_alerts(db: Session, store_id: Optional[str] = None, status: Optional[AlertStatus] = None) -> List[Alert]:
    query = db.query(Alert).options(joinedload(Alert.store).joinedload(Store.user))
    if store_id is not None:
        query = query.filter(Alert.store_id == store_id)
    if status is not None:
        query = query.filter(Alert.status == status)
    return query.order_by(Alert.timestamp.desc()).all()

def create_alert_with_siren(
    db: Session,
    store_id: str,
    detection_type: DetectionType,
    image_url: str,
    triggered_by: str,
    timestamp: Optional[datetime] = None,
    initiated_by: Optional[str] = None
) -> Alert:
    """Persist an ACTIVE alert and its siren ON row in a single commit."""
    db_alert = Alert(
        store_id=store_id,
        detection_type=detection_type,
        image_url=image_url,
        timestamp=timestamp or datetime.utcnow(),
        status=AlertStatus.ACTIVE,
        initiated_by=initiated_by,
    )
    try:
        db.add(db_alert)
        db.flush()
        db.add(SirenLog(
            store_id=store_id,
            action=SirenAction.ON,
            triggered_by=triggered_by,
            alert_id=db_alert.id,
        ))
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(db_alert)
    return db_alert

def resolve_alert_with_siren(db: Session, alert_id: str, store_id: str, resolved_by: str) -> bool:
    """
    Flip an ACTIVE alert to RESOLVED and append the siren OFF row.

    The status change is a conditional UPDATE, so of two racing resolves
    only one matches a row; the loser gets False and writes nothing.
    """
    try:
        updated = db.query(Alert).filter(
            Alert.id == alert_id,
            Alert.status == AlertStatus.ACTIVE
        ).update(
            {
                Alert.status: AlertStatus.RESOLVED,
                Alert.resolved_at: datetime.utcnow(),
                Alert.resolved_by: resolved_by,
            },
            synchronize_session=False
        )
        if not updated:
            db.rollback()
            return False
        db.add(SirenLog(
            store_id=store_id,
            action=SirenAction.OFF,
            triggered_by=resolved_by,
            alert_id=alert_id,
        ))
        db.commit()
    except Exception:
        db.rollback()
        raise
    return True
