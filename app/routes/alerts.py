from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from app.auth import get_current_user, is_admin, require_admin, require_client
from app.dependencies import get_alert_lifecycle, get_db
from app.db.crud import alert as alert_crud
from app.db.crud import store as store_crud
from app.db.models.alert import Alert
from app.db.models.enums import AlertStatus
from app.db.models.user import User
from app.db.schemas.alert import AlertDetail, AlertOut, DetectionWebhook, ManualAlertCreate
from app.db.schemas.common import Envelope, ok
from app.errors import Forbidden, NotFound
from app.services.alert_lifecycle import AlertLifecycle

router = APIRouter(
    prefix="/api/alerts",
    tags=["alerts"]
)

def to_detail(alert: Alert) -> AlertDetail:
    store = alert.store
    return AlertDetail(
        **AlertOut.model_validate(alert).model_dump(),
        store_name=store.name,
        location={"address": store.address, "latitude": store.latitude, "longitude": store.longitude},
        store_contact={"phone": store.user.phone if store.user else None, "police_number": store.police_number},
    )

@router.post("/webhook", response_model=Envelope[AlertOut])
async def detection_webhook(
    trigger: DetectionWebhook,
    db: Session = Depends(get_db),
    lifecycle: AlertLifecycle = Depends(get_alert_lifecycle)
):
    """Threat detected by the upstream detection pipeline"""
    alert = await lifecycle.handle_detection(db, trigger)
    return ok(AlertOut.model_validate(alert))

@router.get("/", response_model=Envelope[List[AlertDetail]])
def list_alerts(
    status_filter: Optional[AlertStatus] = Query(None, alias="status"),
    store_id: Optional[str] = Query(None, alias="storeId"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user)
):
    """
    List alerts, newest first. Clients only ever see their own store;
    admins may narrow down with storeId.
    """
    if not is_admin(user):
        store = store_crud.get_store_by_user(db, user.id)
        if store is None:
            return ok([])
        store_id = store.id
    alerts = alert_crud.get_alerts(db, store_id=store_id, status=status_filter)
    return ok([to_detail(alert) for alert in alerts])

@router.get("/{alert_id}", response_model=Envelope[AlertDetail])
def get_alert(
    alert_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user)
):
    """Get a specific alert"""
    alert = alert_crud.get_alert(db, alert_id)
    if alert is None:
        raise NotFound("Alert not found")
    if not is_admin(user) and alert.store.user_id != user.id:
        raise Forbidden("Access denied to this alert")
    return ok(to_detail(alert))

@router.post("/", response_model=Envelope[AlertOut], status_code=status.HTTP_201_CREATED)
async def create_manual_alert(
    data: ManualAlertCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
    lifecycle: AlertLifecycle = Depends(get_alert_lifecycle)
):
    """Raise an alert for a store by hand (admin only)"""
    alert = await lifecycle.create_manual_alert(db, admin, data)
    return ok(AlertOut.model_validate(alert))

@router.post("/panic", response_model=Envelope[AlertOut], status_code=status.HTTP_201_CREATED)
async def create_panic_alert(
    db: Session = Depends(get_db),
    user: User = Depends(require_client),
    lifecycle: AlertLifecycle = Depends(get_alert_lifecycle)
):
    """Panic button pressed on site"""
    alert = await lifecycle.create_panic_alert(db, user)
    return ok(AlertOut.model_validate(alert))

@router.patch("/{alert_id}/resolve", response_model=Envelope[AlertOut])
async def resolve_alert(
    alert_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    lifecycle: AlertLifecycle = Depends(get_alert_lifecycle)
):
    """Resolve an active alert and switch its siren off"""
    alert = await lifecycle.resolve_alert(db, user, alert_id)
    return ok(AlertOut.model_validate(alert))
