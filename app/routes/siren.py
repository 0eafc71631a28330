import hmac
import logging
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from app import config
from app.auth import get_current_user, is_admin
from app.dependencies import get_alert_lifecycle, get_db
from app.db.crud import siren_log as siren_crud
from app.db.crud import store as store_crud
from app.db.models.user import User
from app.db.schemas.common import Envelope, ok
from app.db.schemas.siren import DeviceSirenStatus, SirenLogOut, SirenStatusOut, SirenToggle
from app.errors import ConfigurationError, Forbidden, NotFound, Unauthorized, ValidationError
from app.services.alert_lifecycle import AlertLifecycle, current_siren_status

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/siren",
    tags=["siren"]
)

def _check_store_access(db: Session, user: User, store_id: str):
    if is_admin(user):
        store = store_crud.get_store(db, store_id)
        if store is None:
            raise NotFound("Store not found", code="STORE_NOT_FOUND")
        return store
    store = store_crud.get_store_by_user(db, user.id)
    if store is None or store.id != store_id:
        raise Forbidden("Access denied to this store")
    return store

@router.get("/device-status", response_model=Envelope[DeviceSirenStatus])
def device_status(
    store_id: Optional[str] = Query(None, alias="storeId"),
    api_key: Optional[str] = Query(None, alias="apiKey"),
    db: Session = Depends(get_db)
):
    """
    Polled by the siren controller installed in the store.

    Authenticated by the shared IOT_DEVICE_SECRET instead of a user token.
    """
    if not store_id:
        raise ValidationError("storeId is required", details=[{"field": "storeId", "message": "storeId is required"}])
    if not api_key:
        raise ValidationError("apiKey is required", details=[{"field": "apiKey", "message": "apiKey is required"}])

    expected = config.IOT_DEVICE_SECRET
    if not expected:
        raise ConfigurationError(
            "IOT_DEVICE_SECRET environment variable is not configured",
            code="IOT_SECRET_NOT_CONFIGURED",
        )
    if not hmac.compare_digest(api_key.encode(), expected.encode()):
        logger.warning(f"Rejected siren device poll for store {store_id}: bad API key")
        raise Unauthorized("Invalid API key")

    if store_crud.get_store(db, store_id) is None:
        raise NotFound("Store not found", code="STORE_NOT_FOUND")

    is_on, updated_at = current_siren_status(db, store_id)
    return ok(DeviceSirenStatus(status="on" if is_on else "off", updated_at=updated_at))

@router.get("/status/{store_id}", response_model=Envelope[SirenStatusOut])
def siren_status(
    store_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user)
):
    """Current siren state for the dashboard"""
    _check_store_access(db, user, store_id)
    is_on, updated_at = current_siren_status(db, store_id)
    return ok(SirenStatusOut(store_id=store_id, status=is_on, updated_at=updated_at))

@router.post("/toggle", response_model=Envelope[SirenLogOut])
async def toggle_siren(
    data: SirenToggle,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    lifecycle: AlertLifecycle = Depends(get_alert_lifecycle)
):
    """Switch the siren on or off by hand"""
    log = await lifecycle.toggle_siren(db, user, data.store_id, data.action)
    return ok(SirenLogOut.model_validate(log))

@router.get("/logs/{store_id}", response_model=Envelope[List[SirenLogOut]])
def siren_logs(
    store_id: str,
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user)
):
    """Siren history, newest first"""
    _check_store_access(db, user, store_id)
    logs = siren_crud.get_logs(db, store_id, limit=limit)
    return ok([SirenLogOut.model_validate(log) for log in logs])
