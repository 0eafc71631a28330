"""
Alert and siren lifecycle.

Every operation follows the same shape:

    1. validate and look up (no writes, errors propagate to the caller)
    2. one commit that stores the alert change together with its siren row
    3. post-commit effects (realtime emits, police notification)

Effects run in order and each one is isolated: a failure is logged and the
next effect still runs. Once step 2 has committed the operation has
succeeded, whatever happens to the effects.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, List, Optional, Protocol, Tuple

from sqlalchemy.orm import Session

from app.auth import is_admin
from app.db.crud import alert as alert_crud
from app.db.crud import camera as camera_crud
from app.db.crud import siren_log as siren_crud
from app.db.crud import store as store_crud
from app.db.models.alert import Alert
from app.db.models.enums import AlertStatus, DetectionType, SirenAction, SYSTEM_TRIGGER
from app.db.models.siren_log import SirenLog
from app.db.models.user import User
from app.db.schemas.alert import AlertOut, DetectionWebhook, ManualAlertCreate
from app.errors import Conflict, Forbidden, NotFound, Unauthorized
from app.realtime.hub import FanoutChannel
from app.services.notifications import NotificationGateway

logger = logging.getLogger(__name__)

Effect = Tuple[str, Callable[[], Awaitable[Any]]]


class SignatureVerifier(Protocol):
    def verify(self, trigger: DetectionWebhook) -> bool:
        ...


class AcceptAllSignatures:
    """
    Accepts every webhook signature.

    The detection pipeline does not sign its payloads yet. Deployments that
    expose the webhook publicly must plug in a real verifier.
    """

    def verify(self, trigger: DetectionWebhook) -> bool:
        return True


def current_siren_status(db: Session, store_id: str) -> Tuple[bool, Optional[datetime]]:
    """(is_on, updated_at) derived from the newest siren row; off when there is none."""
    latest: Optional[SirenLog] = siren_crud.latest_action(db, store_id)
    if latest is None:
        return False, None
    return latest.action == SirenAction.ON, latest.timestamp


def _utc_naive(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def serialize_alert(alert: Alert) -> dict:
    return AlertOut.model_validate(alert).model_dump(mode="json", by_alias=True)


class AlertLifecycle:
    def __init__(
        self,
        channel: FanoutChannel,
        notifier: NotificationGateway,
        signature_verifier: Optional[SignatureVerifier] = None,
    ):
        self.channel = channel
        self.notifier = notifier
        self.signature_verifier = signature_verifier or AcceptAllSignatures()

    # -- effects ---------------------------------------------------------

    def _broadcast(self, owner_id: str, event: str, payload: Any) -> List[Effect]:
        return [
            (f"{event} -> client:{owner_id}", lambda: self.channel.emit_to_client(owner_id, event, payload)),
            (f"{event} -> admin", lambda: self.channel.emit_to_admins(event, payload)),
        ]

    def _siren_effects(self, owner_id: str, store_id: str, on: bool) -> List[Effect]:
        return self._broadcast(owner_id, "siren:status", {"storeId": store_id, "status": on})

    def _notify_effect(self, police_number: str, store_name: str, address: str, detection_type: str, image_url: str) -> Effect:
        return (
            "police notification",
            lambda: self.notifier.send_alert_notification(police_number, store_name, address, detection_type, image_url),
        )

    async def run_effects(self, effects: List[Effect]) -> List[str]:
        """Run effects in order; returns the names of the ones that failed."""
        failed = []
        for name, effect in effects:
            try:
                await effect()
            except Exception as e:
                logger.error(f"Post-commit effect '{name}' failed: {e}")
                failed.append(name)
        return failed

    # -- operations ------------------------------------------------------

    async def handle_detection(self, db: Session, trigger: DetectionWebhook) -> Alert:
        if not self.signature_verifier.verify(trigger):
            raise Unauthorized("Invalid webhook signature", code="INVALID_SIGNATURE")

        camera = camera_crud.get_camera(db, trigger.camera_id)
        if camera is None or camera.store is None:
            raise NotFound("Camera not found")
        store = camera.store
        owner_id, store_id = store.user_id, store.id
        police_number, store_name, address = store.police_number, store.name, store.address
        detection_type = DetectionType(trigger.detection_type)
        image_url = trigger.image_url

        alert = alert_crud.create_alert_with_siren(
            db,
            store_id=store_id,
            detection_type=detection_type,
            image_url=image_url,
            triggered_by=SYSTEM_TRIGGER,
            timestamp=_utc_naive(trigger.timestamp),
        )
        logger.info(f"{detection_type.value} detected on camera {trigger.camera_id} "
                    f"(confidence {trigger.confidence:.2f}); alert {alert.id} raised for store {store_id}")

        payload = serialize_alert(alert)
        await self.run_effects(
            self._broadcast(owner_id, "alert:new", payload)
            + self._siren_effects(owner_id, store_id, True)
            + [self._notify_effect(police_number, store_name, address, detection_type.value, image_url)]
        )
        return alert

    async def create_manual_alert(self, db: Session, admin: User, data: ManualAlertCreate) -> Alert:
        store = store_crud.get_store(db, data.store_id)
        if store is None:
            raise NotFound("Store not found")
        owner_id, store_id = store.user_id, store.id

        alert = alert_crud.create_alert_with_siren(
            db,
            store_id=store_id,
            detection_type=data.detection_type,
            image_url=data.image_url or "",
            triggered_by=admin.id,
            initiated_by=admin.id,
        )
        logger.info(f"Manual {data.detection_type.value} alert {alert.id} raised by admin {admin.id} for store {store_id}")

        # Admin alerts are tests/overrides: no police notification
        payload = serialize_alert(alert)
        await self.run_effects(
            self._broadcast(owner_id, "alert:new", payload)
            + self._siren_effects(owner_id, store_id, True)
        )
        return alert

    async def create_panic_alert(self, db: Session, user: User) -> Alert:
        store = store_crud.get_store_by_user(db, user.id)
        if store is None:
            raise NotFound("Store not found for this user")
        store_id = store.id
        police_number, store_name, address = store.police_number, store.name, store.address

        alert = alert_crud.create_alert_with_siren(
            db,
            store_id=store_id,
            detection_type=DetectionType.MANUAL,
            image_url="",
            triggered_by=user.id,
            initiated_by=user.id,
        )
        logger.warning(f"Panic alert {alert.id} raised by client {user.id} for store {store_id}")

        payload = serialize_alert(alert)
        await self.run_effects(
            self._broadcast(user.id, "alert:new", payload)
            + self._siren_effects(user.id, store_id, True)
            + [self._notify_effect(police_number, store_name, address, DetectionType.MANUAL.value, "")]
        )
        return alert

    async def resolve_alert(self, db: Session, caller: User, alert_id: str) -> Alert:
        alert = alert_crud.get_alert(db, alert_id)
        if alert is None:
            raise NotFound("Alert not found")
        owner_id, store_id = alert.store.user_id, alert.store_id
        if not is_admin(caller) and owner_id != caller.id:
            raise Forbidden("Access denied to this alert")
        if alert.status == AlertStatus.RESOLVED:
            raise Conflict("Alert already resolved", code="ALERT_ALREADY_RESOLVED")

        if not alert_crud.resolve_alert_with_siren(db, alert_id, store_id, caller.id):
            # Lost a race against another resolve
            raise Conflict("Alert already resolved", code="ALERT_ALREADY_RESOLVED")
        db.refresh(alert)
        logger.info(f"Alert {alert_id} resolved by {caller.id}")

        await self.run_effects(
            self._broadcast(owner_id, "alert:resolved", alert_id)
            + self._siren_effects(owner_id, store_id, False)
        )
        return alert

    async def toggle_siren(self, db: Session, caller: User, store_id: str, action: SirenAction) -> SirenLog:
        """Manual siren switch, not tied to any alert."""
        if is_admin(caller):
            store = store_crud.get_store(db, store_id)
            if store is None:
                raise NotFound("Store not found")
        else:
            store = store_crud.get_store_by_user(db, caller.id)
            if store is None or store.id != store_id:
                raise Forbidden("Access denied to this store")
        owner_id = store.user_id

        log = siren_crud.append(db, store_id=store_id, action=action, triggered_by=caller.id)
        logger.info(f"Siren {action.value} for store {store_id} by {caller.id}")

        await self.run_effects(self._siren_effects(owner_id, store_id, action == SirenAction.ON))
        return log
