from fastapi import Depends
from app.database import get_db
from app.realtime.hub import ConnectionHub, get_hub
from app.services.alert_lifecycle import AcceptAllSignatures, AlertLifecycle, SignatureVerifier
from app.services.go2rtc import Go2RTCClient, get_stream_client
from app.services.notifications import NotificationGateway, get_notifier

__all__ = ["get_db", "get_hub", "get_notifier", "get_stream_client", "get_signature_verifier", "get_alert_lifecycle", "Go2RTCClient"]


def get_signature_verifier() -> SignatureVerifier:
    return AcceptAllSignatures()


def get_alert_lifecycle(
    hub: ConnectionHub = Depends(get_hub),
    notifier: NotificationGateway = Depends(get_notifier),
    verifier: SignatureVerifier = Depends(get_signature_verifier),
) -> AlertLifecycle:
    return AlertLifecycle(channel=hub, notifier=notifier, signature_verifier=verifier)
