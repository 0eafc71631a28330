"""WhatsApp notifications to the police contact of a store (Twilio REST API)."""
import logging
from typing import Optional, Protocol

import httpx

from app import config
from app.errors import ExternalServiceFailure

logger = logging.getLogger(__name__)


class NotificationGateway(Protocol):
    async def send_alert_notification(
        self,
        police_number: str,
        store_name: str,
        address: str,
        detection_type: str,
        image_url: Optional[str] = None,
    ) -> bool:
        ...


def format_alert_message(store_name: str, address: str, detection_type: str) -> str:
    return (
        "\U0001F6A8 SECURITY ALERT\n\n"
        f"Store: {store_name}\n"
        f"Location: {address}\n"
        f"Threat: {detection_type} detected\n\n"
        "Immediate response required."
    )


class WhatsAppNotifier:
    def __init__(
        self,
        account_sid: Optional[str] = None,
        auth_token: Optional[str] = None,
        from_number: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: float = 10.0,
    ):
        self.account_sid = account_sid if account_sid is not None else config.TWILIO_ACCOUNT_SID
        self.auth_token = auth_token if auth_token is not None else config.TWILIO_AUTH_TOKEN
        self.from_number = from_number if from_number is not None else config.TWILIO_WHATSAPP_NUMBER
        self.api_url = (api_url or config.TWILIO_API_URL).rstrip("/")
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.account_sid and self.auth_token and self.from_number)

    @staticmethod
    def _whatsapp(number: str) -> str:
        return number if number.startswith("whatsapp:") else f"whatsapp:{number}"

    async def send_whatsapp_message(self, to: str, body: str, media_url: Optional[str] = None) -> bool:
        if not self.configured:
            logger.warning("Twilio not configured. Skipping WhatsApp message.")
            return False

        data = {
            "From": self._whatsapp(self.from_number),
            "To": self._whatsapp(to),
            "Body": body,
        }
        if media_url:
            data["MediaUrl"] = media_url

        url = f"{self.api_url}/Accounts/{self.account_sid}/Messages.json"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(url, data=data, auth=(self.account_sid, self.auth_token))
        except httpx.HTTPError as e:
            raise ExternalServiceFailure(f"WhatsApp gateway unreachable: {e}", code="NOTIFICATION_FAILED")

        if response.status_code >= 400:
            raise ExternalServiceFailure(
                f"WhatsApp gateway returned {response.status_code}",
                code="NOTIFICATION_FAILED",
                details=response.text,
            )

        logger.info(f"WhatsApp message sent: {response.json().get('sid')}")
        return True

    async def send_alert_notification(
        self,
        police_number: str,
        store_name: str,
        address: str,
        detection_type: str,
        image_url: Optional[str] = None,
    ) -> bool:
        message = format_alert_message(store_name, address, detection_type)
        return await self.send_whatsapp_message(police_number, message, image_url or None)


def get_notifier() -> NotificationGateway:
    return WhatsAppNotifier()
