from pydantic import AfterValidator, Field, HttpUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from typing import Annotated, Literal, Optional
from datetime import datetime
from .common import CamelModel
from app.db.models.enums import AlertStatus, DetectionType

_http_url = TypeAdapter(HttpUrl)


def _check_image_url(value: str) -> str:
    # Persisted verbatim, only the format is checked
    try:
        _http_url.validate_python(value)
    except PydanticValidationError:
        raise ValueError("Input should be a valid http or https URL") from None
    return value


ImageUrl = Annotated[str, AfterValidator(_check_image_url)]


class DetectionWebhook(CamelModel):
    camera_id: str
    detection_type: Literal["HELMET", "GUN"]
    confidence: float = Field(..., ge=0, le=1)
    image_url: ImageUrl
    timestamp: datetime
    signature: str


class ManualAlertCreate(CamelModel):
    store_id: str
    detection_type: DetectionType
    image_url: Optional[ImageUrl] = None


class AlertOut(CamelModel):
    id: str
    store_id: str
    detection_type: DetectionType
    image_url: str
    timestamp: datetime
    status: AlertStatus
    initiated_by: Optional[str] = None
    resolved_by: Optional[str] = None
    resolved_at: Optional[datetime] = None


class AlertLocation(CamelModel):
    address: str
    latitude: float
    longitude: float


class StoreContact(CamelModel):
    phone: Optional[str] = None
    police_number: str


class AlertDetail(AlertOut):
    store_name: str
    location: AlertLocation
    store_contact: StoreContact
