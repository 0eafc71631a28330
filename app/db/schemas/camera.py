from pydantic import Field, StringConstraints
from datetime import datetime
from typing import Annotated, Optional
from .common import CamelModel
from app.db.models.enums import CameraStatus

SourceUrl = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class CameraCreate(CamelModel):
    rtsp_url: SourceUrl
    store_id: Optional[str] = None
    position: Optional[int] = Field(None, ge=0)


class CameraStatusUpdate(CamelModel):
    status: CameraStatus


class CameraOut(CamelModel):
    id: str
    store_id: str
    ip_address: str
    stream_url: Optional[str] = None
    status: CameraStatus
    position: int
    created_at: Optional[datetime] = None
