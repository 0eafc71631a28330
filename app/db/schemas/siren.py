from typing import Literal, Optional
from datetime import datetime
from .common import CamelModel
from app.db.models.enums import SirenAction


class SirenToggle(CamelModel):
    store_id: str
    action: SirenAction


class SirenLogOut(CamelModel):
    id: str
    store_id: str
    action: SirenAction
    triggered_by: str
    timestamp: datetime
    alert_id: Optional[str] = None


class SirenStatusOut(CamelModel):
    store_id: str
    status: bool
    updated_at: Optional[datetime] = None


class DeviceSirenStatus(CamelModel):
    status: Literal["on", "off"]
    updated_at: Optional[datetime] = None
