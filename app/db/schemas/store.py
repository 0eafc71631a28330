from pydantic import Field
from datetime import datetime
from typing import Annotated, List, Optional
from .common import CamelModel
from .camera import CameraOut, SourceUrl

PoliceNumber = Annotated[str, Field(pattern=r"^\+?\d{7,15}$")]


class StoreSetup(CamelModel):
    store_name: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    police_number: str = Field(..., pattern=r"^\+?\d{7,15}$")
    camera_ips: List[SourceUrl] = Field(..., min_length=1, alias="cameraIPs")


class StoreUpdate(CamelModel):
    store_name: Optional[str] = Field(None, min_length=1)
    address: Optional[str] = Field(None, min_length=1)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    police_number: Optional[str] = Field(None, pattern=r"^\+?\d{7,15}$")


class StoreOut(CamelModel):
    id: str
    user_id: str
    name: str
    address: str
    latitude: float
    longitude: float
    police_number: str
    created_at: Optional[datetime] = None


class StoreWithCameras(StoreOut):
    cameras: List[CameraOut] = []
