from pydantic import Field
from datetime import datetime
from typing import List, Optional
from .common import CamelModel
from .store import StoreWithCameras, PoliceNumber
from .camera import SourceUrl
from app.db.models.enums import UserRole

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
PHONE_PATTERN = r"^\+?[1-9]\d{1,14}$"


class RegisterRequest(CamelModel):
    email: str = Field(..., pattern=EMAIL_PATTERN)
    phone: str = Field(..., pattern=PHONE_PATTERN)
    password: str = Field(..., min_length=6)


class LoginRequest(CamelModel):
    email_or_phone: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    role: UserRole


class RefreshRequest(CamelModel):
    refresh_token: Optional[str] = None


class UserOut(CamelModel):
    id: str
    email: str
    phone: str
    role: UserRole
    created_at: Optional[datetime] = None


class UserWithStore(UserOut):
    store: Optional[StoreWithCameras] = None


class AuthResponse(CamelModel):
    user: UserWithStore
    token: str
    refresh_token: str


class TokenOut(CamelModel):
    token: str


class CreateClientRequest(CamelModel):
    """Admin-side onboarding: client account, store and cameras in one go."""
    email: str = Field(..., pattern=EMAIL_PATTERN)
    phone: str = Field(..., pattern=PHONE_PATTERN)
    password: str = Field(..., min_length=6)
    store_name: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    police_number: str = Field(..., pattern=r"^\+?\d{7,15}$")
    camera_ips: List[SourceUrl] = Field(default_factory=list, alias="cameraIPs")


class ClientStoreUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    address: Optional[str] = Field(None, min_length=1)
    police_number: Optional[PoliceNumber] = None


class UpdateUserRequest(CamelModel):
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN)
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    password: Optional[str] = Field(None, min_length=6)
    store: Optional[ClientStoreUpdate] = None
