from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Any, Generic, Optional, TypeVar
from datetime import datetime, timezone

T = TypeVar("T")


class CamelModel(BaseModel):
    """Snake_case attributes in Python, camelCase keys on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ErrorInfo(BaseModel):
    code: str
    message: str
    details: Optional[Any] = None


class Envelope(BaseModel, Generic[T]):
    success: bool = True
    data: Optional[T] = None
    error: Optional[ErrorInfo] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


def ok(data: Any = None) -> dict:
    """Wrap a payload in the success envelope."""
    return {"success": True, "data": data, "timestamp": datetime.now(timezone.utc)}


class MessageOut(BaseModel):
    message: str
