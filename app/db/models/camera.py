import uuid
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum
from datetime import datetime
from app.database import Base
from sqlalchemy.orm import relationship
from .enums import CameraStatus

class Camera(Base):
    __tablename__ = "cameras"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    store_id = Column(String, ForeignKey("stores.id", ondelete="CASCADE"), nullable=False, index=True)
    # Source locator as entered (rtsp://, http(s)://, file path)
    ip_address = Column(String, nullable=False)
    stream_url = Column(String, nullable=True)
    status = Column(Enum(CameraStatus, native_enum=False), nullable=False, default=CameraStatus.INACTIVE)
    position = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    store = relationship("Store", back_populates="cameras")

    def __repr__(self):
        return f"<Camera(id={self.id}, store_id='{self.store_id}', ip_address='{self.ip_address}')>"
