import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from datetime import datetime
from app.database import Base
from .enums import AlertStatus, DetectionType

class Alert(Base):
    __tablename__ = "alerts"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    store_id = Column(String, ForeignKey("stores.id", ondelete="CASCADE"), nullable=False, index=True)
    detection_type = Column(Enum(DetectionType, native_enum=False), nullable=False)
    image_url = Column(String, nullable=False, default="")
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    status = Column(Enum(AlertStatus, native_enum=False), nullable=False, default=AlertStatus.ACTIVE)
    initiated_by = Column(String, nullable=True)  # set for manual and panic alerts
    resolved_by = Column(String, nullable=True)
    resolved_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    store = relationship("Store", back_populates="alerts")

    def __repr__(self):
        return f"<Alert(id={self.id}, detection_type='{self.detection_type}', status='{self.status}')>"
