import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, Enum, Index
from sqlalchemy.orm import relationship
from datetime import datetime
from app.database import Base
from .enums import SirenAction

class SirenLog(Base):
    """Append-only; the current siren state of a store is its newest row."""
    __tablename__ = "siren_logs"
    __table_args__ = (
        Index("ix_siren_logs_store_timestamp", "store_id", "timestamp"),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    store_id = Column(String, ForeignKey("stores.id", ondelete="CASCADE"), nullable=False)
    action = Column(Enum(SirenAction, native_enum=False), nullable=False)
    triggered_by = Column(String, nullable=False)  # user id or SYSTEM
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False)
    alert_id = Column(String, ForeignKey("alerts.id", ondelete="SET NULL"), nullable=True)

    store = relationship("Store", back_populates="siren_logs")

    def __repr__(self):
        return f"<SirenLog(id={self.id}, store_id='{self.store_id}', action='{self.action}')>"
