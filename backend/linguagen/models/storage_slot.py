"""Storage slot model — one named blob per persisted collection."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Text

from linguagen.database import Base


class StorageSlot(Base):
    __tablename__ = "storage_slots"

    key = Column(String(100), primary_key=True)
    value = Column(Text, nullable=False)                  # Whole collection, JSON-encoded

    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))
