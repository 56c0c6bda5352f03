"""SQLAlchemy ORM models."""

from linguagen.models.storage_slot import StorageSlot

__all__ = [
    "StorageSlot",
]
