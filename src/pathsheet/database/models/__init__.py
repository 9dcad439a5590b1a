"""SQLAlchemy models for Pathsheet."""

from pathsheet.database.models.base import Base, TimestampMixin
from pathsheet.database.models.character import CharacterRecord

__all__ = [
    "Base",
    "TimestampMixin",
    "CharacterRecord",
]
