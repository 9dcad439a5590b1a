"""Stored character records."""

from typing import Any

from sqlalchemy import JSON, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin


class CharacterRecord(Base, TimestampMixin):
    """
    A whole character record kept as its JSON wire format.

    ``name`` and ``level`` are copied out of the payload so listings don't
    need to parse every record.
    """

    __tablename__ = "characters"

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        comment="Character id from the record payload",
    )

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        default="",
        index=True,
        comment="Character name",
    )

    level: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
        server_default="1",
        comment="Character level (1-20)",
    )

    payload: Mapped[dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
        comment="Character record in its camelCase JSON shape",
    )

    def __repr__(self) -> str:
        return f"<CharacterRecord(id={self.id}, name={self.name}, level={self.level})>"
