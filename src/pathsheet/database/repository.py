"""Save and load whole character records."""

from collections.abc import Sequence

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pathsheet.game.character.record import Character, migrate_character

from .models.character import CharacterRecord

logger = structlog.get_logger(__name__)


class CharacterNotFoundError(LookupError):
    """Raised when no record exists for a character id."""

    def __init__(self, character_id: str):
        super().__init__(f"Character {character_id} not found")
        self.character_id = character_id


async def save_character(session: AsyncSession, character: Character) -> CharacterRecord:
    """Insert or replace the stored record for ``character``."""
    payload = character.to_wire()
    record = await session.get(CharacterRecord, character.id)
    if record is None:
        record = CharacterRecord(
            id=character.id, name=character.name, level=character.level, payload=payload
        )
        session.add(record)
    else:
        record.name = character.name
        record.level = character.level
        record.payload = payload
    await session.flush()

    logger.info(
        "character_saved",
        character_id=character.id,
        character_name=character.name,
        level=character.level,
    )
    return record


async def load_character(session: AsyncSession, character_id: str) -> Character:
    """
    Load a character, upgrading records written by older versions.

    Raises:
        CharacterNotFoundError: If no record has this id
    """
    record = await session.get(CharacterRecord, character_id)
    if record is None:
        raise CharacterNotFoundError(character_id)
    return migrate_character(dict(record.payload))


async def list_characters(session: AsyncSession) -> Sequence[CharacterRecord]:
    """All stored records ordered by name."""
    result = await session.execute(select(CharacterRecord).order_by(CharacterRecord.name))
    return result.scalars().all()


async def delete_character(session: AsyncSession, character_id: str) -> None:
    """
    Remove a stored character.

    Raises:
        CharacterNotFoundError: If no record has this id
    """
    record = await session.get(CharacterRecord, character_id)
    if record is None:
        raise CharacterNotFoundError(character_id)
    await session.delete(record)
    await session.flush()
    logger.info("character_deleted", character_id=character_id)
