"""Shared fixtures for all tests."""

import os

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from pathsheet.database.models import Base
from pathsheet.game.character.record import Character
from pathsheet.game.rules.loader import load_catalog


# Point settings at a throwaway database before anything caches them
@pytest.fixture(scope="session", autouse=True)
def use_test_database(tmp_path_factory):
    """Force every test onto a temporary database and default settings."""
    test_db_dir = tmp_path_factory.mktemp("pathsheet_test")
    os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{test_db_dir / 'test_pathsheet.db'}"
    os.environ.pop("PATHSHEET_CATALOG_DIR", None)
    os.environ.pop("PATHSHEET_FOCUS_POINT_CAP", None)

    import pathsheet.database.engine as engine_module

    engine_module._engine = None
    engine_module._async_session_factory = None

    from pathsheet.config import get_settings

    get_settings.cache_clear()

    yield

    engine_module._engine = None
    engine_module._async_session_factory = None
    get_settings.cache_clear()


@pytest.fixture
async def db_session():
    """Create a test database session with in-memory SQLite."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with async_session() as session:
        yield session
        await session.rollback()

    await engine.dispose()


@pytest.fixture(scope="session")
def catalog():
    """The bundled rule catalog, loaded once."""
    return load_catalog()


@pytest.fixture
def fighter():
    """A level 5 human fighter with a longsword and a steel shield."""
    return Character.model_validate(
        {
            "id": "fighter-1",
            "name": "Valeros",
            "ancestryId": "human",
            "backgroundId": "soldier",
            "classId": "fighter",
            "level": 5,
            "abilityScores": {"str": 18, "dex": 14, "con": 14, "int": 10, "wis": 12, "cha": 10},
            "hitPoints": {"current": 20, "max": 20, "temporary": 0},
            "saves": {"fortitude": "expert", "reflex": "expert", "will": "trained"},
            "perception": "expert",
            "armorClass": {"base": 10, "proficiency": "trained", "itemBonus": 1, "acBonus": 4, "dexCap": 1},
            "weaponProficiencies": [
                {"category": "simple", "proficiency": "expert"},
                {"category": "martial", "proficiency": "expert"},
            ],
            "skills": [
                {"name": "Athletics", "ability": "str", "proficiency": "expert"},
                {"name": "Intimidation", "ability": "cha", "proficiency": "trained"},
                {"name": "Stealth", "ability": "dex", "proficiency": "untrained"},
            ],
            "equipment": [
                {
                    "id": "sword-1",
                    "name": "Longsword",
                    "equipmentId": "longsword",
                    "bulk": 1,
                    "wielded": {"hands": 1},
                    "runes": {"kind": "weapon", "potencyRune": 1, "strikingRune": "striking"},
                },
                {
                    "id": "shield-1",
                    "name": "Steel Shield",
                    "equipmentId": "steel-shield",
                    "bulk": 1,
                },
            ],
            "equippedShield": "shield-1",
        }
    )


@pytest.fixture
def bard():
    """A level 3 elf bard with an occult spellcasting block."""
    return Character.model_validate(
        {
            "id": "bard-1",
            "name": "Lem",
            "ancestryId": "elf",
            "classId": "bard",
            "level": 3,
            "abilityScores": {"str": 10, "dex": 14, "con": 12, "int": 12, "wis": 10, "cha": 18},
            "spellcasting": {
                "tradition": "occult",
                "spellcastingType": "spontaneous",
                "keyAbility": "cha",
                "proficiency": "trained",
            },
        }
    )
