"""Engine and sessions for the character store."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from pathsheet.config import get_settings

from .models.base import Base

_engine: AsyncEngine | None = None
_async_session_factory: async_sessionmaker[AsyncSession] | None = None


def sqlite_file(database_url: str) -> Path | None:
    """The database file behind a SQLite URL; None for in-memory or other backends."""
    if not database_url.startswith("sqlite") or ":memory:" in database_url:
        return None
    return Path(database_url.split("///", 1)[-1])


def get_engine() -> AsyncEngine:
    """Engine for ``Settings.database_url``, created on first use."""
    global _engine

    if _engine is None:
        settings = get_settings()
        db_file = sqlite_file(settings.database_url)
        if db_file is not None:
            db_file.parent.mkdir(parents=True, exist_ok=True)
        _engine = create_async_engine(settings.database_url, echo=settings.debug)

    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _async_session_factory

    if _async_session_factory is None:
        _async_session_factory = async_sessionmaker(
            get_engine(), class_=AsyncSession, expire_on_commit=False
        )
    return _async_session_factory


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    One unit of work against the character store.

    Commits when the block exits cleanly, rolls back and re-raises otherwise:

        async with get_session() as session:
            await save_character(session, character)
    """
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Create the characters table if it is missing."""
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose of the engine; the next get_engine() call builds a fresh one."""
    global _engine, _async_session_factory

    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _async_session_factory = None
