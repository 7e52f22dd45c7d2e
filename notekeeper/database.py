"""
NoteKeeper Backend — Database Engine & Session Factory
=======================================================

What:  Async SQLAlchemy engine and session factory for DatabaseNotesApi.
How:   build_engine() creates the engine from a URL; build_session_factory()
       wraps it in an async_sessionmaker. Nothing is created at import time:
       the engine only exists when NOTES_BACKEND=database.
Who:   Called by main.py during startup and by Alembic's env.py.

Connection Pooling:
    Server databases (PostgreSQL) get a sized pool with pre-ping and hourly
    recycling. SQLite (development, tests) keeps SQLAlchemy's default pool,
    which does not accept sizing arguments.
"""

from typing import Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from notekeeper.config import settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object with Alembic for --autogenerate.
    """
    pass


def build_engine(database_url: Optional[str] = None) -> AsyncEngine:
    """
    Create an async engine for the given URL (defaults to settings.database_url).

    SQL echo is enabled only at DEBUG log level.
    """
    url = database_url or settings.database_url
    kwargs = {"echo": settings.log_level == "DEBUG"}

    if not url.startswith("sqlite"):
        kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )

    return create_async_engine(url, **kwargs)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: records are read after the session commits
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_schema(engine: AsyncEngine) -> None:
    """
    Create all tables that don't exist yet.

    Used for SQLite development databases and tests; production schemas are
    managed by Alembic migrations.
    """
    # Registers the notes table on Base.metadata
    from notekeeper.models.note import Note  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine(engine: Optional[AsyncEngine]) -> None:
    """Closes all pooled connections. Safe to call with None."""
    if engine is not None:
        await engine.dispose()
