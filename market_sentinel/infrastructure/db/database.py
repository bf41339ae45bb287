"""
Database Configuration
SQLAlchemy async setup for the SQLite history store
"""

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


def sqlite_url(path: str) -> str:
    return f"sqlite+aiosqlite:///{path}"


def create_engine_for_path(path: str, echo: bool = False) -> AsyncEngine:
    """
    Async engine for a SQLite file with WAL journaling

    WAL lets readers (dashboards, ad-hoc queries) run while the bot writes.
    """
    engine = create_async_engine(sqlite_url(path), echo=echo)

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def init_db(engine: AsyncEngine) -> None:
    """Initialize database (create tables)"""
    # Import models so they register on Base.metadata
    from market_sentinel.infrastructure.db import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
