"""
Database connection and session management.
Uses SQLAlchemy 2.0 async pattern.

The content store and the progress store share one database. Locally that is
a SQLite file; the hosted deployment points ``DATABASE_URL`` at Postgres.
"""

from typing import AsyncGenerator, Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from moono.config import get_settings
from moono.logging_config import get_logger

logger = get_logger(__name__)


def _set_sqlite_pragma(dbapi_conn, connection_record):
    """WAL mode, enforced foreign keys and a busy timeout on every SQLite connection."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.close()


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Create the async engine for a database URL.

    SQLite gets one connection per session (NullPool) and the pragmas above,
    so progress rows pointing at unknown users or lessons are rejected.
    """
    if database_url.startswith("sqlite"):
        engine = create_async_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=NullPool,
        )
        event.listen(engine.sync_engine, "connect", _set_sqlite_pragma)
        return engine

    return create_async_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


def build_session_maker(bind: AsyncEngine) -> async_sessionmaker:
    """Session factory; objects stay usable after commit."""
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


settings = get_settings()
engine = build_engine(settings.database_url, echo=settings.debug)
async_session_maker = build_session_maker(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a database session and close it afterwards."""
    async with async_session_maker() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db(bind: Optional[AsyncEngine] = None) -> None:
    """Create all tables on the given engine (default: the configured one)."""
    # Import Base from kernel models to ensure all models are registered
    from moono.kernel.models import Base

    target = bind or engine
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema ready", extra={"dialect": target.dialect.name})


async def close_db() -> None:
    """Close database connections."""
    await engine.dispose()
