"""Async SQLAlchemy engine and session management."""

from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from hrleave.config import Settings, settings


def engine_options(cfg: Settings) -> dict[str, Any]:
    """create_async_engine keyword arguments for the configured database.

    SQLite (local runs, tests) gets no pool sizing; its pools reject it.
    """
    options: dict[str, Any] = {
        "echo": cfg.DB_ECHO or cfg.ENVIRONMENT == "development",
        "pool_pre_ping": True,
    }
    if make_url(cfg.DATABASE_URL).get_backend_name() != "sqlite":
        options["pool_size"] = cfg.DB_POOL_SIZE
        options["max_overflow"] = cfg.DB_MAX_OVERFLOW
    return options


# Async engine for FastAPI
engine = create_async_engine(settings.DATABASE_URL, **engine_options(settings))

# Async session factory
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


async def get_db() -> AsyncSession:
    """FastAPI dependency: yield an async database session for one request."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
