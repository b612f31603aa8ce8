# This project was developed with assistance from AI tools.
"""Async engine, session factory, and FastAPI session dependency."""

import logging
from collections.abc import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from .config import db_settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


engine = create_async_engine(
    db_settings.DATABASE_URL,
    echo=db_settings.SQL_ECHO,
    pool_size=db_settings.POOL_SIZE,
    pool_pre_ping=True,
)

SessionLocal = async_sessionmaker(engine, expire_on_commit=False)


class DatabaseService:
    """Thin wrapper around the engine for health checks and shutdown."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] = SessionLocal):
        self._session_factory = session_factory

    async def health_check(self) -> bool:
        try:
            async with self._session_factory() as session:
                await session.execute(text("SELECT 1"))
            return True
        except Exception:
            logger.warning("Database health check failed", exc_info=True)
            return False

    async def close(self) -> None:
        await engine.dispose()


_db_service: DatabaseService | None = None


def get_db_service() -> DatabaseService:
    global _db_service  # noqa: PLW0603
    if _db_service is None:
        _db_service = DatabaseService()
    return _db_service


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a session that is closed after the request."""
    async with SessionLocal() as session:
        yield session
