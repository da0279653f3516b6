# This project was developed with assistance from AI tools.
"""Async engine, session factory and FastAPI session dependency."""

import logging
from collections.abc import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from .config import db_settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


engine = create_async_engine(
    db_settings.DATABASE_URL,
    echo=db_settings.SQL_ECHO,
    pool_pre_ping=True,
)

# expire_on_commit=False keeps ORM objects readable after commit without a
# lazy refresh, which would fail outside the greenlet in async code.
SessionLocal = async_sessionmaker(engine, expire_on_commit=False)


class DatabaseService:
    """Thin wrapper over the async engine for startup/health checks."""

    def __init__(self, db_engine: AsyncEngine):
        self._engine = db_engine

    async def health_check(self) -> bool:
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception:
            logger.warning("Database health check failed", exc_info=True)
            return False

    async def close(self) -> None:
        await self._engine.dispose()


_db_service = DatabaseService(engine)


def get_db_service() -> DatabaseService:
    return _db_service


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: yield a session, roll back anything left uncommitted."""
    async with SessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
