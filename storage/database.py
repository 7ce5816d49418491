"""
Storage - Database.

============================================================
RESPONSIBILITY
============================================================
Manages the async engine and sessions for the ledger.

- Connection pooling (PostgreSQL via asyncpg)
- SQLite via aiosqlite for local runs and tests
- Session factory and scoped session context manager
- Schema creation and health checks

============================================================
USAGE
============================================================
    database = Database(DatabaseConfig(url="sqlite+aiosqlite:///ledger.db"))
    await database.connect()
    await database.create_all()

    async with database.session() as session:
        repo = TransactionLogRepository(session)
        ...

    await database.disconnect()

============================================================
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from storage.models.base import Base


logger = logging.getLogger(__name__)


@dataclass
class DatabaseConfig:
    """Engine settings. Pool sizing applies to server databases only."""
    url: str
    pool_size: int = 10
    max_overflow: int = 20
    pool_timeout_seconds: int = 30
    pool_recycle_seconds: int = 1800
    echo: bool = False

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def masked_url(self) -> str:
        return self.url.split("@")[-1]


class Database:
    """
    Owns the async engine and the session factory.

    connect() is idempotent; session() raises if called before connect().
    """

    def __init__(self, config: DatabaseConfig) -> None:
        self._config = config
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def config(self) -> DatabaseConfig:
        return self._config

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    async def connect(self) -> None:
        """Create the engine and session factory."""
        if self._engine is not None:
            return

        logger.info(f"Creating database engine for: {self._config.masked_url}")

        engine_kwargs: dict[str, Any] = {"echo": self._config.echo}
        if not self._config.is_sqlite:
            engine_kwargs.update(
                pool_size=self._config.pool_size,
                max_overflow=self._config.max_overflow,
                pool_timeout=self._config.pool_timeout_seconds,
                pool_recycle=self._config.pool_recycle_seconds,
                pool_pre_ping=True,
            )

        self._engine = create_async_engine(self._config.url, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            bind=self._engine,
            autoflush=False,
            expire_on_commit=False,
        )

    async def disconnect(self) -> None:
        """Dispose the engine and its pool."""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Database engine disposed")

    def get_engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database is not connected; call connect() first")
        return self._engine

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Session scope with rollback on error.

        Callers commit explicitly; anything left uncommitted is rolled back.
        """
        if self._session_factory is None:
            raise RuntimeError("Database is not connected; call connect() first")

        session = self._session_factory()
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def create_all(self) -> None:
        """Create all ledger tables that do not exist yet."""
        engine = self.get_engine()
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ensured")

    async def drop_all(self) -> None:
        """Drop all ledger tables."""
        engine = self.get_engine()
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        logger.warning("Database schema dropped")

    async def health_check(self) -> bool:
        """Run SELECT 1 against the database."""
        if self._engine is None:
            return False
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning(f"Database health check failed: {e}")
            return False
