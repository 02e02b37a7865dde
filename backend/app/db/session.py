"""Database lifecycle and per-request sessions.

The engine is built explicitly by ``Database.connect()`` during application
startup and drained by ``Database.dispose()`` on shutdown. Request handlers get
sessions through the ``get_session`` dependency, which reads the instance the
lifespan stored on ``app.state``.
"""
import logging
from collections.abc import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import Settings

logger = logging.getLogger(__name__)


class Database:
    def __init__(self, settings: Settings):
        self._settings = settings
        self._engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    def connect(self) -> None:
        if self._engine is not None:
            return
        self._engine = create_async_engine(
            self._settings.DATABASE_URL,
            echo=self._settings.DB_ECHO,
            # bound parameters include password hashes
            hide_parameters=True,
            pool_pre_ping=True,
            pool_size=self._settings.DB_POOL_SIZE,
            max_overflow=self._settings.DB_MAX_OVERFLOW,
        )
        self._sessionmaker = async_sessionmaker(
            self._engine,
            expire_on_commit=False,
            autoflush=False,
        )
        logger.info("Database engine created")

    async def dispose(self) -> None:
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._sessionmaker = None
        logger.info("Database engine disposed")

    def session(self) -> AsyncSession:
        if self._sessionmaker is None:
            raise RuntimeError("Database.connect() has not been called")
        return self._sessionmaker()


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    database: Database = request.app.state.db
    async with database.session() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
