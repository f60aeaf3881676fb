"""Core classes and mixins for DB connections"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, AsyncContextManager, Optional, cast

from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from components.core import config
from components.core.exceptions import StorageUnavailableError
from components.core.logging import get_logger

logger = get_logger(__name__)

Base = declarative_base()
SessionMaker = Callable[[], AsyncContextManager[AsyncSession]]


class DatabaseManager:
    def __init__(self, engine: Optional[AsyncEngine] = None) -> None:
        """Initialize DatabaseManager with optional engine for testing."""
        self.engine = engine or self._create_engine()
        self._session_factory: Optional[SessionMaker] = None

    def _create_engine(self) -> AsyncEngine:
        """Create async engine from the configured database URL."""
        url = config.get_settings().async_db_url
        if url.startswith("sqlite"):
            return create_async_engine(url, echo=False)
        return create_async_engine(
            url,
            echo=False,  # Set to True for SQL query logging
            pool_pre_ping=True,  # Enable connection health checks
            pool_size=5,  # Connection pool size
            max_overflow=10,  # Maximum number of connections that can be created beyond pool_size
        )

    def get_session(self) -> SessionMaker:
        """Returns SessionMaker for database sessions."""
        if not self.engine:
            raise ValueError("Database engine wasn't initialized")

        if self._session_factory is None:
            self._session_factory = cast(
                SessionMaker,
                sessionmaker(
                    self.engine,
                    class_=AsyncSession,
                    expire_on_commit=False,
                    autocommit=False,
                    autoflush=False,
                ),
            )
        return self._session_factory

    @asynccontextmanager
    async def get_db(self) -> AsyncIterator[AsyncSession]:
        """Get database session context manager."""
        async_session = self.get_session()
        async with async_session() as session:
            try:
                yield session
            finally:
                await session.close()

    async def create_all(self) -> None:
        """Create missing tables for all registered models."""
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except DBAPIError as exc:
            logger.error("Could not create tables: %s", exc)
            raise StorageUnavailableError("Database is unavailable") from exc

    async def dispose(self) -> None:
        await self.engine.dispose()


@asynccontextmanager
async def storage_errors(session: AsyncSession) -> AsyncIterator[None]:
    """Roll back and re-raise driver failures as StorageUnavailableError."""
    try:
        yield
    except DBAPIError as exc:
        await session.rollback()
        logger.error("Storage failure: %s", exc)
        raise StorageUnavailableError("Database is unavailable") from exc
