"""Async SQLAlchemy engine lifecycle and session factory."""
import logging
from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from models.base import Base

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _connection_record: Any) -> None:
    """SQLite ships with foreign key enforcement off; turn it on per connection."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    Owns the process-wide engine and session factory.

    Built from explicit configuration at startup, connected once, and closed on
    shutdown. Tables are created on connect if they don't exist yet.
    """

    def __init__(self, url: str, pool_size: int = 5, max_overflow: int = 10) -> None:
        self._url = url
        self._pool_size = pool_size
        self._max_overflow = max_overflow
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_sqlite(self) -> bool:
        """Check if the configured backend is SQLite."""
        return make_url(self._url).get_backend_name() == "sqlite"

    def _engine_kwargs(self) -> dict[str, Any]:
        if not self.is_sqlite:
            return {
                "pool_pre_ping": True,
                "pool_size": self._pool_size,
                "max_overflow": self._max_overflow,
            }
        database = make_url(self._url).database
        if not database or database == ":memory:":
            # In-memory databases only live as long as their single connection
            return {
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            }
        Path(database).parent.mkdir(parents=True, exist_ok=True)
        return {}

    async def connect(self) -> None:
        """Create the engine and make sure the schema exists."""
        self._engine = create_async_engine(self._url, echo=False, **self._engine_kwargs())
        if self.is_sqlite:
            event.listen(self._engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info("Database connected (%s)", make_url(self._url).get_backend_name())

    async def close(self) -> None:
        """Dispose of the engine and its connection pool."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Database connection closed")

    @property
    def engine(self) -> AsyncEngine:
        """The connected engine."""
        if self._engine is None:
            raise RuntimeError("Database is not connected")
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Return the session factory for the connected engine."""
        if self._session_factory is None:
            raise RuntimeError("Database is not connected")
        return self._session_factory


_database: Database | None = None


def get_database() -> Database:
    """Get the database registered at startup."""
    if _database is None:
        raise RuntimeError("Database has not been initialized")
    return _database


def set_database(database: Database | None) -> None:
    """Register (or clear) the process-wide database."""
    global _database  # noqa: PLW0603
    _database = database


async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """
    Yield an async database session.

    Uses unit-of-work pattern: services use flush() for refreshing objects,
    commit happens once here at request end. This ensures atomic transactions
    per request - if anything fails, all changes are rolled back.
    """
    async with get_database().session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
