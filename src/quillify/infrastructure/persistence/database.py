"""Async engine and session handling.

SQLite (aiosqlite) is the default store; PostgreSQL (asyncpg) is used when
``QUILLIFY_DATABASE_URL`` points at it. One :class:`DatabaseManager` per process
owns the engine, created lazily on first use.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator

from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from quillify.core.config import Settings, get_settings
from quillify.core.logging import get_logger

logger = get_logger(__name__)


class Base(DeclarativeBase):
    pass


def _sqlite_connect(dbapi_connection: Any, connection_record: Any) -> None:
    # Cascading deletes from users to their tokens and books need this per connection.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(settings: Settings) -> AsyncEngine:
    """Create the engine for ``settings.database_url`` with driver-specific options."""
    url = make_url(settings.database_url)
    if url.get_backend_name() == "sqlite":
        engine = create_async_engine(
            url,
            echo=settings.db_echo,
            connect_args={"check_same_thread": False},
        )
        event.listen(engine.sync_engine, "connect", _sqlite_connect)
    else:
        engine = create_async_engine(
            url,
            echo=settings.db_echo,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_pool_timeout,
            pool_recycle=settings.db_pool_recycle,
            pool_pre_ping=True,
        )
    logger.info("Database engine created", database_url=url.render_as_string(hide_password=True))
    return engine


class DatabaseManager:
    """Owns the engine and hands out sessions."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self._engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_sqlite(self) -> bool:
        return make_url(self.settings.database_url).get_backend_name() == "sqlite"

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            self._engine = build_engine(self.settings)
        return self._engine

    @property
    def sessionmaker(self) -> async_sessionmaker[AsyncSession]:
        if self._sessionmaker is None:
            # Loaded rows stay readable after commit; services return them to routes.
            self._sessionmaker = async_sessionmaker(
                bind=self.engine, expire_on_commit=False, autoflush=False
            )
        return self._sessionmaker

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Yield a session, rolling back whatever is uncommitted if the block raises.

        Services commit their own units of work; nothing is committed here.
        """
        async with self.sessionmaker() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def create_tables(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created", tables=sorted(Base.metadata.tables))

    async def check_connection(self) -> bool:
        """Run ``SELECT 1``; False (and an error log) if the database is unreachable."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            logger.error("Database connection check failed", error=str(e))
            return False
        return True

    async def disconnect(self) -> None:
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._sessionmaker = None
        logger.info("Database engine disposed")


_db_manager: DatabaseManager | None = None


def get_db_manager() -> DatabaseManager:
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager()
    return _db_manager


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding one session per request."""
    async with get_db_manager().session() as session:
        yield session


def _ensure_sqlite_directory(database_url: str) -> None:
    database = make_url(database_url).database
    if not database or database == ":memory:":
        return
    directory = Path(database).parent
    if not directory.exists():
        directory.mkdir(parents=True, exist_ok=True)
        logger.info("Database directory created", path=str(directory))


async def init_database() -> None:
    """Connect on startup and, outside production, create missing tables.

    Raises:
        RuntimeError: If the database cannot be reached.
    """
    # Importing the models registers their tables on Base.metadata.
    from quillify.infrastructure.persistence import models  # noqa: F401

    db = get_db_manager()
    if db.is_sqlite:
        _ensure_sqlite_directory(db.settings.database_url)

    if not await db.check_connection():
        raise RuntimeError("Failed to connect to database")

    if db.settings.is_production:
        logger.info("Production mode: skipping table creation")
        return
    await db.create_tables()


async def close_database() -> None:
    await get_db_manager().disconnect()
