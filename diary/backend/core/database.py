"""
Database Configuration.

SQLAlchemy async engine and session management.

A ``Database`` object owns the engine and session factory. It is
constructed once in the application lifespan, stored on ``app.state``,
handed to request handlers through the ``get_db_session`` dependency and
disposed at shutdown.
"""

from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any

from fastapi import Request
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from diary.backend.core.logging import get_logger

logger = get_logger(__name__)


class Database:
    """
    Engine and session factory with an explicit lifecycle.

    Usage:
        database = Database.from_config()
        await database.create_all()
        async with database.session() as session:
            ...
        await database.dispose()
    """

    def __init__(self, url: str, **engine_kwargs: Any) -> None:
        self.url = url
        self._engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.debug("Database engine created", extra={"dialect": self._engine.dialect.name})

    @classmethod
    def from_config(cls) -> "Database":
        """Build a Database from database.yaml and the DATABASE_URL secret."""
        from diary.backend.core.config import get_app_config, get_database_url

        url = get_database_url()
        db_config = get_app_config().database

        if url.startswith("sqlite"):
            url = resolve_sqlite_url(url)
            # SQLite ignores pool sizing and needs cross-thread access
            return cls(
                url,
                echo=db_config.echo,
                connect_args={"check_same_thread": False},
            )

        return cls(
            url,
            pool_size=db_config.pool_size,
            max_overflow=db_config.max_overflow,
            pool_timeout=db_config.pool_timeout,
            pool_recycle=db_config.pool_recycle,
            pool_pre_ping=True,
            echo=db_config.echo,
        )

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    def session(self) -> AsyncSession:
        """Open a new session. Use as an async context manager."""
        return self._session_factory()

    async def create_all(self) -> None:
        """Create all tables known to the model metadata."""
        from diary.backend.models import Base

        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ensured")

    async def schema_revision(self) -> str | None:
        """Alembic revision stamped on the database, or None when unstamped."""
        from alembic.runtime.migration import MigrationContext

        def _current(sync_conn) -> str | None:
            return MigrationContext.configure(sync_conn).get_current_revision()

        async with self._engine.connect() as conn:
            return await conn.run_sync(_current)

    async def dispose(self) -> None:
        """Close every pooled connection."""
        await self._engine.dispose()
        logger.info("Database engine disposed")


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides a database session for one request.

    Commits when the handler returns normally and rolls back on any
    exception, so no request leaves a partial write behind.
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def resolve_sqlite_url(url: str) -> str:
    """
    Anchor a relative SQLite file path at the project root and create its
    directory. In-memory URLs are returned unchanged.
    """
    from diary.backend.core.config import find_project_root

    parsed = make_url(url)
    database = parsed.database
    if not database or database == ":memory:":
        return url

    path = Path(database)
    if not path.is_absolute():
        path = find_project_root() / path
    path.parent.mkdir(parents=True, exist_ok=True)
    return parsed.set(database=str(path)).render_as_string(hide_password=False)
