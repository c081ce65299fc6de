"""Database engine and session management.

The store handle is an explicitly constructed ``Database`` object rather
than a module-level engine. The application lifespan creates one, keeps it
on ``app.state.db`` and disposes it on shutdown; scripts and tests build
their own.

Example:
    db = Database("sqlite+aiosqlite:///./accounts.db")
    await db.create_all()
    async with db.session() as session:
        ...
    await db.dispose()
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Any

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from account_service.core.logging import get_logger
from account_service.models.base import Base

logger = get_logger(__name__)


def normalize_database_url(url: str) -> str:
    """Force an async driver onto PostgreSQL URLs.

    Examples:
        >>> normalize_database_url("postgres://u:p@db/accounts")
        'postgresql+asyncpg://u:p@db/accounts'
    """
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    return url


class Database:
    """Owns the async engine and the session factory for one store."""

    def __init__(
        self,
        url: str,
        *,
        pool_size: int = 20,
        max_overflow: int = 30,
        echo: bool = False,
        **engine_kwargs: Any,
    ) -> None:
        self.url = normalize_database_url(url)

        options: dict[str, Any] = {"echo": echo, **engine_kwargs}
        if not self.url.startswith("sqlite"):
            # SQLite pools do not accept sizing arguments
            options.setdefault("pool_pre_ping", True)
            options.setdefault("pool_size", pool_size)
            options.setdefault("max_overflow", max_overflow)

        self.engine: AsyncEngine = create_async_engine(self.url, **options)
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    def session(self) -> AsyncSession:
        """Open a new session. Use as an async context manager."""
        return self.session_factory()

    async def create_all(self) -> None:
        """Create all tables that do not exist yet."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info(
            "Database schema ensured",
            extra={"context": {"action": "create_all", "tables": sorted(Base.metadata.tables)}},
        )

    async def drop_all(self) -> None:
        """Drop all tables. Intended for tests and local resets."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        """Close every pooled connection."""
        await self.engine.dispose()
        logger.info("Database connections closed", extra={"context": {"action": "dispose"}})


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency for FastAPI.

    Yields a session from the application's ``Database`` handle.
    Commits on success, rolls back on exception.

    Yields:
        AsyncSession: The database session for the request.
    """
    database: Database = request.app.state.db
    async with database.session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


__all__ = [
    "Database",
    "get_db",
    "normalize_database_url",
]
