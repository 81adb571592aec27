"""Database configuration and session management.

Provides async SQLAlchemy engine and session factory.
"""

import asyncio
from collections.abc import AsyncGenerator, Awaitable
from typing import TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from catalog_service.domain.exceptions import StorageError, StorageTimeoutError
from catalog_service.infrastructure.config import settings

T = TypeVar("T")

# Create async engine
engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_pre_ping=True,
)

# Session factory
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

# Base class for models
Base = declarative_base()


async def create_tables() -> None:
    """Create database tables if they don't exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def guard_storage(
    operation: str,
    awaitable: Awaitable[T],
    timeout: float | None = None,
) -> T:
    """Await a storage operation with a timeout and uniform errors.

    Args:
        operation: Operation name used in error messages and logs.
        awaitable: The storage coroutine to run.
        timeout: Seconds to wait; defaults to ``settings.storage_timeout_seconds``.

    Returns:
        Whatever the storage coroutine returns.

    Raises:
        StorageTimeoutError: The operation exceeded the timeout.
        StorageError: The database driver or ORM raised an error.
    """
    if timeout is None:
        timeout = settings.storage_timeout_seconds
    try:
        return await asyncio.wait_for(awaitable, timeout)
    except asyncio.TimeoutError:
        raise StorageTimeoutError(operation, timeout) from None
    except SQLAlchemyError as e:
        raise StorageError(operation, str(e)) from e


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session.

    Yields:
        AsyncSession for database operations.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
