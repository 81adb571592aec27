"""Shared fixtures for storage-backed tests.

Each test gets its own SQLite file under ``tmp_path``; NullPool keeps
connections from outliving the event loop that opened them.
"""

from collections.abc import AsyncGenerator, Callable
from datetime import datetime
from typing import Any

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from catalog_service.catalog.models import Product  # noqa: F401  (registers the table)
from catalog_service.infrastructure.database import Base


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
def database_url(tmp_path) -> str:
    """SQLite database file private to the test."""
    return f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}"


@pytest.fixture
async def db_engine(database_url: str) -> AsyncGenerator[AsyncEngine, None]:
    """Async engine with the schema created."""
    engine = create_async_engine(database_url, poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Session for a single test."""
    async with session_factory() as session:
        yield session


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def product_data() -> Callable[..., dict[str, Any]]:
    """Build normalized product dictionaries with overridable fields."""

    def build(product_id: int = 1, **overrides: Any) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": product_id,
            "title": f"Product {product_id}",
            "price": 100.0,
            "regular_price": 100.0,
            "sale_price": 0.0,
            "stock_status": "instock",
            "stock_quantity": 10,
            "category": "Electronics",
            "tags": ["new"],
            "on_sale": False,
            "created_at": datetime(2023, 6, 15, 12, 0, 0),
            "average_rating": 4.0,
        }
        data.update(overrides)
        return data

    return build


@pytest.fixture
def raw_product() -> Callable[..., dict[str, Any]]:
    """Build raw WooCommerce product records with overridable fields."""

    def build(product_id: int = 101, **overrides: Any) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": product_id,
            "name": f"Upstream Product {product_id}",
            "price": "49.99",
            "regular_price": "59.99",
            "sale_price": "49.99",
            "stock_status": "instock",
            "stock_quantity": 5,
            "categories": [
                {"id": 9, "name": "Audio", "slug": "audio"},
                {"id": 10, "name": "Accessories", "slug": "accessories"},
            ],
            "tags": [
                {"id": 1, "name": "wireless", "slug": "wireless"},
                {"id": 2, "name": "bluetooth", "slug": "bluetooth"},
            ],
            "on_sale": True,
            "date_created": "2023-05-01T10:20:30",
            "average_rating": "4.50",
        }
        data.update(overrides)
        return data

    return build
