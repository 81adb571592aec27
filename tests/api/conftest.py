"""Shared fixtures for API tests.

TestClient runs every request on its own event loop, so the API tests
seed data through a synchronous engine and hand the app an async
engine without pooling.
"""

from collections.abc import Callable, Generator
from datetime import datetime
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import NullPool

from catalog_service.api.dependencies import get_ingestion
from catalog_service.application.ingestion_service import IngestionService
from catalog_service.catalog.models import Product
from catalog_service.infrastructure.database import Base, get_session
from catalog_service.infrastructure.woocommerce_client import WooCommerceClient
from catalog_service.main import app


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
def db_path(tmp_path):
    """SQLite file shared by the sync seeding engine and the app."""
    return tmp_path / "api.db"


@pytest.fixture
def sync_engine(db_path):
    """Synchronous engine used to create the schema and seed rows."""
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def api_session_factory(sync_engine, db_path) -> async_sessionmaker[AsyncSession]:
    """Async session factory the app uses during tests."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def seed(sync_engine) -> Callable[..., None]:
    """Insert products directly into the test database."""

    def insert(*products: dict[str, Any]) -> None:
        with Session(sync_engine) as session:
            session.add_all(Product(**data) for data in products)
            session.commit()

    return insert


@pytest.fixture
def catalog(seed, product_data) -> None:
    """A small, varied catalog."""
    seed(
        product_data(
            1,
            title="Budget Earbuds",
            price=25.0,
            category="Audio",
            on_sale=True,
            created_at=datetime(2023, 1, 10, 9, 30),
        ),
        product_data(
            2,
            title="Studio Headphones",
            price=250.0,
            category="Audio",
            stock_status="outofstock",
            created_at=datetime(2023, 7, 1),
        ),
        product_data(3, title="Mystery Box", price=60.0, category=None, created_at=None),
        product_data(
            4,
            title="4K Monitor",
            price=499.99,
            category="Displays",
            on_sale=True,
            created_at=datetime(2024, 2, 29, 18, 0),
        ),
    )


# ============================================================================
# Client Fixtures
# ============================================================================


@pytest.fixture
def client(api_session_factory) -> Generator[TestClient, None, None]:
    """Create test client backed by the test database."""

    async def override_get_session():
        async with api_session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def upstream() -> dict[str, Any]:
    """Mutable upstream behaviour: a response payload or a handler."""
    return {"status": 200, "json": [], "handler": None}


@pytest.fixture
def ingest_client(client, api_session_factory, upstream) -> TestClient:
    """Test client whose ingestion talks to a mocked WooCommerce store."""

    def handler(request: httpx.Request) -> httpx.Response:
        if upstream["handler"] is not None:
            return upstream["handler"](request)
        return httpx.Response(upstream["status"], json=upstream["json"])

    async def override_get_ingestion():
        woo = WooCommerceClient(
            base_url="http://store.test",
            consumer_key="ck_test",
            consumer_secret="cs_test",
            timeout=1.0,
            transport=httpx.MockTransport(handler),
        )
        try:
            yield IngestionService(woo, api_session_factory, concurrency=2, storage_timeout=5.0)
        finally:
            await woo.close()

    app.dependency_overrides[get_ingestion] = override_get_ingestion
    return client
