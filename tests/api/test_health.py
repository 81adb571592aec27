"""Tests for health check endpoints."""

from unittest.mock import AsyncMock, MagicMock

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from catalog_service.infrastructure.database import get_session
from catalog_service.main import app


def test_health_check(client: TestClient) -> None:
    """Test health endpoint returns healthy status."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "catalog-service"
    assert "version" in data


def test_readiness_check(client: TestClient) -> None:
    """Test readiness endpoint returns ready status."""
    response = client.get("/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["storage"] == "ok"


def test_readiness_check_storage_down(client: TestClient) -> None:
    """Test readiness endpoint reports unreachable storage."""
    session = MagicMock()
    session.execute = AsyncMock(
        side_effect=OperationalError("SELECT 1", {}, Exception("unable to open database"))
    )

    async def broken_session():
        yield session

    app.dependency_overrides[get_session] = broken_session

    response = client.get("/ready")
    assert response.status_code == 503
    assert response.json()["status"] == "unavailable"
