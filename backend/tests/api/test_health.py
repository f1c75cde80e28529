"""Tests for the health check endpoint."""
from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession


async def test_health_endpoint_returns_healthy_status(client: AsyncClient) -> None:
    """Test that the health endpoint reports a reachable database."""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "database": "healthy"}


async def test_health_endpoint_reports_degraded_database(
    client: AsyncClient,
    db_session: AsyncSession,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """A failing database query degrades the status instead of failing the request."""
    monkeypatch.setattr(
        db_session,
        "execute",
        AsyncMock(side_effect=OperationalError("SELECT 1", {}, Exception("down"))),
    )
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "degraded", "database": "unhealthy"}


async def test_security_headers_present(client: AsyncClient) -> None:
    response = await client.get("/health")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"
