# tests/routes/test_app.py
"""Tests for the application shell: health, root and middleware."""

from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient) -> None:
    with patch("app.main.ping_db", AsyncMock(return_value=True)):
        response = await client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["database"] == "connected"
    assert body["cache"]["backend"] == "in-memory"
    assert body["cache"]["status"] == "healthy"


@pytest.mark.asyncio
async def test_health_check_degraded_without_database(client: AsyncClient) -> None:
    with patch("app.main.ping_db", AsyncMock(return_value=False)):
        response = await client.get("/health")

    assert response.json()["status"] == "degraded"
    assert response.json()["database"] == "unavailable"


@pytest.mark.asyncio
async def test_root(client: AsyncClient) -> None:
    response = await client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "Welcome to Rocky Blog Backend"}


@pytest.mark.asyncio
async def test_security_and_request_id_headers(client: AsyncClient) -> None:
    response = await client.get("/", headers={"X-Request-ID": "abc123"})
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["X-Request-ID"] == "abc123"
