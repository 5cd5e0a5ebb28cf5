# tests/routes/conftest.py
"""Pytest fixtures for route tests."""

from collections.abc import AsyncGenerator
from datetime import timedelta
from io import BytesIO
from uuid import UUID

import pytest
from httpx import ASGITransport, AsyncClient
from PIL import Image

from app.dependencies import get_post_repository
from app.main import app
from app.managers.cache_manager import CacheManager
from app.managers.rate_limiter import limiter
from app.managers.token_manager import create_access_token
from app.services.revalidation import Revalidator
from tests.fakes import FakePostRepository, FakeStorage


@pytest.fixture
def auth_headers(author_id: UUID) -> dict[str, str]:
    """Create auth headers with a valid access token."""
    token = create_access_token(author_id, expires_delta=timedelta(minutes=30))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_auth_headers(other_author_id: UUID) -> dict[str, str]:
    token = create_access_token(other_author_id, expires_delta=timedelta(minutes=30))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def client(
    cache_manager: CacheManager,
    post_repository: FakePostRepository,
    storage: FakeStorage,
) -> AsyncGenerator[AsyncClient]:
    """
    Create async HTTP client for testing.

    ASGITransport does not run the lifespan, so the services it would build
    are placed on ``app.state`` here and the repository is swapped for the
    in-memory fake.
    """
    limiter.enabled = False
    app.state.cache_manager = cache_manager
    app.state.storage = storage
    app.state.revalidator = Revalidator(cache_manager, remote_urls=[])
    app.dependency_overrides[get_post_repository] = lambda: post_repository
    async with AsyncClient(
        base_url="http://test",
        transport=ASGITransport(app=app),
    ) as ac:
        yield ac
    app.dependency_overrides.clear()
    limiter.enabled = True


@pytest.fixture
def valid_png_bytes() -> bytes:
    """Create valid PNG image bytes."""
    img = Image.new("RGBA", (200, 200), color="blue")
    buffer = BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()
