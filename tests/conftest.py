# tests/conftest.py
"""Root pytest configuration and shared fixtures."""

import os
import tempfile

# Settings are read once at import; this must happen before app is imported anywhere
os.environ["REDIS_ENABLED"] = "false"
os.environ["LOG_TO_FILE"] = "false"
os.environ["POSTS_READ_FALLBACK"] = "false"
os.environ["REVALIDATE_SECRET"] = "test-revalidate-secret"
os.environ["REVALIDATE_REMOTE_URLS"] = "[]"
os.environ["SECRET_KEY"] = "test-secret-key-for-signing-tokens"
os.environ["UPLOADS_DIR"] = tempfile.mkdtemp(prefix="rocky-uploads-")

from uuid import UUID, uuid4  # noqa: E402

import pytest  # noqa: E402

from app.clients.memory_client import MemoryClient  # noqa: E402
from app.managers.cache_manager import CacheManager  # noqa: E402
from tests.fakes import FakePostRepository, FakeStorage  # noqa: E402



@pytest.fixture
def author_id() -> UUID:
    return uuid4()


@pytest.fixture
def other_author_id() -> UUID:
    return uuid4()


@pytest.fixture
def memory_client() -> MemoryClient:
    """
    Create an in-memory cache client for testing.

    Use this fixture for testing cache operations without Redis dependency.
    """
    return MemoryClient()


@pytest.fixture
async def cache_manager(memory_client: MemoryClient) -> CacheManager:
    """Cache manager pinned to a fresh in-memory backend."""
    manager = CacheManager(client=memory_client)
    await manager.initialize()
    return manager


@pytest.fixture
def post_repository() -> FakePostRepository:
    return FakePostRepository()


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()
