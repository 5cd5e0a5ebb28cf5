# tests/routes/test_revalidate.py
"""HTTP tests for the revalidation endpoint."""

from unittest.mock import AsyncMock, patch
from uuid import UUID

import pytest
from httpx import AsyncClient

from app.configs import settings
from app.errors import CacheKeyError
from app.managers.cache_manager import CacheManager
from tests.fakes import FakePostRepository, make_post


@pytest.fixture
def secret() -> str:
    assert settings.REVALIDATE_SECRET is not None
    return settings.REVALIDATE_SECRET.get_secret_value()


class TestSecret:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("params", [{}, {"secret": ""}, {"secret": "wrong"}, {"secret": "wrong", "slug": "a"}])
    async def test_wrong_secret_is_rejected_without_side_effects(
        self,
        client: AsyncClient,
        cache_manager: CacheManager,
        params: dict[str, str],
    ) -> None:
        response = await client.post("/api/revalidate", params=params)

        assert response.status_code == 401
        assert response.json() == {"message": "Invalid secret"}
        assert await cache_manager.tag_versions(["posts", "post-a"]) == {"posts": 0, "post-a": 0}

    @pytest.mark.asyncio
    async def test_info_requires_secret(self, client: AsyncClient) -> None:
        response = await client.get("/api/revalidate", params={"secret": "wrong"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_info(self, client: AsyncClient, secret: str) -> None:
        response = await client.get("/api/revalidate", params={"secret": secret})
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Revalidate API is working"
        assert set(body["usage"]) == {"revalidatePath", "revalidatePost", "revalidateHome"}


class TestInvalidation:
    @pytest.mark.asyncio
    async def test_home(self, client: AsyncClient, secret: str) -> None:
        response = await client.post("/api/revalidate", params={"secret": secret})

        assert response.status_code == 200
        body = response.json()
        assert body["revalidated"] is True
        assert body["message"] == "Revalidation successful"
        assert body["timestamp"].endswith("Z")
        assert body["tags"] == ["posts"]

    @pytest.mark.asyncio
    async def test_slug(self, client: AsyncClient, secret: str) -> None:
        response = await client.post("/api/revalidate", params={"secret": secret, "slug": "hello"})
        assert response.json()["tags"] == ["post-hello", "posts"]

    @pytest.mark.asyncio
    async def test_path(self, client: AsyncClient, secret: str) -> None:
        response = await client.post("/api/revalidate", params={"secret": secret, "path": "/posts/hello"})
        assert response.json()["tags"] == ["post-hello"]

    @pytest.mark.asyncio
    async def test_revalidation_refreshes_cached_post(
        self,
        client: AsyncClient,
        post_repository: FakePostRepository,
        author_id: UUID,
        secret: str,
    ) -> None:
        """An out-of-band edit shows up once the post is revalidated."""
        post_repository.add(make_post("hello", author_id, content="Before"))
        assert (await client.get("/api/posts/hello")).json()["content"] == "Before"

        post_repository.posts["hello"].content = "After"
        assert (await client.get("/api/posts/hello")).json()["content"] == "Before"

        await client.post("/api/revalidate", params={"secret": secret, "slug": "hello"})
        assert (await client.get("/api/posts/hello")).json()["content"] == "After"

    @pytest.mark.asyncio
    async def test_cache_failure_answers_500(
        self,
        client: AsyncClient,
        cache_manager: CacheManager,
        secret: str,
    ) -> None:
        with patch.object(
            cache_manager,
            "invalidate_tags",
            AsyncMock(side_effect=CacheKeyError("Cache invalidation failed")),
        ):
            response = await client.post("/api/revalidate", params={"secret": secret})

        assert response.status_code == 500
        assert response.json() == {"message": "Error revalidating", "error": "Cache invalidation failed"}
