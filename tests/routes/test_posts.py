# tests/routes/test_posts.py
"""HTTP tests for the post endpoints."""

from uuid import UUID

import pytest
from httpx import AsyncClient

from app.dependencies import get_post_repository
from app.main import app
from app.repositories.post import PostRepository
from tests.fakes import FakePostRepository, FakeStorage, make_post, unreachable_session


class TestReadEndpoints:
    @pytest.mark.asyncio
    async def test_list_posts_empty(self, client: AsyncClient) -> None:
        response = await client.get("/api/posts")
        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_list_posts_uses_public_field_names(
        self,
        client: AsyncClient,
        post_repository: FakePostRepository,
        author_id: UUID,
    ) -> None:
        post_repository.add(make_post("hello", author_id, cover_image="/uploads/rkbucket/covers/a.png"))

        response = await client.get("/api/posts")

        assert response.status_code == 200
        (post,) = response.json()
        assert post["slug"] == "hello"
        assert post["coverImage"] == "/uploads/rkbucket/covers/a.png"
        assert post["authorId"] == str(author_id)
        assert "contentHtml" not in post

    @pytest.mark.asyncio
    async def test_list_slugs(
        self,
        client: AsyncClient,
        post_repository: FakePostRepository,
        author_id: UUID,
    ) -> None:
        post_repository.add(make_post("one", author_id))
        post_repository.add(make_post("two", author_id))

        response = await client.get("/api/posts/slugs")

        assert response.status_code == 200
        assert sorted(response.json()) == ["one", "two"]

    @pytest.mark.asyncio
    async def test_get_post_renders_markdown(
        self,
        client: AsyncClient,
        post_repository: FakePostRepository,
        author_id: UUID,
    ) -> None:
        post_repository.add(make_post("hello", author_id, content="Hello **world**"))

        response = await client.get("/api/posts/hello")

        assert response.status_code == 200
        assert response.json()["contentHtml"] == "<p>Hello <strong>world</strong></p>"

    @pytest.mark.asyncio
    async def test_get_missing_post(self, client: AsyncClient) -> None:
        response = await client.get("/api/posts/does-not-exist")
        assert response.status_code == 404
        assert response.json() == {"error": "Post not found"}

    @pytest.mark.asyncio
    async def test_reads_are_served_from_cache(
        self,
        client: AsyncClient,
        post_repository: FakePostRepository,
        author_id: UUID,
    ) -> None:
        post_repository.add(make_post("hello", author_id))
        await client.get("/api/posts")
        await client.get("/api/posts")
        assert post_repository.reads == 1

    @pytest.mark.asyncio
    async def test_unavailable_store_answers_503(
        self,
        client: AsyncClient,
        post_repository: FakePostRepository,
    ) -> None:
        post_repository.fail_reads = True
        response = await client.get("/api/posts")
        assert response.status_code == 503
        assert response.json() == {"error": "Posts are temporarily unavailable"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["/api/posts", "/api/posts/slugs", "/api/posts/hello"])
    async def test_refused_database_connection_answers_503(self, client: AsyncClient, path: str) -> None:
        app.dependency_overrides[get_post_repository] = lambda: PostRepository(unreachable_session())
        response = await client.get(path)
        assert response.status_code == 503
        assert response.json() == {"error": "Posts are temporarily unavailable"}


class TestCreateEndpoint:
    @pytest.mark.asyncio
    async def test_requires_authentication(
        self,
        client: AsyncClient,
        post_repository: FakePostRepository,
    ) -> None:
        response = await client.post("/api/posts", json={"title": "Hi", "content": "Body"})
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}
        assert post_repository.posts == {}

    @pytest.mark.asyncio
    async def test_rejects_invalid_token(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/posts",
            json={"title": "Hi", "content": "Body"},
            headers={"Authorization": "Bearer not-a-jwt"},
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_create_post(
        self,
        client: AsyncClient,
        auth_headers: dict[str, str],
        author_id: UUID,
    ) -> None:
        response = await client.post(
            "/api/posts",
            json={"title": "My First Post", "content": "Hello world", "coverImage": "/uploads/x.png"},
            headers=auth_headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["slug"] == "my-first-post"
        assert body["excerpt"] == "Hello world..."
        assert body["coverImage"] == "/uploads/x.png"
        assert body["authorId"] == str(author_id)

        listed = await client.get("/api/posts/slugs")
        assert listed.json() == ["my-first-post"]

    @pytest.mark.asyncio
    async def test_duplicate_slug_conflicts(
        self,
        client: AsyncClient,
        post_repository: FakePostRepository,
        auth_headers: dict[str, str],
        author_id: UUID,
    ) -> None:
        post_repository.add(make_post("hello", author_id))
        response = await client.post(
            "/api/posts",
            json={"title": "Hello", "content": "Body"},
            headers=auth_headers,
        )
        assert response.status_code == 409
        assert "already exists" in response.json()["error"]

    @pytest.mark.asyncio
    async def test_title_without_letters(self, client: AsyncClient, auth_headers: dict[str, str]) -> None:
        response = await client.post(
            "/api/posts",
            json={"title": "!!!", "content": "Body"},
            headers=auth_headers,
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_missing_content_is_a_validation_error(
        self,
        client: AsyncClient,
        auth_headers: dict[str, str],
    ) -> None:
        response = await client.post("/api/posts", json={"title": "Hello"}, headers=auth_headers)
        assert response.status_code == 422


class TestUpdateEndpoint:
    @pytest.mark.asyncio
    async def test_owner_can_update(
        self,
        client: AsyncClient,
        post_repository: FakePostRepository,
        auth_headers: dict[str, str],
        author_id: UUID,
    ) -> None:
        post_repository.add(make_post("hello", author_id, title="Hello"))
        await client.get("/api/posts/hello")

        response = await client.put(
            "/api/posts/hello",
            json={"title": "Hello", "content": "Edited body"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["content"] == "Edited body"
        detail = await client.get("/api/posts/hello")
        assert detail.json()["content"] == "Edited body"

    @pytest.mark.asyncio
    async def test_non_owner_is_forbidden(
        self,
        client: AsyncClient,
        post_repository: FakePostRepository,
        other_auth_headers: dict[str, str],
        author_id: UUID,
    ) -> None:
        post_repository.add(make_post("hello", author_id, title="Hello"))

        response = await client.put(
            "/api/posts/hello",
            json={"title": "Mine now", "content": "x"},
            headers=other_auth_headers,
        )

        assert response.status_code == 403
        assert response.json() == {"error": "Forbidden"}
        assert post_repository.posts["hello"].title == "Hello"

    @pytest.mark.asyncio
    async def test_missing_post(self, client: AsyncClient, auth_headers: dict[str, str]) -> None:
        response = await client.put(
            "/api/posts/nope",
            json={"title": "Nope", "content": "x"},
            headers=auth_headers,
        )
        assert response.status_code == 404


class TestDeleteEndpoint:
    @pytest.mark.asyncio
    async def test_delete_flow(
        self,
        client: AsyncClient,
        post_repository: FakePostRepository,
        storage: FakeStorage,
        auth_headers: dict[str, str],
        author_id: UUID,
    ) -> None:
        """Deleting a post removes it from every cached view and drops its cover."""
        post_repository.add(
            make_post("my-post", author_id, title="My Post", cover_image="/uploads/rkbucket/covers/17-ab.png"),
        )
        assert (await client.get("/api/posts/my-post")).status_code == 200
        assert len((await client.get("/api/posts")).json()) == 1

        response = await client.delete("/api/posts/my-post/delete", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {
            "message": "Post deleted successfully",
            "deletedPost": {"slug": "my-post", "title": "My Post"},
        }
        assert storage.deleted == ["covers/17-ab.png"]
        assert (await client.get("/api/posts/my-post")).status_code == 404
        assert (await client.get("/api/posts")).json() == []
        assert (await client.get("/api/posts/slugs")).json() == []

    @pytest.mark.asyncio
    async def test_delete_requires_authentication(
        self,
        client: AsyncClient,
        post_repository: FakePostRepository,
        author_id: UUID,
    ) -> None:
        post_repository.add(make_post("my-post", author_id))
        response = await client.delete("/api/posts/my-post/delete")
        assert response.status_code == 401
        assert "my-post" in post_repository.posts

    @pytest.mark.asyncio
    async def test_non_owner_cannot_delete(
        self,
        client: AsyncClient,
        post_repository: FakePostRepository,
        other_auth_headers: dict[str, str],
        author_id: UUID,
    ) -> None:
        post_repository.add(make_post("my-post", author_id))
        response = await client.delete("/api/posts/my-post/delete", headers=other_auth_headers)
        assert response.status_code == 403
        assert "my-post" in post_repository.posts

    @pytest.mark.asyncio
    async def test_delete_missing_post(self, client: AsyncClient, auth_headers: dict[str, str]) -> None:
        response = await client.delete("/api/posts/nope/delete", headers=auth_headers)
        assert response.status_code == 404
        assert response.json() == {"error": "Post not found"}
