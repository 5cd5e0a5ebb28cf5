"""Tests for the post service: cached reads and ownership-checked writes."""

from uuid import UUID

import pytest
from pydantic import SecretStr

from app.errors.auth import ForbiddenError
from app.errors.database import BackingStoreUnavailableError, DatabaseConnectionError, DuplicateEntryError
from app.errors.posts import InvalidPostError, PostNotFoundError
from app.managers.cache_manager import CacheManager
from app.repositories.post import PostRepository
from app.schemas.post import PostCreate, PostUpdate
from app.services.posts import PostService
from app.services.revalidation import Revalidator
from tests.fakes import FakePostRepository, FakeStorage, make_post, unreachable_session


@pytest.fixture
def service(
    post_repository: FakePostRepository,
    cache_manager: CacheManager,
    storage: FakeStorage,
) -> PostService:
    revalidator = Revalidator(cache_manager, secret=SecretStr("s3cret"), remote_urls=[])
    return PostService(post_repository, cache_manager, revalidator, storage, read_fallback=False)


class TestReads:
    @pytest.mark.asyncio
    async def test_list_is_cached(
        self,
        service: PostService,
        post_repository: FakePostRepository,
        author_id: UUID,
    ) -> None:
        post_repository.add(make_post("older", author_id, days_ago=2))
        post_repository.add(make_post("newer", author_id))

        first = await service.list_posts()
        second = await service.list_posts()

        assert [post.slug for post in first] == ["newer", "older"]
        assert second == first
        assert post_repository.reads == 1

    @pytest.mark.asyncio
    async def test_empty_store_is_a_successful_empty_read(self, service: PostService) -> None:
        result = await service.read_all()
        assert result.ok
        assert result.value == []
        assert await service.list_slugs() == []

    @pytest.mark.asyncio
    async def test_missing_post_raises_not_found_and_is_remembered(
        self,
        service: PostService,
        post_repository: FakePostRepository,
    ) -> None:
        for _ in range(2):
            with pytest.raises(PostNotFoundError):
                await service.get_post("nope")
        assert post_repository.reads == 1

    @pytest.mark.asyncio
    async def test_failed_read_is_reported_distinctly(
        self,
        service: PostService,
        post_repository: FakePostRepository,
    ) -> None:
        post_repository.fail_reads = True
        result = await service.read_all()
        assert not result.ok
        with pytest.raises(BackingStoreUnavailableError):
            await service.list_posts()

    @pytest.mark.asyncio
    async def test_failed_read_is_not_cached(
        self,
        service: PostService,
        post_repository: FakePostRepository,
        author_id: UUID,
    ) -> None:
        post_repository.add(make_post("hello", author_id))
        post_repository.fail_reads = True
        with pytest.raises(BackingStoreUnavailableError):
            await service.list_slugs()

        post_repository.fail_reads = False
        assert await service.list_slugs() == ["hello"]

    @pytest.mark.asyncio
    async def test_fallback_serves_neutral_values(
        self,
        post_repository: FakePostRepository,
        cache_manager: CacheManager,
        storage: FakeStorage,
    ) -> None:
        revalidator = Revalidator(cache_manager, secret=SecretStr("s3cret"), remote_urls=[])
        service = PostService(post_repository, cache_manager, revalidator, storage, read_fallback=True)
        post_repository.fail_reads = True

        assert await service.list_posts() == []
        assert await service.list_slugs() == []
        with pytest.raises(PostNotFoundError):
            await service.get_post("hello")


class TestUnreachableDatabase:
    """Reads through the SQL repository when the driver cannot connect."""

    @pytest.fixture
    def revalidator(self, cache_manager: CacheManager) -> Revalidator:
        return Revalidator(cache_manager, secret=SecretStr("s3cret"), remote_urls=[])

    @pytest.mark.asyncio
    async def test_refused_connection_is_a_failed_read(
        self,
        cache_manager: CacheManager,
        revalidator: Revalidator,
        storage: FakeStorage,
    ) -> None:
        repository = PostRepository(unreachable_session())
        service = PostService(repository, cache_manager, revalidator, storage, read_fallback=False)

        result = await service.read_all()
        assert not result.ok
        assert isinstance(result.error, DatabaseConnectionError)
        with pytest.raises(BackingStoreUnavailableError):
            await service.list_posts()
        with pytest.raises(BackingStoreUnavailableError):
            await service.get_post("hello")

    @pytest.mark.asyncio
    async def test_refused_connection_with_fallback_serves_neutral_values(
        self,
        cache_manager: CacheManager,
        revalidator: Revalidator,
        storage: FakeStorage,
    ) -> None:
        repository = PostRepository(unreachable_session())
        service = PostService(repository, cache_manager, revalidator, storage, read_fallback=True)

        assert await service.list_posts() == []
        assert await service.list_slugs() == []
        with pytest.raises(PostNotFoundError):
            await service.get_post("hello")


class TestCreate:
    @pytest.mark.asyncio
    async def test_create_derives_slug_and_excerpt(
        self,
        service: PostService,
        post_repository: FakePostRepository,
        author_id: UUID,
    ) -> None:
        created = await service.create_post(
            PostCreate(title="Hello, World!", content="Some content"),
            author_id,
        )

        assert created.slug == "hello-world"
        assert created.excerpt == "Some content..."
        assert created.author_id == author_id
        assert post_repository.commits == 1

    @pytest.mark.asyncio
    async def test_create_makes_post_visible_in_cached_lists(
        self,
        service: PostService,
        author_id: UUID,
    ) -> None:
        assert await service.list_slugs() == []
        with pytest.raises(PostNotFoundError):
            await service.get_post("fresh-post")

        await service.create_post(PostCreate(title="Fresh Post", content="Body"), author_id)

        assert await service.list_slugs() == ["fresh-post"]
        assert (await service.get_post("fresh-post")).title == "Fresh Post"

    @pytest.mark.asyncio
    async def test_title_without_letters_is_rejected(self, service: PostService, author_id: UUID) -> None:
        with pytest.raises(InvalidPostError):
            await service.create_post(PostCreate(title="???", content="Body"), author_id)

    @pytest.mark.asyncio
    async def test_duplicate_slug(
        self,
        service: PostService,
        post_repository: FakePostRepository,
        author_id: UUID,
    ) -> None:
        post_repository.add(make_post("hello", author_id))
        with pytest.raises(DuplicateEntryError):
            await service.create_post(PostCreate(title="Hello", content="Body"), author_id)


class TestUpdate:
    @pytest.mark.asyncio
    async def test_owner_update_refreshes_cached_post(
        self,
        service: PostService,
        post_repository: FakePostRepository,
        author_id: UUID,
    ) -> None:
        post_repository.add(make_post("hello", author_id, title="Hello"))
        assert (await service.get_post("hello")).content == "Hello **world**"

        updated = await service.update_post(
            "hello",
            PostUpdate(title="Hello", content="Edited", excerpt=""),
            author_id,
        )

        assert updated.content == "Edited"
        assert updated.excerpt == "Edited..."
        assert (await service.get_post("hello")).content == "Edited"

    @pytest.mark.asyncio
    async def test_title_change_moves_slug(
        self,
        service: PostService,
        post_repository: FakePostRepository,
        author_id: UUID,
    ) -> None:
        post_repository.add(make_post("hello", author_id, title="Hello"))
        await service.list_slugs()

        updated = await service.update_post(
            "hello",
            PostUpdate(title="Goodbye", content="Body"),
            author_id,
        )

        assert updated.slug == "goodbye"
        assert await service.list_slugs() == ["goodbye"]
        with pytest.raises(PostNotFoundError):
            await service.get_post("hello")

    @pytest.mark.asyncio
    async def test_non_owner_is_forbidden_and_nothing_changes(
        self,
        service: PostService,
        post_repository: FakePostRepository,
        author_id: UUID,
        other_author_id: UUID,
    ) -> None:
        post_repository.add(make_post("hello", author_id, title="Hello"))

        with pytest.raises(ForbiddenError):
            await service.update_post("hello", PostUpdate(title="Hijacked", content="x"), other_author_id)

        assert post_repository.posts["hello"].title == "Hello"
        assert post_repository.commits == 0

    @pytest.mark.asyncio
    async def test_missing_post(self, service: PostService, author_id: UUID) -> None:
        with pytest.raises(PostNotFoundError):
            await service.update_post("nope", PostUpdate(title="Nope", content="x"), author_id)


class TestDelete:
    @pytest.mark.asyncio
    async def test_owner_delete_removes_post_and_cover(
        self,
        service: PostService,
        post_repository: FakePostRepository,
        storage: FakeStorage,
        author_id: UUID,
    ) -> None:
        cover = "https://cdn.example.com/rkbucket/covers/1718-ab12.png"
        post_repository.add(make_post("hello", author_id, title="Hello", cover_image=cover))
        await service.get_post("hello")
        await service.list_posts()

        response = await service.delete_post("hello", author_id)

        assert response.deleted_post.slug == "hello"
        assert response.deleted_post.title == "Hello"
        assert storage.deleted == ["covers/1718-ab12.png"]
        assert await service.list_posts() == []
        with pytest.raises(PostNotFoundError):
            await service.get_post("hello")

    @pytest.mark.asyncio
    async def test_cover_cleanup_failure_does_not_fail_delete(
        self,
        service: PostService,
        post_repository: FakePostRepository,
        storage: FakeStorage,
        author_id: UUID,
    ) -> None:
        storage.fail_delete = True
        post_repository.add(make_post("hello", author_id, cover_image="/uploads/rkbucket/covers/x.png"))

        await service.delete_post("hello", author_id)

        assert "hello" not in post_repository.posts

    @pytest.mark.asyncio
    async def test_non_owner_cannot_delete(
        self,
        service: PostService,
        post_repository: FakePostRepository,
        storage: FakeStorage,
        author_id: UUID,
        other_author_id: UUID,
    ) -> None:
        post_repository.add(make_post("hello", author_id, cover_image="/uploads/rkbucket/covers/x.png"))

        with pytest.raises(ForbiddenError):
            await service.delete_post("hello", other_author_id)

        assert "hello" in post_repository.posts
        assert storage.deleted == []

    @pytest.mark.asyncio
    async def test_missing_post(self, service: PostService, author_id: UUID) -> None:
        with pytest.raises(PostNotFoundError):
            await service.delete_post("nope", author_id)

    @pytest.mark.asyncio
    async def test_post_without_cover_skips_cleanup(
        self,
        service: PostService,
        post_repository: FakePostRepository,
        storage: FakeStorage,
        author_id: UUID,
    ) -> None:
        post_repository.add(make_post("hello", author_id))
        await service.delete_post("hello", author_id)
        assert storage.deleted == []
