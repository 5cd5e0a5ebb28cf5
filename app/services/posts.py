"""
Post service.

Reads go through the tag-addressable cache and come back as ``ReadResult``
values so "no posts" and "posts unavailable" stay distinct. Writes check
ownership twice (pre-read, then an owner-constrained statement), commit,
clean up blobs best-effort and invalidate the affected cache tags.
"""

from collections.abc import Awaitable, Callable
from logging import getLogger
from uuid import UUID

from pydantic import TypeAdapter

from app.configs import file_logger, settings
from app.errors.auth import ForbiddenError
from app.errors.database import BackingStoreUnavailableError, DatabaseError
from app.errors.posts import InvalidPostError, PostNotFoundError
from app.managers.cache_manager import CacheManager
from app.models import PostDB
from app.repositories.post import PostRepository, to_response
from app.schemas.post import DeletedPost, DeletePostResponse, PostCreate, PostResponse, PostUpdate
from app.services.revalidation import Revalidator
from app.services.storage import StorageService, cover_path_from_url
from app.utils.best_effort import best_effort
from app.utils.cache_keys import all_posts_key, list_tags, post_key, post_slugs_key, post_tags
from app.utils.helpers import derive_excerpt, slugify, utc_now
from app.utils.results import ReadResult

logger = file_logger(getLogger(__name__))

_post_list = TypeAdapter(list[PostResponse])
_optional_post = TypeAdapter(PostResponse | None)
_slug_list = TypeAdapter(list[str])


class PostService:
    """Cached reads and ownership-checked writes for posts."""

    def __init__(
        self,
        repository: PostRepository,
        cache: CacheManager,
        revalidator: Revalidator,
        storage: StorageService,
        *,
        read_fallback: bool | None = None,
    ) -> None:
        self.repository = repository
        self.cache = cache
        self.revalidator = revalidator
        self.storage = storage
        self.read_fallback = settings.POSTS_READ_FALLBACK if read_fallback is None else read_fallback

    async def _read[T](
        self,
        key: str,
        ttl: int,
        tags: list[str],
        compute_fn: Callable[[], Awaitable[object]],
        adapter: TypeAdapter[T],
    ) -> ReadResult[T]:
        try:
            value = await self.cache.get_or_compute(key, ttl, tags, compute_fn)
        except DatabaseError as e:
            logger.warning("Read of %s failed: %s", key, e.detail)
            return ReadResult.failure(e)
        return ReadResult.success(adapter.validate_python(value))

    async def read_all(self) -> ReadResult[list[PostResponse]]:
        """All posts, newest first (``all-posts``)."""
        return await self._read(
            all_posts_key(),
            settings.CACHE_TTL_POSTS,
            list_tags(),
            self.repository.get_all,
            _post_list,
        )

    async def read_slugs(self) -> ReadResult[list[str]]:
        """Every post slug (``post-slugs``)."""
        return await self._read(
            post_slugs_key(),
            settings.CACHE_TTL_POSTS,
            list_tags(),
            self.repository.get_slugs,
            _slug_list,
        )

    async def read_post(self, slug: str) -> ReadResult[PostResponse | None]:
        """One post by slug (``post-{slug}``); ``None`` when absent."""
        return await self._read(
            post_key(slug),
            settings.CACHE_TTL_POST,
            post_tags(slug),
            lambda: self.repository.get_by_slug(slug),
            _optional_post,
        )

    def _unwrap[T](self, result: ReadResult[T], neutral: T) -> T:
        """Value of a read, the neutral value under fallback, else 503."""
        if not result.ok and not self.read_fallback:
            raise BackingStoreUnavailableError from result.error
        return result.or_default(neutral)

    async def list_posts(self) -> list[PostResponse]:
        return self._unwrap(await self.read_all(), [])

    async def list_slugs(self) -> list[str]:
        return self._unwrap(await self.read_slugs(), [])

    async def get_post(self, slug: str) -> PostResponse:
        """
        Get a single post.

        Raises:
            PostNotFoundError: If no post has this slug
            BackingStoreUnavailableError: If the read failed and fallback is off
        """
        post = self._unwrap(await self.read_post(slug), None)
        if post is None:
            raise PostNotFoundError
        return post

    async def _owned_row(self, slug: str, author_id: UUID) -> PostDB:
        """Pre-read used to tell "not found" from "not yours" before writing."""
        row = await self.repository.get_row(slug)
        if row is None:
            raise PostNotFoundError
        if row.author_id != author_id:
            logger.warning("Author %s attempted to modify post %s owned by another author", author_id, slug)
            raise ForbiddenError
        return row

    @staticmethod
    def _derive_slug(title: str) -> str:
        slug = slugify(title)
        if not slug:
            mssg = "Title must contain at least one letter or digit"
            raise InvalidPostError(mssg)
        return slug

    async def _invalidate(self, *slugs: str) -> None:
        await best_effort("cache invalidation", self.revalidator.revalidate_posts, *slugs)

    async def _fresh(self, slug: str, written: PostDB | None = None) -> PostResponse:
        """Read a just-written post straight from the store, bypassing the cache."""
        fresh = await self.repository.get_by_slug(slug)
        if fresh is not None:
            return fresh
        if written is None:
            raise PostNotFoundError
        return to_response(written, None)

    async def create_post(self, data: PostCreate, author_id: UUID) -> PostResponse:
        """
        Create a post owned by ``author_id``.

        Raises:
            InvalidPostError: If no slug can be derived from the title
            DuplicateEntryError: If the slug is already taken
        """
        slug = self._derive_slug(data.title)
        now = utc_now()
        post = PostDB(
            slug=slug,
            title=data.title,
            content=data.content,
            excerpt=derive_excerpt(data.content, data.excerpt),
            cover_image=data.cover_image,
            author_id=author_id,
            preview=data.preview,
            date=data.date or now,
            created_at=now,
        )
        created = await self.repository.create(post)
        await self.repository.commit()
        logger.info("Post %s created by %s", slug, author_id)

        # A miss for this slug may already be cached as "not found"
        await self._invalidate(slug)
        return await self._fresh(slug, created)

    async def update_post(self, slug: str, data: PostUpdate, author_id: UUID) -> PostResponse:
        """
        Update a post owned by ``author_id``.

        A changed title re-derives the slug, applied as a second
        owner-constrained statement in the same transaction.

        Raises:
            PostNotFoundError: If the post does not exist
            ForbiddenError: If the caller is not the owner
            DuplicateEntryError: If the new slug is taken
        """
        row = await self._owned_row(slug, author_id)
        new_slug = self._derive_slug(data.title)

        values = {
            "title": data.title,
            "content": data.content,
            "excerpt": derive_excerpt(data.content, data.excerpt),
            "cover_image": data.cover_image,
        }
        if not await self.repository.update_owned(row.id, author_id, values):
            raise ForbiddenError

        if new_slug != row.slug and not await self.repository.update_slug_owned(
            row.id,
            author_id,
            new_slug,
        ):
            raise ForbiddenError

        await self.repository.commit()
        logger.info("Post %s updated by %s", new_slug, author_id)

        await self._invalidate(*dict.fromkeys((row.slug, new_slug)))
        return await self._fresh(new_slug)

    async def delete_post(self, slug: str, author_id: UUID) -> DeletePostResponse:
        """
        Delete a post owned by ``author_id`` and its cover image.

        The cover removal never fails the request; the row delete is
        authoritative.

        Raises:
            PostNotFoundError: If the post does not exist (or vanished meanwhile)
            ForbiddenError: If the caller is not the owner
        """
        row = await self._owned_row(slug, author_id)

        if not await self.repository.delete_owned(slug, author_id):
            raise PostNotFoundError
        await self.repository.commit()
        logger.info("Post %s deleted by %s", slug, author_id)

        cover_path = cover_path_from_url(row.cover_image)
        if cover_path:
            await best_effort("cover image cleanup", self.storage.delete_cover, cover_path)

        await self._invalidate(slug)
        return DeletePostResponse(deleted_post=DeletedPost(slug=row.slug, title=row.title))
