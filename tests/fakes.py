# tests/fakes.py
"""In-memory doubles for the repository and blob storage."""

from collections.abc import Mapping
from datetime import UTC, datetime, timedelta
from typing import Any
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID, uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from app.errors.database import DatabaseConnectionError, DuplicateEntryError
from app.models import AuthorDB, PostDB
from app.repositories.post import to_response
from app.schemas.post import PostResponse


class FakePostRepository:
    """
    In-memory stand-in for ``PostRepository``.

    Counts reads so tests can tell cache hits from recomputation, and can be
    switched into a failing mode to simulate an unavailable database.
    """

    def __init__(self) -> None:
        self.posts: dict[str, PostDB] = {}
        self.authors: dict[UUID, AuthorDB] = {}
        self.reads = 0
        self.commits = 0
        self.fail_reads = False

    def add(self, post: PostDB, author: AuthorDB | None = None) -> PostDB:
        self.posts[post.slug] = post
        if author is not None:
            self.authors[author.id] = author
        return post

    def _check_reads(self) -> None:
        self.reads += 1
        if self.fail_reads:
            raise DatabaseConnectionError(detail="Failed to fetch posts: connection refused")

    def _by_id(self, post_id: UUID) -> PostDB | None:
        return next((post for post in self.posts.values() if post.id == post_id), None)

    async def get_by_slug(self, slug: str) -> PostResponse | None:
        self._check_reads()
        post = self.posts.get(slug)
        return to_response(post, self.authors.get(post.author_id)) if post else None

    async def get_all(self) -> list[PostResponse]:
        self._check_reads()
        ordered = sorted(self.posts.values(), key=lambda post: post.date, reverse=True)
        return [to_response(post, self.authors.get(post.author_id)) for post in ordered]

    async def get_slugs(self) -> list[str]:
        self._check_reads()
        ordered = sorted(self.posts.values(), key=lambda post: post.date, reverse=True)
        return [post.slug for post in ordered]

    async def get_row(self, slug: str) -> PostDB | None:
        return self.posts.get(slug)

    async def create(self, post: PostDB) -> PostDB:
        if post.slug in self.posts:
            raise DuplicateEntryError(detail=f"Post with slug '{post.slug}' already exists")
        self.posts[post.slug] = post
        return post

    async def update_owned(self, post_id: UUID, author_id: UUID, values: Mapping[str, Any]) -> int:
        post = self._by_id(post_id)
        if post is None or post.author_id != author_id:
            return 0
        for field, value in values.items():
            setattr(post, field, value)
        post.updated_at = datetime.now(tz=UTC)
        return 1

    async def update_slug_owned(self, post_id: UUID, author_id: UUID, slug: str) -> int:
        post = self._by_id(post_id)
        if post is None or post.author_id != author_id:
            return 0
        if slug in self.posts:
            raise DuplicateEntryError(detail=f"Post with slug '{slug}' already exists")
        del self.posts[post.slug]
        post.slug = slug
        self.posts[slug] = post
        return 1

    async def delete_owned(self, slug: str, author_id: UUID) -> int:
        post = self.posts.get(slug)
        if post is None or post.author_id != author_id:
            return 0
        del self.posts[slug]
        return 1

    async def commit(self) -> None:
        self.commits += 1


class FakeStorage:
    """Records cover uploads and deletions instead of touching a blob store."""

    def __init__(self) -> None:
        self.files: dict[str, bytes] = {}
        self.deleted: list[str] = []
        self.fail_delete = False

    async def upload_cover(self, path: str, file_data: bytes, content_type: str) -> str:
        self.files[path] = file_data
        return f"https://cdn.example.com/rkbucket/{path}"

    async def delete_cover(self, path: str) -> bool:
        if self.fail_delete:
            mssg = "blob store unreachable"
            raise ConnectionError(mssg)
        self.deleted.append(path)
        return self.files.pop(path, None) is not None


def make_post(
    slug: str,
    author_id: UUID,
    *,
    title: str | None = None,
    content: str = "Hello **world**",
    cover_image: str | None = None,
    days_ago: int = 0,
) -> PostDB:
    """Build a post row the way the write path would."""
    date = datetime(2025, 6, 1, tzinfo=UTC) - timedelta(days=days_ago)
    return PostDB(
        id=uuid4(),
        slug=slug,
        title=title or slug.replace("-", " ").title(),
        content=content,
        excerpt=content[:160] + "...",
        cover_image=cover_image,
        author_id=author_id,
        preview=False,
        date=date,
        created_at=date,
    )


def mock_session(result: object = None) -> MagicMock:
    """``AsyncSession`` double; ``execute`` resolves to ``result``."""
    session = MagicMock(spec=AsyncSession)
    session.execute = AsyncMock(return_value=result)
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session


def unreachable_session() -> MagicMock:
    """Session whose statements fail like asyncpg does when the server is down."""
    session = mock_session()
    session.execute.side_effect = ConnectionRefusedError(111, "Connect call failed ('127.0.0.1', 5432)")
    return session
