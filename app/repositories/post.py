"""Post repository for database operations."""

from collections.abc import Mapping
from logging import getLogger
from typing import Any
from uuid import UUID

from sqlalchemy import delete, desc, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.configs import file_logger
from app.errors.base import BASE_EXCEPTION
from app.errors.database import DatabaseConnectionError, DatabaseError, DuplicateEntryError
from app.models import AuthorDB, PostDB
from app.schemas.post import AuthorResponse, PostResponse
from app.utils.helpers import utc_now

logger = file_logger(getLogger(__name__))


def to_response(post: PostDB, author: AuthorDB | None) -> PostResponse:
    """Combine a post row and its (optional) author row into the public shape."""
    return PostResponse(
        id=post.id,
        slug=post.slug,
        title=post.title,
        date=post.date,
        cover_image=post.cover_image,
        author=AuthorResponse.model_validate(author) if author else None,
        author_id=post.author_id,
        excerpt=post.excerpt,
        content=post.content,
        preview=post.preview,
        updated_at=post.updated_at,
    )


class PostRepository:
    """
    Repository for Post database operations.

    Reads join the author so a post renders in one query. Writes that
    change or remove an existing post are always constrained by the owner
    (``author_id``) and report how many rows they touched, so a caller can
    tell a lost race from success.
    """

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize repository with database session.

        Args:
            session: Async database session
        """
        self.session = session

    def _with_author(self):  # noqa: ANN202
        return select(PostDB, AuthorDB).outerjoin(AuthorDB, AuthorDB.id == PostDB.author_id)

    async def get_by_slug(self, slug: str) -> PostResponse | None:
        """
        Get a post with its author by slug.

        Raises:
            DatabaseConnectionError: If the query cannot be executed
        """
        statement = (
            self._with_author()
            .where(PostDB.slug == slug)
            .execution_options(populate_existing=True)
        )
        try:
            result = await self.session.execute(statement)
        except (SQLAlchemyError, *BASE_EXCEPTION) as e:
            logger.exception("Error fetching post %s", slug)
            raise DatabaseConnectionError(detail=f"Failed to fetch post: {e}") from e
        row = result.first()
        return to_response(row[0], row[1]) if row else None

    async def get_all(self) -> list[PostResponse]:
        """
        Get every post, newest first.

        Raises:
            DatabaseConnectionError: If the query cannot be executed
        """
        statement = self._with_author().order_by(desc(PostDB.date))
        try:
            result = await self.session.execute(statement)
        except (SQLAlchemyError, *BASE_EXCEPTION) as e:
            logger.exception("Error fetching posts")
            raise DatabaseConnectionError(detail=f"Failed to fetch posts: {e}") from e
        return [to_response(post, author) for post, author in result.all()]

    async def get_slugs(self) -> list[str]:
        """
        Get all post slugs, newest first.

        Raises:
            DatabaseConnectionError: If the query cannot be executed
        """
        try:
            result = await self.session.execute(select(PostDB.slug).order_by(desc(PostDB.date)))
        except (SQLAlchemyError, *BASE_EXCEPTION) as e:
            logger.exception("Error fetching post slugs")
            raise DatabaseConnectionError(detail=f"Failed to fetch slugs: {e}") from e
        return list(result.scalars().all())

    async def get_row(self, slug: str) -> PostDB | None:
        """
        Get the raw post row used for ownership checks.

        Raises:
            DatabaseConnectionError: If the query cannot be executed
        """
        try:
            result = await self.session.execute(select(PostDB).where(PostDB.slug == slug))
        except (SQLAlchemyError, *BASE_EXCEPTION) as e:
            logger.exception("Error fetching post row %s", slug)
            raise DatabaseConnectionError(detail=f"Failed to fetch post: {e}") from e
        return result.scalar_one_or_none()

    async def create(self, post: PostDB) -> PostDB:
        """
        Insert a new post.

        Raises:
            DuplicateEntryError: If the slug already exists
            DatabaseError: For other database errors
        """
        self.session.add(post)
        await self._flush(f"Post with slug '{post.slug}' already exists")
        await self.session.refresh(post)
        return post

    async def update_owned(
        self,
        post_id: UUID,
        author_id: UUID,
        values: Mapping[str, Any],
    ) -> int:
        """
        Update a post only if it belongs to ``author_id``.

        Returns:
            int: Number of rows updated (0 when the owner no longer matches)
        """
        statement = (
            update(PostDB)
            .where(PostDB.id == post_id, PostDB.author_id == author_id)
            .values(**values, updated_at=utc_now())
        )
        return await self._execute_write(statement, "Failed to update post")

    async def update_slug_owned(self, post_id: UUID, author_id: UUID, slug: str) -> int:
        """
        Change a post's slug, constrained by owner.

        Raises:
            DuplicateEntryError: If another post already uses ``slug``
        """
        statement = (
            update(PostDB)
            .where(PostDB.id == post_id, PostDB.author_id == author_id)
            .values(slug=slug)
        )
        return await self._execute_write(statement, f"Post with slug '{slug}' already exists")

    async def delete_owned(self, slug: str, author_id: UUID) -> int:
        """
        Delete a post only if it belongs to ``author_id``.

        Returns:
            int: Number of rows deleted
        """
        statement = delete(PostDB).where(PostDB.slug == slug, PostDB.author_id == author_id)
        return await self._execute_write(statement, "Failed to delete post")

    async def commit(self) -> None:
        """Commit the current unit of work so later reads observe it."""
        try:
            await self.session.commit()
        except (SQLAlchemyError, *BASE_EXCEPTION) as e:
            await self.session.rollback()
            logger.exception("Commit failed")
            raise DatabaseError(detail="Failed to save changes") from e

    async def _execute_write(self, statement: Any, message: str) -> int:  # noqa: ANN401
        try:
            result = await self.session.execute(statement)
        except IntegrityError as e:
            await self.session.rollback()
            raise self._integrity_error(e, message) from e
        except (SQLAlchemyError, *BASE_EXCEPTION) as e:
            await self.session.rollback()
            logger.exception(message)
            raise DatabaseError(detail=message) from e
        return result.rowcount or 0

    async def _flush(self, message: str) -> None:
        try:
            await self.session.flush()
        except IntegrityError as e:
            await self.session.rollback()
            raise self._integrity_error(e, message) from e
        except (SQLAlchemyError, *BASE_EXCEPTION) as e:
            await self.session.rollback()
            logger.exception("Failed to save post")
            raise DatabaseError(detail="Failed to save post") from e

    @staticmethod
    def _integrity_error(error: IntegrityError, message: str) -> DatabaseError:
        error_msg = str(error.orig) if error.orig else str(error)
        if "unique" in error_msg.lower() or "duplicate" in error_msg.lower():
            return DuplicateEntryError(detail=message)
        logger.error("Database integrity error: %s", error_msg)
        return DatabaseError(detail="Database integrity error")
