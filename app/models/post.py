"""Post database model using SQLModel."""

from datetime import UTC, datetime
from typing import cast
from uuid import UUID, uuid4

from pydantic import ConfigDict
from sqlalchemy import Boolean, DateTime, Index, Text
from sqlalchemy.orm import declared_attr
from sqlmodel import Column, Field, SQLModel, String

from app.configs.settings import MAX_EXCERPT_LENGTH, MAX_TITLE_LENGTH


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


class PostDB(SQLModel, table=True):
    """
    Post database model for PostgreSQL.

    ``slug`` is the external lookup key and is unique. ``author_id`` holds
    the identity provider's subject; the author row may not exist yet, so
    there is no foreign key constraint.
    """

    __tablename__ = cast("declared_attr[str]", "posts")

    __table_args__ = (
        Index("ix_posts_date", "date"),
        Index("ix_posts_author_slug", "author_id", "slug"),
    )

    id: UUID = Field(
        default_factory=uuid4,
        primary_key=True,
        nullable=False,
        description="Post ID",
    )
    slug: str = Field(
        sa_column=Column(String(MAX_TITLE_LENGTH), unique=True, nullable=False, index=True),
        description="URL-friendly slug (unique)",
    )
    title: str = Field(
        sa_column=Column(String(MAX_TITLE_LENGTH), nullable=False),
        description="Post title",
    )
    content: str = Field(
        sa_column=Column(Text, nullable=False),
        description="Post content (markdown)",
    )
    excerpt: str = Field(
        default="",
        sa_column=Column(String(MAX_EXCERPT_LENGTH), nullable=False),
        description="Short summary shown in listings",
    )
    cover_image: str | None = Field(
        default=None,
        sa_column=Column(String(1024)),
        description="Public URL of the cover image in the blob store",
    )
    author_id: UUID = Field(
        nullable=False,
        index=True,
        description="Owning author's identity",
    )
    preview: bool = Field(
        default=False,
        sa_column=Column(Boolean, nullable=False, server_default="false"),
        description="Draft preview flag",
    )

    # Timestamps (timezone-aware)
    date: datetime = Field(
        default_factory=_utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
        description="Publication date, used for ordering",
    )
    created_at: datetime = Field(
        default_factory=_utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
        description="Creation timestamp",
    )
    updated_at: datetime | None = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True)),
        description="Last update timestamp",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "550e8400-e29b-41d4-a716-446655440000",
                "slug": "my-first-post",
                "title": "My First Post",
                "content": "Hello **world**.",
                "excerpt": "Hello **world**....",
                "cover_image": "https://example.com/storage/rkbucket/covers/1718000000000-ab12cd.png",
                "author_id": "123e4567-e89b-12d3-a456-426614174000",
                "preview": False,
            },
        },
    )
