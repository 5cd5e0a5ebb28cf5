"""
Post schemas for the Rocky Blog API.

Responses use the camelCase field names the frontend reads
(``coverImage``, ``authorId``). Everything also validates by field name so
cached payloads and ORM rows load the same way.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, computed_field

from app.configs.settings import MAX_CONTENT_LENGTH, MAX_EXCERPT_LENGTH, MAX_TITLE_LENGTH
from app.utils.helpers import md_to_html


class AuthorResponse(BaseModel):
    """Public author information embedded in posts."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    name: str
    picture: str | None = None


class PostCreate(BaseModel):
    """Post creation body; slug and author are derived server-side."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "title": "My First Post",
                "content": "Hello **world**. This is my first post on Rocky Blog.",
                "excerpt": "",
                "coverImage": "https://example.com/storage/rkbucket/covers/1718000000000-ab12cd.png",
            },
        },
    )

    title: str = Field(..., min_length=1, max_length=MAX_TITLE_LENGTH, description="Post title")
    content: str = Field(
        ...,
        min_length=1,
        max_length=MAX_CONTENT_LENGTH,
        description="Post content (markdown)",
    )
    excerpt: str | None = Field(
        default=None,
        max_length=MAX_EXCERPT_LENGTH,
        description="Optional summary; derived from content when empty",
    )
    cover_image: str | None = Field(default=None, alias="coverImage", max_length=1024)
    preview: bool = Field(default=False, description="Draft preview flag")
    date: datetime | None = Field(default=None, description="Publication date, now by default")


class PostUpdate(BaseModel):
    """
    Post update body.

    Mirrors the editor form: title and content are always sent, an empty
    excerpt is re-derived and a missing cover image clears it.
    """

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1, max_length=MAX_TITLE_LENGTH)
    content: str = Field(..., min_length=1, max_length=MAX_CONTENT_LENGTH)
    excerpt: str | None = Field(default=None, max_length=MAX_EXCERPT_LENGTH)
    cover_image: str | None = Field(default=None, alias="coverImage", max_length=1024)


class PostResponse(BaseModel):
    """A post as served by the read endpoints and cached."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: UUID
    slug: str
    title: str
    date: datetime
    cover_image: str | None = Field(default=None, alias="coverImage")
    author: AuthorResponse | None = None
    author_id: UUID = Field(alias="authorId")
    excerpt: str
    content: str
    preview: bool = False
    updated_at: datetime | None = Field(default=None, alias="updatedAt")


class PostDetailResponse(PostResponse):
    """Single post including its rendered markdown."""

    @computed_field(alias="contentHtml")  # type: ignore[prop-decorator]
    @property
    def content_html(self) -> str:
        return md_to_html(self.content)


class DeletedPost(BaseModel):
    slug: str
    title: str


class DeletePostResponse(BaseModel):
    """Body returned after a post is deleted."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = "Post deleted successfully"
    deleted_post: DeletedPost = Field(alias="deletedPost")
