# app/routes/posts.py

"""
Post Routes.

Cached read endpoints and ownership-checked mutation endpoints for posts.

Summary
-------
Endpoints include:
  - List posts (cached as ``all-posts``)
  - List post slugs (cached as ``post-slugs``)
  - Get post by slug (cached as ``post-{slug}``)
  - Create post
  - Update post (owner only)
  - Delete post (owner only, removes the cover image best-effort)

Dependencies
------------
  - `PostServiceDep`: Post service wired to the request's session, cache,
    revalidator and storage.
  - `IdentityDep`: Author id from the bearer token; resolves before any
    data access and answers `401` when missing or invalid.

Rate Limiting
-------------
Mutation endpoints define explicit limits and include `429` response
examples. Tiered limits apply when `X-API-Key` is present.
"""

from logging import getLogger
from typing import Annotated

from fastapi import APIRouter, Body, Path, Request
from fastapi.responses import ORJSONResponse
from starlette.responses import Response
from starlette.status import HTTP_201_CREATED

from app.configs import file_logger
from app.dependencies import IdentityDep, PostServiceDep
from app.managers import limiter
from app.schemas import DeletePostResponse, PostCreate, PostDetailResponse, PostResponse, PostUpdate

router = APIRouter(prefix="/api/posts", tags=["📝 Posts"])

logger = file_logger(getLogger(__name__))

SlugPath = Annotated[str, Path(min_length=1, max_length=200, description="Post slug")]

POST_EXAMPLE = {
    "id": "550e8400-e29b-41d4-a716-446655440000",
    "slug": "my-first-post",
    "title": "My First Post",
    "date": "2025-01-01T00:00:00Z",
    "coverImage": "/uploads/rkbucket/covers/1735689600000-ab12cd34ef.png",
    "author": {"name": "Rocky", "picture": "https://example.com/rocky.png"},
    "authorId": "123e4567-e89b-12d3-a456-426614174000",
    "excerpt": "Hello world...",
    "content": "Hello world",
    "preview": False,
    "updatedAt": None,
}

ERROR_RESPONSES: dict[int | str, dict] = {
    401: {
        "description": "Missing or invalid bearer token",
        "content": {"application/json": {"example": {"error": "Unauthorized"}}},
    },
    403: {
        "description": "Caller is not the post's author",
        "content": {"application/json": {"example": {"error": "Forbidden"}}},
    },
    404: {
        "description": "Post not found",
        "content": {"application/json": {"example": {"error": "Post not found"}}},
    },
    429: {
        "description": "Rate limit exceeded",
        "content": {"application/json": {"example": {"error": "Rate limit exceeded"}}},
    },
}


def _mutation_limit(key: str) -> str:
    return "30/minute" if "apikey" in key else "10/minute"


@router.get(
    "",
    response_class=ORJSONResponse,
    response_model=list[PostResponse],
    summary="List posts",
    description="All posts, newest first. Served from cache for up to 5 minutes.",
    responses={
        200: {"content": {"application/json": {"example": [POST_EXAMPLE]}}},
        503: {
            "description": "Backing store unavailable",
            "content": {
                "application/json": {"example": {"error": "Posts are temporarily unavailable"}},
            },
        },
    },
    operation_id="posts_list",
)
async def list_posts(service: PostServiceDep) -> list[PostResponse]:
    """
    List all posts.

    Returns
    -------
    list[PostResponse]
        Posts ordered by date, newest first.
    """
    return await service.list_posts()


@router.get(
    "/slugs",
    response_class=ORJSONResponse,
    response_model=list[str],
    summary="List post slugs",
    description="Every post slug, e.g. for static page generation.",
    operation_id="posts_slugs",
)
async def list_post_slugs(service: PostServiceDep) -> list[str]:
    return await service.list_slugs()


@router.get(
    "/{slug}",
    response_class=ORJSONResponse,
    response_model=PostDetailResponse,
    summary="Get post by slug",
    description="A single post with rendered HTML. Served from cache for up to 1 minute.",
    responses={
        200: {"content": {"application/json": {"example": POST_EXAMPLE | {"contentHtml": "<p>Hello world</p>"}}}},
        404: ERROR_RESPONSES[404],
    },
    operation_id="posts_get_by_slug",
)
async def get_post(slug: SlugPath, service: PostServiceDep) -> PostDetailResponse:
    """
    Get a post by slug.

    Parameters
    ----------
    slug : str
        Post slug.

    Returns
    -------
    PostDetailResponse
        The post, including ``contentHtml``.

    Raises
    ------
    PostNotFoundError
        When no post has this slug.
    """
    post = await service.get_post(slug)
    return PostDetailResponse.model_validate(post.model_dump())


@router.post(
    "",
    response_class=ORJSONResponse,
    response_model=PostResponse,
    status_code=HTTP_201_CREATED,
    summary="Create a new post",
    description="Create a post authored by the caller. The slug is derived from the title.",
    responses={
        201: {"content": {"application/json": {"example": POST_EXAMPLE}}},
        400: {
            "description": "Title yields an empty slug",
            "content": {
                "application/json": {
                    "example": {"error": "Title must contain at least one letter or digit"},
                },
            },
        },
        401: ERROR_RESPONSES[401],
        409: {
            "description": "Slug already exists",
            "content": {
                "application/json": {
                    "example": {"error": "Post with slug 'my-first-post' already exists"},
                },
            },
        },
        429: ERROR_RESPONSES[429],
    },
    operation_id="posts_create",
)
@limiter.limit(_mutation_limit)
async def create_post(
    request: Request,
    response: Response,
    author_id: IdentityDep,
    post: Annotated[
        PostCreate,
        Body(
            examples={
                "basic": {
                    "summary": "Post without excerpt",
                    "value": {"title": "My First Post", "content": "Hello world"},
                },
            },
        ),
    ],
    service: PostServiceDep,
) -> PostResponse:
    """
    Create a new post.

    Parameters
    ----------
    request : Request
        Incoming request (used by the rate limiter).
    response : Response
        Outgoing response (used by the rate limiter).
    author_id : UUID
        Authenticated author.
    post : PostCreate
        Title, content and optional excerpt / cover image.

    Returns
    -------
    PostResponse
        The created post.
    """
    return await service.create_post(post, author_id)


@router.put(
    "/{slug}",
    response_class=ORJSONResponse,
    response_model=PostResponse,
    summary="Update a post",
    description="Replace a post's title, content, excerpt and cover image. Owner only.",
    responses={
        200: {"content": {"application/json": {"example": POST_EXAMPLE}}},
        **ERROR_RESPONSES,
    },
    operation_id="posts_update",
)
@limiter.limit(_mutation_limit)
async def update_post(
    request: Request,
    response: Response,
    slug: SlugPath,
    author_id: IdentityDep,
    post: PostUpdate,
    service: PostServiceDep,
) -> PostResponse:
    """
    Update a post owned by the caller.

    A changed title also changes the slug; the response carries the new one.
    """
    return await service.update_post(slug, post, author_id)


@router.delete(
    "/{slug}/delete",
    response_class=ORJSONResponse,
    response_model=DeletePostResponse,
    summary="Delete a post",
    description=(
        "Delete a post owned by the caller and, best-effort, its cover image. "
        "Invalidates the home page and the post page."
    ),
    responses={
        200: {
            "content": {
                "application/json": {
                    "example": {
                        "message": "Post deleted successfully",
                        "deletedPost": {"slug": "my-post", "title": "My Post"},
                    },
                },
            },
        },
        **ERROR_RESPONSES,
        500: {
            "description": "Backing store failure",
            "content": {"application/json": {"example": {"error": "Failed to delete post"}}},
        },
    },
    operation_id="posts_delete",
)
@limiter.limit(_mutation_limit)
async def delete_post(
    request: Request,
    response: Response,
    slug: SlugPath,
    author_id: IdentityDep,
    service: PostServiceDep,
) -> DeletePostResponse:
    """
    Delete a post owned by the caller.

    Parameters
    ----------
    slug : str
        Post slug.
    author_id : UUID
        Authenticated author.

    Returns
    -------
    DeletePostResponse
        Confirmation with the deleted post's slug and title.
    """
    return await service.delete_post(slug, author_id)
