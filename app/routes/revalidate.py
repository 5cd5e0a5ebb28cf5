# app/routes/revalidate.py

"""
Revalidation Routes.

Lets a caller holding the shared secret force cache entries to be
recomputed on their next read.

Summary
-------
  - ``POST /api/revalidate?secret=..&path=..`` invalidates the entries behind a path.
  - ``POST /api/revalidate?secret=..&slug=..`` invalidates a post and the home page.
  - ``POST /api/revalidate?secret=..`` invalidates the home page.
  - ``GET /api/revalidate?secret=..`` describes the above.

A wrong or missing secret answers ``401 {"message": "Invalid secret"}``
and leaves every cache entry untouched.
"""

from logging import getLogger
from typing import Annotated

from fastapi import APIRouter, Query, Request
from fastapi.responses import ORJSONResponse
from starlette.responses import Response

from app.configs import file_logger
from app.dependencies import RevalidatorDep
from app.errors import CacheExceptionError, InvalidSecretError, RevalidationError
from app.managers import limiter
from app.schemas import RevalidateInfoResponse, RevalidateResponse, RevalidateUsage
from app.services.revalidation import Revalidator
from app.utils.helpers import iso_timestamp

router = APIRouter(prefix="/api/revalidate", tags=["🔄 Revalidate"])

logger = file_logger(getLogger(__name__))

SecretQuery = Annotated[str | None, Query(description="Shared revalidation secret")]

INVALID_SECRET_RESPONSE: dict[int | str, dict] = {
    401: {
        "description": "Invalid secret",
        "content": {"application/json": {"example": {"message": "Invalid secret"}}},
    },
}


def _require_secret(revalidator: Revalidator, secret: str | None) -> None:
    if not revalidator.verify_secret(secret):
        raise InvalidSecretError


@router.post(
    "",
    response_class=ORJSONResponse,
    response_model=RevalidateResponse,
    summary="Invalidate cached pages",
    description="Invalidate by explicit path, by post slug (post and home), or the home page.",
    responses={
        200: {
            "content": {
                "application/json": {
                    "example": {
                        "revalidated": True,
                        "message": "Revalidation successful",
                        "timestamp": "2025-01-01T00:00:00.000Z",
                        "tags": ["post-my-post", "posts"],
                    },
                },
            },
        },
        **INVALID_SECRET_RESPONSE,
        500: {
            "description": "Cache backend failure",
            "content": {
                "application/json": {
                    "example": {"message": "Error revalidating", "error": "Cache invalidation failed"},
                },
            },
        },
    },
    operation_id="revalidate",
)
@limiter.limit("60/minute")
async def revalidate(
    request: Request,
    response: Response,
    revalidator: RevalidatorDep,
    secret: SecretQuery = None,
    path: Annotated[str | None, Query(description="Page path, e.g. /posts/my-post")] = None,
    slug: Annotated[str | None, Query(description="Post slug")] = None,
) -> RevalidateResponse:
    """
    Invalidate cache entries for a path, a post, or the home page.

    Only this process's cache is touched; peers are not notified so that
    peers calling each other cannot loop.
    """
    _require_secret(revalidator, secret)
    try:
        tags = await revalidator.invalidate(path=path, slug=slug)
    except CacheExceptionError as e:
        logger.exception("Revalidation error")
        raise RevalidationError(error=e.detail) from e

    logger.info("Revalidated %s", path or (f"post {slug}" if slug else "homepage"))
    return RevalidateResponse(timestamp=iso_timestamp(), tags=tags)


@router.get(
    "",
    response_class=ORJSONResponse,
    response_model=RevalidateInfoResponse,
    summary="Describe the revalidate API",
    responses=INVALID_SECRET_RESPONSE,
    operation_id="revalidate_info",
)
async def revalidate_info(revalidator: RevalidatorDep, secret: SecretQuery = None) -> RevalidateInfoResponse:
    """Check the secret and return usage examples; nothing is invalidated."""
    _require_secret(revalidator, secret)
    return RevalidateInfoResponse(
        usage=RevalidateUsage(
            revalidate_path="POST /api/revalidate?secret=xxx&path=/posts/example-post",
            revalidate_post="POST /api/revalidate?secret=xxx&slug=example-post",
            revalidate_home="POST /api/revalidate?secret=xxx",
        ),
    )
