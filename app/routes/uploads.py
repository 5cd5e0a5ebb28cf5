# app/routes/uploads.py

"""
Upload Routes.

Cover image upload for the post editor. The returned ``url`` is what the
client then sends as ``coverImage`` when creating or updating a post.
"""

from typing import Annotated

from fastapi import APIRouter, File, Request, UploadFile
from fastapi.responses import ORJSONResponse
from starlette.responses import Response
from starlette.status import HTTP_201_CREATED

from app.dependencies import IdentityDep, MediaServiceDep
from app.managers import limiter
from app.schemas import CoverUploadResponse

router = APIRouter(prefix="/api/uploads", tags=["🖼️ Uploads"])


@router.post(
    "/cover",
    response_class=ORJSONResponse,
    response_model=CoverUploadResponse,
    status_code=HTTP_201_CREATED,
    summary="Upload a cover image",
    description="JPEG, PNG, WebP or GIF up to the configured size (5MB by default).",
    responses={
        201: {
            "content": {
                "application/json": {
                    "example": {
                        "url": "/uploads/rkbucket/covers/1735689600000-ab12cd34ef.png",
                        "path": "covers/1735689600000-ab12cd34ef.png",
                        "size": 48213,
                        "contentType": "image/png",
                    },
                },
            },
        },
        400: {
            "description": "Not a readable image",
            "content": {"application/json": {"example": {"error": "Invalid or corrupted image file"}}},
        },
        401: {
            "description": "Missing or invalid bearer token",
            "content": {"application/json": {"example": {"error": "Unauthorized"}}},
        },
        413: {
            "description": "Image too large",
            "content": {
                "application/json": {
                    "example": {"error": "Your image is too large. Please use an image smaller than 5MB."},
                },
            },
        },
        415: {
            "description": "Unsupported image type",
            "content": {
                "application/json": {"example": {"error": "Please choose an image file (JPEG, PNG, WebP or GIF)."}},
            },
        },
    },
    operation_id="uploads_cover",
)
@limiter.limit("20/minute")
async def upload_cover(
    request: Request,
    response: Response,
    author_id: IdentityDep,
    file: Annotated[UploadFile, File(description="Cover image")],
    media: MediaServiceDep,
) -> CoverUploadResponse:
    """Validate and store a cover image for the authenticated author."""
    return await media.upload_cover(file)
