from app.schemas.auth import TokenData
from app.schemas.cache import CacheHealthResponse, CacheStatisticsData, HealthCheckResponse
from app.schemas.post import (
    AuthorResponse,
    DeletedPost,
    DeletePostResponse,
    PostCreate,
    PostDetailResponse,
    PostResponse,
    PostUpdate,
)
from app.schemas.revalidate import (
    RevalidateInfoResponse,
    RevalidateResponse,
    RevalidateUsage,
)
from app.schemas.upload import CoverUploadResponse

__all__ = [
    "AuthorResponse",
    "CacheHealthResponse",
    "CacheStatisticsData",
    "CoverUploadResponse",
    "DeletePostResponse",
    "DeletedPost",
    "HealthCheckResponse",
    "PostCreate",
    "PostDetailResponse",
    "PostResponse",
    "PostUpdate",
    "RevalidateInfoResponse",
    "RevalidateResponse",
    "RevalidateUsage",
    "TokenData",
]
