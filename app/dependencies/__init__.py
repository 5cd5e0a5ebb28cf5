# app/dependencies/__init__.py

from app.dependencies.dependencies import (
    CacheDep,
    IdentityDep,
    MediaServiceDep,
    PostRepoDep,
    PostServiceDep,
    RevalidatorDep,
    StorageDep,
    get_cache_manager,
    get_current_identity,
    get_media_service,
    get_post_repository,
    get_post_service,
    get_revalidator,
    get_storage,
)

__all__ = [
    "CacheDep",
    "IdentityDep",
    "MediaServiceDep",
    "PostRepoDep",
    "PostServiceDep",
    "RevalidatorDep",
    "StorageDep",
    "get_cache_manager",
    "get_current_identity",
    "get_media_service",
    "get_post_repository",
    "get_post_service",
    "get_revalidator",
    "get_storage",
]
