# app/dependencies/dependencies.py

"""Application dependencies: identity, cache, storage and services."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import get_session
from app.errors.auth import UnauthenticatedError
from app.managers.cache_manager import CacheManager
from app.managers.token_manager import decode_access_token
from app.repositories import PostRepository
from app.services.media import MediaService
from app.services.posts import PostService
from app.services.revalidation import Revalidator
from app.services.storage import StorageService

# Tokens are issued by the identity provider; this API only verifies them.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token", auto_error=False)


async def get_current_identity(
    token: Annotated[str | None, Depends(oauth2_scheme)],
) -> UUID:
    """
    Resolve the caller's author id from the bearer token.

    Runs before any data access, so unauthenticated requests never touch
    the database.

    Parameters
    ----------
    token : str | None
        Bearer token, if one was sent.

    Returns
    -------
    UUID
        The authenticated author's id.

    Raises
    ------
    UnauthenticatedError
        When the token is missing, expired or invalid.
    """
    if not token:
        raise UnauthenticatedError
    token_data = decode_access_token(token)
    if token_data is None:
        raise UnauthenticatedError
    return token_data.author_id


IdentityDep = Annotated[UUID, Depends(get_current_identity)]


def get_cache_manager(request: Request) -> CacheManager:
    """Dependency to get the cache manager built in the lifespan."""
    return request.app.state.cache_manager


CacheDep = Annotated[CacheManager, Depends(get_cache_manager)]


def get_storage(request: Request) -> StorageService:
    return request.app.state.storage


StorageDep = Annotated[StorageService, Depends(get_storage)]


def get_revalidator(request: Request) -> Revalidator:
    return request.app.state.revalidator


RevalidatorDep = Annotated[Revalidator, Depends(get_revalidator)]


def get_post_repository(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> PostRepository:
    """
    Dependency to get PostRepository instance.

    Parameters
    ----------
    session : AsyncSession
        Database session.

    Returns
    -------
    PostRepository
        Post repository instance.
    """
    return PostRepository(session)


PostRepoDep = Annotated[PostRepository, Depends(get_post_repository)]


def get_post_service(
    repository: PostRepoDep,
    cache: CacheDep,
    revalidator: RevalidatorDep,
    storage: StorageDep,
) -> PostService:
    return PostService(repository, cache, revalidator, storage)


PostServiceDep = Annotated[PostService, Depends(get_post_service)]


def get_media_service(storage: StorageDep) -> MediaService:
    return MediaService(storage)


MediaServiceDep = Annotated[MediaService, Depends(get_media_service)]
