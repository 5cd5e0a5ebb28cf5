"""
Base storage protocol for blob storage operations.

Covers live under ``{COVERS_PREFIX}/`` inside the configured bucket,
whatever the backend (local filesystem, Cloudinary).
"""

from abc import abstractmethod
from typing import Protocol
from urllib.parse import urlparse

from app.configs.settings import settings


class StorageService(Protocol):
    """Interface every storage backend implements."""

    @abstractmethod
    async def upload_cover(self, path: str, file_data: bytes, content_type: str) -> str:
        """
        Store a cover image.

        Args:
            path: Object path inside the bucket, e.g. ``covers/1718-ab12.png``
            file_data: Raw image bytes
            content_type: MIME type of the image

        Returns:
            str: Public URL of the stored image
        """
        ...

    @abstractmethod
    async def delete_cover(self, path: str) -> bool:
        """
        Delete a cover image.

        Args:
            path: Object path inside the bucket

        Returns:
            bool: True if something was deleted
        """
        ...


def cover_path_from_url(url: str | None) -> str | None:
    """
    Map a stored cover URL back to its object path.

    Only the last segment of the URL path is kept and placed under the
    covers prefix, so both local and CDN URLs resolve the same way.

    Examples:
    --------
    >>> cover_path_from_url("https://cdn.example.com/v1/rkbucket/covers/17-ab.png")
    'covers/17-ab.png'
    """
    if not url:
        return None
    name = urlparse(url).path.rstrip("/").rsplit("/", 1)[-1]
    if not name:
        return None
    return f"{settings.COVERS_PREFIX}/{name}"
