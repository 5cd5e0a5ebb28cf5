"""
Cloudinary storage implementation.

Covers are uploaded with a public ID of ``{bucket}/{path without extension}``
so the URL Cloudinary returns ends with the same file name the app derived.
"""

import asyncio
from functools import partial
from pathlib import PurePosixPath

import cloudinary
import cloudinary.uploader

from app.configs.settings import settings


class CloudinaryStorage:
    """Cloudinary storage implementation with CDN delivery."""

    def __init__(self) -> None:
        """Initialize Cloudinary with configured credentials."""
        cloudinary.config(
            cloud_name=settings.CLOUDINARY_CLOUD_NAME,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_API_SECRET,
            secure=True,
        )
        self.bucket = settings.STORAGE_BUCKET

    def _get_public_id(self, path: str) -> str:
        """
        Get the Cloudinary public ID for an object path.

        Args:
            path: Object path inside the bucket

        Returns:
            str: Cloudinary public ID
        """
        return f"{self.bucket}/{PurePosixPath(path).with_suffix('')}"

    async def upload_cover(self, path: str, file_data: bytes, content_type: str) -> str:
        """Upload a cover image and return its secure URL."""
        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(
            None,
            partial(
                cloudinary.uploader.upload,
                file_data,
                public_id=self._get_public_id(path),
                overwrite=False,
                resource_type="image",
                transformation=[{"quality": "auto:good", "fetch_format": "auto"}],
            ),
        )
        return result["secure_url"]

    async def delete_cover(self, path: str) -> bool:
        """Delete a cover image by its object path."""
        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(
            None,
            partial(cloudinary.uploader.destroy, self._get_public_id(path), resource_type="image"),
        )
        return result.get("result") == "ok"
