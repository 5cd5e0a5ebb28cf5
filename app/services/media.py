"""
Cover image upload service.

Validates uploaded images (type, size, decodability) and stores them
under a collision-resistant name in the covers folder.
"""

from io import BytesIO
from logging import getLogger
from secrets import token_hex
from time import time_ns

from fastapi import UploadFile
from PIL import Image, UnidentifiedImageError

from app.configs import file_logger, settings
from app.errors.upload import (
    ImageTooLargeError,
    InvalidImageError,
    StorageError,
    UnsupportedImageTypeError,
)
from app.schemas.upload import CoverUploadResponse
from app.services.storage import StorageService

logger = file_logger(getLogger(__name__))

EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
}


def new_cover_path(extension: str) -> str:
    """Build ``covers/{epoch ms}-{random}.{ext}`` for a fresh upload."""
    return f"{settings.COVERS_PREFIX}/{time_ns() // 1_000_000}-{token_hex(5)}.{extension}"


class MediaService:
    """Service for validating and storing post cover images."""

    def __init__(self, storage: StorageService) -> None:
        """
        Initialize the media service.

        Args:
            storage: Storage backend receiving the files.
        """
        self.storage = storage
        self.max_size_bytes = settings.COVER_MAX_SIZE_MB * 1024 * 1024
        self.allowed_types = settings.COVER_ALLOWED_TYPES

    def _validate_image_type(self, content_type: str | None) -> None:
        if not content_type or content_type not in self.allowed_types:
            raise UnsupportedImageTypeError(
                content_type=content_type or "unknown",
                allowed_types=self.allowed_types,
            )

    def _validate_image_size(self, file_data: bytes) -> None:
        actual_size = len(file_data)
        if actual_size > self.max_size_bytes:
            raise ImageTooLargeError(
                max_size_mb=settings.COVER_MAX_SIZE_MB,
                actual_size_mb=actual_size / (1024 * 1024),
            )

    @staticmethod
    def _validate_image_content(file_data: bytes) -> None:
        """Validate that the bytes decode as an image."""
        try:
            with Image.open(BytesIO(file_data)) as img:
                img.verify()
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
            mssg = f"Invalid or corrupted image file: {e!s}"
            raise InvalidImageError(mssg) from e

    async def upload_cover(self, file: UploadFile) -> CoverUploadResponse:
        """
        Validate and store a cover image.

        Args:
            file: The uploaded file

        Returns:
            CoverUploadResponse: Public URL and object path of the image

        Raises:
            UnsupportedImageTypeError: If the MIME type is not allowed
            ImageTooLargeError: If the file exceeds the size limit
            InvalidImageError: If the bytes are not a readable image
            StorageError: If the storage backend fails
        """
        content_type = file.content_type
        self._validate_image_type(content_type)

        file_data = await file.read()
        self._validate_image_size(file_data)
        self._validate_image_content(file_data)

        extension = EXTENSIONS.get(content_type, content_type.rsplit("/", 1)[-1])  # type: ignore[union-attr]
        path = new_cover_path(extension)
        try:
            url = await self.storage.upload_cover(path, file_data, content_type)  # type: ignore[arg-type]
        except Exception as e:
            logger.exception("Failed to store cover image %s", path)
            raise StorageError from e

        logger.info("Stored cover image %s (%d bytes)", path, len(file_data))
        return CoverUploadResponse(
            url=url,
            path=path,
            size=len(file_data),
            content_type=content_type,  # type: ignore[arg-type]
        )
