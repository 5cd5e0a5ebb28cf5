"""
Local filesystem storage implementation.

Files are written under ``UPLOADS_DIR/{bucket}/`` and served by the app's
``/uploads`` static mount. Suitable for development and testing.
"""

from pathlib import Path

import aiofiles
import aiofiles.os

from app.configs.settings import settings


class LocalStorage:
    """Local filesystem storage implementation."""

    def __init__(self, uploads_dir: Path | None = None, bucket: str | None = None) -> None:
        """Initialize local storage with configured paths."""
        self.uploads_dir = uploads_dir or settings.UPLOADS_DIR
        self.bucket = bucket or settings.STORAGE_BUCKET
        self.base_path = self.uploads_dir / self.bucket
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _get_file_path(self, path: str) -> Path:
        """Resolve an object path, refusing anything outside the bucket."""
        file_path = (self.base_path / path).resolve()
        if not file_path.is_relative_to(self.base_path.resolve()):
            mssg = f"Path escapes the storage bucket: {path}"
            raise ValueError(mssg)
        return file_path

    def public_url(self, path: str) -> str:
        return f"/uploads/{self.bucket}/{path}"

    async def upload_cover(self, path: str, file_data: bytes, content_type: str) -> str:
        """Write the image to disk and return its URL path."""
        file_path = self._get_file_path(path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        async with aiofiles.open(file_path, "wb") as f:
            await f.write(file_data)

        return self.public_url(path)

    async def delete_cover(self, path: str) -> bool:
        """Remove the image; a missing file is not an error."""
        file_path = self._get_file_path(path)
        if not file_path.exists():
            return False
        await aiofiles.os.remove(file_path)
        return True
