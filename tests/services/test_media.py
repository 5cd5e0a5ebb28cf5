"""Tests for cover image validation and storage."""

import re
from io import BytesIO
from unittest.mock import AsyncMock

import pytest
from fastapi import UploadFile
from PIL import Image
from starlette.datastructures import Headers

from app.errors.upload import (
    ImageTooLargeError,
    InvalidImageError,
    StorageError,
    UnsupportedImageTypeError,
)
from app.services.media import MediaService, new_cover_path
from tests.fakes import FakeStorage


def make_upload(data: bytes, content_type: str, filename: str = "cover.png") -> UploadFile:
    return UploadFile(
        file=BytesIO(data),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


@pytest.fixture
def png_bytes() -> bytes:
    img = Image.new("RGBA", (64, 64), color="blue")
    buffer = BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


def test_new_cover_path_format() -> None:
    assert re.match(r"^covers/\d{13}-[0-9a-f]{10}\.png$", new_cover_path("png"))


def test_new_cover_paths_do_not_collide() -> None:
    assert len({new_cover_path("jpg") for _ in range(100)}) == 100


class TestUploadCover:
    @pytest.mark.asyncio
    async def test_valid_png_is_stored(self, storage: FakeStorage, png_bytes: bytes) -> None:
        media = MediaService(storage)

        response = await media.upload_cover(make_upload(png_bytes, "image/png"))

        assert response.path.startswith("covers/")
        assert response.path.endswith(".png")
        assert response.url == f"https://cdn.example.com/rkbucket/{response.path}"
        assert response.size == len(png_bytes)
        assert response.content_type == "image/png"
        assert storage.files[response.path] == png_bytes

    @pytest.mark.asyncio
    async def test_unsupported_type(self, storage: FakeStorage) -> None:
        with pytest.raises(UnsupportedImageTypeError):
            await MediaService(storage).upload_cover(make_upload(b"%PDF-1.4", "application/pdf"))
        assert storage.files == {}

    @pytest.mark.asyncio
    async def test_corrupted_image(self, storage: FakeStorage) -> None:
        with pytest.raises(InvalidImageError):
            await MediaService(storage).upload_cover(make_upload(b"not really a png", "image/png"))

    @pytest.mark.asyncio
    async def test_too_large(self, storage: FakeStorage) -> None:
        media = MediaService(storage)
        media.max_size_bytes = 10
        with pytest.raises(ImageTooLargeError):
            await media.upload_cover(make_upload(b"x" * 11, "image/png"))

    @pytest.mark.asyncio
    async def test_storage_failure_is_wrapped(self, storage: FakeStorage, png_bytes: bytes) -> None:
        storage.upload_cover = AsyncMock(side_effect=OSError("disk full"))  # type: ignore[method-assign]
        with pytest.raises(StorageError):
            await MediaService(storage).upload_cover(make_upload(png_bytes, "image/png"))
