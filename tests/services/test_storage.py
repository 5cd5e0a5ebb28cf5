# tests/services/test_storage.py
"""Tests for storage services."""

import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest

from app.services.storage import cover_path_from_url
from app.services.storage.local import LocalStorage


class TestLocalStorage:
    """Tests for LocalStorage service."""

    @pytest.fixture
    def temp_uploads_dir(self) -> Generator[Path]:
        """Create a temporary uploads directory."""
        with tempfile.TemporaryDirectory() as tmpdir:
            yield Path(tmpdir)

    @pytest.fixture
    def local_storage(self, temp_uploads_dir: Path) -> LocalStorage:
        return LocalStorage(uploads_dir=temp_uploads_dir, bucket="rkbucket")

    @pytest.mark.asyncio
    async def test_upload_and_delete_cover(self, local_storage: LocalStorage, temp_uploads_dir: Path) -> None:
        url = await local_storage.upload_cover("covers/1-ab.png", b"data", "image/png")

        assert url == "/uploads/rkbucket/covers/1-ab.png"
        stored = temp_uploads_dir / "rkbucket" / "covers" / "1-ab.png"
        assert stored.read_bytes() == b"data"

        assert await local_storage.delete_cover("covers/1-ab.png") is True
        assert not stored.exists()

    @pytest.mark.asyncio
    async def test_delete_missing_cover(self, local_storage: LocalStorage) -> None:
        assert await local_storage.delete_cover("covers/missing.png") is False

    @pytest.mark.asyncio
    async def test_path_escape_is_refused(self, local_storage: LocalStorage) -> None:
        with pytest.raises(ValueError, match="escapes"):
            await local_storage.upload_cover("../../etc/passwd", b"x", "image/png")


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://res.cloudinary.com/demo/image/upload/v1/rkbucket/covers/17-ab.png", "covers/17-ab.png"),
        ("/uploads/rkbucket/covers/17-ab.png", "covers/17-ab.png"),
        ("https://cdn.example.com/17-ab.png?width=300", "covers/17-ab.png"),
        (None, None),
        ("", None),
        ("https://cdn.example.com/", None),
    ],
)
def test_cover_path_from_url(url: str | None, expected: str | None) -> None:
    assert cover_path_from_url(url) == expected
