"""Tests for best-effort side effects and read results."""

import pytest

from app.errors.database import DatabaseConnectionError
from app.utils.best_effort import best_effort
from app.utils.results import ReadResult


@pytest.mark.asyncio
async def test_best_effort_returns_result() -> None:
    async def add(a: int, b: int) -> int:
        return a + b

    assert await best_effort("add", add, 1, b=2) == 3


@pytest.mark.asyncio
async def test_best_effort_swallows_and_logs_failure(caplog: pytest.LogCaptureFixture) -> None:
    async def boom() -> None:
        mssg = "blob store unreachable"
        raise ConnectionError(mssg)

    assert await best_effort("cover cleanup", boom, default=False) is False
    assert "cover cleanup" in caplog.text


class TestReadResult:
    def test_success_with_empty_value_is_ok(self) -> None:
        result = ReadResult.success([])
        assert result.ok
        assert result.value == []

    def test_failure_keeps_error(self) -> None:
        error = DatabaseConnectionError()
        result = ReadResult.failure(error)
        assert not result.ok
        assert result.error is error
        assert result.or_default(["fallback"]) == ["fallback"]
