"""Read results that keep "no data" apart from "data unavailable"."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ReadResult[T]:
    """
    Outcome of a backing-store read.

    ``error`` is set when the read failed; ``value`` holds the data otherwise
    (which may legitimately be empty or ``None``).
    """

    value: T | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "ReadResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: Exception) -> "ReadResult[T]":
        return cls(error=error)

    def or_default(self, default: T) -> T:
        """Return the value, or ``default`` when the read failed."""
        if self.error is not None:
            return default
        return self.value  # type: ignore[return-value]
