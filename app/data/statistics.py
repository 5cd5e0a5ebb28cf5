"""Cache statistics and monitoring module."""

from dataclasses import dataclass, field, fields
from threading import Lock

from app.utils import today_str


@dataclass
class CacheStatistics:
    """Counters for cache activity, safe to update from any task."""

    hits: int = 0
    misses: int = 0
    stale: int = 0
    sets: int = 0
    deletes: int = 0
    invalidations: int = 0
    errors: int = 0
    total_bytes_written: int = 0
    total_bytes_read: int = 0
    created_at: str = field(default_factory=today_str)
    last_updated_at: str = field(default_factory=today_str)
    _lock: Lock = field(default_factory=Lock, init=False, repr=False)

    def _bump(self, counter: str, amount: int = 1) -> None:
        with self._lock:
            setattr(self, counter, getattr(self, counter) + amount)
            self.last_updated_at = today_str()

    def record_hit(self, bytes_read: int = 0) -> None:
        """Record a cache hit and the bytes it returned."""
        self._bump("hits")
        self._bump("total_bytes_read", bytes_read)

    def record_miss(self) -> None:
        self._bump("misses")

    def record_stale(self) -> None:
        """Record an entry rejected because one of its tags moved on."""
        self._bump("stale")

    def record_set(self, bytes_written: int = 0) -> None:
        self._bump("sets")
        self._bump("total_bytes_written", bytes_written)

    def record_delete(self) -> None:
        self._bump("deletes")

    def record_invalidation(self, count: int = 1) -> None:
        self._bump("invalidations", count)

    def record_error(self) -> None:
        self._bump("errors")

    @property
    def hit_rate(self) -> float:
        """
        Calculate cache hit rate.

        Returns:
            Hit rate as percentage (0-100).
        """
        total = self.total_requests
        return (self.hits / total * 100) if total > 0 else 0.0

    @property
    def total_requests(self) -> int:
        return self.hits + self.misses + self.stale

    def reset(self) -> None:
        """Reset all counters and timestamps."""
        with self._lock:
            for item in fields(self):
                if item.type is int:
                    setattr(self, item.name, 0)
            self.created_at = today_str()
            self.last_updated_at = self.created_at

    def to_dict(self) -> dict[str, int | str]:
        """
        Convert statistics to dictionary.

        Returns:
            Dictionary representation of statistics.
        """
        with self._lock:
            return {
                "hits": self.hits,
                "misses": self.misses,
                "stale": self.stale,
                "sets": self.sets,
                "deletes": self.deletes,
                "invalidations": self.invalidations,
                "errors": self.errors,
                "total_bytes_written": self.total_bytes_written,
                "total_bytes_read": self.total_bytes_read,
                "hit_rate": f"{self.hit_rate:.2f}%",
                "total_requests": self.total_requests,
                "created_at": self.created_at,
                "last_updated_at": self.last_updated_at,
            }
