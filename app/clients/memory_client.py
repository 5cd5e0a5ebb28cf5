"""In-memory cache client used when Redis is disabled or unreachable."""

from asyncio import CancelledError, Lock, Task, create_task
from asyncio import sleep as asyncio_sleep
from collections import OrderedDict
from contextlib import suppress
from logging import DEBUG, getLogger
from sys import getsizeof
from time import monotonic

from app.configs import file_logger

logger = file_logger(getLogger(__name__))


class MemoryClient:
    """
    Asynchronous in-memory cache client that mimics RedisClient.

    Features:
        - Lazy expiration on access plus a background sweep
        - LRU eviction bounded by entry count and approximate memory
        - Atomic counters (``incr``) for tag versions
        - Operations serialized by an ``asyncio.Lock``
    """

    DEFAULT_MAX_ENTRIES: int = 100_000
    DEFAULT_MAX_MEMORY_MB: int = 100
    DEFAULT_CLEANUP_INTERVAL: int = 60  # seconds

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        max_memory_mb: int = DEFAULT_MAX_MEMORY_MB,
        cleanup_interval: int = DEFAULT_CLEANUP_INTERVAL,
    ) -> None:
        """
        Initialize the MemoryClient with configurable limits.

        Args:
            max_entries: Maximum number of cache entries before LRU eviction.
            max_memory_mb: Maximum memory usage in megabytes before eviction.
            cleanup_interval: Interval in seconds for background cleanup.
        """
        self._cache: OrderedDict[str, str] = OrderedDict()
        self._expires_at: dict[str, float] = {}
        self.is_connected: bool = True
        self._cleanup_task: Task[None] | None = None

        self._max_entries = max_entries
        self._max_memory_bytes = max_memory_mb * 1024 * 1024
        self._cleanup_interval = cleanup_interval
        self._current_memory: int = 0

        self._lock = Lock()

    async def start_lifecycle(self) -> None:
        """Start the background expiration sweep."""
        async with self._lock:
            if not self._cleanup_task:
                self.is_connected = True
                self._cleanup_task = create_task(self._cleanup_loop())
                logger.info("MemoryClient active expiration task started.")

    async def _cleanup_loop(self) -> None:
        while self.is_connected:
            try:
                await asyncio_sleep(self._cleanup_interval)
                await self._active_expire()
            except CancelledError:
                break
            except Exception:
                logger.exception("Error in memory cleanup loop")

    async def _active_expire(self) -> None:
        async with self._lock:
            expired = [key for key in list(self._expires_at) if self._is_expired(key)]
            if expired:
                count = self._delete_internal(*expired)
                if logger.isEnabledFor(DEBUG):
                    logger.debug("Memory cleanup: removed %d expired keys.", count)

    def _is_expired(self, key: str) -> bool:
        """Check if a key has expired (caller holds the lock)."""
        deadline = self._expires_at.get(key)
        return deadline is not None and monotonic() >= deadline

    @staticmethod
    def _entry_size(key: str, value: str) -> int:
        return getsizeof(key) + getsizeof(value)

    def _evict_oldest(self) -> None:
        if self._cache:
            key, value = self._cache.popitem(last=False)
            self._current_memory -= self._entry_size(key, value)
            self._expires_at.pop(key, None)

    def _delete_internal(self, *keys: str) -> int:
        count = 0
        for key in keys:
            if key in self._cache:
                value = self._cache.pop(key)
                self._current_memory -= self._entry_size(key, value)
                self._expires_at.pop(key, None)
                count += 1
        return count

    def _get_internal(self, key: str) -> str | None:
        if self._is_expired(key):
            self._delete_internal(key)
            return None
        value = self._cache.get(key)
        if value is not None:
            self._cache.move_to_end(key)
        return value

    def _set_internal(self, key: str, value: str, ex: int | None = None) -> None:
        entry_size = self._entry_size(key, value)
        if key in self._cache:
            self._current_memory -= self._entry_size(key, self._cache.pop(key))

        while self._cache and (
            len(self._cache) >= self._max_entries
            or self._current_memory + entry_size > self._max_memory_bytes
        ):
            self._evict_oldest()

        self._cache[key] = value
        self._current_memory += entry_size

        if ex:
            self._expires_at[key] = monotonic() + ex
        else:
            # Redis SET drops any previous TTL unless KEEPTTL is used
            self._expires_at.pop(key, None)

    async def get(self, key: str) -> str | None:
        """Get a value from the cache."""
        async with self._lock:
            return self._get_internal(key)

    async def mget(self, *keys: str) -> list[str | None]:
        """Get several values in one locked pass."""
        async with self._lock:
            return [self._get_internal(key) for key in keys]

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        """Set a value in the cache with optional TTL and automatic eviction."""
        async with self._lock:
            self._set_internal(key, value, ex)
            return True

    async def incr(self, key: str) -> int:
        """Increment an integer counter, keeping its TTL like Redis INCR."""
        async with self._lock:
            current = self._get_internal(key)
            value = int(current) + 1 if current is not None else 1
            deadline = self._expires_at.get(key)
            self._set_internal(key, str(value))
            if deadline is not None:
                self._expires_at[key] = deadline
            return value

    async def delete(self, *keys: str) -> int:
        """Delete one or more keys from the cache."""
        async with self._lock:
            return self._delete_internal(*keys)

    async def exists(self, *keys: str) -> int:
        """Count how many of the keys exist and are not expired."""
        async with self._lock:
            return sum(1 for key in keys if key in self._cache and not self._is_expired(key))

    async def flush_all(self) -> bool:
        """Clear the entire cache."""
        async with self._lock:
            self._cache.clear()
            self._expires_at.clear()
            self._current_memory = 0
            return True

    async def ping(self) -> bool:
        return self.is_connected

    async def info(self) -> dict[str, str | int]:
        """Get information about the in-memory cache."""
        async with self._lock:
            return {
                "server": "In-Memory Cache",
                "used_memory_human": f"{self._current_memory / 1024 / 1024:.2f}MB",
                "total_keys": len(self._cache),
                "max_entries": self._max_entries,
            }

    async def ttl(self, key: str) -> int:
        """Remaining TTL in seconds, -1 without expiry, -2 when missing (Redis semantics)."""
        async with self._lock:
            if self._is_expired(key):
                self._delete_internal(key)
                return -2
            if key not in self._cache:
                return -2
            if key not in self._expires_at:
                return -1
            return int(self._expires_at[key] - monotonic())

    async def close(self) -> None:
        """Stop the client and cleanup tasks."""
        async with self._lock:
            self.is_connected = False
            if self._cleanup_task:
                self._cleanup_task.cancel()
                with suppress(CancelledError):
                    await self._cleanup_task
                self._cleanup_task = None
