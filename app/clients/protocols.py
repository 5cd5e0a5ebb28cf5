"""Protocol definitions for cache client implementations."""

from collections.abc import Awaitable
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class CacheClientProtocol(Protocol):
    """
    Protocol for cache client implementations.

    Both RedisClient and MemoryClient conform to this protocol, so the
    cache manager can switch backends without changing its own logic.
    """

    def get(self, key: str) -> Awaitable[str | None]:
        """Get a value from the cache."""
        ...

    def set(self, key: str, value: str, ex: int | None = None) -> Awaitable[bool]:
        """Set a value in the cache with optional TTL."""
        ...

    def delete(self, *keys: str) -> Awaitable[int]:
        """Delete one or more keys from the cache."""
        ...

    def exists(self, *keys: str) -> Awaitable[int]:
        """Check if keys exist in the cache."""
        ...

    def incr(self, key: str) -> Awaitable[int]:
        """Atomically increment an integer counter, creating it at 1."""
        ...

    def mget(self, *keys: str) -> Awaitable[list[str | None]]:
        """Get several values at once, ``None`` for missing keys."""
        ...

    def ttl(self, key: str) -> Awaitable[int]:
        """Get the remaining TTL of a key."""
        ...

    def ping(self) -> Awaitable[bool]:
        """Check if the cache server is reachable."""
        ...

    def info(self) -> Awaitable[dict[str, Any]]:
        """Get information about the cache."""
        ...

    def flush_all(self) -> Awaitable[bool]:
        """Clear all entries from the cache."""
        ...
