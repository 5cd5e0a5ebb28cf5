# app/managers/cache_manager.py
"""Tag-addressable cache manager over Redis or an in-memory fallback."""

from asyncio import Lock as AsyncLock
from collections import OrderedDict
from collections.abc import Awaitable, Callable, Iterable
from logging import DEBUG, getLogger
from threading import Lock as ThreadLock
from time import perf_counter
from typing import Any

from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError

from app.clients.memory_client import MemoryClient
from app.clients.protocols import CacheClientProtocol
from app.clients.redis_client import RedisClient
from app.configs import CacheConfig, file_logger, settings
from app.data import CacheStatistics
from app.errors import BASE_EXCEPTION, CacheExceptionError, CacheKeyError
from app.schemas.cache import CacheStatisticsData
from app.utils.cache_serializer import compress, decompress, deserialize, do_compress, serialize

logger = file_logger(getLogger(__name__))

# Errors a cache backend may raise on an ordinary read or write.
CACHE_BACKEND_ERRORS = (RedisError, CacheExceptionError) + BASE_EXCEPTION

_MISSING = object()


class CacheManager:
    """
    Cache manager with tag based invalidation.

    Every tag owns a version counter stored in the backend. An entry is
    written as an envelope holding the computed value and the versions of its
    tags as they were *before* the value was computed. A read compares those
    versions with the current ones, so invalidating a tag makes every entry
    carrying it stale at once, without scanning or deleting anything.

    Features:
        - Request coalescing per key (Thundering Herd protection)
        - Automatic fallback to in-memory cache
        - LRU-based lock eviction to prevent memory leaks
        - Compression for large values
        - Statistics tracking
    """

    # Maximum number of locks to keep in memory (LRU eviction)
    MAX_LOCKS: int = 10_000

    def __init__(
        self,
        client: CacheClientProtocol | None = None,
        config: CacheConfig | None = None,
    ) -> None:
        """
        Initialize cache manager.

        Args:
            client: Backend to use as-is. When omitted, ``initialize`` picks
                Redis or the in-memory client from settings.
            config: Cache configuration, read from the environment by default.
        """
        self.redis_client = RedisClient()
        self.memory_client = client if isinstance(client, MemoryClient) else MemoryClient()
        self._client: CacheClientProtocol = client or self.memory_client
        self._pinned = client is not None
        self.is_redis_available = isinstance(client, RedisClient)
        self.cache_config = config or CacheConfig()
        self.statistics = CacheStatistics()

        self._locks: OrderedDict[str, AsyncLock] = OrderedDict()
        self._locks_lock = ThreadLock()

    async def initialize(self) -> None:
        """
        Connect to Redis when enabled.

        If the Redis connection fails, it falls back to an in-memory cache.
        """
        if self._pinned:
            logger.info("Cache manager using injected %s.", type(self._client).__name__)
            return
        try:
            if settings.REDIS_ENABLED:
                await self.redis_client.connect()
                self._client = self.redis_client
                self.is_redis_available = True
                logger.info("Cache manager initialized with Redis.")
                return
            logger.info("Redis disabled. Using in-memory cache.")
        except RedisConnectionError as e:
            logger.warning(f"Redis connection failed: {e}. Falling back to in-memory cache.")
        self._client = self.memory_client
        self.is_redis_available = False
        await self.memory_client.start_lifecycle()
        logger.info("Cache manager initialized successfully.")

    async def shutdown(self) -> None:
        """Close the backend connections."""
        if self.is_redis_available:
            await self.redis_client.disconnect()
        await self.memory_client.close()
        logger.info("Cache manager shutdown successfully.")

    @property
    def backend(self) -> str:
        return "redis" if self.is_redis_available else "in-memory"

    def _build_key(self, key: str, namespace: str | None = None) -> str:
        """Build full cache key with prefix and namespace."""
        prefix = self.cache_config.key_prefix
        return f"{prefix}:{namespace}:{key}" if namespace else f"{prefix}:{key}"

    def _tag_key(self, tag: str) -> str:
        return self._build_key(tag, self.cache_config.tag_prefix)

    def _encode(self, value: object) -> str:
        serialized = serialize(value)
        if self.cache_config.compression_enabled and do_compress(
            serialized,
            self.cache_config.compression_threshold,
        ):
            serialized = compress(serialized)
        return serialized

    def _clamp_ttl(self, ttl: int | None) -> int:
        ex = ttl if ttl is not None else self.cache_config.default_ttl
        return max(1, min(ex, self.cache_config.max_ttl))

    async def get(self, key: str, namespace: str | None = None) -> Any:  # noqa: ANN401
        """Get a raw (untagged) value from cache, ``None`` when absent."""
        try:
            full_key = self._build_key(key, namespace)
            cached_value = await self._client.get(full_key)
            if cached_value is None:
                self.statistics.record_miss()
                return None
            self.statistics.record_hit(len(cached_value.encode("utf-8")))
            return deserialize(decompress(cached_value))
        except CACHE_BACKEND_ERRORS as e:
            logger.exception("Cache get failed for key: %s", key)
            self.statistics.record_error()
            mssg = f"Cache get failed for key {key}, {e}"
            raise CacheKeyError(mssg) from e

    async def set(
        self,
        key: str,
        value: object,
        ttl: int | None = None,
        namespace: str | None = None,
    ) -> bool:
        """Set a raw (untagged) value in cache."""
        try:
            serialized = self._encode(value)
            success = await self._client.set(
                self._build_key(key, namespace),
                serialized,
                ex=self._clamp_ttl(ttl),
            )
            self.statistics.record_set(len(serialized.encode("utf-8")))
        except CACHE_BACKEND_ERRORS as e:
            logger.exception("Cache set failed for key %s", key)
            self.statistics.record_error()
            mssg = f"Cache set failed for key {key}"
            raise CacheKeyError(mssg) from e
        return success

    async def delete(self, *keys: str, namespace: str | None = None) -> int:
        """Delete keys from cache."""
        try:
            full_keys = [self._build_key(key, namespace) for key in keys]
            deleted_count = await self._client.delete(*full_keys)
            if deleted_count:
                self.statistics.record_delete()
        except CACHE_BACKEND_ERRORS as e:
            logger.exception("Cache delete failed for keys: %s", keys)
            self.statistics.record_error()
            mssg = "Cache delete failed"
            raise CacheKeyError(mssg) from e
        return deleted_count

    async def exists(self, *keys: str, namespace: str | None = None) -> int:
        """Count how many of the keys are present (live or stale)."""
        try:
            full_keys = [self._build_key(key, namespace) for key in keys]
            return await self._client.exists(*full_keys)
        except CACHE_BACKEND_ERRORS as e:
            logger.exception("Cache exists check failed for keys: %s", keys)
            self.statistics.record_error()
            mssg = "Cache exists check failed"
            raise CacheKeyError(mssg) from e

    async def ttl(self, key: str, namespace: str | None = None) -> int:
        """Get remaining time to live."""
        try:
            return await self._client.ttl(self._build_key(key, namespace))
        except CACHE_BACKEND_ERRORS as e:
            logger.exception("Cache ttl check failed for key %s", key)
            self.statistics.record_error()
            mssg = f"Cache ttl check failed for key {key}"
            raise CacheKeyError(mssg) from e

    async def tag_versions(self, tags: Iterable[str]) -> dict[str, int]:
        """Current version of each tag; a tag never invalidated is at 0."""
        names = list(dict.fromkeys(tags))
        if not names:
            return {}
        raw = await self._client.mget(*(self._tag_key(tag) for tag in names))
        return {tag: int(value) if value is not None else 0 for tag, value in zip(names, raw, strict=True)}

    async def invalidate_tags(self, *tags: str) -> list[str]:
        """
        Mark every entry carrying any of ``tags`` as stale.

        Nothing is evicted; the next read of an affected key recomputes it.
        Invalidating the same tag again is harmless.

        Returns:
            The distinct tags that were bumped, in call order.
        """
        bumped = list(dict.fromkeys(tags))
        try:
            for tag in bumped:
                await self._client.incr(self._tag_key(tag))
        except CACHE_BACKEND_ERRORS as e:
            logger.exception("Cache invalidation failed for tags: %s", bumped)
            self.statistics.record_error()
            mssg = f"Cache invalidation failed for tags {bumped}"
            raise CacheKeyError(mssg) from e
        self.statistics.record_invalidation(len(bumped))
        logger.info("Invalidated cache tags: %s", ", ".join(bumped))
        return bumped

    async def _read_live(self, key: str) -> object:
        """Return the stored value when the entry is live, else ``_MISSING``."""
        try:
            raw = await self._client.get(self._build_key(key))
            if raw is None:
                self.statistics.record_miss()
                return _MISSING
            envelope = deserialize(decompress(raw))
            stored: dict[str, int] = envelope["tags"]
            if await self.tag_versions(stored) != stored:
                self.statistics.record_stale()
                if logger.isEnabledFor(DEBUG):
                    logger.debug("Cache entry %s is stale.", key)
                return _MISSING
        except (*CACHE_BACKEND_ERRORS, KeyError, TypeError) as e:
            logger.warning("Cache read failed for key %s, treating as miss: %s", key, e)
            self.statistics.record_error()
            return _MISSING
        self.statistics.record_hit(len(raw.encode("utf-8")))
        return envelope["value"]

    async def _store(self, key: str, value: object, ttl: int, versions: dict[str, int]) -> None:
        try:
            serialized = self._encode({"value": value, "tags": versions})
            await self._client.set(self._build_key(key), serialized, ex=self._clamp_ttl(ttl))
            self.statistics.record_set(len(serialized.encode("utf-8")))
        except CACHE_BACKEND_ERRORS as e:
            logger.warning("Cache write failed for key %s: %s", key, e)
            self.statistics.record_error()

    def _get_or_create_lock(self, key: str) -> AsyncLock:
        """
        Get or create a lock for a key in a thread-safe manner.

        Uses LRU eviction to prevent memory leaks from unbounded lock growth.
        """
        with self._locks_lock:
            if key in self._locks:
                self._locks.move_to_end(key)
                return self._locks[key]

            while len(self._locks) >= self.MAX_LOCKS:
                self._locks.popitem(last=False)

            lock = AsyncLock()
            self._locks[key] = lock
            return lock

    async def get_or_compute[T](
        self,
        key: str,
        ttl: int,
        tags: Iterable[str],
        compute_fn: Callable[[], Awaitable[T]],
    ) -> T:
        """
        Return the live value for ``key`` or compute, store and return it.

        Args:
            key: Stable cache key, e.g. ``post-{slug}``.
            ttl: Seconds the stored value may be served.
            tags: Invalidation groups the entry belongs to.
            compute_fn: Zero-argument coroutine factory reading the source.

        Returns:
            The cached or freshly computed value (``None`` is a valid value).

        Raises:
            Exception: Whatever ``compute_fn`` raises; failures are never cached.
        """
        tag_names = list(dict.fromkeys(tags))

        cached = await self._read_live(key)
        if cached is not _MISSING:
            return cached  # type: ignore[return-value]

        async with self._get_or_create_lock(self._build_key(key)):
            # Another request may have filled it while we waited
            cached = await self._read_live(key)
            if cached is not _MISSING:
                return cached  # type: ignore[return-value]

            # Snapshot before computing so an invalidation that lands while
            # compute_fn runs leaves the stored entry already stale.
            try:
                versions: dict[str, int] | None = await self.tag_versions(tag_names)
            except CACHE_BACKEND_ERRORS as e:
                logger.warning("Tag versions unavailable for %s, not caching: %s", key, e)
                versions = None

            value = await compute_fn()
            if versions is not None:
                await self._store(key, value, ttl, versions)
            return value

    async def clear(self, namespace: str | None = None) -> int:
        """
        Clear all cache entries, optionally for a namespace.

        Uses batched deletion to ensure memory safety.
        """
        try:
            if isinstance(self._client, RedisClient):
                prefix = self.cache_config.key_prefix
                pattern = f"{prefix}:{namespace}:*" if namespace else f"{prefix}:*"

                deleted_total = 0
                keys_batch: list[str] = []
                async for key in self._client.scan_iter(pattern):
                    keys_batch.append(key)
                    if len(keys_batch) >= 1000:
                        deleted_total += await self._client.delete(*keys_batch)
                        keys_batch = []
                if keys_batch:
                    deleted_total += await self._client.delete(*keys_batch)

                logger.info("Cleared %d keys for pattern '%s'.", deleted_total, pattern)
                self.statistics.reset()
                return deleted_total

            await self._client.flush_all()
            self.statistics.reset()
            logger.info("In-memory cache cleared (flushed all).")
        except CACHE_BACKEND_ERRORS as e:
            logger.exception("Cache clear failed")
            self.statistics.record_error()
            mssg = "Cache clear failed"
            raise CacheKeyError(mssg) from e
        return 0

    async def ping(self) -> bool:
        """Ping the cache server."""
        try:
            return await self._client.ping()
        except CACHE_BACKEND_ERRORS:
            logger.exception("Cache ping failed")
            return False

    async def health_check(self) -> dict[str, Any]:
        """
        Perform a health check of the active backend.

        Returns:
            Dictionary with health status and details.
        """
        result: dict[str, Any] = {"backend": self.backend, "statistics": self.get_statistics()}
        try:
            start = perf_counter()
            healthy = await self._client.ping()
            info = await self._client.info()
            result["status"] = "healthy" if healthy else "unhealthy"
            if self.is_redis_available:
                result["latency_ms"] = round((perf_counter() - start) * 1000, 2)
                result["redis_version"] = info.get("redis_version")
                result["used_memory_human"] = info.get("used_memory_human")
            else:
                result["info"] = info
        except CACHE_BACKEND_ERRORS as e:
            result["status"] = "unhealthy"
            result["error"] = str(e)
        return result

    def get_statistics(self) -> CacheStatisticsData:
        """Get cache statistics."""
        return self.statistics.to_dict()  # type: ignore[return-value]

    def reset_statistics(self) -> None:
        """Reset cache statistics."""
        self.statistics.reset()
        logger.info("Cache statistics reset.")
