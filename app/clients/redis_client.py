# app/clients/redis_client.py
"""Redis client module for cache operations."""

from collections.abc import AsyncGenerator, Awaitable
from logging import getLogger
from typing import Any

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from app.configs import file_logger, pool_kwargs

logger = file_logger(getLogger(__name__))


class RedisClient:
    """Async Redis client wrapper with connection pooling."""

    def __init__(self, config: dict[str, Any] | None = None) -> None:
        """Initialize Redis client."""
        self.config = config or pool_kwargs
        self._pool: ConnectionPool | None = None
        self._redis: Redis | None = None

    async def connect(self) -> None:
        """Establish Redis connection pool and verify it with a ping."""
        try:
            self._pool = ConnectionPool(**self.config)
            self._redis = Redis(connection_pool=self._pool)
            if not await self.ping():
                mssg = "Redis ping returned False"
                raise RedisConnectionError(mssg)
            logger.info("Redis connection successful. Cache is using Redis.")
        except (ConnectionError, RedisTimeoutError, RedisError) as e:
            logger.exception("Failed to connect to Redis")
            mssg = f"Cannot connect to Redis at {self.config.get('host')}:{self.config.get('port')}"
            raise RedisConnectionError(mssg) from e

    async def disconnect(self) -> None:
        """Close Redis connection pool."""
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
            logger.info("Redis connection closed.")

    @property
    def client(self) -> Redis:
        """Get Redis client instance."""
        if self._redis is None:
            mssg = "Redis client not initialized. Call connect() first."
            raise RuntimeError(mssg)
        return self._redis

    @staticmethod
    async def _run[T](operation: str, target: object, call: Awaitable[T]) -> T:
        try:
            return await call
        except RedisError as e:
            logger.exception(f"Redis {operation} failed for {target}")
            mssg = f"Cache {operation} operation failed for {target}: {e}"
            raise RedisConnectionError(mssg) from e

    async def get(self, key: str) -> str | None:
        """Get value from cache."""
        return await self._run("get", key, self.client.get(key))

    async def mget(self, *keys: str) -> list[str | None]:
        """Get several values in one round trip."""
        if not keys:
            return []
        return await self._run("mget", keys, self.client.mget(keys))

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        """Set value in cache."""
        return bool(await self._run("set", key, self.client.set(key, value, ex=ex)))

    async def incr(self, key: str) -> int:
        """Increment an integer counter atomically."""
        return await self._run("incr", key, self.client.incr(key))

    async def delete(self, *keys: str) -> int:
        """Delete keys from cache."""
        if not keys:
            return 0
        return await self._run("delete", keys, self.client.delete(*keys))

    async def exists(self, *keys: str) -> int:
        """Check if keys exist in cache."""
        return await self._run("exists", keys, self.client.exists(*keys))

    async def ttl(self, key: str) -> int:
        """Get remaining time to live."""
        return await self._run("ttl", key, self.client.ttl(key))

    async def flush_all(self) -> bool:
        """Flush the current database."""
        return bool(await self._run("flushdb", "current db", self.client.flushdb()))

    async def ping(self) -> bool:
        """Ping Redis server."""
        result = self.client.ping()
        if isinstance(result, Awaitable):
            return bool(await self._run("ping", "server", result))
        return bool(result)

    async def info(self) -> dict[str, Any]:
        """Get Redis server info."""
        info = await self._run("info", "server", self.client.info())
        return info if isinstance(info, dict) else {}

    async def scan_iter(self, pattern: str, count: int = 100) -> AsyncGenerator[str]:
        """Yield keys matching the pattern without loading them all at once."""
        try:
            async for key in self.client.scan_iter(match=pattern, count=count):
                yield key.decode("utf-8") if isinstance(key, bytes) else key
        except RedisError as e:
            logger.exception(f"Failed to scan keys with pattern {pattern}")
            mssg = f"Cache scan_iter operation failed for pattern {pattern}: {e}"
            raise RedisConnectionError(mssg) from e
