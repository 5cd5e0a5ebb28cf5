from app.configs.logger import file_logger
from app.configs.settings import (
    CacheConfig,
    LimiterConfig,
    RedisCacheConfig,
    pool_kwargs,
    settings,
)

__all__ = [
    "CacheConfig",
    "LimiterConfig",
    "RedisCacheConfig",
    "file_logger",
    "pool_kwargs",
    "settings",
]
