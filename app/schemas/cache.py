from typing import Any, TypedDict

from pydantic import BaseModel, ConfigDict, Field


class CacheStatisticsData(TypedDict):
    """Plain statistics mapping returned by ``CacheManager.get_statistics``."""

    hits: int
    misses: int
    stale: int
    sets: int
    deletes: int
    invalidations: int
    errors: int
    total_bytes_written: int
    total_bytes_read: int
    hit_rate: str
    total_requests: int
    created_at: str
    last_updated_at: str


class CacheHealthResponse(BaseModel):
    """Cache health response model (nested in HealthCheckResponse)."""

    model_config = ConfigDict(ser_json_timedelta="iso8601", ser_json_bytes="utf8")

    backend: str
    statistics: dict[str, Any]
    status: str
    # Redis-specific fields (optional)
    latency_ms: float | None = None
    redis_version: str | None = None
    used_memory_human: str | None = None
    # In-memory-specific fields (optional)
    info: dict[str, Any] | None = None
    error: str | None = None


class HealthCheckResponse(BaseModel):
    """Health check response model."""

    model_config = ConfigDict(ser_json_timedelta="iso8601", ser_json_bytes="utf8")

    version: str = Field(description="API version")
    status: str = Field(description="Overall health status")
    timestamp: str = Field(description="Current timestamp")
    database: str = Field(description="Database connectivity status")
    cache: CacheHealthResponse | None = Field(
        default=None,
        description="Cache health information",
    )
