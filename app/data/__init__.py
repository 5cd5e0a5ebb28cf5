"""Runtime data containers."""

from app.data.statistics import CacheStatistics

__all__ = ["CacheStatistics"]
