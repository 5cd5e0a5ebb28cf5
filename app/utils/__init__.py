"""Utility helper functions."""

from app.utils.best_effort import best_effort
from app.utils.helpers import (
    derive_excerpt,
    get_summary,
    host,
    iso_timestamp,
    md_to_html,
    slugify,
    today_str,
    utc_now,
)
from app.utils.results import ReadResult

__all__ = [
    "ReadResult",
    "best_effort",
    "derive_excerpt",
    "get_summary",
    "host",
    "iso_timestamp",
    "md_to_html",
    "slugify",
    "today_str",
    "utc_now",
]
