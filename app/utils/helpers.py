from collections.abc import MutableMapping
from datetime import UTC, datetime
from re import sub
from typing import Any

from fastapi import FastAPI, Request
from fastapi.routing import APIRoute
from markdown import markdown
from starlette.routing import BaseRoute, Match, Route

from app.configs.settings import EXCERPT_LENGTH, EXCERPT_SUFFIX


def host(request: Request) -> str:
    """Return the host IP address."""
    return request.client.host if request.client else "unknown"


def today_str() -> str:
    """Return today's date as a string."""
    return datetime.now(datetime.now().astimezone().tzinfo).strftime(
        "%Y-%m-%d %H:%M:%S",
    )


def utc_now() -> datetime:
    """Return the current UTC time without sub-second noise."""
    return datetime.now(tz=UTC).replace(microsecond=0)


def iso_timestamp() -> str:
    """Return the current UTC time as an ISO-8601 string with milliseconds."""
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def get_summary(request: Request) -> str | None:
    """Extract route summary from request."""

    scope: MutableMapping[str, Any] = request.scope
    app: FastAPI = scope["app"]
    routes: list[BaseRoute] = app.routes

    summary = None
    for route in routes:
        is_api_route = type(route) is APIRoute
        is_route = type(route) is Route
        if is_api_route and route.matches(scope)[0] == Match.FULL:
            summary = route.summary
            break
        if is_route and route.matches(scope)[0] == Match.FULL:
            summary = route.name
            break

    return summary


def slugify(title: str) -> str:
    """
    Derive a URL-safe slug from a post title.

    Lower-cases the title, collapses every run of non-alphanumeric
    characters into a single hyphen and strips leading/trailing hyphens.
    Applying it to its own output returns the same slug.

    Args:
        title: Post title.

    Returns:
        str: Slug, possibly empty when the title has no alphanumerics.

    Examples:
    --------
    >>> slugify("Hello, World! 2024")
    'hello-world-2024'
    """
    return sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")


def derive_excerpt(content: str, excerpt: str | None = None) -> str:
    """
    Return the given excerpt, or the first characters of the content.

    An empty or missing excerpt falls back to the first 160 characters of
    ``content`` followed by ``...``.
    """
    if excerpt:
        return excerpt
    return content[:EXCERPT_LENGTH] + EXCERPT_SUFFIX


def md_to_html(text: str) -> str:
    """Render post markdown to HTML."""
    if not text:
        return ""
    return markdown(text, extensions=["fenced_code", "tables"])
