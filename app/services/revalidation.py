"""
Cache invalidation service.

Turns revalidation selectors (an explicit path, a post slug, or nothing for
the home page) into cache tags and bumps them. Mutations call it in-process;
the ``/api/revalidate`` endpoint calls it on behalf of a caller that knows the
shared secret. Peers listed in ``REVALIDATE_REMOTE_URLS`` are notified so
their caches follow.
"""

from logging import getLogger
from secrets import compare_digest

from httpx import AsyncClient, HTTPStatusError
from pydantic import SecretStr

from app.configs import file_logger, settings
from app.managers.cache_manager import CacheManager
from app.utils.best_effort import best_effort
from app.utils.cache_keys import list_tags, post_tag, tags_for_path

logger = file_logger(getLogger(__name__))


def tags_for_selector(path: str | None = None, slug: str | None = None) -> list[str]:
    """
    Resolve a revalidation selector to cache tags.

    An explicit ``path`` wins over ``slug``. A slug affects its own entry and
    the list views that show its title and excerpt. No selector means the
    home page.
    """
    if path:
        return tags_for_path(path)
    if slug:
        return [post_tag(slug), *list_tags()]
    return list_tags()


class Revalidator:
    """Invalidate cache entries locally and on configured peers."""

    def __init__(
        self,
        cache: CacheManager,
        secret: SecretStr | None = None,
        remote_urls: list[str] | None = None,
        http_client: AsyncClient | None = None,
    ) -> None:
        self.cache = cache
        self._secret = secret if secret is not None else settings.REVALIDATE_SECRET
        urls = remote_urls if remote_urls is not None else settings.REVALIDATE_REMOTE_URLS
        self.remote_urls = [url.rstrip("/") for url in urls]
        self._http_client = http_client

    def verify_secret(self, presented: str | None) -> bool:
        """
        Exact, constant-time comparison with the server secret.

        Every caller is rejected when no secret is configured.
        """
        if self._secret is None or presented is None:
            return False
        expected = self._secret.get_secret_value()
        if not expected:
            return False
        return compare_digest(presented.encode("utf-8"), expected.encode("utf-8"))

    async def invalidate(self, path: str | None = None, slug: str | None = None) -> list[str]:
        """
        Invalidate the entries behind a selector in this process's cache.

        Returns:
            list[str]: The tags that were invalidated.
        """
        tags = tags_for_selector(path, slug)
        return await self.cache.invalidate_tags(*tags)

    async def revalidate(self, path: str | None = None, slug: str | None = None) -> list[str]:
        """Invalidate locally, then tell every peer to do the same."""
        tags = await self.invalidate(path=path, slug=slug)
        await self._notify_peers(path=path, slug=slug)
        return tags

    async def revalidate_posts(self, *slugs: str) -> list[str]:
        """Invalidate several posts and the list views in one pass."""
        tags = [tag for slug in slugs for tag in tags_for_selector(slug=slug)]
        bumped = await self.cache.invalidate_tags(*tags)
        for slug in dict.fromkeys(slugs):
            await self._notify_peers(slug=slug)
        return bumped

    async def _notify_peers(self, path: str | None = None, slug: str | None = None) -> None:
        for url in self.remote_urls:
            await best_effort(f"remote revalidation of {url}", self._notify, url, path, slug)

    async def _notify(self, base_url: str, path: str | None, slug: str | None) -> None:
        if self._secret is None:
            logger.warning("REVALIDATE_SECRET not set, skipping remote revalidation")
            return

        params = {"secret": self._secret.get_secret_value()}
        if path:
            params["path"] = path
        elif slug:
            params["slug"] = slug

        if self._http_client is not None:
            response = await self._http_client.post(f"{base_url}/api/revalidate", params=params)
        else:
            async with AsyncClient(timeout=settings.REVALIDATE_REMOTE_TIMEOUT) as client:
                response = await client.post(f"{base_url}/api/revalidate", params=params)
        try:
            response.raise_for_status()
        except HTTPStatusError:
            logger.warning("Peer %s refused revalidation with %s", base_url, response.status_code)
            raise
        logger.info("Peer %s revalidated (%s)", base_url, path or slug or "home")
