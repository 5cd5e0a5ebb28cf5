"""
Cache key and tag builders for post read paths.

Routes, services and the revalidation endpoint all build keys and tags
through these helpers so that a write can find the entries it affects.
"""

from app.configs.settings import ALL_POSTS_KEY, POST_SLUGS_KEY, POST_TAG, POSTS_TAG

HOME_PATH = "/"
POSTS_PATH = "/posts"
POST_PATH_PREFIX = "/posts/"


def post_key(slug: str) -> str:
    """Generate cache key for a single post by slug."""
    return f"post-{slug}"


def post_tag(slug: str) -> str:
    """Generate the invalidation tag owned by a single post."""
    return f"post-{slug}"


def all_posts_key() -> str:
    return ALL_POSTS_KEY


def post_slugs_key() -> str:
    return POST_SLUGS_KEY


def list_tags() -> list[str]:
    """Tags carried by the list entries (all posts and post slugs)."""
    return [POSTS_TAG]


def post_tags(slug: str) -> list[str]:
    """Tags carried by a post detail entry."""
    return [POST_TAG, post_tag(slug)]


def tags_for_path(path: str) -> list[str]:
    """
    Map a logical page path to the cache tags that back it.

    ``/`` and ``/posts`` are served from the list entries, ``/posts/{slug}``
    from that post's entry. Anything else is taken as a tag name verbatim.
    """
    normalized = path.rstrip("/") or HOME_PATH
    if normalized in (HOME_PATH, POSTS_PATH):
        return [POSTS_TAG]
    if normalized.startswith(POST_PATH_PREFIX):
        slug = normalized.removeprefix(POST_PATH_PREFIX)
        if slug and "/" not in slug:
            return [post_tag(slug)]
    return [path]
