"""
Cached access to the upstream post and comment collections.
"""

from typing import Tuple, TYPE_CHECKING

from service_posts.app.posts.models import Comment, Post

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from service_posts.app.adapters.placeholder_client import PlaceholderClient
    from service_posts.app.caching.ttl_cache import TTLCache


ALL_POSTS_KEY = "all-posts"
ALL_COMMENTS_KEY = "all-comments"


class PostCollections:
    """Get-or-populate accessors for the two cached collections.

    Collections are cached as tuples of frozen records; callers that need
    a subset must build a new sequence.
    """

    def __init__(self, cache: "TTLCache", client: "PlaceholderClient", ttl_seconds: float):
        self.cache = cache
        self.client = client
        self.ttl_seconds = ttl_seconds

    async def posts(self) -> Tuple[Post, ...]:
        return await self.cache.get_or_populate(ALL_POSTS_KEY, self._fetch_posts, self.ttl_seconds)

    async def comments(self) -> Tuple[Comment, ...]:
        return await self.cache.get_or_populate(ALL_COMMENTS_KEY, self._fetch_comments, self.ttl_seconds)

    async def _fetch_posts(self) -> Tuple[Post, ...]:
        return tuple(await self.client.fetch_posts())

    async def _fetch_comments(self) -> Tuple[Comment, ...]:
        return tuple(await self.client.fetch_comments())
