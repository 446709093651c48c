"""
Posts Gateway service.
"""

from typing import Any, Dict, List, Optional

from fastapi import Query

from shared.base_service import BaseService
from shared.config import ServiceConfig, get_config
from service_posts.app.adapters.placeholder_client import PlaceholderClient
from service_posts.app.caching.ttl_cache import TTLCache
from service_posts.app.posts import (
    CommentCriteria,
    CommentSearchService,
    PostAggregationService,
    PostCollections,
)
from service_posts.app.schemas import BareEmail, CommentResponse, PostCommentCountResponse


SERVICE_NAME = "posts"
DEFAULT_PORT = 4000


class PostsGatewayService(BaseService):
    """Posts Gateway service implementation."""

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        *,
        client: Optional[PlaceholderClient] = None,
        cache: Optional[TTLCache] = None,
    ):
        super().__init__(SERVICE_NAME, DEFAULT_PORT, config or get_config(SERVICE_NAME, DEFAULT_PORT))

        if client is None:
            client = PlaceholderClient(
                self.config.upstream_base_url,
                timeout=self.config.upstream_timeout_seconds,
                metrics=self.metrics,
            )
        if cache is None:
            cache = TTLCache(
                self.config.cache_ttl_seconds,
                sweep_interval=self.config.cache_sweep_interval_seconds,
                metrics=self.metrics,
            )
        self.client = client
        self.cache = cache
        self.collections = PostCollections(self.cache, self.client, self.config.cache_ttl_seconds)
        self.aggregation_service = PostAggregationService(self.collections)
        self.search_service = CommentSearchService(self.collections)

        self._setup_post_routes()

        # Expose service instance via app state for introspection/testing
        self.app.state.posts_service = self

    async def _on_startup(self) -> None:
        await self.cache.start()

    async def _on_shutdown(self) -> None:
        await self.cache.stop()

    async def _check_dependencies(self) -> Dict[str, Any]:
        return {
            "upstream": self.client.base_url,
            "cache": self.cache.stats(),
        }

    def _setup_post_routes(self):
        """Set up /v1/post routes."""

        @self.app.get(
            "/v1/post/all-ordered-by-top-comment",
            response_model=List[PostCommentCountResponse],
        )
        async def all_posts_ordered_by_top_comment():
            """List every post, most commented first."""
            posts = await self.aggregation_service.get_all_posts_ordered_by_comment_count()
            return [PostCommentCountResponse.from_post(post) for post in posts]

        @self.app.get(
            "/v1/post/comment/search",
            response_model=List[CommentResponse],
        )
        async def search_comments(
            postId: Optional[int] = Query(default=None),
            id: Optional[int] = Query(default=None),
            name: Optional[str] = Query(default=None),
            email: Optional[BareEmail] = Query(default=None),
            body: Optional[str] = Query(default=None),
        ):
            """Search comments; returns [] when no parameter is given."""
            criteria = CommentCriteria(
                post_id=postId,
                id=id,
                name=name or None,
                email=email or None,
                body=body or None,
            )
            comments = await self.search_service.search_comments(criteria)
            return [CommentResponse.from_comment(comment) for comment in comments]


def create_app(config: Optional[ServiceConfig] = None):
    """Create FastAPI application."""
    service = PostsGatewayService(config)
    return service.app


if __name__ == "__main__":
    service = PostsGatewayService()
    service.run()
