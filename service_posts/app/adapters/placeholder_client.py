"""
Upstream placeholder API client for the posts gateway.
"""

from contextlib import nullcontext
from typing import Any, Callable, List, Optional, TYPE_CHECKING, TypeVar

import httpx

from shared.logging import get_logger
from shared.errors import UpstreamError
from service_posts.app.posts.models import Comment, Post

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


UPSTREAM_SERVICE = "placeholder_api"

T = TypeVar("T")


class PlaceholderClient:
    """Client for the public posts/comments REST API.

    Each call issues exactly one GET; failures are raised as
    ``UpstreamError`` and never retried.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 5.0,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.metrics = metrics
        self.logger = get_logger("posts.upstream_client")

    async def fetch_posts(self) -> List[Post]:
        """Fetch every post."""
        return await self._fetch_collection("posts", Post.from_dict)

    async def fetch_comments(self) -> List[Comment]:
        """Fetch every comment."""
        return await self._fetch_collection("comments", Comment.from_dict)

    async def _fetch_collection(self, resource: str, parse: Callable[[Any], T]) -> List[T]:
        """GET ``/<resource>`` and parse the JSON array body."""
        url = f"{self.base_url}/{resource}"
        outcome = "error"

        try:
            with self._timed(resource):
                records = await self._request(url, resource, parse)
            outcome = "success"
            self.logger.debug("Upstream collection retrieved", url=url, count=len(records))
            return records
        finally:
            self._count_request(resource, outcome)

    async def _request(self, url: str, resource: str, parse: Callable[[Any], T]) -> List[T]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url)
        except httpx.HTTPError as exc:
            self.logger.error("Upstream request failed", url=url, error=str(exc))
            raise UpstreamError(
                service=UPSTREAM_SERVICE,
                message=f"request to {resource} failed",
                details={"url": url, "error": str(exc)}
            ) from exc

        if not response.is_success:
            self.logger.error(
                "Upstream returned unexpected status",
                url=url,
                status_code=response.status_code,
            )
            raise UpstreamError(
                service=UPSTREAM_SERVICE,
                message=f"unexpected status {response.status_code}",
                details={"url": url, "status_code": response.status_code}
            )

        return self._parse_body(url, response, parse)

    def _parse_body(self, url: str, response: httpx.Response, parse: Callable[[Any], T]) -> List[T]:
        try:
            payload = response.json()
        except ValueError as exc:
            self.logger.error("Upstream body is not valid JSON", url=url)
            raise UpstreamError(
                service=UPSTREAM_SERVICE,
                message="response body is not valid JSON",
                details={"url": url}
            ) from exc

        if not isinstance(payload, list):
            self.logger.error("Upstream body is not a JSON array", url=url, body_type=type(payload).__name__)
            raise UpstreamError(
                service=UPSTREAM_SERVICE,
                message="response body is not a JSON array",
                details={"url": url}
            )

        try:
            return [parse(item) for item in payload]
        except (KeyError, TypeError, ValueError) as exc:
            self.logger.error("Upstream record is malformed", url=url, error=str(exc))
            raise UpstreamError(
                service=UPSTREAM_SERVICE,
                message="response contains malformed records",
                details={"url": url, "error": str(exc)}
            ) from exc

    def _timed(self, resource: str):
        if not self.metrics:
            return nullcontext()
        return self.metrics.time_operation("upstream_request_duration_seconds", resource=resource)

    def _count_request(self, resource: str, outcome: str) -> None:
        if self.metrics:
            self.metrics.increment_counter("upstream_requests_total", resource=resource, outcome=outcome)
