"""
Unit tests for the posts gateway TTL cache.
"""

import asyncio
import pytest
from unittest.mock import AsyncMock, patch

from service_posts.app.caching.ttl_cache import TTLCache
from shared.errors import UpstreamError
from shared.metrics import MetricsCollector


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class TestTTLCache:
    """Test cases for TTLCache."""

    @pytest.fixture
    def clock(self):
        return FakeClock()

    @pytest.fixture
    def cache(self, clock):
        return TTLCache(100, sweep_interval=120, clock=clock)

    def test_get_missing_key_returns_none(self, cache):
        assert cache.get("all-posts") is None

    def test_value_retrievable_before_ttl(self, cache, clock):
        cache.set("all-posts", ("a", "b"))
        clock.advance(99)

        assert cache.get("all-posts") == ("a", "b")

    def test_value_absent_after_ttl(self, cache, clock):
        cache.set("all-posts", ("a", "b"))
        clock.advance(101)

        assert cache.get("all-posts") is None
        assert cache.stats()["entries"] == 0

    def test_overwrite_resets_expiry(self, cache, clock):
        cache.set("all-comments", (1,))
        clock.advance(80)
        cache.set("all-comments", (2,))
        clock.advance(80)

        assert cache.get("all-comments") == (2,)

    def test_explicit_ttl_overrides_default(self, cache, clock):
        cache.set("short", "value", ttl=5)
        clock.advance(6)

        assert cache.get("short") is None

    def test_expiry_does_not_depend_on_sweep(self, clock):
        cache = TTLCache(10, sweep_interval=10_000, clock=clock)
        cache.set("key", "value")
        clock.advance(10)

        assert cache.get("key") is None

    def test_sweep_evicts_only_expired_entries(self, cache, clock):
        cache.set("old", 1)
        clock.advance(60)
        cache.set("new", 2)
        clock.advance(50)

        assert cache.sweep() == 1
        assert cache.get("new") == 2
        assert cache.stats()["evictions"] == 1

    def test_delete_and_clear(self, cache):
        cache.set("a", 1)
        cache.set("b", 2)

        assert cache.delete("a") is True
        assert cache.delete("a") is False
        cache.clear()
        assert cache.stats()["entries"] == 0

    def test_stats_counts_hits_and_misses(self, cache):
        cache.get("missing")
        cache.set("present", 1)
        cache.get("present")
        cache.get("present")

        stats = cache.stats()
        assert stats["hits"] == 2
        assert stats["misses"] == 1
        assert stats["entries"] == 1

    def test_metrics_recorded_per_key(self, clock):
        metrics = MetricsCollector("posts")
        cache = TTLCache(100, clock=clock, metrics=metrics)

        cache.get("all-posts")
        cache.set("all-posts", (1,))
        cache.get("all-posts")

        assert metrics.registry.get_sample_value("cache_misses_total", {"cache_key": "all-posts"}) == 1.0
        assert metrics.registry.get_sample_value("cache_hits_total", {"cache_key": "all-posts"}) == 1.0

    def test_non_positive_ttl_rejected(self):
        with pytest.raises(ValueError):
            TTLCache(0)

    @pytest.mark.asyncio
    async def test_get_or_populate_fetches_on_miss_and_caches(self, cache):
        fetch = AsyncMock(return_value=("post",))

        first = await cache.get_or_populate("all-posts", fetch)
        second = await cache.get_or_populate("all-posts", fetch)

        assert first == second == ("post",)
        fetch.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_get_or_populate_refetches_after_expiry(self, cache, clock):
        fetch = AsyncMock(side_effect=[("v1",), ("v2",)])

        assert await cache.get_or_populate("all-posts", fetch) == ("v1",)
        clock.advance(99)
        assert await cache.get_or_populate("all-posts", fetch) == ("v1",)
        clock.advance(2)
        assert await cache.get_or_populate("all-posts", fetch) == ("v2",)
        assert fetch.await_count == 2

    @pytest.mark.asyncio
    async def test_get_or_populate_propagates_failure_without_storing(self, cache):
        fetch = AsyncMock(side_effect=UpstreamError("placeholder_api", "boom"))

        with pytest.raises(UpstreamError):
            await cache.get_or_populate("all-comments", fetch)

        assert cache.get("all-comments") is None

    @pytest.mark.asyncio
    async def test_concurrent_misses_share_one_fetch(self, cache):
        release = asyncio.Event()
        calls = 0

        async def fetch():
            nonlocal calls
            calls += 1
            await release.wait()
            return ("comment",)

        waiters = [asyncio.ensure_future(cache.get_or_populate("all-comments", fetch)) for _ in range(5)]
        await asyncio.sleep(0)
        release.set()
        results = await asyncio.gather(*waiters)

        assert calls == 1
        assert results == [("comment",)] * 5

    @pytest.mark.asyncio
    async def test_failed_fetch_after_waiter_cancelled_is_retrieved(self, cache):
        release = asyncio.Event()

        async def fetch():
            await release.wait()
            raise UpstreamError("placeholder_api", "boom")

        with patch.object(cache, "logger") as logger:
            waiter = asyncio.ensure_future(cache.get_or_populate("all-comments", fetch))
            await asyncio.sleep(0)
            inflight = cache._inflight["all-comments"]

            waiter.cancel()
            with pytest.raises(asyncio.CancelledError):
                await waiter
            release.set()
            await asyncio.wait([inflight])

        assert isinstance(inflight.exception(), UpstreamError)
        assert "all-comments" not in cache._inflight
        assert cache.get("all-comments") is None
        logger.warning.assert_called_once_with(
            "Cache populate failed", key="all-comments", error="placeholder_api: boom"
        )

    @pytest.mark.asyncio
    async def test_sweeper_start_and_stop(self, clock):
        cache = TTLCache(1, sweep_interval=0.01, clock=clock)
        cache.set("key", "value")
        clock.advance(5)

        await cache.start()
        await asyncio.sleep(0.05)
        await cache.stop()

        assert cache.stats()["evictions"] == 1
        assert cache.stats()["misses"] == 0
