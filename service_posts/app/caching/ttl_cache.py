"""
In-process TTL cache for the posts gateway.
"""

import asyncio
import threading
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, TYPE_CHECKING

from shared.logging import get_logger

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


DEFAULT_TTL_SECONDS = 100
DEFAULT_SWEEP_INTERVAL_SECONDS = 120


@dataclass(frozen=True)
class CacheEntry:
    """A cached value and the clock reading after which it is absent."""

    key: str
    value: Any
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class TTLCache:
    """Key-value store with per-entry time-to-live.

    ``get`` checks expiry itself, so the periodic sweep only reclaims
    memory. The map is guarded by a lock because a single store is shared
    by every request.
    """

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL_SECONDS,
        *,
        sweep_interval: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        metrics: Optional["MetricsCollector"] = None,
    ):
        if default_ttl <= 0:
            raise ValueError("default_ttl must be positive")
        self.default_ttl = default_ttl
        self.sweep_interval = sweep_interval
        self.metrics = metrics
        self.logger = get_logger("posts.cache")

        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._inflight: Dict[str, "asyncio.Future[Any]"] = {}
        self._sweeper: Optional["asyncio.Task[None]"] = None
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None if absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry.is_expired(self._clock()):
                del self._entries[key]
                entry = None

            if entry is None:
                self._misses += 1
            else:
                self._hits += 1

        self._record_access(key, hit=entry is not None)
        return entry.value if entry is not None else None

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """Store ``value``; overwriting a key restarts its expiry."""
        ttl = self.default_ttl if ttl is None else ttl
        with self._lock:
            self._entries[key] = CacheEntry(key=key, value=value, expires_at=self._clock() + ttl)
        self.logger.debug("Cached value", key=key, ttl=ttl)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    async def get_or_populate(
        self,
        key: str,
        fetch: Callable[[], Awaitable[Any]],
        ttl: Optional[float] = None,
    ) -> Any:
        """Return the cached value for ``key``, fetching and storing it on a miss.

        Concurrent misses on the same key share a single ``fetch`` call.
        Fetch failures propagate to every waiter and nothing is stored.
        """
        cached = self.get(key)
        if cached is not None:
            return cached

        pending = self._inflight.get(key)
        if pending is None:
            pending = asyncio.ensure_future(self._populate(key, fetch, ttl))
            self._inflight[key] = pending
            pending.add_done_callback(lambda done: self._finish_inflight(key, done))
        else:
            self.logger.debug("Joining in-flight fetch", key=key)

        return await asyncio.shield(pending)

    async def _populate(self, key: str, fetch: Callable[[], Awaitable[Any]], ttl: Optional[float]) -> Any:
        self.logger.info("Cache miss, fetching", key=key)
        value = await fetch()
        self.set(key, value, ttl)
        return value

    def _finish_inflight(self, key: str, done: "asyncio.Future[Any]") -> None:
        self._inflight.pop(key, None)
        # Mark the failure as retrieved; every waiter may have been cancelled.
        if not done.cancelled() and done.exception() is not None:
            self.logger.warning("Cache populate failed", key=key, error=str(done.exception()))

    def sweep(self) -> int:
        """Evict every expired entry and return how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
            for key in expired:
                del self._entries[key]
            self._evictions += len(expired)

        if expired:
            self.logger.debug("Evicted expired entries", count=len(expired))
            if self.metrics:
                self.metrics.increment_counter("cache_evictions_total", amount=len(expired))
        return len(expired)

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "entries": len(self._entries),
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
                "default_ttl_seconds": self.default_ttl,
            }

    async def start(self) -> None:
        """Start the periodic sweeper on the running event loop."""
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.create_task(self._sweep_loop())
            self.logger.info("Cache sweeper started", interval_seconds=self.sweep_interval)

    async def stop(self) -> None:
        """Stop the periodic sweeper."""
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            pass
        self._sweeper = None
        self.logger.info("Cache sweeper stopped")

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval)
            self.sweep()

    def _record_access(self, key: str, hit: bool) -> None:
        if not self.metrics:
            return
        metric = "cache_hits_total" if hit else "cache_misses_total"
        self.metrics.increment_counter(metric, cache_key=key)
