"""Read-through cache interceptor.

Wraps a read handler with cache-aside behaviour: serve a stored payload on
hit, otherwise run the handler and store its successful result with the
route's TTL. Stores are written in the background by default, so a slow
store never delays the response.
"""

import asyncio
import json
import time
from collections.abc import Awaitable, Callable
from dataclasses import replace

from content_cache.entities import CacheStatus, HandlerResult, RequestDescriptor
from content_cache.keys import build_cache_key
from content_cache.logging import get_logger
from content_cache.models import CacheMetrics
from content_cache.protocols import CacheStore

logger = get_logger(__name__)

Handler = Callable[[], Awaitable[HandlerResult]]


def cache_key(request: RequestDescriptor) -> str:
    """Derive the cache key for a request."""
    return build_cache_key(request.method, request.path, request.query)


class RequestCacheInterceptor:
    """Cache-aside wrapper for read handlers.

    The wrapped handler must not have side effects that callers rely on:
    on a hit it is not invoked at all.

    Example:
        ```python
        interceptor = RequestCacheInterceptor(store=RedisCacheRepository.create())

        result = await interceptor.intercept(request, ttl=3600, handler=list_projects)
        ```
    """

    def __init__(
        self,
        store: CacheStore,
        metrics: CacheMetrics | None = None,
        write_behind: bool = True,
    ) -> None:
        """Initialize the interceptor.

        Args:
            store: Cache storage backend (required).
            metrics: Counters to update. A fresh instance is created if None.
            write_behind: Store results from a background task instead of
                before returning. ``flush()`` waits for pending writes.
        """
        self._store = store
        self._metrics = metrics or CacheMetrics()
        self._write_behind = write_behind
        self._pending: set[asyncio.Task] = set()

    def should_bypass(self, request: RequestDescriptor) -> str | None:
        """Return why the cache is skipped for ``request``, or None to use it."""
        if not request.is_read:
            return "method"
        if request.is_admin:
            return "admin"
        if not self._store.is_available():
            return "unavailable"
        return None

    async def intercept(self, request: RequestDescriptor, ttl: int, handler: Handler) -> HandlerResult:
        """Serve ``request`` from the cache or from ``handler``.

        Business logic:
        1. Bypass for non-GET, authenticated/admin or store-unavailable
        2. Return the stored payload on hit without calling the handler
        3. On miss call the handler and store successful, serializable results
        4. Return the handler's result with ``cache_status`` set

        Args:
            request: The inbound request
            ttl: Time-to-live for a stored result, in seconds
            handler: Async callable producing the fresh result

        Returns:
            The cached or freshly computed result
        """
        reason = self.should_bypass(request)
        if reason is not None:
            self._metrics.record_bypass()
            logger.debug("cache_bypass", method=request.method, path=request.path, reason=reason)
            result = await handler()
            return replace(result, cache_status=CacheStatus.BYPASS)

        key = cache_key(request)
        start_time = time.perf_counter()
        cached = await self._store.get(key)
        lookup_time_ms = (time.perf_counter() - start_time) * 1000

        if cached is not None:
            try:
                payload = json.loads(cached)
            except ValueError:
                logger.warning("cache_entry_corrupt", key=key)
            else:
                self._metrics.record_hit(lookup_time_ms)
                logger.debug("cache_hit", key=key)
                return HandlerResult(success=True, payload=payload, from_cache=True, cache_status=CacheStatus.HIT)

        self._metrics.record_miss(lookup_time_ms)
        logger.debug("cache_miss", key=key)

        result = await handler()
        serialized = self._serialize(key, result)
        if serialized is not None:
            if self._write_behind:
                task = asyncio.create_task(self._write(key, serialized, ttl))
                self._pending.add(task)
                task.add_done_callback(self._write_done)
            else:
                await self._write(key, serialized, ttl)
        return replace(result, cache_status=CacheStatus.MISS)

    def _serialize(self, key: str, result: HandlerResult) -> bytes | None:
        if not result.success:
            self._metrics.record_uncacheable()
            return None

        try:
            return json.dumps(result.payload).encode("utf-8")
        except (TypeError, ValueError) as e:
            self._metrics.record_uncacheable()
            logger.warning("cache_serialization_failed", key=key, error=str(e))
            return None

    async def _write(self, key: str, serialized: bytes, ttl: int) -> None:
        if not await self._store.set_with_expiry(key, serialized, ttl):
            self._metrics.record_store_error()
            logger.warning("cache_set_failed", key=key)

    def _write_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            self._metrics.record_store_error()
            logger.error("cache_set_failed", error=repr(task.exception()))

    async def flush(self) -> None:
        """Wait until every background write has finished."""
        while self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    @property
    def pending_writes(self) -> int:
        """Number of background writes still in flight."""
        return len(self._pending)

    @property
    def metrics(self) -> CacheMetrics:
        """Get the metrics updated by this interceptor."""
        return self._metrics

    @property
    def store(self) -> CacheStore:
        """Get the underlying store (for testing)."""
        return self._store
