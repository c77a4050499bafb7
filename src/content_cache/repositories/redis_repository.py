"""Redis implementation of CacheStore.

Values are stored as plain strings with ``SETEX`` so operators can inspect
them with any Redis client. Prefix deletes walk the keyspace with ``SCAN``.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import TypeVar

import redis.asyncio as redis
from redis.exceptions import RedisError

from content_cache.config import settings
from content_cache.connection import get_redis_client, init_redis
from content_cache.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

_GLOB_SPECIAL = "\\*?[]"

_STORE_ERRORS = (RedisError, OSError, asyncio.TimeoutError)


def escape_glob(prefix: str) -> str:
    """Escape Redis glob metacharacters so ``prefix`` matches literally."""
    return "".join(f"\\{ch}" if ch in _GLOB_SPECIAL else ch for ch in prefix)


class RedisCacheRepository:
    """Redis implementation of the CacheStore protocol.

    The client is looked up on every call. When the shared handle is still
    empty, the first operation establishes it through ``connect``; a failed
    attempt is retried after ``retry_after`` seconds.

    Each Redis round trip is bounded by ``operation_timeout``; a timeout counts
    as a failure and is handled like an unavailable store. After
    ``max_failures`` consecutive failures the repository reports itself
    unavailable for ``retry_after`` seconds, then lets the next operation
    through as a trial. A successful trial or ``ping()`` restores it.
    """

    def __init__(
        self,
        client_provider: Callable[[], redis.Redis | None] | None = None,
        connect: Callable[[], Awaitable[redis.Redis | None]] | None = None,
        operation_timeout: float | None = None,
        max_failures: int | None = None,
        retry_after: float | None = None,
        scan_batch_size: int = 500,
        clock: Callable[[], float] | None = None,
    ) -> None:
        """Initialize the Redis cache repository.

        Args:
            client_provider: Returns the current client or None. Defaults to the
                process-wide connection handle.
            connect: Establishes the client when the provider has none.
                Defaults to ``init_redis`` when ``client_provider`` is not
                given; without it an empty handle means unavailable.
            operation_timeout: Per round-trip timeout in seconds.
            max_failures: Consecutive failures tolerated before reporting
                unavailable.
            retry_after: Seconds to wait before retrying a failed connect or a
                disabled store.
            scan_batch_size: COUNT hint for SCAN.
            clock: Returns the current time in seconds. Defaults to
                ``time.monotonic``.
        """
        if client_provider is None:
            client_provider = get_redis_client
            connect = connect or init_redis
        self._client_provider = client_provider
        self._connect = connect
        self._timeout = operation_timeout or settings.cache_operation_timeout
        self._max_failures = max_failures or settings.cache_max_failures
        self._retry_after = retry_after or settings.cache_retry_after
        self._batch_size = scan_batch_size
        self._clock = clock or time.monotonic
        self._failures = 0
        self._disabled_at = 0.0
        self._next_connect_at: float | None = None

    @classmethod
    def create(
        cls,
        operation_timeout: float | None = None,
        max_failures: int | None = None,
    ) -> "RedisCacheRepository":
        """Factory method bound to the shared connection handle.

        Args:
            operation_timeout: Per round-trip timeout. If None, uses settings.
            max_failures: Failure budget. If None, uses settings.

        Returns:
            Configured RedisCacheRepository
        """
        return cls(operation_timeout=operation_timeout, max_failures=max_failures)

    @property
    def client(self) -> redis.Redis | None:
        """Get the Redis client, if connected."""
        return self._client_provider()

    def _can_connect(self) -> bool:
        if self._connect is None:
            return False
        return self._next_connect_at is None or self._clock() >= self._next_connect_at

    def _cooling_down(self) -> bool:
        return self._failures >= self._max_failures and self._clock() - self._disabled_at < self._retry_after

    def is_available(self) -> bool:
        if self.client is None:
            return self._can_connect()
        return not self._cooling_down()

    async def _connected_client(self) -> redis.Redis | None:
        client = self.client
        if client is None and self._can_connect():
            self._next_connect_at = self._clock() + self._retry_after
            client = await self._connect()
        return client

    async def _acquire(self) -> redis.Redis | None:
        client = await self._connected_client()
        if client is None or self._cooling_down():
            return None
        return client

    def _record_failure(self, operation: str, key: str, error: Exception) -> None:
        self._failures += 1
        logger.warning(
            "cache_operation_failed",
            operation=operation,
            key=key,
            error=str(error) or type(error).__name__,
            consecutive_failures=self._failures,
        )
        if self._failures >= self._max_failures:
            self._disabled_at = self._clock()
            if self._failures == self._max_failures:
                logger.error("cache_store_disabled", max_failures=self._max_failures, retry_after=self._retry_after)

    def _record_success(self) -> None:
        if self._failures >= self._max_failures:
            logger.info("cache_store_restored")
        self._failures = 0

    async def _run(self, operation: str, key: str, call: Callable[[redis.Redis], Awaitable[T]]) -> T | None:
        client = await self._acquire()
        if client is None:
            return None
        try:
            result = await asyncio.wait_for(call(client), timeout=self._timeout)
        except _STORE_ERRORS as e:
            self._record_failure(operation, key, e)
            return None
        self._record_success()
        return result

    async def get(self, key: str) -> bytes | None:
        value = await self._run("get", key, lambda c: c.get(key))
        if isinstance(value, str):
            return value.encode("utf-8")
        return value

    async def set_with_expiry(self, key: str, value: bytes, ttl_seconds: int) -> bool:
        result = await self._run("setex", key, lambda c: c.setex(key, ttl_seconds, value))
        return bool(result)

    async def delete_by_prefix(self, prefix: str) -> int:
        """Delete every key starting with ``prefix``, one SCAN page at a time.

        Each SCAN and DEL round trip gets its own timeout, so a large keyspace
        does not fail the purge as a whole. On error the keys already deleted
        are still counted.

        Args:
            prefix: Literal key prefix

        Returns:
            Number of keys deleted
        """
        client = await self._acquire()
        if client is None:
            return 0

        pattern = f"{escape_glob(prefix)}*"
        deleted = 0
        cursor = 0
        try:
            while True:
                cursor, keys = await asyncio.wait_for(
                    client.scan(cursor=cursor, match=pattern, count=self._batch_size),
                    timeout=self._timeout,
                )
                if keys:
                    deleted += await asyncio.wait_for(client.delete(*keys), timeout=self._timeout)
                if not cursor:
                    break
        except _STORE_ERRORS as e:
            self._record_failure("delete_by_prefix", prefix, e)
            return deleted

        self._record_success()
        return deleted

    async def ping(self) -> bool:
        """Check if Redis is accessible, resetting the failure budget on success.

        Returns:
            True if healthy, False otherwise
        """
        client = await self._connected_client()
        if client is None:
            return False
        try:
            result = await asyncio.wait_for(client.ping(), timeout=self._timeout)
        except _STORE_ERRORS:
            return False
        if result:
            self._record_success()
        return bool(result)

    def get_stats(self) -> dict:
        """Get repository statistics.

        Returns:
            Dictionary with stats
        """
        return {
            "backend": "redis",
            "connected": self.client is not None,
            "available": self.is_available(),
            "consecutive_failures": self._failures,
            "operation_timeout": self._timeout,
            "retry_after": self._retry_after,
        }
