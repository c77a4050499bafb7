"""Process-wide Redis connection handle.

The handle is created by ``init_redis()``, either at application startup or
lazily by the first repository operation, and shared by every request.
Initialization is guarded by a lock so concurrent or repeated calls never open
a second client. When Redis cannot be reached within the retry budget the
handle stays empty and the cache degrades to pass-through.
"""

import asyncio

import redis.asyncio as redis
from redis.exceptions import RedisError

from content_cache.config import Settings, settings
from content_cache.logging import get_logger

logger = get_logger(__name__)

_client: redis.Redis | None = None
_init_lock: asyncio.Lock | None = None


def _get_lock() -> asyncio.Lock:
    global _init_lock
    if _init_lock is None:
        _init_lock = asyncio.Lock()
    return _init_lock


def reconnect_delay(attempt: int) -> float:
    """Backoff before connect attempt ``attempt + 1``, in seconds."""
    return min(attempt * 0.1, 3.0)


def create_redis_client(config: Settings | None = None) -> redis.Redis:
    """Create an asyncio Redis client instance (no network I/O)."""
    config = config or settings
    return redis.from_url(
        config.redis_url,
        password=config.redis_password,
        db=config.redis_db,
        decode_responses=False,
        socket_connect_timeout=config.cache_connect_timeout,
        socket_timeout=config.cache_operation_timeout,
        health_check_interval=30,
    )


async def init_redis(config: Settings | None = None) -> redis.Redis | None:
    """Establish the shared client once.

    Args:
        config: Settings to connect with. Defaults to the global settings.

    Returns:
        The shared client, or None if Redis is unreachable
    """
    global _client
    if _client is not None:
        return _client

    config = config or settings
    async with _get_lock():
        if _client is not None:
            return _client

        client = create_redis_client(config)
        for attempt in range(1, config.cache_max_retries + 1):
            try:
                await client.ping()
            except (RedisError, OSError, asyncio.TimeoutError) as e:
                logger.warning(
                    "redis_connect_failed",
                    attempt=attempt,
                    max_retries=config.cache_max_retries,
                    error=str(e),
                )
                if attempt < config.cache_max_retries:
                    await asyncio.sleep(reconnect_delay(attempt))
                continue

            _client = client
            logger.info("redis_connected", url=config.redis_url)
            return _client

        logger.error("redis_unavailable", reason="too many connection attempts")
        await client.aclose()
        return None


def get_redis_client() -> redis.Redis | None:
    """Return the shared client, or None if it was never established."""
    return _client


async def close_redis() -> None:
    """Close the shared client, if any."""
    global _client
    if _client is not None:
        client, _client = _client, None
        await client.aclose()
        logger.info("redis_closed")
