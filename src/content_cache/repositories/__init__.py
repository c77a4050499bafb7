"""Repository layer for data access.

This layer hides the cache backend behind the CacheStore protocol. The
repositories are protocol-based (structural typing), not inheritance-based.
"""

from content_cache.config import Settings, settings
from content_cache.protocols import CacheStore

from .memory_repository import InMemoryCacheRepository
from .redis_repository import RedisCacheRepository


def create_store(config: Settings | None = None) -> CacheStore:
    """Build the store selected by ``CACHE_BACKEND``."""
    config = config or settings
    if config.uses_memory_backend:
        return InMemoryCacheRepository()
    return RedisCacheRepository(
        operation_timeout=config.cache_operation_timeout,
        max_failures=config.cache_max_failures,
        retry_after=config.cache_retry_after,
    )


__all__ = [
    "CacheStore",
    "InMemoryCacheRepository",
    "RedisCacheRepository",
    "create_store",
]
