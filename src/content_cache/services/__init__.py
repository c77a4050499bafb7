"""Service layer for cache orchestration.

Services depend on the CacheStore protocol, not concrete implementations,
making them testable with the in-memory store.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Cache policy) -> (Data Access)
"""

from .interceptor import RequestCacheInterceptor, cache_key
from .invalidation import DEFAULT_SECONDARY_VIEWS, RESOURCES, InvalidationCoordinator
from .mutation_hooks import MutationHooks

__all__ = [
    "DEFAULT_SECONDARY_VIEWS",
    "RESOURCES",
    "InvalidationCoordinator",
    "MutationHooks",
    "RequestCacheInterceptor",
    "cache_key",
]
