"""Content Cache - read-through Redis cache for a CRUD content API.

This package provides a layered architecture for request caching:

Layers:
    - protocols: Interface contracts (CacheStore)
    - repositories: Store implementations (Redis, in-memory)
    - services: Cache policy (interceptor, invalidation, mutation hooks)
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from content_cache import InvalidationCoordinator, RequestCacheInterceptor
    from content_cache.repositories import RedisCacheRepository

    store = RedisCacheRepository.create()
    interceptor = RequestCacheInterceptor(store=store)
    coordinator = InvalidationCoordinator(store=store)
    ```

For HTTP API:
    ```python
    from content_cache.api.app import app
    ```
"""

__version__ = "0.1.0"

from content_cache.config import get_settings, settings
from content_cache.connection import close_redis, get_redis_client, init_redis
from content_cache.entities import CacheStatus, HandlerResult, RequestDescriptor
from content_cache.exceptions import CacheLayerError, UnknownResourceError
from content_cache.keys import build_cache_key, route_prefix
from content_cache.protocols import CacheStore
from content_cache.repositories import InMemoryCacheRepository, RedisCacheRepository
from content_cache.services import InvalidationCoordinator, MutationHooks, RequestCacheInterceptor

__all__ = [
    "__version__",
    # Configuration
    "settings",
    "get_settings",
    # Connection handle
    "init_redis",
    "get_redis_client",
    "close_redis",
    # Protocols (interfaces)
    "CacheStore",
    # Repositories (data access)
    "RedisCacheRepository",
    "InMemoryCacheRepository",
    # Services (cache policy)
    "RequestCacheInterceptor",
    "InvalidationCoordinator",
    "MutationHooks",
    # Entities (domain models)
    "RequestDescriptor",
    "CacheStatus",
    "HandlerResult",
    # Keys
    "build_cache_key",
    "route_prefix",
    # Errors
    "CacheLayerError",
    "UnknownResourceError",
]
