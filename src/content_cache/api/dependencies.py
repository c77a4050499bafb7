"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services stored in app.state during lifespan
    - Dependency functions retrieve from request.app.state
    - Content routes mounted on the same app reuse RouteCacheDep and HooksDep
"""

from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from content_cache.api.route_cache import RouteCache
from content_cache.config import settings
from content_cache.connection import close_redis, init_redis
from content_cache.handlers import CacheHandler
from content_cache.logging import configure_logging, get_logger
from content_cache.models import CacheMetrics
from content_cache.protocols import CacheStore
from content_cache.repositories import create_store
from content_cache.services import InvalidationCoordinator, MutationHooks, RequestCacheInterceptor

logger = get_logger(__name__)


def _from_state(request: Request, name: str):
    value = getattr(request.app.state, name, None)
    if value is None:
        raise RuntimeError(f"{name} not initialized. Check lifespan setup.")
    return value


def get_handler(request: Request) -> CacheHandler:
    """Dependency injection for CacheHandler from app.state.

    Raises:
        RuntimeError: If handler is not initialized
    """
    return _from_state(request, "cache_handler")


def get_route_cache(request: Request) -> RouteCache:
    """Dependency injection for RouteCache from app.state.

    Raises:
        RuntimeError: If the route cache is not initialized
    """
    return _from_state(request, "route_cache")


def get_mutation_hooks(request: Request) -> MutationHooks:
    """Dependency injection for MutationHooks from app.state.

    Raises:
        RuntimeError: If the hooks are not initialized
    """
    return _from_state(request, "mutation_hooks")


def wire_cache(app: FastAPI, store: CacheStore) -> None:
    """Build every layer on top of ``store`` and store it in app.state."""
    metrics = CacheMetrics()
    interceptor = RequestCacheInterceptor(store=store, metrics=metrics)
    coordinator = InvalidationCoordinator(store=store, metrics=metrics)

    app.state.cache_store = store
    app.state.cache_metrics = metrics
    app.state.interceptor = interceptor
    app.state.coordinator = coordinator
    app.state.mutation_hooks = MutationHooks(coordinator)
    app.state.route_cache = RouteCache(interceptor)
    app.state.cache_handler = CacheHandler(store=store, coordinator=coordinator, metrics=metrics)


def make_lifespan(
    store: CacheStore | None = None,
) -> Callable[[FastAPI], AbstractAsyncContextManager[None]]:
    """Create the lifespan context manager for the FastAPI app.

    Args:
        store: Use this store instead of the one selected by settings.

    Returns:
        Lifespan function for ``FastAPI(lifespan=...)``
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging()

        owns_connection = store is None and not settings.uses_memory_backend
        if owns_connection:
            # Failure leaves the handle empty; the cache then passes through.
            await init_redis()

        active_store = store or create_store()
        wire_cache(app, active_store)
        logger.info(
            "cache_layer_started",
            backend=active_store.get_stats().get("backend"),
            available=active_store.is_available(),
        )

        yield

        await app.state.interceptor.flush()
        for name in (
            "cache_handler",
            "route_cache",
            "mutation_hooks",
            "coordinator",
            "interceptor",
            "cache_metrics",
            "cache_store",
        ):
            delattr(app.state, name)
        if owns_connection:
            await close_redis()
        logger.info("cache_layer_stopped")

    return lifespan


# Type aliases for cleaner dependency injection
HandlerDep = Annotated[CacheHandler, Depends(get_handler)]
RouteCacheDep = Annotated[RouteCache, Depends(get_route_cache)]
HooksDep = Annotated[MutationHooks, Depends(get_mutation_hooks)]
