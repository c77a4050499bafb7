"""HTTP handlers for cache operations.

Handlers convert between DTOs (API contracts) and service calls.
They handle HTTP concerns like status codes and error responses.
"""

from fastapi import HTTPException, status

from content_cache.config import settings
from content_cache.dto import (
    CacheStatsResponse,
    HealthCheckResponse,
    InvalidationResponse,
    PrefixPurgeRequest,
)
from content_cache.exceptions import UnknownResourceError
from content_cache.models import CacheMetrics
from content_cache.protocols import CacheStore
from content_cache.services import InvalidationCoordinator


class CacheHandler:
    """HTTP handlers for the cache's operational endpoints.

    Example:
        ```python
        handler = CacheHandler(store=store, coordinator=coordinator, metrics=metrics)

        @app.delete("/cache/resources/{resource}", response_model=InvalidationResponse)
        async def invalidate(resource: str):
            return await handler.invalidate_resource(resource)
        ```
    """

    def __init__(
        self,
        store: CacheStore,
        coordinator: InvalidationCoordinator,
        metrics: CacheMetrics,
    ) -> None:
        """Initialize the cache handler.

        Args:
            store: The cache backend.
            coordinator: Resource invalidation service.
            metrics: Counters shared with the interceptor.
        """
        self._store = store
        self._coordinator = coordinator
        self._metrics = metrics

    async def invalidate_resource(self, resource: str) -> InvalidationResponse:
        """Handle DELETE /cache/resources/{resource} requests.

        Raises:
            HTTPException: 404 for an unknown resource
        """
        try:
            prefixes = self._coordinator.prefixes_for(resource)
        except UnknownResourceError as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e

        deleted = await self._coordinator.invalidate_resource(resource)
        return InvalidationResponse(
            success=True,
            resource=resource,
            prefixes=prefixes,
            deleted_count=deleted,
        )

    async def purge_prefix(self, request: PrefixPurgeRequest) -> InvalidationResponse:
        """Handle POST /cache/purge requests."""
        deleted = await self._coordinator.invalidate_prefix(request.prefix)
        return InvalidationResponse(
            success=True,
            prefixes=[request.prefix],
            deleted_count=deleted,
        )

    async def get_stats(self) -> CacheStatsResponse:
        """Handle GET /cache/stats requests.

        Raises:
            HTTPException: If the store cannot report its stats
        """
        try:
            store_stats = self._store.get_stats()
        except Exception as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to get stats: {e}",
            ) from e

        return CacheStatsResponse(
            store=store_stats,
            performance=self._metrics.to_dict(),
            resources={name: self._coordinator.prefixes_for(name) for name in self._coordinator.resources},
            default_ttl_seconds=settings.cache_default_ttl,
            aggregate_ttl_seconds=settings.cache_aggregate_ttl,
        )

    async def reset_stats(self) -> dict:
        """Handle POST /cache/stats/reset requests."""
        self._metrics.reset()
        return {"message": "Cache metrics reset"}

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /health requests.

        Raises:
            HTTPException: 503 when the cache backend is unreachable
        """
        available = await self._store.ping()
        backend = str(self._store.get_stats().get("backend", "unknown"))
        if not available:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=f"Cache backend '{backend}' is unavailable; requests are served uncached",
            )
        return HealthCheckResponse(status="healthy", cache_available=True, backend=backend)
