"""Resource-scoped cache invalidation.

A mutation of a resource purges its own reads and every derived view
declared for it. Derived views are listed explicitly; they are never
inferred from the resource name.
"""

from collections.abc import Mapping

from content_cache.exceptions import UnknownResourceError
from content_cache.keys import route_prefix
from content_cache.logging import get_logger
from content_cache.models import CacheMetrics
from content_cache.protocols import CacheStore

logger = get_logger(__name__)

RESOURCES: tuple[str, ...] = ("projects", "blog", "skills", "profile")

DEFAULT_SECONDARY_VIEWS: dict[str, tuple[str, ...]] = {
    "projects": (),
    "blog": ("blog/categories", "blog/tags"),
    "skills": ("skills/categories",),
    "profile": (),
}


class InvalidationCoordinator:
    """Maps resource names to the key prefixes purged when they change.

    Must be called after the mutation is durably persisted. Calling it
    redundantly is harmless; purging more than strictly needed is accepted.

    Example:
        ```python
        coordinator = InvalidationCoordinator(store=RedisCacheRepository.create())

        await save_post(post)
        await coordinator.invalidate_resource("blog")
        ```
    """

    def __init__(
        self,
        store: CacheStore,
        secondary_views: Mapping[str, tuple[str, ...]] | None = None,
        metrics: CacheMetrics | None = None,
    ) -> None:
        """Initialize the coordinator.

        Args:
            store: Cache storage backend (required).
            secondary_views: Resource name -> derived view routes. The keys are
                the complete set of known resources.
            metrics: Counters to update. A fresh instance is created if None.
        """
        views = DEFAULT_SECONDARY_VIEWS if secondary_views is None else secondary_views
        self._views = {name: tuple(routes) for name, routes in views.items()}
        self._store = store
        self._metrics = metrics or CacheMetrics()

    @property
    def resources(self) -> tuple[str, ...]:
        """Names of every resource with an invalidation mapping."""
        return tuple(self._views)

    def prefixes_for(self, resource: str) -> list[str]:
        """Key prefixes purged when ``resource`` changes.

        Raises:
            UnknownResourceError: If the resource has no mapping
        """
        if resource not in self._views:
            raise UnknownResourceError(resource, self.resources)
        routes = (resource, *self._views[resource])
        return [route_prefix(route) for route in routes]

    async def invalidate_resource(self, resource: str) -> int:
        """Purge every cached read of ``resource`` and its derived views.

        Args:
            resource: One of the known resource names

        Returns:
            Total number of entries deleted

        Raises:
            UnknownResourceError: If the resource has no mapping
        """
        deleted = 0
        for prefix in self.prefixes_for(resource):
            deleted += await self.invalidate_prefix(prefix)
        self._metrics.record_invalidation(deleted)
        logger.info("cache_invalidated", resource=resource, deleted=deleted)
        return deleted

    async def invalidate_route(self, route: str) -> int:
        """Purge cached reads under ``/api/<route>`` only."""
        return await self.invalidate_prefix(route_prefix(route))

    async def invalidate_prefix(self, prefix: str) -> int:
        """Purge every entry whose key starts with ``prefix``.

        A store that is unavailable or failing deletes nothing; stale
        entries then live until their TTL expires.
        """
        if not self._store.is_available():
            logger.warning("cache_invalidation_skipped", prefix=prefix, reason="unavailable")
            return 0
        deleted = await self._store.delete_by_prefix(prefix)
        if deleted:
            logger.debug("cache_prefix_purged", prefix=prefix, deleted=deleted)
        return deleted

    @property
    def metrics(self) -> CacheMetrics:
        return self._metrics
