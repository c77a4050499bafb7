"""Post-commit invalidation hooks for write handlers.

Write handlers are bound to a resource when they are defined, so
invalidation does not depend on each handler remembering to call it.
"""

import functools
from collections.abc import Awaitable, Callable
from typing import ParamSpec

from content_cache.entities import HandlerResult
from content_cache.exceptions import UnknownResourceError
from content_cache.logging import get_logger
from content_cache.services.invalidation import InvalidationCoordinator

logger = get_logger(__name__)

P = ParamSpec("P")

WriteHandler = Callable[P, Awaitable[HandlerResult]]


class MutationHooks:
    """Registry binding write handlers to the resources they mutate.

    Example:
        ```python
        hooks = MutationHooks(coordinator)

        @hooks.invalidates("skills")
        async def create_skill(data: dict) -> HandlerResult:
            skill = await skills.insert(data)
            return HandlerResult.ok({"success": True, "data": skill}, status_code=201)
        ```
    """

    def __init__(self, coordinator: InvalidationCoordinator) -> None:
        self._coordinator = coordinator
        self._handlers: dict[str, list[str]] = {name: [] for name in coordinator.resources}

    def invalidates(self, resource: str) -> Callable[[WriteHandler], WriteHandler]:
        """Decorate a write handler so a successful result purges ``resource``.

        The purge runs after the handler returns, i.e. after the write has
        been committed. Failed results and exceptions leave the cache alone.
        A failing invalidation is logged and never changes the result.

        Raises:
            UnknownResourceError: At decoration time, for an unknown resource
        """
        if resource not in self._handlers:
            raise UnknownResourceError(resource, self._coordinator.resources)

        def decorator(handler: WriteHandler) -> WriteHandler:
            if handler.__qualname__ not in self._handlers[resource]:
                self._handlers[resource].append(handler.__qualname__)

            @functools.wraps(handler)
            async def wrapper(*args: P.args, **kwargs: P.kwargs) -> HandlerResult:
                result = await handler(*args, **kwargs)
                if result.success:
                    try:
                        await self._coordinator.invalidate_resource(resource)
                    except Exception:
                        # The write is committed; stale entries expire with their TTL.
                        logger.exception("cache_invalidation_failed", resource=resource, handler=handler.__qualname__)
                return result

            return wrapper

        return decorator

    async def notify(self, resource: str) -> int:
        """Post-commit event for writers that cannot use the decorator."""
        return await self._coordinator.invalidate_resource(resource)

    def registered(self) -> dict[str, list[str]]:
        """Resource name -> qualified names of bound write handlers."""
        return {name: list(handlers) for name, handlers in self._handlers.items()}

    def unbound_resources(self) -> list[str]:
        """Resources with no write handler bound yet."""
        return [name for name, handlers in self._handlers.items() if not handlers]
