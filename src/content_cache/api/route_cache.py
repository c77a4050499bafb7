"""FastAPI integration for the request cache interceptor.

Route functions hand their request and a result-producing coroutine to
``RouteCache.respond`` and return the response it builds:

    ```python
    @router.get("/api/blog/categories")
    async def blog_categories(request: Request, cache: RouteCacheDep) -> JSONResponse:
        return await cache.respond(request, AGGREGATE_TTL, lambda: load_categories())
    ```
"""

from collections.abc import Awaitable, Callable

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from content_cache.config import settings
from content_cache.entities import CacheStatus, HandlerResult, RequestDescriptor
from content_cache.services import RequestCacheInterceptor

DEFAULT_TTL = settings.cache_default_ttl
AGGREGATE_TTL = settings.cache_aggregate_ttl

CACHE_STATUS_HEADER = "X-Cache"


def describe_request(request: Request) -> RequestDescriptor:
    """Build a RequestDescriptor from a Starlette request.

    Identity comes from ``request.state.user`` when an upstream auth
    middleware set it, otherwise from the presence of an Authorization header.
    """
    identity = getattr(request.state, "user", None)
    if identity is None and request.headers.get("authorization"):
        identity = "bearer"
    return RequestDescriptor(
        method=request.method,
        path=request.url.path,
        query=tuple(request.query_params.multi_items()),
        identity=str(identity) if identity is not None else None,
    )


class RouteCache:
    """Adapter from FastAPI routes to RequestCacheInterceptor."""

    def __init__(self, interceptor: RequestCacheInterceptor) -> None:
        self._interceptor = interceptor

    async def respond(
        self,
        request: Request,
        ttl: int,
        handler: Callable[[], Awaitable[HandlerResult]],
    ) -> JSONResponse:
        """Run ``handler`` through the cache and render the JSON response.

        Args:
            request: The FastAPI request
            ttl: Time-to-live for this route, in seconds
            handler: Async callable producing the fresh result

        Returns:
            JSONResponse with the result's status and an X-Cache header
        """
        descriptor = describe_request(request)

        async def encoded() -> HandlerResult:
            result = await handler()
            return HandlerResult(
                success=result.success,
                payload=jsonable_encoder(result.payload),
                status_code=result.status_code,
            )

        result = await self._interceptor.intercept(descriptor, ttl, encoded)
        cache_status = result.cache_status or CacheStatus.BYPASS

        return JSONResponse(
            content=result.payload,
            status_code=result.status_code,
            headers={CACHE_STATUS_HEADER: cache_status.value},
        )
