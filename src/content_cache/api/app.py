from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from content_cache import __version__
from content_cache.api.dependencies import HandlerDep, make_lifespan
from content_cache.config import settings
from content_cache.dto import (
    CacheStatsResponse,
    HealthCheckResponse,
    InvalidationResponse,
    PrefixPurgeRequest,
)
from content_cache.protocols import CacheStore


def create_app(store: CacheStore | None = None) -> FastAPI:
    """Build the FastAPI app with the cache's operational endpoints.

    Args:
        store: Cache backend to use. If None, selected from settings at startup.

    Returns:
        The configured application
    """
    app = FastAPI(
        title="Content Cache API",
        description="Read-through Redis cache for the content API",
        version=__version__,
        lifespan=make_lifespan(store),
    )

    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root() -> dict[str, Any]:
        """Root endpoint with API information."""
        return {
            "name": "Content Cache API",
            "version": __version__,
            "description": "Read-through Redis cache for the content API",
            "endpoints": {
                "stats": "/cache/stats",
                "invalidate": "/cache/resources/{resource}",
                "purge": "/cache/purge",
                "health": "/health",
                "docs": "/docs",
            },
        }

    @app.get("/health", response_model=HealthCheckResponse)
    async def health(handler: HandlerDep) -> HealthCheckResponse:
        """Health check endpoint."""
        return await handler.health_check()

    @app.get("/cache/stats", response_model=CacheStatsResponse)
    async def get_stats(handler: HandlerDep) -> CacheStatsResponse:
        """Get cache statistics."""
        return await handler.get_stats()

    @app.post("/cache/stats/reset", response_model=dict[str, str])
    async def reset_stats(handler: HandlerDep) -> dict[str, str]:
        """Reset interceptor and invalidation counters."""
        return await handler.reset_stats()

    @app.delete("/cache/resources/{resource}", response_model=InvalidationResponse)
    async def invalidate_resource(resource: str, handler: HandlerDep) -> InvalidationResponse:
        """Purge every cached read of a resource and its derived views."""
        return await handler.invalidate_resource(resource)

    @app.post("/cache/purge", response_model=InvalidationResponse)
    async def purge_prefix(request: PrefixPurgeRequest, handler: HandlerDep) -> InvalidationResponse:
        """Purge every entry whose key starts with a literal prefix."""
        return await handler.purge_prefix(request)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "content_cache.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
