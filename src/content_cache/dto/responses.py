"""Response DTOs for API endpoints."""

from pydantic import BaseModel, Field


class InvalidationResponse(BaseModel):
    """Response DTO for a resource or prefix purge."""

    success: bool = Field(..., description="Whether the purge ran")
    resource: str | None = Field(None, description="The purged resource, if any")
    prefixes: list[str] = Field(default_factory=list, description="Key prefixes that were purged")
    deleted_count: int = Field(..., description="Number of entries deleted", ge=0)


class CacheStatsResponse(BaseModel):
    """Response DTO for cache statistics."""

    store: dict = Field(..., description="Backend statistics (implementation-specific)")
    performance: dict[str, float | int] = Field(..., description="Interceptor and invalidation counters")
    resources: dict[str, list[str]] = Field(
        ...,
        description="Resource name -> key prefixes purged on mutation",
    )
    default_ttl_seconds: int = Field(..., description="TTL for listings and detail views", ge=1)
    aggregate_ttl_seconds: int = Field(..., description="TTL for category/tag views", ge=1)


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'unhealthy'")
    cache_available: bool = Field(..., description="Whether the cache backend is reachable")
    backend: str = Field(..., description="Cache backend in use")
