"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract of the cache's
operational endpoints. Internal logic uses entities from the entities package.
"""

from .requests import PrefixPurgeRequest
from .responses import CacheStatsResponse, HealthCheckResponse, InvalidationResponse

__all__ = [
    "CacheStatsResponse",
    "HealthCheckResponse",
    "InvalidationResponse",
    "PrefixPurgeRequest",
]
