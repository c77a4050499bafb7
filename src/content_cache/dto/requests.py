"""Request DTOs for API endpoints."""

from pydantic import BaseModel, Field


class PrefixPurgeRequest(BaseModel):
    """Request DTO for purging a literal key prefix."""

    prefix: str = Field(
        ...,
        description="Key prefix to purge, e.g. 'GET:/api/blog/tags'",
        min_length=1,
    )
