"""Handler result domain entity."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class CacheStatus(str, Enum):
    """How the cache took part in producing a result."""

    HIT = "HIT"
    MISS = "MISS"
    BYPASS = "BYPASS"


@dataclass(frozen=True)
class HandlerResult:
    """Typed outcome of a route handler.

    Only successful results are cacheable. The payload must be JSON
    serializable for the result to be stored.

    Attributes:
        success: Whether the handler completed its logical operation
        payload: The response body
        status_code: HTTP status to send with the payload
        from_cache: True when the payload was served from the cache
        cache_status: Set by the interceptor; None for results it never saw
    """

    success: bool
    payload: Any
    status_code: int = 200
    from_cache: bool = False
    cache_status: CacheStatus | None = None

    @classmethod
    def ok(cls, payload: Any, status_code: int = 200, from_cache: bool = False) -> "HandlerResult":
        return cls(success=True, payload=payload, status_code=status_code, from_cache=from_cache)

    @classmethod
    def fail(cls, payload: Any, status_code: int = 500) -> "HandlerResult":
        return cls(success=False, payload=payload, status_code=status_code)
