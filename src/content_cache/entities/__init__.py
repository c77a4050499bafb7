"""Domain entities for internal representation.

These are pure frozen dataclasses passed between the framework adapter,
the interceptor and route handlers. They are NOT used for API contracts -
use DTOs from the dto package for that.
"""

from .request import RequestDescriptor
from .result import CacheStatus, HandlerResult

__all__ = ["CacheStatus", "HandlerResult", "RequestDescriptor"]
