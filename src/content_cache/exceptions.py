"""Exceptions raised by the cache layer.

Store failures are never raised; these cover misuse at the boundary only.
"""


class CacheLayerError(Exception):
    """Base exception for the cache layer."""


class UnknownResourceError(CacheLayerError, ValueError):
    """Raised when a resource name has no invalidation mapping."""

    def __init__(self, resource: str, known: tuple[str, ...] = ()) -> None:
        self.resource = resource
        self.known = known
        message = f"Unknown cache resource: {resource!r}"
        if known:
            message += f" (expected one of: {', '.join(known)})"
        super().__init__(message)
