"""Handler layer for HTTP endpoints.

Handlers depend on services (cache policy), not directly on repositories,
except for health and stats which report on the store itself.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Cache policy) -> (Data Access)
"""

from .cache_handler import CacheHandler

__all__ = [
    "CacheHandler",
]
