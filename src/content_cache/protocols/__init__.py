"""Protocol interfaces for swappable implementations.

Protocols enable:
- Swapping the store (Redis -> in-process dictionary) without touching services
- Unit testing with fake implementations
"""

from .cache_store import CacheStore

__all__ = [
    "CacheStore",
]
