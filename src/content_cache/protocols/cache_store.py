"""Cache storage protocol.

Defines the interface for the key-value backend sitting in front of the
database. Every operation is best-effort: implementations report failures
through their return value and logs, never by raising.

Implementations:
- Redis (default)
- In-process dictionary (local development and tests)
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class CacheStore(Protocol):
    """Protocol for cache storage backends.

    Any type that implements these methods satisfies the protocol, no
    explicit inheritance needed.

    Example:
        ```python
        from content_cache.protocols import CacheStore

        store: CacheStore = RedisCacheRepository.create()
        store: CacheStore = InMemoryCacheRepository()
        ```
    """

    def is_available(self) -> bool:
        """Check whether the backend can currently serve requests.

        Returns:
            True if usable, False otherwise
        """
        ...

    async def get(self, key: str) -> bytes | None:
        """Fetch a stored value.

        Args:
            key: The cache key

        Returns:
            The stored bytes, or None if absent, expired or unreachable
        """
        ...

    async def set_with_expiry(self, key: str, value: bytes, ttl_seconds: int) -> bool:
        """Store a value, replacing any existing entry.

        Args:
            key: The cache key
            value: Serialized payload
            ttl_seconds: Time-to-live in seconds

        Returns:
            True if stored, False otherwise
        """
        ...

    async def delete_by_prefix(self, prefix: str) -> int:
        """Delete every entry whose key starts with ``prefix``.

        Args:
            prefix: Literal key prefix

        Returns:
            Number of entries deleted (0 when nothing matched)
        """
        ...

    async def ping(self) -> bool:
        """Probe the backend.

        Returns:
            True if healthy, False otherwise
        """
        ...

    def get_stats(self) -> dict:
        """Get backend statistics.

        Returns:
            Dictionary with stats (implementation-specific)
        """
        ...
