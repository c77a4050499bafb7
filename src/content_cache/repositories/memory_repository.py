"""In-process implementation of CacheStore.

Used for local development without Redis (``CACHE_BACKEND=memory``) and as a
test double. Entries are not shared between processes.
"""

import time
from collections.abc import Callable


class InMemoryCacheRepository:
    """Dictionary-backed store with monotonic expiry.

    Expired entries are dropped lazily when read or scanned.
    """

    def __init__(self, clock: Callable[[], float] | None = None) -> None:
        """Initialize the in-memory repository.

        Args:
            clock: Returns the current time in seconds. Defaults to
                ``time.monotonic``; tests inject a fake clock.
        """
        self._clock = clock or time.monotonic
        self._entries: dict[str, tuple[bytes, float]] = {}
        self.available = True

    def is_available(self) -> bool:
        return self.available

    def _live(self, key: str) -> bytes | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    async def get(self, key: str) -> bytes | None:
        if not self.available:
            return None
        return self._live(key)

    async def set_with_expiry(self, key: str, value: bytes, ttl_seconds: int) -> bool:
        if not self.available:
            return False
        self._entries[key] = (value, self._clock() + ttl_seconds)
        return True

    async def delete_by_prefix(self, prefix: str) -> int:
        if not self.available:
            return 0
        matching = [key for key in list(self._entries) if key.startswith(prefix) and self._live(key) is not None]
        for key in matching:
            del self._entries[key]
        return len(matching)

    async def ping(self) -> bool:
        return self.available

    def keys(self) -> list[str]:
        """Return the keys of all live entries."""
        return [key for key in list(self._entries) if self._live(key) is not None]

    def get_stats(self) -> dict:
        return {
            "backend": "memory",
            "available": self.available,
            "total_entries": len(self.keys()),
        }
