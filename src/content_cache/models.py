from dataclasses import dataclass


@dataclass
class CacheMetrics:
    """Track outcomes of cache operations in this process."""

    total_reads: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    bypasses: int = 0
    uncacheable: int = 0
    store_errors: int = 0
    invalidations: int = 0
    invalidated_keys: int = 0
    total_lookup_time_ms: float = 0.0

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate over reads that consulted the cache."""
        lookups = self.cache_hits + self.cache_misses
        if lookups == 0:
            return 0.0
        return self.cache_hits / lookups

    @property
    def avg_lookup_time_ms(self) -> float:
        """Calculate average lookup time."""
        lookups = self.cache_hits + self.cache_misses
        if lookups == 0:
            return 0.0
        return self.total_lookup_time_ms / lookups

    def record_hit(self, lookup_time_ms: float) -> None:
        """Record a cache hit."""
        self.total_reads += 1
        self.cache_hits += 1
        self.total_lookup_time_ms += lookup_time_ms

    def record_miss(self, lookup_time_ms: float) -> None:
        """Record a cache miss."""
        self.total_reads += 1
        self.cache_misses += 1
        self.total_lookup_time_ms += lookup_time_ms

    def record_bypass(self) -> None:
        """Record a request served without consulting the cache."""
        self.total_reads += 1
        self.bypasses += 1

    def record_uncacheable(self) -> None:
        """Record a miss whose result was not stored (failure or unserializable)."""
        self.uncacheable += 1

    def record_store_error(self) -> None:
        """Record a failed write to the store."""
        self.store_errors += 1

    def record_invalidation(self, deleted: int) -> None:
        """Record a resource invalidation."""
        self.invalidations += 1
        self.invalidated_keys += deleted

    def to_dict(self) -> dict[str, float | int]:
        """Convert metrics to dictionary."""
        return {
            "total_reads": self.total_reads,
            "cache_hits": self.cache_hits,
            "cache_misses": self.cache_misses,
            "bypasses": self.bypasses,
            "uncacheable": self.uncacheable,
            "store_errors": self.store_errors,
            "invalidations": self.invalidations,
            "invalidated_keys": self.invalidated_keys,
            "hit_rate": self.hit_rate,
            "avg_lookup_time_ms": self.avg_lookup_time_ms,
        }

    def reset(self) -> None:
        """Zero every counter."""
        for name, default in CacheMetrics().__dict__.items():
            setattr(self, name, default)
