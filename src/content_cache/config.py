import os
from dataclasses import dataclass, field
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


def _split_origins(raw: str) -> tuple[str, ...]:
    return tuple(origin.strip() for origin in raw.split(",") if origin.strip())


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Redis
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    redis_password: str | None = os.getenv("REDIS_PASSWORD")
    redis_db: int = int(os.getenv("REDIS_DB", "0"))

    # Cache
    cache_backend: str = os.getenv("CACHE_BACKEND", "redis")
    cache_default_ttl: int = int(os.getenv("CACHE_DEFAULT_TTL", "3600"))  # 1 hour
    cache_aggregate_ttl: int = int(os.getenv("CACHE_AGGREGATE_TTL", "7200"))  # 2 hours
    cache_operation_timeout: float = float(os.getenv("CACHE_OPERATION_TIMEOUT", "1.0"))
    cache_connect_timeout: float = float(os.getenv("CACHE_CONNECT_TIMEOUT", "5.0"))
    cache_max_retries: int = int(os.getenv("CACHE_MAX_RETRIES", "10"))
    cache_max_failures: int = int(os.getenv("CACHE_MAX_FAILURES", "5"))
    cache_retry_after: float = float(os.getenv("CACHE_RETRY_AFTER", "30"))

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_reload: bool = os.getenv("API_RELOAD", "true").lower() == "true"
    cors_origins: tuple[str, ...] = field(
        default_factory=lambda: _split_origins(os.getenv("FRONTEND_ORIGIN", "http://localhost:3000"))
    )

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "info")
    log_json: bool = os.getenv("LOG_JSON", "false").lower() == "true"

    @property
    def uses_memory_backend(self) -> bool:
        """Check if the in-process store was requested instead of Redis."""
        return self.cache_backend.lower() == "memory"

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.cache_backend.lower() not in ("redis", "memory"):
            raise ValueError(f"CACHE_BACKEND must be 'redis' or 'memory', got {self.cache_backend!r}")

        if self.cache_default_ttl <= 0 or self.cache_aggregate_ttl <= 0:
            raise ValueError("CACHE_DEFAULT_TTL and CACHE_AGGREGATE_TTL must be positive")

        if min(self.cache_operation_timeout, self.cache_connect_timeout, self.cache_retry_after) <= 0:
            raise ValueError("Cache timeouts and CACHE_RETRY_AFTER must be positive")

        if self.cache_max_retries < 1 or self.cache_max_failures < 1:
            raise ValueError("CACHE_MAX_RETRIES and CACHE_MAX_FAILURES must be at least 1")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
