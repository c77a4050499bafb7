"""Request descriptor domain entity."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class RequestDescriptor:
    """Framework-independent view of an inbound request.

    Attributes:
        method: HTTP method, e.g. "GET"
        path: Request path without the query string
        query: Query parameters as (name, value) pairs, in arrival order
        identity: Caller identity set by authentication, None when anonymous
    """

    method: str
    path: str
    query: tuple[tuple[str, str], ...] = field(default_factory=tuple)
    identity: str | None = None

    @property
    def is_read(self) -> bool:
        """Only GET is served from the cache."""
        return self.method.upper() == "GET"

    @property
    def is_admin(self) -> bool:
        """Authenticated callers and /admin paths always see fresh data."""
        return self.identity is not None or "/admin" in self.path
