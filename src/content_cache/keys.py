"""Cache key derivation.

Keys are plain strings of the form::

    METHOD:/api/<resource>[/<suffix>][?<sorted, percent-encoded query>]

Operators inspect and purge the store by prefix, so this layout is part of the
operational contract. Every function here is pure.
"""

import re
from collections.abc import Iterable, Mapping
from urllib.parse import quote

API_ROOT = "/api"

_REPEATED_SLASHES = re.compile(r"/{2,}")

QueryInput = Mapping[str, object] | Iterable[tuple[str, object]] | None


def normalize_path(path: str) -> str:
    """Collapse repeated slashes and drop a trailing slash.

    Args:
        path: Request path, without the query string

    Returns:
        The normalized path ("/" stays "/")
    """
    path = _REPEATED_SLASHES.sub("/", path or "/")
    if not path.startswith("/"):
        path = f"/{path}"
    if len(path) > 1:
        path = path.rstrip("/")
    return path


def _query_pairs(query: QueryInput) -> list[tuple[str, str]]:
    if not query:
        return []
    items = query.items() if isinstance(query, Mapping) else query
    pairs = []
    for name, value in items:
        if isinstance(value, (list, tuple)):
            pairs.extend((str(name), str(v)) for v in value)
        else:
            pairs.append((str(name), str(value)))
    return pairs


def canonical_query(query: QueryInput) -> str:
    """Serialize query parameters as sorted ``name=value`` pairs joined by ``&``.

    Repeated names are ordered by value so that parameter order never
    changes the result. Names and values arrive decoded and are
    percent-encoded again, so a value containing ``&`` or ``=`` cannot
    collide with a different set of parameters.
    """
    return "&".join(
        f"{quote(name, safe='')}={quote(value, safe='')}" for name, value in sorted(_query_pairs(query))
    )


def build_cache_key(method: str, path: str, query: QueryInput = None) -> str:
    """Build the cache key for a read request.

    Args:
        method: HTTP method
        path: Request path
        query: Query parameters as a mapping or a sequence of pairs

    Returns:
        The cache key string
    """
    base = f"{method.upper()}:{normalize_path(path)}"
    query_string = canonical_query(query)
    return f"{base}?{query_string}" if query_string else base


def route_prefix(route: str, method: str = "GET") -> str:
    """Key prefix shared by every cached read under ``/api/<route>``."""
    return f"{method.upper()}:{API_ROOT}/{route.strip('/')}"
