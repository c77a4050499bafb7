"""
Tests for the request cache interceptor.
"""

import asyncio
import json

import pytest

from content_cache.entities import CacheStatus, HandlerResult, RequestDescriptor
from content_cache.repositories import InMemoryCacheRepository
from content_cache.services import RequestCacheInterceptor, cache_key

SKILLS = [{"name": "Python", "category": "backend"}]


def get(path: str, query=(), identity=None) -> RequestDescriptor:
    return RequestDescriptor(method="GET", path=path, query=tuple(query), identity=identity)


@pytest.mark.asyncio
async def test_miss_then_hit_calls_handler_once(interceptor, store, make_handler, metrics):
    """First read runs the handler and stores; the next read is served from cache."""
    handler = make_handler(HandlerResult.ok({"success": True, "data": SKILLS}))
    request = get("/api/skills")

    first = await interceptor.intercept(request, 3600, handler)
    second = await interceptor.intercept(request, 3600, handler)

    assert handler.calls == 1
    assert first.payload == second.payload == {"success": True, "data": SKILLS}
    assert first.from_cache is False
    assert second.from_cache is True
    assert json.loads(await store.get("GET:/api/skills")) == {"success": True, "data": SKILLS}
    assert metrics.cache_hits == 1
    assert metrics.cache_misses == 1


@pytest.mark.asyncio
async def test_reordered_query_hits_same_entry(interceptor, make_handler):
    handler = make_handler(HandlerResult.ok({"success": True, "data": []}))

    await interceptor.intercept(get("/api/projects", [("featured", "true"), ("page", "1")]), 3600, handler)
    result = await interceptor.intercept(get("/api/projects", [("page", "1"), ("featured", "true")]), 3600, handler)

    assert handler.calls == 1
    assert result.from_cache is True


@pytest.mark.asyncio
async def test_entry_expires_after_route_ttl(interceptor, clock, make_handler):
    handler = make_handler(HandlerResult.ok({"success": True}))
    request = get("/api/blog/categories")

    await interceptor.intercept(request, 7200, handler)
    clock.advance(7199)
    await interceptor.intercept(request, 7200, handler)
    assert handler.calls == 1

    clock.advance(2)
    await interceptor.intercept(request, 7200, handler)
    assert handler.calls == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["POST", "PUT", "PATCH", "DELETE", "HEAD"])
async def test_non_get_methods_bypass(interceptor, store, make_handler, method):
    handler = make_handler(HandlerResult.ok({"success": True}))
    request = RequestDescriptor(method=method, path="/api/skills")

    await interceptor.intercept(request, 3600, handler)
    await interceptor.intercept(request, 3600, handler)

    assert handler.calls == 2
    assert store.keys() == []


@pytest.mark.asyncio
async def test_authenticated_request_bypasses_even_when_public_entry_exists(interceptor, store, make_handler):
    """Admin views never read or write the public entry for the same path."""
    public = make_handler(HandlerResult.ok({"success": True, "data": "public"}))
    admin = make_handler(HandlerResult.ok({"success": True, "data": "admin"}))

    await interceptor.intercept(get("/api/blog"), 3600, public)
    result = await interceptor.intercept(get("/api/blog", identity="user-1"), 3600, admin)

    assert result.payload["data"] == "admin"
    assert admin.calls == 1
    assert json.loads(await store.get("GET:/api/blog"))["data"] == "public"


@pytest.mark.asyncio
async def test_admin_path_bypasses(interceptor, store, make_handler):
    handler = make_handler(HandlerResult.ok({"success": True}))

    await interceptor.intercept(get("/api/blog/admin/all"), 3600, handler)
    await interceptor.intercept(get("/api/blog/admin/all"), 3600, handler)

    assert handler.calls == 2
    assert store.keys() == []


@pytest.mark.asyncio
async def test_failed_result_is_not_cached(interceptor, store, make_handler, metrics):
    handler = make_handler(HandlerResult.fail({"success": False, "message": "Blog post not found"}, 404))
    request = get("/api/blog/missing")

    first = await interceptor.intercept(request, 3600, handler)
    await interceptor.intercept(request, 3600, handler)

    assert first.status_code == 404
    assert handler.calls == 2
    assert store.keys() == []
    assert metrics.uncacheable == 2


@pytest.mark.asyncio
async def test_unserializable_payload_is_returned_but_not_cached(interceptor, store, make_handler):
    payload = {"success": True, "data": {1, 2, 3}}
    handler = make_handler(HandlerResult.ok(payload))

    result = await interceptor.intercept(get("/api/projects"), 3600, handler)

    assert result.payload is payload
    assert store.keys() == []


@pytest.mark.asyncio
async def test_unavailable_store_passes_through(interceptor, store, make_handler, metrics):
    store.available = False
    handler = make_handler(HandlerResult.ok({"success": True, "data": SKILLS}))

    results = [await interceptor.intercept(get("/api/skills"), 3600, handler) for _ in range(3)]

    assert handler.calls == 3
    assert all(r.payload == {"success": True, "data": SKILLS} for r in results)
    assert metrics.bypasses == 3


@pytest.mark.asyncio
async def test_corrupt_entry_is_treated_as_miss(interceptor, store, make_handler):
    await store.set_with_expiry("GET:/api/profile", b"{not json", 60)
    handler = make_handler(HandlerResult.ok({"success": True, "data": {"name": "Ada"}}))

    result = await interceptor.intercept(get("/api/profile"), 3600, handler)

    assert handler.calls == 1
    assert result.from_cache is False
    assert json.loads(await store.get("GET:/api/profile"))["data"] == {"name": "Ada"}


class FailingStore:
    """Store that is reachable but fails every operation."""

    def is_available(self):
        return True

    async def get(self, key):
        return None

    async def set_with_expiry(self, key, value, ttl_seconds):
        return False

    async def delete_by_prefix(self, prefix):
        return 0

    async def ping(self):
        return False

    def get_stats(self):
        return {"backend": "failing"}


@pytest.mark.asyncio
async def test_set_failure_does_not_affect_response(make_handler, metrics):
    interceptor = RequestCacheInterceptor(store=FailingStore(), metrics=metrics)
    handler = make_handler(HandlerResult.ok({"success": True}))

    result = await interceptor.intercept(get("/api/skills"), 3600, handler)
    await interceptor.flush()

    assert result.payload == {"success": True}
    assert metrics.store_errors == 1


@pytest.mark.asyncio
async def test_concurrent_misses_leave_last_writer(interceptor, store):
    """Two concurrent misses both run; the store ends with one consistent entry."""
    calls = []

    async def slow_handler(tag):
        calls.append(tag)
        await asyncio.sleep(0)
        return HandlerResult.ok({"success": True, "data": tag})

    request = get("/api/projects", [("featured", "true")])
    await asyncio.gather(
        interceptor.intercept(request, 3600, lambda: slow_handler("a")),
        interceptor.intercept(request, 3600, lambda: slow_handler("b")),
    )

    assert sorted(calls) == ["a", "b"]
    assert store.keys() == [cache_key(request)]
    assert json.loads(await store.get(cache_key(request)))["data"] in ("a", "b")


@pytest.mark.asyncio
async def test_result_reports_cache_status(interceptor, store, make_handler):
    handler = make_handler(HandlerResult.ok({"success": True}))

    miss = await interceptor.intercept(get("/api/skills"), 3600, handler)
    hit = await interceptor.intercept(get("/api/skills"), 3600, handler)
    bypass = await interceptor.intercept(get("/api/skills", identity="user-1"), 3600, handler)
    store.available = False
    unavailable = await interceptor.intercept(get("/api/skills"), 3600, handler)

    assert miss.cache_status is CacheStatus.MISS
    assert hit.cache_status is CacheStatus.HIT
    assert bypass.cache_status is CacheStatus.BYPASS
    assert unavailable.cache_status is CacheStatus.BYPASS


@pytest.mark.asyncio
async def test_encoded_query_value_does_not_serve_another_request(interceptor, make_handler):
    """A value carrying ``&`` and ``=`` gets its own entry."""
    smuggled = make_handler(HandlerResult.ok({"success": True, "data": "evil"}))
    honest = make_handler(HandlerResult.ok({"success": True, "data": "page 2 tagged x"}))

    await interceptor.intercept(get("/api/blog", [("page", "2&tag=x")]), 3600, smuggled)
    result = await interceptor.intercept(get("/api/blog", [("page", "2"), ("tag", "x")]), 3600, honest)

    assert honest.calls == 1
    assert result.from_cache is False
    assert result.payload["data"] == "page 2 tagged x"


class GatedStore(InMemoryCacheRepository):
    """In-memory store whose writes wait until the gate opens."""

    def __init__(self):
        super().__init__()
        self.gate = asyncio.Event()

    async def set_with_expiry(self, key, value, ttl_seconds):
        await self.gate.wait()
        return await super().set_with_expiry(key, value, ttl_seconds)


@pytest.mark.asyncio
async def test_miss_returns_before_the_store_write(make_handler):
    store = GatedStore()
    interceptor = RequestCacheInterceptor(store=store)
    handler = make_handler(HandlerResult.ok({"success": True, "data": SKILLS}))

    result = await asyncio.wait_for(interceptor.intercept(get("/api/skills"), 3600, handler), timeout=1)

    assert result.payload == {"success": True, "data": SKILLS}
    assert interceptor.pending_writes == 1
    assert store.keys() == []

    store.gate.set()
    await interceptor.flush()

    assert interceptor.pending_writes == 0
    assert store.keys() == ["GET:/api/skills"]
    hit = await interceptor.intercept(get("/api/skills"), 3600, handler)
    assert hit.from_cache is True
    assert handler.calls == 1


class RaisingStore(FailingStore):
    async def set_with_expiry(self, key, value, ttl_seconds):
        raise ConnectionError("store went away")


@pytest.mark.asyncio
async def test_background_write_error_is_recorded_not_raised(make_handler, metrics):
    interceptor = RequestCacheInterceptor(store=RaisingStore(), metrics=metrics)
    handler = make_handler(HandlerResult.ok({"success": True}))

    result = await interceptor.intercept(get("/api/skills"), 3600, handler)
    await interceptor.flush()

    assert result.payload == {"success": True}
    assert metrics.store_errors == 1
