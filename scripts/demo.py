#!/usr/bin/env python3
"""
Demo script for the content cache.

Walks through cache-aside reads, bypass rules, TTL-scoped views and
resource invalidation. Uses Redis when it is reachable, otherwise falls
back to the in-process store.
"""

import asyncio
import time

from content_cache import (
    HandlerResult,
    InMemoryCacheRepository,
    InvalidationCoordinator,
    MutationHooks,
    RedisCacheRepository,
    RequestCacheInterceptor,
    RequestDescriptor,
    close_redis,
    init_redis,
    settings,
)
from content_cache.logging import configure_logging
from content_cache.protocols import CacheStore

POSTS = [
    {"slug": "hello-world", "title": "Hello World", "category": "news", "tags": ["intro"]},
    {"slug": "async-python", "title": "Async Python", "category": "engineering", "tags": ["python"]},
]


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


async def list_posts() -> HandlerResult:
    await asyncio.sleep(0.05)  # simulated database round trip
    return HandlerResult.ok({"success": True, "count": len(POSTS), "data": list(POSTS)})


async def list_categories() -> HandlerResult:
    await asyncio.sleep(0.05)
    return HandlerResult.ok({"success": True, "data": sorted({p["category"] for p in POSTS})})


async def timed(interceptor: RequestCacheInterceptor, request: RequestDescriptor, ttl: int, handler) -> None:
    start = time.perf_counter()
    result = await interceptor.intercept(request, ttl, handler)
    await interceptor.flush()
    duration = (time.perf_counter() - start) * 1000
    label = result.cache_status.value.ljust(6)
    print(f"  {label} {request.method} {request.path} ({duration:.1f}ms)")


async def demo_read_through(interceptor: RequestCacheInterceptor) -> None:
    """Demonstrate miss, hit and query-order independence."""
    print_section("Read-through caching")

    await timed(interceptor, RequestDescriptor("GET", "/api/blog"), settings.cache_default_ttl, list_posts)
    await timed(interceptor, RequestDescriptor("GET", "/api/blog"), settings.cache_default_ttl, list_posts)

    print("\n  Same query, different parameter order:")
    first = RequestDescriptor("GET", "/api/blog", (("page", "1"), ("category", "news")))
    second = RequestDescriptor("GET", "/api/blog", (("category", "news"), ("page", "1")))
    await timed(interceptor, first, settings.cache_default_ttl, list_posts)
    await timed(interceptor, second, settings.cache_default_ttl, list_posts)

    print("\n  Aggregate view with a longer TTL:")
    categories = RequestDescriptor("GET", "/api/blog/categories")
    await timed(interceptor, categories, settings.cache_aggregate_ttl, list_categories)
    await timed(interceptor, categories, settings.cache_aggregate_ttl, list_categories)


async def demo_bypass(interceptor: RequestCacheInterceptor) -> None:
    """Demonstrate requests that never touch the cache."""
    print_section("Bypass rules")

    admin = RequestDescriptor("GET", "/api/blog", identity="admin")
    print(f"  authenticated GET bypasses: {interceptor.should_bypass(admin)}")
    write = RequestDescriptor("POST", "/api/blog")
    print(f"  POST bypasses: {interceptor.should_bypass(write)}")
    admin_path = RequestDescriptor("GET", "/api/blog/admin/all")
    print(f"  /admin path bypasses: {interceptor.should_bypass(admin_path)}")


async def demo_invalidation(interceptor: RequestCacheInterceptor, coordinator: InvalidationCoordinator) -> None:
    """Demonstrate post-commit invalidation of a resource."""
    print_section("Invalidation on write")

    hooks = MutationHooks(coordinator)

    @hooks.invalidates("blog")
    async def create_post(post: dict) -> HandlerResult:
        POSTS.append(post)
        return HandlerResult.ok({"success": True, "data": post}, status_code=201)

    print(f"  prefixes purged for 'blog': {coordinator.prefixes_for('blog')}")
    await create_post({"slug": "caching", "title": "Caching", "category": "engineering", "tags": ["redis"]})
    print("  created a post; the next reads recompute:")

    await timed(interceptor, RequestDescriptor("GET", "/api/blog"), settings.cache_default_ttl, list_posts)
    await timed(
        interceptor,
        RequestDescriptor("GET", "/api/blog/categories"),
        settings.cache_aggregate_ttl,
        list_categories,
    )


async def build_store() -> CacheStore:
    if settings.uses_memory_backend:
        return InMemoryCacheRepository()
    if await init_redis() is None:
        print("Redis unreachable, using the in-process store")
        return InMemoryCacheRepository()
    return RedisCacheRepository.create()


async def main() -> None:
    """Run all demos."""
    configure_logging(log_level="warning")
    print("\n🚀 Content Cache Demo")
    print("=" * 70)

    store = await build_store()
    interceptor = RequestCacheInterceptor(store=store)
    coordinator = InvalidationCoordinator(store=store, metrics=interceptor.metrics)

    try:
        await coordinator.invalidate_resource("blog")
        await demo_read_through(interceptor)
        await demo_bypass(interceptor)
        await demo_invalidation(interceptor, coordinator)

        print_section("Metrics")
        for name, value in interceptor.metrics.to_dict().items():
            print(f"  {name}: {value}")
    finally:
        await close_redis()


if __name__ == "__main__":
    asyncio.run(main())
