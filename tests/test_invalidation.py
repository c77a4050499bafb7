"""
Tests for resource invalidation and post-commit mutation hooks.
"""

import pytest

from content_cache.entities import HandlerResult, RequestDescriptor
from content_cache.exceptions import UnknownResourceError
from content_cache.repositories import InMemoryCacheRepository
from content_cache.services import InvalidationCoordinator, MutationHooks


async def seed(store, *keys):
    for key in keys:
        await store.set_with_expiry(key, b'{"success": true}', 3600)


def test_prefixes_include_declared_secondary_views(coordinator):
    assert coordinator.prefixes_for("blog") == [
        "GET:/api/blog",
        "GET:/api/blog/categories",
        "GET:/api/blog/tags",
    ]
    assert coordinator.prefixes_for("skills") == ["GET:/api/skills", "GET:/api/skills/categories"]
    assert coordinator.prefixes_for("profile") == ["GET:/api/profile"]
    assert coordinator.resources == ("projects", "blog", "skills", "profile")


@pytest.mark.asyncio
async def test_invalidate_blog_removes_every_blog_key(coordinator, store):
    await seed(
        store,
        "GET:/api/blog",
        "GET:/api/blog?page=2",
        "GET:/api/blog/my-first-post",
        "GET:/api/blog/categories",
        "GET:/api/blog/tags",
        "GET:/api/projects",
        "GET:/api/skills/categories",
    )

    deleted = await coordinator.invalidate_resource("blog")

    assert deleted == 5
    assert not [key for key in store.keys() if key.startswith("GET:/api/blog")]
    assert sorted(store.keys()) == ["GET:/api/projects", "GET:/api/skills/categories"]


@pytest.mark.asyncio
async def test_invalidation_is_idempotent(coordinator, store, metrics):
    await seed(store, "GET:/api/skills", "GET:/api/skills/categories")

    assert await coordinator.invalidate_resource("skills") == 2
    assert await coordinator.invalidate_resource("skills") == 0
    assert metrics.invalidations == 2
    assert metrics.invalidated_keys == 2


@pytest.mark.asyncio
async def test_unknown_resource_raises(coordinator):
    with pytest.raises(UnknownResourceError) as exc_info:
        await coordinator.invalidate_resource("comments")
    assert "comments" in str(exc_info.value)
    assert isinstance(exc_info.value, ValueError)


@pytest.mark.asyncio
async def test_invalidate_route_only_touches_that_route(coordinator, store):
    await seed(store, "GET:/api/profile", "GET:/api/projects")

    assert await coordinator.invalidate_route("profile") == 1
    assert store.keys() == ["GET:/api/projects"]


@pytest.mark.asyncio
async def test_unavailable_store_skips_invalidation(coordinator, store):
    await seed(store, "GET:/api/blog")
    store.available = False

    assert await coordinator.invalidate_resource("blog") == 0


def test_custom_secondary_views(store):
    coordinator = InvalidationCoordinator(store=store, secondary_views={"notes": ("notes/pinned",)})
    assert coordinator.prefixes_for("notes") == ["GET:/api/notes", "GET:/api/notes/pinned"]
    with pytest.raises(UnknownResourceError):
        coordinator.prefixes_for("blog")


class TestMutationHooks:
    """Test cases for post-commit invalidation hooks."""

    @pytest.fixture
    def hooks(self, coordinator):
        return MutationHooks(coordinator)

    @pytest.mark.asyncio
    async def test_successful_write_invalidates(self, hooks, store):
        await seed(store, "GET:/api/projects", "GET:/api/projects/portfolio-site")

        @hooks.invalidates("projects")
        async def update_project(slug: str) -> HandlerResult:
            return HandlerResult.ok({"success": True, "data": {"slug": slug}})

        result = await update_project("portfolio-site")

        assert result.payload["data"]["slug"] == "portfolio-site"
        assert store.keys() == []

    @pytest.mark.asyncio
    async def test_failed_write_keeps_cache(self, hooks, store):
        await seed(store, "GET:/api/projects")

        @hooks.invalidates("projects")
        async def delete_project() -> HandlerResult:
            return HandlerResult.fail({"success": False, "message": "Project not found"}, 404)

        await delete_project()

        assert store.keys() == ["GET:/api/projects"]

    @pytest.mark.asyncio
    async def test_raising_write_keeps_cache(self, hooks, store):
        await seed(store, "GET:/api/skills")

        @hooks.invalidates("skills")
        async def create_skill() -> HandlerResult:
            raise RuntimeError("database down")

        with pytest.raises(RuntimeError):
            await create_skill()

        assert store.keys() == ["GET:/api/skills"]

    def test_unknown_resource_rejected_at_decoration(self, hooks):
        with pytest.raises(UnknownResourceError):

            @hooks.invalidates("comments")
            async def create_comment() -> HandlerResult:
                return HandlerResult.ok({})

    def test_registration_tracks_bound_resources(self, hooks):
        @hooks.invalidates("blog")
        async def create_post() -> HandlerResult:
            return HandlerResult.ok({})

        assert create_post.__name__ == "create_post"
        assert hooks.registered()["blog"] == [create_post.__qualname__]
        assert hooks.unbound_resources() == ["projects", "skills", "profile"]

    @pytest.mark.asyncio
    async def test_notify(self, hooks, store):
        await seed(store, "GET:/api/profile")
        assert await hooks.notify("profile") == 1

    @pytest.mark.asyncio
    async def test_write_then_read_recomputes(self, hooks, interceptor):
        """POST /api/skills invalidates a cached GET /api/skills listing."""
        skills = [{"name": "Python"}]

        async def list_skills() -> HandlerResult:
            return HandlerResult.ok({"success": True, "data": list(skills)})

        @hooks.invalidates("skills")
        async def create_skill(name: str) -> HandlerResult:
            skills.append({"name": name})
            return HandlerResult.ok({"success": True, "data": {"name": name}}, status_code=201)

        listing = RequestDescriptor(method="GET", path="/api/skills")
        await interceptor.intercept(listing, 3600, list_skills)
        cached = await interceptor.intercept(listing, 3600, list_skills)
        assert cached.from_cache is True

        await create_skill("Rust")
        fresh = await interceptor.intercept(listing, 3600, list_skills)

        assert fresh.from_cache is False
        assert {"name": "Rust"} in fresh.payload["data"]

    @pytest.mark.asyncio
    async def test_write_succeeds_with_store_unavailable(self, hooks, store, interceptor):
        """Writes and reads return correct results while the store is down."""
        skills = [{"name": "Python"}]

        async def list_skills() -> HandlerResult:
            return HandlerResult.ok({"success": True, "data": list(skills)})

        @hooks.invalidates("skills")
        async def create_skill(name: str) -> HandlerResult:
            skills.append({"name": name})
            return HandlerResult.ok({"success": True, "data": {"name": name}}, status_code=201)

        store.available = False
        created = await create_skill("Go")
        listing = await interceptor.intercept(RequestDescriptor("GET", "/api/skills"), 3600, list_skills)

        assert created.status_code == 201
        assert created.payload["data"] == {"name": "Go"}
        assert {"name": "Go"} in listing.payload["data"]

    @pytest.mark.asyncio
    async def test_write_result_survives_failing_purge(self):
        class BrokenPurgeStore(InMemoryCacheRepository):
            async def delete_by_prefix(self, prefix):
                raise ConnectionError("connection reset")

        hooks = MutationHooks(InvalidationCoordinator(store=BrokenPurgeStore()))

        @hooks.invalidates("blog")
        async def publish_post(slug: str) -> HandlerResult:
            return HandlerResult.ok({"success": True, "data": {"slug": slug}}, status_code=201)

        result = await publish_post("caching")

        assert result.success is True
        assert result.status_code == 201
        assert result.payload["data"]["slug"] == "caching"
