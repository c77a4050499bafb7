"""Shared fixtures for the cache layer tests."""

import pytest

from content_cache.entities import HandlerResult
from content_cache.models import CacheMetrics
from content_cache.repositories import InMemoryCacheRepository
from content_cache.services import InvalidationCoordinator, RequestCacheInterceptor


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingHandler:
    """Async handler stub that records how often it ran."""

    def __init__(self, result: HandlerResult):
        self.result = result
        self.calls = 0

    async def __call__(self) -> HandlerResult:
        self.calls += 1
        return self.result


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return InMemoryCacheRepository(clock=clock)


@pytest.fixture
def metrics():
    return CacheMetrics()


@pytest.fixture
def interceptor(store, metrics):
    """Interceptor that stores results before returning."""
    return RequestCacheInterceptor(store=store, metrics=metrics, write_behind=False)


@pytest.fixture
def coordinator(store, metrics):
    return InvalidationCoordinator(store=store, metrics=metrics)


@pytest.fixture
def make_handler():
    """Build a CountingHandler returning the given result."""
    return CountingHandler
