"""Testing fixtures – fake_fetch, fake_metrics, query_client."""
from __future__ import annotations

from collections.abc import Iterator

import pytest

from querycache.application.query import QueryClient, reset_query_client
from querycache.kernel.time import FrozenClock
from querycache.testing.fakes import FakeMetricsRegistry, FakeRemoteFetch


@pytest.fixture
def fake_fetch() -> FakeRemoteFetch:
    return FakeRemoteFetch()


@pytest.fixture
def fake_metrics() -> FakeMetricsRegistry:
    return FakeMetricsRegistry()


@pytest.fixture
def query_client(
    fake_fetch: FakeRemoteFetch,
    fake_clock: FrozenClock,
    fake_metrics: FakeMetricsRegistry,
) -> Iterator[QueryClient]:
    """A client wired to the fake fetch, clock and metrics; process-wide state is reset after."""
    client = QueryClient(fake_fetch, clock=fake_clock, metrics=fake_metrics)
    yield client
    client.reset()
    reset_query_client()


__all__ = ["fake_fetch", "fake_metrics", "query_client"]
