"""Testing fakes – in-memory doubles for the cache's ports."""
from querycache.kernel.time import FrozenClock
from querycache.testing.fakes.clock import FakeClock
from querycache.testing.fakes.fetch import FakeRemoteFetch, FetchCall
from querycache.testing.fakes.metrics import FakeMetricsRegistry

__all__ = [
    "FakeClock",
    "FakeMetricsRegistry",
    "FakeRemoteFetch",
    "FetchCall",
    "FrozenClock",
]
