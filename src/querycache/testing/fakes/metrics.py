"""Testing fakes – FakeMetricsRegistry."""
from __future__ import annotations

from querycache.observability.metrics.ports import Counter, Histogram, Metrics


class _FakeCounter(Counter):
    """In-memory counter that records all add() calls."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.calls: list[tuple[float, dict[str, str] | None]] = []
        self.total: float = 0.0

    def add(self, value: float = 1.0, labels: dict[str, str] | None = None) -> None:
        self.calls.append((value, labels))
        self.total += value

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def total_for(self, **labels: str) -> float:
        """Sum of the values recorded with (at least) the given labels."""
        return sum(
            value
            for value, recorded in self.calls
            if all((recorded or {}).get(k) == v for k, v in labels.items())
        )


class _FakeHistogram(Histogram):
    """In-memory histogram that records all record() calls."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.calls: list[tuple[float, dict[str, str] | None]] = []

    def record(self, value: float, labels: dict[str, str] | None = None) -> None:
        self.calls.append((value, labels))

    @property
    def call_count(self) -> int:
        return len(self.calls)

    @property
    def values(self) -> list[float]:
        return [v for v, _ in self.calls]


class FakeMetricsRegistry(Metrics):
    """In-memory :class:`Metrics` double that records all instrument calls.

    Usage::

        metrics = FakeMetricsRegistry()
        client = QueryClient(fetch, metrics=metrics)
        ...
        metrics.assert_counter_total("query_cache_fallbacks", 1)
    """

    def __init__(self) -> None:
        self._counters: dict[str, _FakeCounter] = {}
        self._histograms: dict[str, _FakeHistogram] = {}

    # ------------------------------------------------------------------
    # Metrics protocol
    # ------------------------------------------------------------------

    def counter(self, name: str, description: str = "", unit: str = "") -> _FakeCounter:
        if name not in self._counters:
            self._counters[name] = _FakeCounter(name)
        return self._counters[name]

    def histogram(self, name: str, description: str = "", unit: str = "ms") -> _FakeHistogram:
        if name not in self._histograms:
            self._histograms[name] = _FakeHistogram(name)
        return self._histograms[name]

    # ------------------------------------------------------------------
    # Assertion helpers
    # ------------------------------------------------------------------

    def total(self, name: str) -> float:
        counter = self._counters.get(name)
        return counter.total if counter else 0.0

    def assert_counter_total(self, name: str, total: float) -> None:
        """Assert the cumulative total for *name* counter equals *total*."""
        counter = self._counters.get(name)
        assert counter is not None, f"Counter '{name}' was never created"
        assert counter.total == total, (
            f"Counter '{name}' total is {counter.total}, expected {total}"
        )

    def reset(self) -> None:
        """Forget recorded values; instruments already handed out keep working."""
        for counter in self._counters.values():
            counter.calls.clear()
            counter.total = 0.0
        for histogram in self._histograms.values():
            histogram.calls.clear()


__all__ = ["FakeMetricsRegistry"]
