"""Observability – instruments recorded by the query cache."""
from __future__ import annotations

from querycache.observability.metrics.noop import NoopMetrics
from querycache.observability.metrics.ports import Metrics


class QueryCacheMetrics:
    """Creates every query-cache instrument once from a :class:`Metrics` port.

    Counter labels carry the endpoint name; keys are never used as labels
    since their cardinality is unbounded.
    """

    def __init__(self, metrics: Metrics | None = None) -> None:
        backend = metrics or NoopMetrics()
        self.hits = backend.counter("query_cache_hits", "Queries answered from a fresh cache entry")
        self.misses = backend.counter("query_cache_misses", "Queries that started a fetch")
        self.dedup_joins = backend.counter(
            "query_cache_dedup_joins", "Queries that joined an in-flight request"
        )
        self.fallbacks = backend.counter(
            "query_cache_fallbacks", "Primary fetch failures masked by synthesized data"
        )
        self.errors = backend.counter("query_cache_errors", "Queries stored with status error")
        self.invalidations = backend.counter(
            "query_cache_invalidations", "Cache entries marked stale by tag invalidation"
        )
        self.evictions = backend.counter("query_cache_evictions", "Unused cache entries removed")
        self.mutations = backend.counter("mutations_total", "Mutations executed")
        self.fetch_duration = backend.histogram(
            "query_fetch_duration_ms", "Primary fetch + fallback duration", unit="ms"
        )


__all__ = ["QueryCacheMetrics"]
