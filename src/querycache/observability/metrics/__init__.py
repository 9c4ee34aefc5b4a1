"""Observability – metric ports, no-op backend and cache instruments."""
from querycache.observability.metrics.cache import QueryCacheMetrics
from querycache.observability.metrics.noop import NoopMetrics
from querycache.observability.metrics.ports import Counter, Histogram, Metrics

__all__ = ["Counter", "Histogram", "Metrics", "NoopMetrics", "QueryCacheMetrics"]
