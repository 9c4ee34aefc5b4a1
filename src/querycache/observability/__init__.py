"""Observability – structured logging and metrics."""

from querycache.observability.logging import configure_logging, get_logger
from querycache.observability.metrics import Metrics, NoopMetrics, QueryCacheMetrics

__all__ = [
    "Metrics",
    "NoopMetrics",
    "QueryCacheMetrics",
    "configure_logging",
    "get_logger",
]
