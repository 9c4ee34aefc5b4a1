"""Application – the query cache: keys, tags, store and query execution.

``querycache.application.query`` is imported explicitly; it depends on the
resilience layer, which itself builds on ``querycache.application.cache``.
"""

from querycache.application.cache import (
    CacheEntry,
    CacheKey,
    CacheStore,
    DataSource,
    ErrorInfo,
    KeySerializer,
    QueryStatus,
    Tag,
    TagIndex,
    serialize_key,
)

__all__ = [
    "CacheEntry",
    "CacheKey",
    "CacheStore",
    "DataSource",
    "ErrorInfo",
    "KeySerializer",
    "QueryStatus",
    "Tag",
    "TagIndex",
    "serialize_key",
]
