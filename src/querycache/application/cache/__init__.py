"""Application cache – keys, tags, tag index and the cache store."""
from querycache.application.cache.keys import CacheKey, KeySerializer, serialize_key
from querycache.application.cache.store import (
    CacheEntry,
    CacheStore,
    DataSource,
    ErrorInfo,
    QueryStatus,
)
from querycache.application.cache.tags import Tag, TagIndex, TagLike, TagProvider, resolve_tags

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
    "TagLike",
    "TagProvider",
    "resolve_tags",
    "serialize_key",
]
