"""Application cache – CacheEntry and the process-wide CacheStore."""
from __future__ import annotations

import dataclasses
import threading
from collections.abc import Iterator
from enum import StrEnum
from typing import Any

from querycache.application.cache.tags import Tag, TagLike, TagProvider
from querycache.kernel.errors import BaseError, InvariantViolationError
from querycache.kernel.time import Clock, SystemClock

__all__ = [
    "CacheEntry",
    "CacheStore",
    "DataSource",
    "ErrorInfo",
    "QueryStatus",
]


class QueryStatus(StrEnum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class DataSource(StrEnum):
    """Where the data held by an entry came from."""

    REMOTE = "remote"
    FALLBACK = "fallback"


@dataclasses.dataclass(frozen=True)
class ErrorInfo:
    """Serialisable summary of the error stored on an entry."""

    code: str
    message: str
    detail: dict[str, Any] = dataclasses.field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: BaseException) -> ErrorInfo:
        if isinstance(exc, BaseError):
            return cls(code=exc.code, message=exc.message, detail=dict(exc.detail))
        return cls(code=type(exc).__name__, message=str(exc))


@dataclasses.dataclass(frozen=True)
class CacheEntry:
    """One cached query.

    ``status is SUCCESS`` holds exactly when ``has_data`` is set and
    ``error`` is ``None``; ``None`` is valid data, so presence is tracked by
    ``has_data``. ``subscriber_count`` is owned by the store and survives
    replacement.
    """

    key: str
    endpoint: str
    args: Any = dataclasses.field(default_factory=dict)
    provides: TagProvider = None
    status: QueryStatus = QueryStatus.IDLE
    data: Any = None
    has_data: bool = False
    error: ErrorInfo | None = None
    tags: frozenset[Tag] = frozenset()
    subscriber_count: int = 0
    last_accessed_at: float = 0.0
    stale: bool = False
    source: DataSource | None = None
    fulfilled_at: float | None = None

    def __post_init__(self) -> None:
        succeeded = self.has_data and self.error is None
        if (self.status is QueryStatus.SUCCESS) != succeeded:
            raise InvariantViolationError(
                f"Entry {self.key!r}: status {self.status} inconsistent with "
                f"has_data={self.has_data}, error={self.error!r}"
            )
        if self.subscriber_count < 0:
            raise InvariantViolationError(f"Entry {self.key!r}: negative subscriber count")

    @property
    def is_fresh(self) -> bool:
        return self.status is QueryStatus.SUCCESS and not self.stale

    def replace(self, **changes: Any) -> CacheEntry:
        return dataclasses.replace(self, **changes)


class CacheStore:
    """Holds one :class:`CacheEntry` per cache key.

    ``put`` replaces everything but ``subscriber_count``, which only
    ``adjust_subscribers`` changes. Each operation runs under one re-entrant
    lock so a multi-threaded host can share a store.
    """

    def __init__(self, clock: Clock | None = None) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._clock = clock or SystemClock()
        self._lock = threading.RLock()

    def get(self, key: str) -> CacheEntry | None:
        """Return the entry for *key*, refreshing its ``last_accessed_at``."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            entry = entry.replace(last_accessed_at=self._clock.timestamp())
            self._entries[key] = entry
            return entry

    def peek(self, key: str) -> CacheEntry | None:
        """Return the entry for *key* without counting it as an access."""
        with self._lock:
            return self._entries.get(key)

    def put(self, key: str, entry: CacheEntry) -> CacheEntry:
        with self._lock:
            previous = self._entries.get(key)
            stored = entry.replace(
                key=key,
                subscriber_count=previous.subscriber_count if previous else 0,
                last_accessed_at=self._clock.timestamp(),
            )
            self._entries[key] = stored
            return stored

    def delete(self, key: str) -> CacheEntry | None:
        with self._lock:
            return self._entries.pop(key, None)

    def adjust_subscribers(self, key: str, delta: int) -> CacheEntry:
        """Add *delta* to the subscriber count of an existing entry (floored at 0)."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                raise KeyError(key)
            entry = entry.replace(
                subscriber_count=max(0, entry.subscriber_count + delta),
                last_accessed_at=self._clock.timestamp(),
            )
            self._entries[key] = entry
            return entry

    def entries_by_tag(self, tag: TagLike) -> list[CacheEntry]:
        """Entries providing a tag matched by *tag* (id-less tags match the whole type)."""
        wanted = Tag.coerce(tag)
        with self._lock:
            return [
                entry
                for _, entry in sorted(self._entries.items())
                if any(wanted.matches(provided) for provided in entry.tags)
            ]

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __iter__(self) -> Iterator[CacheEntry]:
        with self._lock:
            return iter(list(self._entries.values()))
