"""Query – subscription tracking and retention-based eviction."""
from __future__ import annotations

import asyncio
import dataclasses
import uuid
from typing import Any

from querycache.application.cache.keys import KeySerializer
from querycache.application.cache.store import CacheEntry, CacheStore, QueryStatus
from querycache.application.cache.tags import TagIndex, TagProvider
from querycache.application.query.executor import QueryExecutor
from querycache.application.query.inflight import InFlightRegistry
from querycache.config.settings import DEFAULT_RETENTION_SECONDS
from querycache.kernel.time import Clock, SystemClock
from querycache.observability.logging import get_logger
from querycache.observability.metrics import QueryCacheMetrics

__all__ = ["DEFAULT_RETENTION_SECONDS", "SubscriptionHandle", "SubscriptionManager"]


@dataclasses.dataclass(eq=False)
class SubscriptionHandle:
    key: str
    endpoint: str
    consumer_id: str
    active: bool = True


class SubscriptionManager:
    """Counts consumers per cache key and evicts entries nobody observes.

    When the last consumer of a key unsubscribes, eviction is scheduled
    ``retention_seconds`` later on the running loop and cancelled if a new
    subscription arrives first. :meth:`sweep` evicts by ``last_accessed_at``
    for hosts that unsubscribe outside an event loop.
    """

    def __init__(
        self,
        store: CacheStore,
        tag_index: TagIndex,
        inflight: InFlightRegistry,
        executor: QueryExecutor,
        *,
        retention_seconds: float = DEFAULT_RETENTION_SECONDS,
        clock: Clock | None = None,
        metrics: QueryCacheMetrics | None = None,
    ) -> None:
        if retention_seconds < 0:
            raise ValueError("retention_seconds must be >= 0")
        self._store = store
        self._tag_index = tag_index
        self._inflight = inflight
        self._executor = executor
        self._retention = retention_seconds
        self._clock = clock or SystemClock()
        self._metrics = metrics or QueryCacheMetrics()
        self._log = get_logger(__name__)
        self._timers: dict[str, asyncio.TimerHandle] = {}
        self._deferred: set[str] = set()

    @property
    def retention_seconds(self) -> float:
        return self._retention

    def subscribe(
        self,
        endpoint: str,
        args: Any = None,
        provides: TagProvider = None,
        *,
        consumer_id: str | None = None,
    ) -> SubscriptionHandle:
        """Register a consumer; fetches unless the entry is fresh or loading.

        The fetch runs as a background task on the running loop. Outside an
        event loop it is deferred until :meth:`resume` (called by
        ``QueryObserver.wait``) or an explicit ``execute``.
        """
        normalized = KeySerializer.normalize(args)
        key = KeySerializer.key(endpoint, normalized)

        entry = self._store.peek(key)
        if entry is None:
            entry = self._store.put(
                key, CacheEntry(key=key, endpoint=endpoint, args=normalized, provides=provides)
            )
        entry = self._store.adjust_subscribers(key, 1)
        self._cancel_eviction(key)

        handle = SubscriptionHandle(
            key=key, endpoint=endpoint, consumer_id=consumer_id or uuid.uuid4().hex
        )
        if not (entry.is_fresh or entry.status is QueryStatus.LOADING):
            if _loop_running():
                self._deferred.discard(key)
                self._executor.execute_in_background(
                    endpoint, normalized, provides if provides is not None else entry.provides
                )
            else:
                self._deferred.add(key)
                self._log.debug("fetch_deferred", key=key)
        self._log.debug(
            "subscribed",
            key=key,
            consumer_id=handle.consumer_id,
            subscribers=entry.subscriber_count,
        )
        return handle

    def unsubscribe(self, handle: SubscriptionHandle) -> None:
        """Release *handle*; idempotent. Never cancels a shared in-flight fetch."""
        if not handle.active:
            return
        handle.active = False
        if self._store.peek(handle.key) is None:
            return
        entry = self._store.adjust_subscribers(handle.key, -1)
        self._log.debug(
            "unsubscribed",
            key=handle.key,
            consumer_id=handle.consumer_id,
            subscribers=entry.subscriber_count,
        )
        if entry.subscriber_count == 0:
            self._deferred.discard(handle.key)
            self._schedule_eviction(handle.key)

    def resume(self, key: str) -> asyncio.Task[Any] | None:
        """Start the fetch a subscription outside an event loop left pending."""
        if key not in self._deferred:
            return None
        self._deferred.discard(key)
        entry = self._store.peek(key)
        if entry is None or entry.subscriber_count == 0:
            return None
        if entry.is_fresh or entry.status is QueryStatus.LOADING:
            return None
        return self._executor.execute_in_background(entry.endpoint, entry.args, entry.provides)

    def fetch_deferred(self, key: str) -> bool:
        return key in self._deferred

    def subscriber_count(self, key: str) -> int:
        entry = self._store.peek(key)
        return entry.subscriber_count if entry else 0

    def eviction_pending(self, key: str) -> bool:
        return key in self._timers

    def sweep(self) -> list[str]:
        """Evict every idle entry not accessed within the retention window."""
        now = self._clock.timestamp()
        evicted: list[str] = []
        for entry in self._store:
            if entry.subscriber_count > 0 or self._inflight.in_flight(entry.key):
                continue
            if now - entry.last_accessed_at >= self._retention:
                self._evict(entry.key)
                evicted.append(entry.key)
        return sorted(evicted)

    def reset(self) -> None:
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        self._deferred.clear()

    def _schedule_eviction(self, key: str) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._log.debug("eviction_left_to_sweep", key=key)
            return
        self._cancel_eviction(key)
        self._timers[key] = loop.call_later(self._retention, self._evict_if_unused, key)

    def _cancel_eviction(self, key: str) -> None:
        timer = self._timers.pop(key, None)
        if timer is not None:
            timer.cancel()

    def _evict_if_unused(self, key: str) -> None:
        self._timers.pop(key, None)
        entry = self._store.peek(key)
        if entry is None or entry.subscriber_count > 0:
            return
        if self._inflight.in_flight(key):
            self._schedule_eviction(key)
            return
        self._evict(key)

    def _evict(self, key: str) -> None:
        entry = self._store.delete(key)
        self._tag_index.remove(key)
        self._cancel_eviction(key)
        self._deferred.discard(key)
        if entry is not None:
            self._metrics.evictions.add(1, {"endpoint": entry.endpoint})
        self._log.debug("entry_evicted", key=key)


def _loop_running() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True
