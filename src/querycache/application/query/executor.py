"""Query – executor: cache → in-flight → remote → fallback → store."""
from __future__ import annotations

import asyncio
from collections.abc import Coroutine, Iterable
from typing import Any

from querycache.application.cache.keys import KeySerializer
from querycache.application.cache.store import (
    CacheEntry,
    CacheStore,
    ErrorInfo,
    QueryStatus,
)
from querycache.application.cache.tags import Tag, TagIndex, TagLike, TagProvider, resolve_tags
from querycache.application.query.inflight import InFlightRegistry
from querycache.application.query.ports import RemoteFetch
from querycache.kernel.errors import FallbackGenerationError, UnknownEndpointError
from querycache.kernel.time import Clock, SystemClock
from querycache.observability.logging import get_logger
from querycache.observability.metrics import QueryCacheMetrics
from querycache.resilience.fallback.policy import FallbackPolicy, Resolution

__all__ = ["QueryExecutor"]


class QueryExecutor:
    """Resolves queries through the cache store and the in-flight registry.

    State machine per key: ``IDLE → LOADING → SUCCESS | ERROR``, with
    ``SUCCESS``/``ERROR`` going back to ``LOADING`` on refetch. A fresh
    ``SUCCESS`` entry is served without touching the network. Transport
    failures are masked by the fallback policy; only an endpoint without a
    generator (or a failing generator) ends in ``ERROR``.

    Invalidations that arrive while a key is being fetched are remembered
    and re-checked against the tags of the result once it is written, so
    the newer signal is never overwritten by the older response.
    """

    def __init__(
        self,
        store: CacheStore,
        tag_index: TagIndex,
        inflight: InFlightRegistry,
        policy: FallbackPolicy,
        fetch: RemoteFetch,
        *,
        clock: Clock | None = None,
        metrics: QueryCacheMetrics | None = None,
    ) -> None:
        self._store = store
        self._tag_index = tag_index
        self._inflight = inflight
        self._policy = policy
        self._fetch = fetch
        self._clock = clock or SystemClock()
        self._metrics = metrics or QueryCacheMetrics()
        self._log = get_logger(__name__)
        self._pending_invalidations: dict[str, set[Tag]] = {}
        self._background: set[asyncio.Task[Any]] = set()
        self._generation = 0

    async def execute(
        self,
        endpoint: str,
        args: Any = None,
        provides: TagProvider = None,
        *,
        force: bool = False,
    ) -> CacheEntry:
        """Return the settled entry for ``(endpoint, args)``.

        Raises :class:`SerializationError` for unserializable *args* (no
        cache state is touched) and :class:`UnknownEndpointError` /
        :class:`FallbackGenerationError` after storing an ``ERROR`` entry.
        """
        normalized = KeySerializer.normalize(args)
        key = KeySerializer.key(endpoint, normalized)

        entry = self._store.get(key)
        if entry is not None and entry.is_fresh and not force:
            self._metrics.hits.add(1, {"endpoint": endpoint})
            self._log.debug("query_cache_hit", endpoint=endpoint, key=key)
            return entry

        if self._inflight.in_flight(key):
            self._metrics.dedup_joins.add(1, {"endpoint": endpoint})
        else:
            self._metrics.misses.add(1, {"endpoint": endpoint})
        return await self._inflight.get_or_start(
            key, lambda: self._run(key, endpoint, normalized, provides)
        )

    async def refetch(self, key: str) -> CacheEntry:
        """Re-run the query stored under *key*, bypassing the cache."""
        entry = self._store.peek(key)
        if entry is None:
            raise KeyError(key)
        return await self.execute(entry.endpoint, entry.args, entry.provides, force=True)

    def invalidate_tags(self, tags: Iterable[TagLike]) -> list[str]:
        """Mark entries matched by *tags* stale and refetch the subscribed ones.

        Returns the matched keys. Keys that are being fetched right now are
        re-checked once their result is stored instead.
        """
        wanted = {Tag.coerce(tag) for tag in tags}
        if not wanted:
            return []
        for key in self._inflight.keys():
            self._pending_invalidations.setdefault(key, set()).update(wanted)

        keys = self._tag_index.invalidate(wanted)
        for key in keys:
            if self._inflight.in_flight(key):
                continue
            entry = self._store.peek(key)
            if entry is None:
                self._tag_index.remove(key)
                continue
            entry = self._store.put(key, entry.replace(stale=True))
            self._metrics.invalidations.add(1, {"endpoint": entry.endpoint})
            if entry.subscriber_count > 0:
                self.spawn(self._refetch_stale(key))
        self._log.info(
            "tags_invalidated",
            tags=sorted(str(tag) for tag in wanted),
            keys=keys,
        )
        return keys

    def execute_in_background(self, endpoint: str, args: Any = None, provides: TagProvider = None) -> asyncio.Task[Any]:
        return self.spawn(self._background_execute(endpoint, args, provides))

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        """Run *coro* as a tracked background task (see :meth:`settle`)."""
        task = asyncio.get_running_loop().create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def settle(self) -> None:
        """Wait until every background fetch, including ones they spawn, is done."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    def reset(self) -> None:
        self._generation += 1
        for task in list(self._background):
            task.cancel()
        self._background.clear()
        self._pending_invalidations.clear()

    @property
    def background_tasks(self) -> int:
        return len(self._background)

    async def _run(self, key: str, endpoint: str, args: Any, provides: TagProvider) -> CacheEntry:
        generation = self._generation
        previous = self._store.peek(key)
        self._store.put(
            key,
            CacheEntry(
                key=key,
                endpoint=endpoint,
                args=args,
                provides=provides,
                status=QueryStatus.LOADING,
                tags=previous.tags if previous else frozenset(),
                stale=previous.stale if previous else False,
            ),
        )
        self._log.debug("query_started", endpoint=endpoint, key=key)
        try:
            resolution = await self._policy.execute(
                endpoint,
                args,
                lambda: self._fetch(endpoint, args, "query"),
                key=key,
            )
            return self._fulfil(key, endpoint, args, provides, resolution, generation)
        except (UnknownEndpointError, FallbackGenerationError) as exc:
            if generation == self._generation:
                self._fail(key, endpoint, args, provides, exc)
            raise
        except BaseException:
            if generation == self._generation:
                self._restore(key, endpoint, args, provides, previous)
            raise

    def _fulfil(
        self,
        key: str,
        endpoint: str,
        args: Any,
        provides: TagProvider,
        resolution: Resolution,
        generation: int,
    ) -> CacheEntry:
        tags = resolve_tags(provides, resolution.data, None, args)
        result = CacheEntry(
            key=key,
            endpoint=endpoint,
            args=args,
            provides=provides,
            status=QueryStatus.SUCCESS,
            data=resolution.data,
            has_data=True,
            tags=tags,
            source=resolution.source,
            fulfilled_at=self._clock.timestamp(),
        )
        if generation != self._generation:
            # the cache was reset while this fetch ran; waiters still get the data
            self._log.debug("result_discarded_after_reset", endpoint=endpoint, key=key)
            return result

        pending = self._pending_invalidations.pop(key, set())
        invalidated = any(p.matches(tag) for p in pending for tag in tags)
        entry = self._store.put(key, result.replace(stale=invalidated))
        self._tag_index.index(key, tags)
        if invalidated:
            self._metrics.invalidations.add(1, {"endpoint": endpoint})
            self._log.info("invalidated_during_fetch", endpoint=endpoint, key=key)
            if entry.subscriber_count > 0:
                self.spawn(self._refetch_stale(key))
        return entry

    def _fail(
        self,
        key: str,
        endpoint: str,
        args: Any,
        provides: TagProvider,
        exc: Exception,
    ) -> None:
        self._pending_invalidations.pop(key, None)
        tags = resolve_tags(provides, None, exc, args)
        self._store.put(
            key,
            CacheEntry(
                key=key,
                endpoint=endpoint,
                args=args,
                provides=provides,
                status=QueryStatus.ERROR,
                error=ErrorInfo.from_exception(exc),
                tags=tags,
            ),
        )
        self._tag_index.index(key, tags)
        self._metrics.errors.add(1, {"endpoint": endpoint})

    def _restore(
        self,
        key: str,
        endpoint: str,
        args: Any,
        provides: TagProvider,
        previous: CacheEntry | None,
    ) -> None:
        self._pending_invalidations.pop(key, None)
        if previous is None:
            previous = CacheEntry(key=key, endpoint=endpoint, args=args, provides=provides)
        self._store.put(key, previous)

    async def _refetch_stale(self, key: str) -> None:
        entry = self._store.peek(key)
        if entry is None or entry.is_fresh:
            return
        await self._background_execute(entry.endpoint, entry.args, entry.provides)

    async def _background_execute(self, endpoint: str, args: Any, provides: TagProvider) -> None:
        try:
            await self.execute(endpoint, args, provides)
        except Exception as exc:  # noqa: BLE001 - stored on the entry, observers read it from there
            self._log.warning(
                "background_refetch_failed",
                endpoint=endpoint,
                error_type=type(exc).__name__,
                error=str(exc),
            )
