"""Query – QueryClient façade, observers and the process-wide client."""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from querycache.adapters.http import HttpxRemoteFetch, Route
from querycache.application.cache.keys import KeySerializer
from querycache.application.cache.store import CacheEntry, CacheStore, ErrorInfo, QueryStatus
from querycache.application.cache.tags import TagIndex, TagLike, TagProvider
from querycache.application.query.endpoints import (
    EndpointDefinition,
    EndpointKind,
    EndpointRegistry,
)
from querycache.application.query.executor import QueryExecutor
from querycache.application.query.inflight import InFlightRegistry
from querycache.application.query.mutation import MutationExecutor, MutationResult
from querycache.application.query.ports import RemoteFetch
from querycache.application.query.subscriptions import SubscriptionHandle, SubscriptionManager
from querycache.config.settings import DEFAULT_RETENTION_SECONDS, QueryCacheSettings
from querycache.kernel.errors import (
    ClientNotConfiguredError,
    EndpointNotDefinedError,
)
from querycache.kernel.time import Clock, SystemClock
from querycache.observability.logging import configure_logging, get_logger
from querycache.observability.metrics import Metrics, QueryCacheMetrics
from querycache.resilience.fallback import FallbackGenerator, FallbackPolicy, FallbackSynthesizer

__all__ = [
    "MutationObserver",
    "QueryClient",
    "QueryObserver",
    "configure_query_client",
    "get_query_client",
    "reset_query_client",
]


class QueryClient:
    """One cache instance: store, tag index, in-flight registry and executors.

    Endpoints are declared with :meth:`define_query` / :meth:`define_mutation`;
    their fallback generators are registered with the client's synthesizer.
    Undeclared endpoints can still be executed with explicit tags.

    Example::

        client = QueryClient(fetch)
        client.define_query("jobs", provides=["Job"], fallback=jobs_generator)
        entry = await client.execute("jobs", {"search": "front"})
    """

    def __init__(
        self,
        fetch: RemoteFetch,
        synthesizer: FallbackSynthesizer | None = None,
        *,
        retention_seconds: float = DEFAULT_RETENTION_SECONDS,
        tag_types: Iterable[str] | None = None,
        clock: Clock | None = None,
        metrics: Metrics | None = None,
    ) -> None:
        self._fetch = fetch
        self._owns_fetch = False
        self._clock = clock or SystemClock()
        self._metrics = QueryCacheMetrics(metrics)
        self._log = get_logger(__name__)

        self.synthesizer = synthesizer or FallbackSynthesizer()
        self.endpoints = EndpointRegistry()
        self.store = CacheStore(self._clock)
        self.tag_index = TagIndex(tag_types)
        self.inflight = InFlightRegistry()

        policy = FallbackPolicy(self.synthesizer, metrics=self._metrics)
        self.queries = QueryExecutor(
            self.store,
            self.tag_index,
            self.inflight,
            policy,
            fetch,
            clock=self._clock,
            metrics=self._metrics,
        )
        self.mutations = MutationExecutor(policy, fetch, self.queries, metrics=self._metrics)
        self.subscriptions = SubscriptionManager(
            self.store,
            self.tag_index,
            self.inflight,
            self.queries,
            retention_seconds=retention_seconds,
            clock=self._clock,
            metrics=self._metrics,
        )

    @classmethod
    def from_settings(
        cls,
        settings: QueryCacheSettings,
        fetch: RemoteFetch | None = None,
        synthesizer: FallbackSynthesizer | None = None,
        *,
        routes: Mapping[str, Route] | None = None,
        clock: Clock | None = None,
        metrics: Metrics | None = None,
        setup_logging: bool = True,
    ) -> QueryClient:
        """Build a client from settings; without *fetch* an :class:`HttpxRemoteFetch` is created.

        Logging is configured from ``log_level``/``log_json`` unless
        *setup_logging* is false (hosts that own their logging setup).
        """
        if setup_logging:
            configure_logging(settings.log_level, json=settings.log_json)
        owns_fetch = fetch is None
        if fetch is None:
            fetch = HttpxRemoteFetch(
                routes or {},
                base_url=settings.base_url,
                timeout=settings.request_timeout,
            )
        client = cls(
            fetch,
            synthesizer,
            retention_seconds=settings.retention_seconds,
            tag_types=settings.tag_types or None,
            clock=clock,
            metrics=metrics,
        )
        client._owns_fetch = owns_fetch
        return client

    # ------------------------------------------------------------------
    # Endpoint definitions
    # ------------------------------------------------------------------

    def define_query(
        self,
        name: str,
        *,
        provides: TagProvider = None,
        fallback: FallbackGenerator | None = None,
    ) -> EndpointDefinition:
        return self._define(EndpointDefinition(name, EndpointKind.QUERY, provides=provides, fallback=fallback))

    def define_mutation(
        self,
        name: str,
        *,
        invalidates: TagProvider = None,
        fallback: FallbackGenerator | None = None,
    ) -> EndpointDefinition:
        return self._define(
            EndpointDefinition(name, EndpointKind.MUTATION, invalidates=invalidates, fallback=fallback)
        )

    def _define(self, definition: EndpointDefinition) -> EndpointDefinition:
        if definition.fallback is not None:
            self.synthesizer.register(definition.name, definition.fallback)
        return self.endpoints.add(definition)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def execute(
        self,
        endpoint: str,
        args: Any = None,
        *,
        provides: TagProvider = None,
        force: bool = False,
    ) -> CacheEntry:
        return await self.queries.execute(
            endpoint, args, self._provides(endpoint, provides), force=force
        )

    async def refetch(self, endpoint: str, args: Any = None) -> CacheEntry:
        return await self.queries.refetch(KeySerializer.serialize(endpoint, args))

    def subscribe(
        self,
        endpoint: str,
        args: Any = None,
        *,
        provides: TagProvider = None,
        consumer_id: str | None = None,
    ) -> SubscriptionHandle:
        return self.subscriptions.subscribe(
            endpoint, args, self._provides(endpoint, provides), consumer_id=consumer_id
        )

    def unsubscribe(self, handle: SubscriptionHandle) -> None:
        self.subscriptions.unsubscribe(handle)

    def use_query(
        self,
        endpoint: str,
        args: Any = None,
        *,
        provides: TagProvider = None,
    ) -> QueryObserver:
        """Subscribe and return an observer of ``(endpoint, args)``."""
        return QueryObserver(self, self.subscribe(endpoint, args, provides=provides))

    def entry(self, endpoint: str, args: Any = None) -> CacheEntry | None:
        return self.store.peek(KeySerializer.serialize(endpoint, args))

    def _provides(self, endpoint: str, provides: TagProvider) -> TagProvider:
        if provides is not None:
            return provides
        definition = self.endpoints.find(endpoint)
        if definition is None:
            return None
        if definition.kind is not EndpointKind.QUERY:
            raise EndpointNotDefinedError(endpoint, EndpointKind.QUERY.value)
        return definition.provides

    # ------------------------------------------------------------------
    # Mutations and invalidation
    # ------------------------------------------------------------------

    async def mutate(
        self,
        endpoint: str,
        args: Any = None,
        *,
        invalidates: TagProvider = None,
    ) -> MutationResult:
        if invalidates is None:
            definition = self.endpoints.find(endpoint)
            if definition is not None:
                if definition.kind is not EndpointKind.MUTATION:
                    raise EndpointNotDefinedError(endpoint, EndpointKind.MUTATION.value)
                invalidates = definition.invalidates
        return await self.mutations.mutate(endpoint, args, invalidates)

    def use_mutation(self, endpoint: str, *, invalidates: TagProvider = None) -> MutationObserver:
        return MutationObserver(self, endpoint, invalidates)

    def invalidate_tags(self, tags: Iterable[TagLike]) -> list[str]:
        return self.queries.invalidate_tags(tags)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def sweep(self) -> list[str]:
        return self.subscriptions.sweep()

    async def settle(self) -> None:
        """Wait for every background fetch started by subscriptions or invalidations."""
        await self.queries.settle()

    def reset(self) -> None:
        """Drop all cached state; endpoint definitions and generators are kept."""
        self.subscriptions.reset()
        self.queries.reset()
        self.store.clear()
        self.tag_index.clear()
        self._log.info("query_cache_reset")

    async def aclose(self) -> None:
        self.reset()
        if self._owns_fetch and isinstance(self._fetch, HttpxRemoteFetch):
            await self._fetch.aclose()


class QueryObserver:
    """Read-side view of one subscribed query.

    ``data`` keeps the last successful value while a refetch is loading or
    after it failed, so consumers never see an empty state between results.
    """

    def __init__(self, client: QueryClient, handle: SubscriptionHandle) -> None:
        self._client = client
        self._handle = handle
        self._last_data: Any = None
        self._observe()

    @property
    def key(self) -> str:
        return self._handle.key

    @property
    def endpoint(self) -> str:
        return self._handle.endpoint

    @property
    def entry(self) -> CacheEntry | None:
        return self._observe()

    @property
    def status(self) -> QueryStatus:
        entry = self._observe()
        return entry.status if entry else QueryStatus.IDLE

    @property
    def data(self) -> Any:
        self._observe()
        return self._last_data

    @property
    def error(self) -> ErrorInfo | None:
        entry = self._observe()
        return entry.error if entry else None

    @property
    def is_stale(self) -> bool:
        entry = self._observe()
        return bool(entry and entry.stale)

    @property
    def is_loading(self) -> bool:
        return self.status is QueryStatus.LOADING

    @property
    def active(self) -> bool:
        return self._handle.active

    async def refetch(self) -> CacheEntry:
        return await self._client.queries.refetch(self.key)

    async def wait(self) -> CacheEntry | None:
        """Wait until no fetch for this key is pending and return the entry.

        A fetch deferred because the observer was created outside an event
        loop is started here.
        """
        self._client.subscriptions.resume(self.key)
        while True:
            await self._client.settle()
            if not self._client.inflight.in_flight(self.key):
                break
            await self._client.inflight.wait(self.key)
        return self._observe()

    def close(self) -> None:
        self._client.unsubscribe(self._handle)

    def __enter__(self) -> QueryObserver:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    async def __aenter__(self) -> QueryObserver:
        await self.wait()
        return self

    async def __aexit__(self, *args: Any) -> None:
        self.close()

    def _observe(self) -> CacheEntry | None:
        entry = self._client.store.peek(self.key)
        if entry is not None and entry.has_data:
            self._last_data = entry.data
        return entry


class MutationObserver:
    """Trigger for one mutation endpoint plus the state of its last call."""

    def __init__(self, client: QueryClient, endpoint: str, invalidates: TagProvider = None) -> None:
        self._client = client
        self.endpoint = endpoint
        self._invalidates = invalidates
        self.status = QueryStatus.IDLE
        self.data: Any = None
        self.error: ErrorInfo | None = None
        self.result: MutationResult | None = None

    async def trigger(self, args: Any = None) -> MutationResult:
        """Run the mutation; a failure (:class:`MutationFailure`) is recorded, then raised."""
        self.status = QueryStatus.LOADING
        self.error = None
        try:
            result = await self._client.mutate(self.endpoint, args, invalidates=self._invalidates)
        except Exception as exc:
            self.status = QueryStatus.ERROR
            self.error = ErrorInfo.from_exception(exc)
            raise
        self.status = QueryStatus.SUCCESS
        self.data = result.data
        self.result = result
        return result

    async def __call__(self, args: Any = None) -> MutationResult:
        return await self.trigger(args)

    @property
    def is_loading(self) -> bool:
        return self.status is QueryStatus.LOADING

    def reset(self) -> None:
        self.status = QueryStatus.IDLE
        self.data = None
        self.error = None
        self.result = None


# ----------------------------------------------------------------------
# Process-wide client
# ----------------------------------------------------------------------

_client: QueryClient | None = None


def configure_query_client(client: QueryClient) -> QueryClient:
    """Install *client* as the process-wide instance and return it."""
    global _client
    _client = client
    return client


def get_query_client() -> QueryClient:
    if _client is None:
        raise ClientNotConfiguredError()
    return _client


def reset_query_client() -> None:
    global _client
    _client = None
