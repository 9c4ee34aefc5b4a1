"""Unit tests for the query executor state machine."""

from __future__ import annotations

import asyncio

import pytest

from querycache.application.cache import (
    CacheEntry,
    CacheStore,
    DataSource,
    QueryStatus,
    Tag,
    TagIndex,
    serialize_key,
)
from querycache.application.query import InFlightRegistry, QueryExecutor
from querycache.kernel.errors import (
    FallbackGenerationError,
    SerializationError,
    UnknownEndpointError,
)
from querycache.observability.metrics import QueryCacheMetrics
from querycache.resilience.fallback import FallbackPolicy, FallbackSynthesizer
from querycache.testing import FakeClock, FakeMetricsRegistry, FakeRemoteFetch


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class Harness:
    def __init__(self, fetch: FakeRemoteFetch | None = None) -> None:
        self.fetch = fetch or FakeRemoteFetch()
        self.clock = FakeClock()
        self.registry = FakeMetricsRegistry()
        metrics = QueryCacheMetrics(self.registry)
        self.synth = FallbackSynthesizer()
        self.store = CacheStore(self.clock)
        self.index = TagIndex()
        self.inflight = InFlightRegistry()
        self.executor = QueryExecutor(
            self.store,
            self.index,
            self.inflight,
            FallbackPolicy(self.synth, metrics=metrics),
            self.fetch,
            clock=self.clock,
            metrics=metrics,
        )

    def subscribe(self, endpoint: str, args: object = None) -> str:
        key = serialize_key(endpoint, args)
        if self.store.peek(key) is None:
            self.store.put(key, CacheEntry(key=key, endpoint=endpoint))
        self.store.adjust_subscribers(key, 1)
        return key


# ---------------------------------------------------------------------------
# Execute
# ---------------------------------------------------------------------------


class TestExecute:
    def test_remote_success(self) -> None:
        h = Harness(FakeRemoteFetch({"jobs": [{"id": "1"}]}))
        entry = asyncio.run(h.executor.execute("jobs", {"page": 1}, ["Job"]))
        assert entry.status is QueryStatus.SUCCESS
        assert entry.data == [{"id": "1"}]
        assert entry.source is DataSource.REMOTE
        assert entry.tags == {Tag("Job")}
        assert entry.fulfilled_at == h.clock.timestamp()
        assert h.index.match(["Job"]) == {'jobs({"page":1})'}
        assert h.fetch.calls[0].method == "query"

    def test_fetch_receives_normalized_args(self) -> None:
        h = Harness(FakeRemoteFetch({"jobs": []}))
        asyncio.run(h.executor.execute("jobs", {"search": None, "page": 1}))
        assert h.fetch.calls[0].args == {"page": 1}

    def test_fresh_entry_is_a_cache_hit(self) -> None:
        h = Harness(FakeRemoteFetch({"jobs": [1]}))

        async def run() -> CacheEntry:
            await h.executor.execute("jobs")
            return await h.executor.execute("jobs", {})

        entry = asyncio.run(run())
        assert entry.data == [1]
        assert h.fetch.call_count("jobs") == 1
        h.registry.assert_counter_total("query_cache_hits", 1)
        h.registry.assert_counter_total("query_cache_misses", 1)

    def test_force_bypasses_cache(self) -> None:
        h = Harness(FakeRemoteFetch({"jobs": [1]}))

        async def run() -> None:
            await h.executor.execute("jobs")
            await h.executor.execute("jobs", force=True)

        asyncio.run(run())
        assert h.fetch.call_count("jobs") == 2

    def test_concurrent_executes_deduplicated(self) -> None:
        h = Harness(FakeRemoteFetch({"jobs": [1]}))

        async def run() -> list[CacheEntry]:
            h.fetch.hold()
            tasks = [asyncio.ensure_future(h.executor.execute("jobs", {"page": 1})) for _ in range(5)]
            await asyncio.sleep(0)
            h.fetch.release()
            return await asyncio.gather(*tasks)

        entries = asyncio.run(run())
        assert h.fetch.call_count() == 1
        assert all(e.data == [1] for e in entries)
        h.registry.assert_counter_total("query_cache_dedup_joins", 4)

    def test_loading_state_while_in_flight(self) -> None:
        h = Harness(FakeRemoteFetch({"jobs": [1]}))

        async def run() -> QueryStatus:
            h.fetch.hold()
            task = asyncio.ensure_future(h.executor.execute("jobs"))
            await asyncio.sleep(0)
            await asyncio.sleep(0)
            status = h.store.peek("jobs({})").status
            h.fetch.release()
            await task
            return status

        assert asyncio.run(run()) is QueryStatus.LOADING

    def test_serialization_error_touches_nothing(self) -> None:
        h = Harness()
        with pytest.raises(SerializationError):
            asyncio.run(h.executor.execute("jobs", {"cb": print}))
        assert len(h.store) == 0
        assert h.fetch.call_count() == 0


class TestFallback:
    def test_transport_failure_masked_by_generator(self) -> None:
        h = Harness(FakeRemoteFetch(always_fail=True))
        h.synth.register("jobs", lambda args: [{"id": "fallback", "page": args.get("page")}])
        entry = asyncio.run(h.executor.execute("jobs", {"page": 2}, ["Job"]))
        assert entry.status is QueryStatus.SUCCESS
        assert entry.source is DataSource.FALLBACK
        assert entry.data == [{"id": "fallback", "page": 2}]
        assert entry.tags == {Tag("Job")}
        h.registry.assert_counter_total("query_cache_fallbacks", 1)

    def test_unknown_endpoint_stores_error(self) -> None:
        h = Harness(FakeRemoteFetch(always_fail=True))
        with pytest.raises(UnknownEndpointError) as exc_info:
            asyncio.run(h.executor.execute("reports"))
        entry = h.store.peek("reports({})")
        assert entry.status is QueryStatus.ERROR
        assert entry.error.code == "unknown_endpoint_fallback"
        assert entry.has_data is False
        assert exc_info.value.__cause__ is not None
        h.registry.assert_counter_total("query_cache_errors", 1)

    def test_unknown_endpoint_raised_to_every_waiter(self) -> None:
        h = Harness(FakeRemoteFetch(always_fail=True))

        async def run() -> list[object]:
            return await asyncio.gather(
                *(h.executor.execute("reports") for _ in range(3)), return_exceptions=True
            )

        results = asyncio.run(run())
        assert all(isinstance(r, UnknownEndpointError) for r in results)
        assert h.fetch.call_count() == 1

    def test_generator_failure_stores_error(self) -> None:
        h = Harness(FakeRemoteFetch(always_fail=True))

        def broken(args: dict) -> list:
            raise KeyError("missing")

        h.synth.register("jobs", broken)
        with pytest.raises(FallbackGenerationError):
            asyncio.run(h.executor.execute("jobs"))
        assert h.store.peek("jobs({})").status is QueryStatus.ERROR

    def test_error_entry_refetches_on_next_execute(self) -> None:
        h = Harness(FakeRemoteFetch(always_fail=True))

        async def run() -> CacheEntry:
            with pytest.raises(UnknownEndpointError):
                await h.executor.execute("reports")
            h.fetch.always_fail = False
            h.fetch.respond("reports", {"ok": True})
            return await h.executor.execute("reports")

        entry = asyncio.run(run())
        assert entry.status is QueryStatus.SUCCESS
        assert entry.error is None

    def test_function_provider_sees_error(self) -> None:
        h = Harness(FakeRemoteFetch(always_fail=True))
        seen = []

        def provides(result, error, args):
            seen.append((result, type(error).__name__))
            return ["Report"]

        with pytest.raises(UnknownEndpointError):
            asyncio.run(h.executor.execute("reports", None, provides))
        assert seen == [(None, "UnknownEndpointError")]
        assert h.index.match(["Report"]) == {"reports({})"}


class TestCancellation:
    def test_cancelled_fetch_restores_previous_entry(self) -> None:
        h = Harness(FakeRemoteFetch({"jobs": [1]}))

        async def run() -> CacheEntry:
            first = await h.executor.execute("jobs")
            h.fetch.respond("jobs", [2])
            h.fetch.hold()
            task = asyncio.ensure_future(h.executor.execute("jobs", force=True))
            await asyncio.sleep(0)
            await asyncio.sleep(0)
            request = h.inflight._requests["jobs({})"]
            request.task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task
            h.fetch.release()
            return first

        first = asyncio.run(run())
        restored = h.store.peek("jobs({})")
        assert restored.status is QueryStatus.SUCCESS
        assert restored.data == first.data == [1]
        assert not h.inflight.in_flight("jobs({})")


# ---------------------------------------------------------------------------
# Invalidation
# ---------------------------------------------------------------------------


class TestInvalidation:
    def test_exact_tag_refetches_only_matching_subscribed_entry(self) -> None:
        h = Harness(FakeRemoteFetch({"jobs.get": lambda args: {"id": args["id"]}}))
        provides = lambda result, error, args: [Tag("Job", args["id"])]  # noqa: E731

        async def run() -> list[str]:
            for job_id in ("1", "2"):
                h.subscribe("jobs.get", {"id": job_id})
                await h.executor.execute("jobs.get", {"id": job_id}, provides)
            keys = h.executor.invalidate_tags([Tag("Job", "1")])
            await h.executor.settle()
            return keys

        keys = asyncio.run(run())
        assert keys == ['jobs.get({"id":"1"})']
        assert h.fetch.call_count("jobs.get") == 3
        assert h.fetch.calls[-1].args == {"id": "1"}

    def test_wildcard_refetches_all_of_type(self) -> None:
        h = Harness(FakeRemoteFetch({"jobs.get": lambda args: {"id": args["id"]}}))
        provides = lambda result, error, args: [Tag("Job", args["id"])]  # noqa: E731

        async def run() -> list[str]:
            for job_id in ("1", "2"):
                h.subscribe("jobs.get", {"id": job_id})
                await h.executor.execute("jobs.get", {"id": job_id}, provides)
            keys = h.executor.invalidate_tags(["Job"])
            await h.executor.settle()
            return keys

        keys = asyncio.run(run())
        assert len(keys) == 2
        assert h.fetch.call_count("jobs.get") == 4
        assert all(h.store.peek(k).is_fresh for k in keys)

    def test_unsubscribed_entry_only_marked_stale(self) -> None:
        h = Harness(FakeRemoteFetch({"jobs": [1]}))

        async def run() -> None:
            await h.executor.execute("jobs", None, ["Job"])
            h.executor.invalidate_tags(["Job"])
            await h.executor.settle()

        asyncio.run(run())
        entry = h.store.peek("jobs({})")
        assert entry.stale is True
        assert entry.data == [1]
        assert h.fetch.call_count() == 1
        h.registry.assert_counter_total("query_cache_invalidations", 1)

    def test_stale_entry_refetched_on_next_execute(self) -> None:
        h = Harness(FakeRemoteFetch({"jobs": [1]}))

        async def run() -> CacheEntry:
            await h.executor.execute("jobs", None, ["Job"])
            h.executor.invalidate_tags(["Job"])
            h.fetch.respond("jobs", [1, 2])
            return await h.executor.execute("jobs", None, ["Job"])

        entry = asyncio.run(run())
        assert entry.data == [1, 2]
        assert entry.stale is False

    def test_no_tags_no_op(self) -> None:
        h = Harness()
        assert h.executor.invalidate_tags([]) == []

    def test_invalidation_during_flight_rechecked_after_write(self) -> None:
        h = Harness(FakeRemoteFetch({"jobs": [1]}))

        async def run() -> CacheEntry:
            h.subscribe("jobs")
            h.fetch.hold()
            task = asyncio.ensure_future(h.executor.execute("jobs", None, ["Job"]))
            await asyncio.sleep(0)
            await asyncio.sleep(0)
            h.executor.invalidate_tags(["Job"])
            h.fetch.respond("jobs", [1, 2])
            h.fetch.release()
            stored = await task
            await h.executor.settle()
            return stored

        stored = asyncio.run(run())
        assert stored.stale is True
        assert h.fetch.call_count("jobs") == 2
        final = h.store.peek("jobs({})")
        assert final.data == [1, 2]
        assert final.is_fresh

    def test_invalidation_during_flight_ignored_when_new_tags_differ(self) -> None:
        h = Harness(FakeRemoteFetch({"jobs": [1]}))

        async def run() -> CacheEntry:
            h.fetch.hold()
            task = asyncio.ensure_future(h.executor.execute("jobs", None, ["Job"]))
            await asyncio.sleep(0)
            h.executor.invalidate_tags(["User"])
            h.fetch.release()
            return await task

        assert asyncio.run(run()).stale is False

    def test_refetch_unknown_key(self) -> None:
        h = Harness()
        with pytest.raises(KeyError):
            asyncio.run(h.executor.refetch("jobs({})"))

    def test_refetch_reuses_stored_args_and_provider(self) -> None:
        h = Harness(FakeRemoteFetch({"jobs": [1]}))

        async def run() -> CacheEntry:
            await h.executor.execute("jobs", {"page": 3}, ["Job"])
            return await h.executor.refetch('jobs({"page":3})')

        entry = asyncio.run(run())
        assert h.fetch.call_count("jobs") == 2
        assert h.fetch.calls[-1].args == {"page": 3}
        assert entry.tags == {Tag("Job")}
