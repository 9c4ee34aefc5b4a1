"""Unit tests for MutationExecutor."""

from __future__ import annotations

import asyncio

import pytest

from querycache.application.cache import DataSource, Tag
from querycache.application.query import QueryClient
from querycache.kernel.errors import MutationFailure, SerializationError, UnknownEndpointError
from querycache.testing import FakeMetricsRegistry, FakeRemoteFetch


def _client(fetch: FakeRemoteFetch, metrics: FakeMetricsRegistry | None = None) -> QueryClient:
    client = QueryClient(fetch, metrics=metrics)
    client.define_query("jobs", provides=["Job"])
    client.define_query("jobs.get", provides=lambda result, error, args: [Tag("Job", args["id"])])
    return client


class TestMutate:
    def test_remote_success_invalidates_tags(self) -> None:
        fetch = FakeRemoteFetch({"jobs": [1], "jobs.create": {"id": "9"}})
        client = _client(fetch)

        async def run():
            await client.execute("jobs")
            return await client.mutations.mutate("jobs.create", {"title": "x"}, ["Job"])

        result = asyncio.run(run())
        assert result.source is DataSource.REMOTE
        assert result.data == {"id": "9"}
        assert result.invalidated == ["jobs({})"]
        assert client.entry("jobs").stale is True
        assert fetch.calls[-1].method == "mutate"

    def test_mutation_is_never_cached(self) -> None:
        fetch = FakeRemoteFetch({"jobs.create": {"id": "9"}})
        client = _client(fetch)

        async def run() -> None:
            await client.mutate("jobs.create", {"title": "x"})
            await client.mutate("jobs.create", {"title": "x"})

        asyncio.run(run())
        assert fetch.call_count("jobs.create") == 2
        assert len(client.store) == 0

    def test_payload_keeps_explicit_nulls(self) -> None:
        fetch = FakeRemoteFetch({"jobs.update": None})
        client = _client(fetch)
        asyncio.run(client.mutate("jobs.update", {"id": "1", "data": {"salary": None}}))
        assert fetch.calls[0].args == {"id": "1", "data": {"salary": None}}

    def test_none_args_sent_as_empty_mapping(self) -> None:
        fetch = FakeRemoteFetch({"jobs.refresh": True})
        client = _client(fetch)
        asyncio.run(client.mutate("jobs.refresh"))
        assert fetch.calls[0].args == {}

    def test_fallback_still_invalidates(self) -> None:
        fetch = FakeRemoteFetch({"jobs": [1]})
        metrics = FakeMetricsRegistry()
        client = _client(fetch, metrics)
        client.define_mutation(
            "jobs.create",
            invalidates=["Job"],
            fallback=lambda args: {"id": "local", **args},
        )

        async def run():
            await client.execute("jobs")
            return await client.mutate("jobs.create", {"title": "x"})

        result = asyncio.run(run())
        assert result.source is DataSource.FALLBACK
        assert result.data == {"id": "local", "title": "x"}
        assert result.invalidated == ["jobs({})"]
        assert metrics.counter("mutations_total").total_for(outcome="fallback") == 1

    def test_failure_without_generator_invalidates_nothing(self) -> None:
        fetch = FakeRemoteFetch({"jobs": [1]})
        metrics = FakeMetricsRegistry()
        client = _client(fetch, metrics)

        async def run() -> None:
            await client.execute("jobs")
            await client.mutate("jobs.delete", {"id": "1"}, invalidates=["Job"])

        with pytest.raises(MutationFailure) as exc_info:
            asyncio.run(run())
        assert isinstance(exc_info.value.__cause__, UnknownEndpointError)
        assert exc_info.value.detail == {"endpoint": "jobs.delete"}
        assert client.entry("jobs").stale is False
        assert metrics.counter("mutations_total").total_for(outcome="failed") == 1

    def test_function_invalidates_sees_result_and_args(self) -> None:
        fetch = FakeRemoteFetch(
            {
                "jobs.get": lambda args: {"id": args["id"]},
                "jobs.update": lambda args: {"id": args["id"], **args["data"]},
            }
        )
        client = _client(fetch)
        seen = []

        def invalidates(result, error, args):
            seen.append((result, error, args))
            return [Tag("Job", result["id"])]

        async def run():
            await client.execute("jobs.get", {"id": "1"})
            await client.execute("jobs.get", {"id": "2"})
            return await client.mutate(
                "jobs.update", {"id": "2", "data": {"title": "t"}}, invalidates=invalidates
            )

        result = asyncio.run(run())
        assert seen == [({"id": "2", "title": "t"}, None, {"id": "2", "data": {"title": "t"}})]
        assert result.invalidated == ['jobs.get({"id":"2"})']
        assert client.entry("jobs.get", {"id": "1"}).stale is False

    def test_unserializable_args_rejected_before_fetch(self) -> None:
        fetch = FakeRemoteFetch()
        client = _client(fetch)
        with pytest.raises(SerializationError):
            asyncio.run(client.mutate("jobs.create", {"at": object()}))
        assert fetch.call_count() == 0
