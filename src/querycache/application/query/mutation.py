"""Query – mutation executor (write, then invalidate declared tags)."""
from __future__ import annotations

import dataclasses
from typing import Any

from querycache.application.cache.keys import KeySerializer
from querycache.application.cache.store import DataSource
from querycache.application.cache.tags import TagProvider, resolve_tags
from querycache.application.query.executor import QueryExecutor
from querycache.application.query.ports import RemoteFetch
from querycache.kernel.errors import (
    FallbackGenerationError,
    MutationFailure,
    UnknownEndpointError,
)
from querycache.observability.logging import get_logger
from querycache.observability.metrics import QueryCacheMetrics
from querycache.resilience.fallback.policy import FallbackPolicy

__all__ = ["MutationExecutor", "MutationResult"]


@dataclasses.dataclass(frozen=True)
class MutationResult:
    endpoint: str
    data: Any
    source: DataSource
    invalidated: list[str] = dataclasses.field(default_factory=list)


class MutationExecutor:
    """Runs writes through the primary-fetch / fallback policy.

    Mutations are neither cached nor de-duplicated. Once a mutation settles
    with data (remote or synthesized) its tags are invalidated; a failed
    mutation invalidates nothing.
    """

    def __init__(
        self,
        policy: FallbackPolicy,
        fetch: RemoteFetch,
        queries: QueryExecutor,
        *,
        metrics: QueryCacheMetrics | None = None,
    ) -> None:
        self._policy = policy
        self._fetch = fetch
        self._queries = queries
        self._metrics = metrics or QueryCacheMetrics()
        self._log = get_logger(__name__)

    async def mutate(
        self,
        endpoint: str,
        args: Any = None,
        invalidates: TagProvider = None,
    ) -> MutationResult:
        # mutation bodies keep explicit nulls; normalize only validates them
        KeySerializer.normalize(args)
        payload = args if args is not None else {}

        try:
            resolution = await self._policy.execute(
                endpoint, payload, lambda: self._fetch(endpoint, payload, "mutate")
            )
        except (UnknownEndpointError, FallbackGenerationError) as exc:
            self._metrics.mutations.add(1, {"endpoint": endpoint, "outcome": "failed"})
            self._log.error("mutation_failed", endpoint=endpoint, error=exc.code)
            raise MutationFailure(endpoint, cause=exc) from exc

        self._metrics.mutations.add(1, {"endpoint": endpoint, "outcome": resolution.source.value})
        tags = resolve_tags(invalidates, resolution.data, None, payload)
        keys = self._queries.invalidate_tags(tags)
        self._log.info(
            "mutation_settled",
            endpoint=endpoint,
            source=resolution.source.value,
            invalidated=len(keys),
        )
        return MutationResult(
            endpoint=endpoint,
            data=resolution.data,
            source=resolution.source,
            invalidated=keys,
        )
