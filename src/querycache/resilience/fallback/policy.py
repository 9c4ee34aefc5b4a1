"""Resilience – primary fetch with synthesized fallback."""
from __future__ import annotations

import dataclasses
import time
from collections.abc import Awaitable, Callable
from typing import Any

from querycache.application.cache.store import DataSource
from querycache.kernel.errors import TransportFailure, UnknownEndpointError
from querycache.observability.logging import get_logger
from querycache.observability.metrics import QueryCacheMetrics
from querycache.resilience.fallback.synthesizer import FallbackSynthesizer

__all__ = ["FallbackPolicy", "Resolution"]


@dataclasses.dataclass(frozen=True)
class Resolution:
    """Outcome of :meth:`FallbackPolicy.execute`."""

    data: Any
    source: DataSource
    failure: TransportFailure | None = None


class FallbackPolicy:
    """Executes the primary fetch; on listed exceptions synthesizes data instead.

    The transport failure is logged and counted but not raised. When the
    synthesizer has no generator for the endpoint the failure surfaces as
    :class:`UnknownEndpointError`, chained to the transport failure.
    """

    def __init__(
        self,
        synthesizer: FallbackSynthesizer,
        on_exceptions: tuple[type[BaseException], ...] = (Exception,),
        *,
        metrics: QueryCacheMetrics | None = None,
    ) -> None:
        self._synthesizer = synthesizer
        self._on_exceptions = on_exceptions
        self._metrics = metrics or QueryCacheMetrics()
        self._log = get_logger(__name__)

    @property
    def synthesizer(self) -> FallbackSynthesizer:
        return self._synthesizer

    async def execute(
        self,
        endpoint: str,
        args: Any,
        primary: Callable[[], Awaitable[Any]],
        *,
        key: str | None = None,
    ) -> Resolution:
        started = time.monotonic()
        try:
            data = await primary()
        except self._on_exceptions as exc:
            failure = TransportFailure(endpoint, cause=exc)
            self._log.warning(
                "transport_failure",
                endpoint=endpoint,
                key=key,
                error_type=type(exc).__name__,
                error=str(exc),
            )
        else:
            return Resolution(data=data, source=DataSource.REMOTE)
        finally:
            # remote round-trip only; synthesis below is not timed
            self._metrics.fetch_duration.record(
                (time.monotonic() - started) * 1000, {"endpoint": endpoint}
            )

        result = await self._synthesizer.synthesize(endpoint, args)
        if not result.known:
            self._log.error("unknown_endpoint_fallback", endpoint=endpoint, key=key)
            raise UnknownEndpointError(endpoint, cause=failure) from failure
        self._metrics.fallbacks.add(1, {"endpoint": endpoint})
        self._log.info("fallback_synthesized", endpoint=endpoint, key=key)
        return Resolution(data=result.data, source=DataSource.FALLBACK, failure=failure)
