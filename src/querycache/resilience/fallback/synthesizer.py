"""Resilience – registry of deterministic per-endpoint fallback generators."""
from __future__ import annotations

import copy
import dataclasses
import inspect
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from querycache.kernel.errors import FallbackGenerationError

__all__ = [
    "FallbackGenerator",
    "FallbackResult",
    "FallbackSynthesizer",
    "UnknownEndpointFallback",
]

type FallbackGenerator = Callable[[Any], Any]


@dataclasses.dataclass(frozen=True)
class FallbackResult:
    """Placeholder data shaped like a successful response for *endpoint*."""

    endpoint: str
    data: Any
    known: bool = True


@dataclasses.dataclass(frozen=True)
class UnknownEndpointFallback(FallbackResult):
    """Returned when no generator is registered: an empty collection."""

    data: Any = dataclasses.field(default_factory=list)
    known: bool = False


class FallbackSynthesizer:
    """Maps endpoint names to generators ``(args) -> data``.

    Generators may be plain or coroutine functions. They receive a private
    copy of the normalized arguments and must be pure: the same arguments
    always yield equal data. Results are copied on the way out so a consumer
    mutating one result cannot change the next.
    """

    def __init__(self, generators: Mapping[str, FallbackGenerator] | None = None) -> None:
        self._generators: dict[str, FallbackGenerator] = dict(generators or {})

    def register(self, endpoint: str, generator: FallbackGenerator) -> None:
        self._generators[endpoint] = generator

    def generator(self, endpoint: str) -> Callable[[FallbackGenerator], FallbackGenerator]:
        """Decorator form of :meth:`register`."""

        def decorator(fn: FallbackGenerator) -> FallbackGenerator:
            self.register(endpoint, fn)
            return fn

        return decorator

    def unregister(self, endpoint: str) -> None:
        self._generators.pop(endpoint, None)

    def has(self, endpoint: str) -> bool:
        return endpoint in self._generators

    @property
    def endpoints(self) -> Iterable[str]:
        return sorted(self._generators)

    async def synthesize(self, endpoint: str, args: Any = None) -> FallbackResult:
        generator = self._generators.get(endpoint)
        if generator is None:
            return UnknownEndpointFallback(endpoint=endpoint)
        try:
            data = generator(copy.deepcopy(args if args is not None else {}))
            if inspect.isawaitable(data):
                data = await data
        except Exception as exc:
            raise FallbackGenerationError(endpoint, cause=exc) from exc
        return FallbackResult(endpoint=endpoint, data=copy.deepcopy(data))
