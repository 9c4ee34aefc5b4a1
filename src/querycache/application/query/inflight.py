"""Query – in-flight request registry (one fetch per key at a time)."""
from __future__ import annotations

import asyncio
import dataclasses
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

__all__ = ["InFlightRegistry", "InFlightRequest"]

T = TypeVar("T")


@dataclasses.dataclass(eq=False)
class InFlightRequest:
    key: str
    task: asyncio.Future[Any] | None = None
    waiters: int = 0


class InFlightRegistry:
    """De-duplicates concurrent executions that share a cache key.

    The first caller starts *executor* as a task; later callers await the
    same task and receive the same value or exception. The registry entry
    is dropped inside the task itself, before any waiter resumes, so a call
    made after settlement always starts fresh. Waiters await through
    :func:`asyncio.shield`: cancelling one caller never cancels the fetch
    other callers share.
    """

    def __init__(self) -> None:
        self._requests: dict[str, InFlightRequest] = {}

    async def get_or_start(self, key: str, executor: Callable[[], Awaitable[T]]) -> T:
        request = self._requests.get(key)
        if request is None:
            request = InFlightRequest(key=key)
            self._requests[key] = request
            request.task = asyncio.ensure_future(self._run(request, executor))
            request.task.add_done_callback(_retrieve_exception)
        request.waiters += 1
        try:
            return await asyncio.shield(request.task)
        finally:
            request.waiters -= 1

    async def wait(self, key: str) -> None:
        """Wait for the request under *key* to settle, ignoring its outcome."""
        request = self._requests.get(key)
        if request is not None and request.task is not None:
            await asyncio.wait({request.task})

    def in_flight(self, key: str) -> bool:
        return key in self._requests

    def waiters(self, key: str) -> int:
        request = self._requests.get(key)
        return request.waiters if request else 0

    def keys(self) -> list[str]:
        return list(self._requests)

    def __len__(self) -> int:
        return len(self._requests)

    async def _run(self, request: InFlightRequest, executor: Callable[[], Awaitable[T]]) -> T:
        try:
            return await executor()
        finally:
            if self._requests.get(request.key) is request:
                del self._requests[request.key]


def _retrieve_exception(task: asyncio.Future[Any]) -> None:
    # waiters re-raise the exception; this only stops "never retrieved" warnings
    # when every waiter was cancelled first
    if not task.cancelled():
        task.exception()
