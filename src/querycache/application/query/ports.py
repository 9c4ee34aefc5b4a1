"""Query ports – the remote fetch collaborator."""
from __future__ import annotations

from typing import Any, Literal, Protocol, runtime_checkable

__all__ = ["FetchMethod", "RemoteFetch"]

type FetchMethod = Literal["query", "mutate"]


@runtime_checkable
class RemoteFetch(Protocol):
    """Port: performs one remote call.

    Must raise on any non-success outcome (timeout, non-2xx status,
    malformed body); the cache layer treats every exception alike.
    """

    async def __call__(self, endpoint: str, args: Any, method: FetchMethod) -> Any: ...
