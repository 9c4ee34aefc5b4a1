"""HTTP adapter – HttpxRemoteFetch (the default remote fetch collaborator)."""
from __future__ import annotations

import dataclasses
import json
import re
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

import httpx

from querycache.kernel.errors import (
    ExternalServiceError,
    SerializationError,
    TimeoutError as AppTimeoutError,
    UnknownRouteError,
)
from querycache.observability.logging import get_logger

DEFAULT_BASE_URL = "http://localhost:3000/api"

_BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})
_PLACEHOLDER = re.compile(r"\{(\w+)\}")


@dataclasses.dataclass(frozen=True)
class Route:
    """HTTP method and path template; ``{name}`` segments are taken from the args.

    *body* names the argument sent as the JSON body; by default every
    argument not used by the path is sent.
    """

    method: str
    path: str
    body: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", self.method.upper())

    @property
    def placeholders(self) -> tuple[str, ...]:
        return tuple(_PLACEHOLDER.findall(self.path))

    def render(self, args: Mapping[str, Any]) -> tuple[str, dict[str, Any]]:
        """Fill the path template and return it with the args left over."""
        remaining = dict(args)
        values: dict[str, str] = {}
        for name in self.placeholders:
            if name not in remaining:
                raise KeyError(f"route {self.path!r} needs argument {name!r}")
            values[name] = quote(str(remaining.pop(name)), safe="")
        return _PLACEHOLDER.sub(lambda m: values[m.group(1)], self.path), remaining


class HttpxRemoteFetch:
    """Async httpx client implementing the remote fetch port.

    Endpoint names are mapped to HTTP calls through *routes*. GET and DELETE
    send the arguments as query parameters (lists as repeated parameters);
    POST, PUT and PATCH send them as a JSON body. Every non-success outcome
    raises, so the query layer can fall back.
    """

    def __init__(
        self,
        routes: Mapping[str, Route],
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        **kwargs: Any,
    ) -> None:
        self._routes = dict(routes)
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, **kwargs)
        self._log = get_logger(__name__)

    @property
    def routes(self) -> dict[str, Route]:
        return dict(self._routes)

    async def __aenter__(self) -> "HttpxRemoteFetch":
        await self._client.__aenter__()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self._client.__aexit__(*args)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __call__(self, endpoint: str, args: Any, method: str = "query") -> Any:
        route = self._routes.get(endpoint)
        if route is None:
            raise UnknownRouteError(endpoint)
        if args is None:
            args = {}
        if not isinstance(args, Mapping):
            # scalar args (a bare id) fill the single placeholder of the route
            names = route.placeholders
            args = {names[0]: args} if len(names) == 1 else {}
        url, remaining = route.render(args)

        kwargs: dict[str, Any] = {}
        if route.method in _BODY_METHODS:
            kwargs["json"] = remaining.get(route.body) if route.body else remaining
        elif remaining:
            kwargs["params"] = _query_params(remaining)

        self._log.debug("http_request", endpoint=endpoint, method=route.method, url=url)
        response = await self._request(route.method, url, **kwargs)
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise SerializationError(
                f"Malformed JSON from {route.method} {url}",
                path="response",
                value_type=response.headers.get("content-type"),
            ) from exc

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, url, **kwargs)
            response.raise_for_status()
            return response
        except httpx.TimeoutException as exc:
            raise AppTimeoutError(f"HTTP request timed out: {method} {url}") from exc
        except httpx.HTTPStatusError as exc:
            raise ExternalServiceError(
                service=url,
                message=f"HTTP {exc.response.status_code} from {method} {url}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise ExternalServiceError(service=url, message=str(exc)) from exc


def _query_params(args: Mapping[str, Any]) -> dict[str, Any]:
    params: dict[str, Any] = {}
    for name, value in args.items():
        if isinstance(value, bool):
            params[name] = "true" if value else "false"
        elif isinstance(value, (list, tuple)):
            params[name] = [_scalar(v) for v in value]
        else:
            params[name] = _scalar(value)
    return params


def _scalar(value: Any) -> Any:
    if isinstance(value, (dict, list)):
        return json.dumps(value, sort_keys=True, separators=(",", ":"))
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return value


__all__ = ["DEFAULT_BASE_URL", "HttpxRemoteFetch", "Route"]
