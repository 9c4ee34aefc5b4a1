"""Infrastructure errors – remote fetch and transport failures."""

from __future__ import annotations

from typing import Any

from querycache.kernel.errors.base import BaseError


class InfrastructureError(BaseError):
    """Infrastructure / I/O failure that is not a business rule violation."""

    default_code = "infrastructure_error"


class TransportFailure(InfrastructureError):
    """The remote fetch collaborator rejected.

    Always wraps the original exception in ``cause``; the query layer masks
    it behind fallback data whenever a generator exists.
    """

    default_code = "transport_failure"

    def __init__(self, endpoint: str, *, cause: BaseException, **kwargs: Any) -> None:
        super().__init__(
            f"Remote fetch for '{endpoint}' failed: {type(cause).__name__}",
            detail={"endpoint": endpoint},
            cause=cause,
            **kwargs,
        )
        self.endpoint = endpoint


class TimeoutError(InfrastructureError):  # noqa: A001
    """An I/O operation exceeded its deadline."""

    default_code = "infrastructure_timeout"


class ExternalServiceError(InfrastructureError):
    """An external service returned an unexpected response."""

    default_code = "external_service_error"

    def __init__(
        self,
        service: str,
        message: str | None = None,
        *,
        status_code: int | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message or f"External service '{service}' error", **kwargs)
        self.service = service
        self.status_code = status_code


class UnknownRouteError(InfrastructureError):
    """The HTTP adapter has no route for the requested endpoint."""

    default_code = "unknown_route"

    def __init__(self, endpoint: str) -> None:
        super().__init__(f"No HTTP route configured for endpoint '{endpoint}'")
        self.endpoint = endpoint


__all__ = [
    "ExternalServiceError",
    "InfrastructureError",
    "TimeoutError",
    "TransportFailure",
    "UnknownRouteError",
]
