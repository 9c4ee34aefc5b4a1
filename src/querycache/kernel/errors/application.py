"""Application-layer errors – outcomes surfaced to cache consumers."""

from __future__ import annotations

from typing import Any

from querycache.kernel.errors.base import BaseError


class ApplicationError(BaseError):
    """Cross-cutting application-layer concern."""

    default_code = "application_error"


class UnknownEndpointError(ApplicationError):
    """The primary fetch failed and no fallback generator is registered."""

    default_code = "unknown_endpoint_fallback"

    def __init__(self, endpoint: str, message: str | None = None, **kwargs: Any) -> None:
        super().__init__(
            message or f"No fallback generator registered for endpoint '{endpoint}'",
            detail={"endpoint": endpoint},
            **kwargs,
        )
        self.endpoint = endpoint


class FallbackGenerationError(ApplicationError):
    """A registered fallback generator raised while synthesizing data."""

    default_code = "fallback_generation_failed"

    def __init__(self, endpoint: str, **kwargs: Any) -> None:
        super().__init__(
            f"Fallback generator for endpoint '{endpoint}' failed",
            detail={"endpoint": endpoint},
            **kwargs,
        )
        self.endpoint = endpoint


class MutationFailure(ApplicationError):
    """Neither the primary fetch nor a fallback produced a mutation result."""

    default_code = "mutation_failed"

    def __init__(self, endpoint: str, **kwargs: Any) -> None:
        super().__init__(
            f"Mutation '{endpoint}' failed",
            detail={"endpoint": endpoint},
            **kwargs,
        )
        self.endpoint = endpoint


class EndpointNotDefinedError(ApplicationError):
    """The endpoint was never declared on the client."""

    default_code = "endpoint_not_defined"

    def __init__(self, endpoint: str, kind: str | None = None) -> None:
        label = f"{kind} endpoint" if kind else "Endpoint"
        super().__init__(f"{label} '{endpoint}' is not defined", detail={"endpoint": endpoint})
        self.endpoint = endpoint
        self.kind = kind


class ClientNotConfiguredError(ApplicationError):
    """The process-wide query client was requested before being configured."""

    default_code = "client_not_configured"

    def __init__(self) -> None:
        super().__init__("No query client configured; call configure_query_client() first")


__all__ = [
    "ApplicationError",
    "ClientNotConfiguredError",
    "EndpointNotDefinedError",
    "FallbackGenerationError",
    "MutationFailure",
    "UnknownEndpointError",
]
