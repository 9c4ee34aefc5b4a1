"""Domain errors – invalid input handed to the cache layer."""

from __future__ import annotations

from typing import Any

from querycache.kernel.errors.base import BaseError


class DomainError(BaseError):
    """Raised when caller-supplied data breaks a cache-layer rule."""

    default_code = "domain_error"


class InvariantViolationError(DomainError):
    """A cache entry was built in an inconsistent state."""

    default_code = "invariant_violation"


class ValidationError(DomainError):
    """Input data does not meet validation rules.

    ``errors`` is a list of field-level validation failures.
    """

    default_code = "validation_error"

    def __init__(
        self,
        message: str,
        *,
        errors: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.errors: list[dict[str, Any]] = errors or []

    def to_dict(self) -> dict[str, Any]:
        base = super().to_dict()
        base["errors"] = self.errors
        return base


class SerializationError(ValidationError):
    """Query arguments cannot be turned into a cache key.

    ``path`` points at the offending value (``"args.filters[2]"``).
    """

    default_code = "serialization_error"

    def __init__(
        self,
        message: str,
        *,
        path: str = "args",
        value_type: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message,
            errors=[{"path": path, "type": value_type}],
            **kwargs,
        )
        self.path = path
        self.value_type = value_type


class NotFoundError(DomainError):
    """The requested resource does not exist."""

    default_code = "not_found"

    def __init__(
        self,
        resource: str,
        identifier: Any = None,
        **kwargs: Any,
    ) -> None:
        msg = f"{resource} not found"
        if identifier is not None:
            msg = f"{resource} '{identifier}' not found"
        super().__init__(msg, detail={"resource": resource, "identifier": identifier}, **kwargs)
        self.resource = resource
        self.identifier = identifier


class InvalidTagError(ValidationError):
    """A tag declaration is not a ``Tag``, a type string, a pair or a mapping."""

    default_code = "invalid_tag"


__all__ = [
    "DomainError",
    "InvalidTagError",
    "InvariantViolationError",
    "NotFoundError",
    "SerializationError",
    "ValidationError",
]
