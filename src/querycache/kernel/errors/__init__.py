"""Kernel error hierarchy – public re-export surface.

Hierarchy::

    BaseError
    ├── DomainError              (domain.py)
    │   ├── InvariantViolationError
    │   ├── NotFoundError
    │   └── ValidationError
    │       ├── SerializationError
    │       └── InvalidTagError
    ├── ApplicationError         (application.py)
    │   ├── UnknownEndpointError
    │   ├── FallbackGenerationError
    │   ├── MutationFailure
    │   ├── EndpointNotDefinedError
    │   └── ClientNotConfiguredError
    └── InfrastructureError      (infrastructure.py)
        ├── TransportFailure
        ├── ExternalServiceError
        ├── TimeoutError
        └── UnknownRouteError
"""

from querycache.kernel.errors.application import (
    ApplicationError,
    ClientNotConfiguredError,
    EndpointNotDefinedError,
    FallbackGenerationError,
    MutationFailure,
    UnknownEndpointError,
)
from querycache.kernel.errors.base import BaseError
from querycache.kernel.errors.domain import (
    DomainError,
    InvalidTagError,
    InvariantViolationError,
    NotFoundError,
    SerializationError,
    ValidationError,
)
from querycache.kernel.errors.infrastructure import (
    ExternalServiceError,
    InfrastructureError,
    TimeoutError,
    TransportFailure,
    UnknownRouteError,
)

__all__ = [
    "ApplicationError",
    "BaseError",
    "ClientNotConfiguredError",
    "DomainError",
    "EndpointNotDefinedError",
    "ExternalServiceError",
    "FallbackGenerationError",
    "InfrastructureError",
    "InvalidTagError",
    "InvariantViolationError",
    "MutationFailure",
    "NotFoundError",
    "SerializationError",
    "TimeoutError",
    "TransportFailure",
    "UnknownEndpointError",
    "UnknownRouteError",
    "ValidationError",
]
