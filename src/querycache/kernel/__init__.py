"""Kernel – framework-agnostic building blocks (errors, clock)."""

from querycache.kernel.errors import (
    ApplicationError,
    BaseError,
    DomainError,
    InfrastructureError,
    SerializationError,
    TransportFailure,
    UnknownEndpointError,
)
from querycache.kernel.time import Clock, FrozenClock, SystemClock

__all__ = [
    "ApplicationError",
    "BaseError",
    "Clock",
    "DomainError",
    "FrozenClock",
    "InfrastructureError",
    "SerializationError",
    "SystemClock",
    "TransportFailure",
    "UnknownEndpointError",
]
