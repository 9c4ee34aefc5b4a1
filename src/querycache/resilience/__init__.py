"""Resilience – fallback synthesis for failed remote fetches."""

from querycache.resilience.fallback import (
    FallbackGenerator,
    FallbackPolicy,
    FallbackResult,
    FallbackSynthesizer,
    Resolution,
    UnknownEndpointFallback,
)

__all__ = [
    "FallbackGenerator",
    "FallbackPolicy",
    "FallbackResult",
    "FallbackSynthesizer",
    "Resolution",
    "UnknownEndpointFallback",
]
