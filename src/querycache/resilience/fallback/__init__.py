"""Resilience – fallback synthesis for failed remote fetches."""
from querycache.resilience.fallback.generators import (
    DEFAULT_LIMIT,
    filter_by_equals,
    filter_by_search,
    list_generator,
    paginate,
    stable_id,
)
from querycache.resilience.fallback.policy import FallbackPolicy, Resolution
from querycache.resilience.fallback.synthesizer import (
    FallbackGenerator,
    FallbackResult,
    FallbackSynthesizer,
    UnknownEndpointFallback,
)

__all__ = [
    "DEFAULT_LIMIT",
    "FallbackGenerator",
    "FallbackPolicy",
    "FallbackResult",
    "FallbackSynthesizer",
    "Resolution",
    "UnknownEndpointFallback",
    "filter_by_equals",
    "filter_by_search",
    "list_generator",
    "paginate",
    "stable_id",
]
