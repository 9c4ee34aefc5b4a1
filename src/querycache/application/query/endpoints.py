"""Query – endpoint definitions declared by the host application."""
from __future__ import annotations

import dataclasses
from enum import StrEnum

from querycache.application.cache.tags import TagProvider
from querycache.kernel.errors import EndpointNotDefinedError
from querycache.resilience.fallback.synthesizer import FallbackGenerator

__all__ = ["EndpointDefinition", "EndpointKind", "EndpointRegistry"]


class EndpointKind(StrEnum):
    QUERY = "query"
    MUTATION = "mutation"


@dataclasses.dataclass(frozen=True)
class EndpointDefinition:
    """A named endpoint plus the tags it provides (queries) or invalidates (mutations)."""

    name: str
    kind: EndpointKind
    provides: TagProvider = None
    invalidates: TagProvider = None
    fallback: FallbackGenerator | None = None


class EndpointRegistry:
    def __init__(self) -> None:
        self._definitions: dict[str, EndpointDefinition] = {}

    def add(self, definition: EndpointDefinition) -> EndpointDefinition:
        self._definitions[definition.name] = definition
        return definition

    def get(self, name: str, kind: EndpointKind | None = None) -> EndpointDefinition:
        definition = self._definitions.get(name)
        if definition is None or (kind is not None and definition.kind is not kind):
            raise EndpointNotDefinedError(name, kind.value if kind else None)
        return definition

    def find(self, name: str) -> EndpointDefinition | None:
        return self._definitions.get(name)

    def names(self, kind: EndpointKind | None = None) -> list[str]:
        return sorted(
            name for name, d in self._definitions.items() if kind is None or d.kind is kind
        )

    def __contains__(self, name: object) -> bool:
        return name in self._definitions
