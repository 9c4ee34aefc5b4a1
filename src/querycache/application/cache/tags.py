"""Application cache – Tag model and the tag invalidation index."""
from __future__ import annotations

import threading
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from querycache.kernel.errors import InvalidTagError
from querycache.observability.logging import get_logger

__all__ = [
    "Tag",
    "TagIndex",
    "TagLike",
    "TagProvider",
    "resolve_tags",
]

_log = get_logger(__name__)


@dataclass(frozen=True)
class Tag:
    """Label attached to cached data.

    ``Tag("Job", "42")`` names one record, ``Tag("Job")`` the whole type.
    Used for invalidation, an id-less tag is a wildcard over its type.
    """

    type: str
    id: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.type, str) or not self.type:
            raise InvalidTagError(f"Tag type must be a non-empty string, got {self.type!r}")
        if self.id is not None and not isinstance(self.id, str):
            object.__setattr__(self, "id", str(self.id))

    @property
    def is_wildcard(self) -> bool:
        return self.id is None

    def matches(self, provided: Tag) -> bool:
        """True when invalidating ``self`` affects an entry providing *provided*."""
        if self.type != provided.type:
            return False
        return self.id is None or self.id == provided.id

    @classmethod
    def coerce(cls, value: TagLike) -> Tag:
        if isinstance(value, Tag):
            return value
        if isinstance(value, str):
            return cls(value)
        if isinstance(value, tuple) and len(value) == 2:
            return cls(value[0], value[1])
        if isinstance(value, Mapping) and "type" in value:
            return cls(value["type"], value.get("id"))
        raise InvalidTagError(f"Cannot interpret {value!r} as a tag")

    def __str__(self) -> str:
        return self.type if self.id is None else f"{self.type}:{self.id}"


type TagLike = Tag | str | tuple[str, Any] | Mapping[str, Any]
type TagProvider = Iterable[TagLike] | Callable[[Any, Any, Any], Iterable[TagLike] | None] | None


def resolve_tags(
    provider: TagProvider,
    result: Any = None,
    error: Any = None,
    args: Any = None,
) -> frozenset[Tag]:
    """Evaluate a static or function-form tag provider into a tag set.

    Function providers are called as ``provider(result, error, args)``.
    """
    if provider is None:
        return frozenset()
    declared = provider(result, error, args) if callable(provider) else provider
    if declared is None:
        return frozenset()
    if isinstance(declared, str | Tag):
        declared = [declared]
    return frozenset(Tag.coerce(tag) for tag in declared)


class TagIndex:
    """Inverted index tag type -> id -> cache keys.

    An optional ``tag_types`` set names the declared tag types; indexing or
    invalidating an undeclared type is logged, not rejected.
    """

    def __init__(self, tag_types: Iterable[str] | None = None) -> None:
        self._by_type: dict[str, dict[str | None, set[str]]] = {}
        self._key_tags: dict[str, frozenset[Tag]] = {}
        self._tag_types = frozenset(tag_types or ())
        self._lock = threading.RLock()

    def index(self, key: str, tags: Iterable[Tag]) -> None:
        """Replace the tags recorded for *key*."""
        tags = frozenset(tags)
        self._check_types(tags)
        with self._lock:
            self._unlink(key)
            if not tags:
                return
            self._key_tags[key] = tags
            for tag in tags:
                self._by_type.setdefault(tag.type, {}).setdefault(tag.id, set()).add(key)

    def remove(self, key: str) -> None:
        with self._lock:
            self._unlink(key)

    def tags_for(self, key: str) -> frozenset[Tag]:
        with self._lock:
            return self._key_tags.get(key, frozenset())

    def match(self, tags: Iterable[TagLike]) -> set[str]:
        """Keys whose indexed tags are matched by any of *tags*."""
        wanted = [Tag.coerce(t) for t in tags]
        self._check_types(wanted)
        keys: set[str] = set()
        with self._lock:
            for tag in wanted:
                ids = self._by_type.get(tag.type)
                if not ids:
                    continue
                if tag.is_wildcard:
                    for bucket in ids.values():
                        keys.update(bucket)
                else:
                    keys.update(ids.get(tag.id, ()))
        return keys

    def invalidate(self, tags: Iterable[TagLike]) -> list[str]:
        """Sorted union of the keys matched by *tags*."""
        return sorted(self.match(tags))

    def clear(self) -> None:
        with self._lock:
            self._by_type.clear()
            self._key_tags.clear()

    def __len__(self) -> int:
        return len(self._key_tags)

    def _unlink(self, key: str) -> None:
        for tag in self._key_tags.pop(key, ()):
            ids = self._by_type.get(tag.type)
            if ids is None:
                continue
            bucket = ids.get(tag.id)
            if bucket is not None:
                bucket.discard(key)
                if not bucket:
                    del ids[tag.id]
            if not ids:
                del self._by_type[tag.type]

    def _check_types(self, tags: Iterable[Tag]) -> None:
        if not self._tag_types:
            return
        for tag in tags:
            if tag.type not in self._tag_types:
                _log.warning("unknown_tag_type", tag=str(tag), declared=sorted(self._tag_types))
