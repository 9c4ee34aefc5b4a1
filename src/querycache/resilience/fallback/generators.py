"""Resilience – helpers for list-shaped fallback generators.

Generators built here honor the same filtering and pagination arguments as
the real endpoints, so a screen rendering fallback data behaves like it
would online::

    synth.register(
        "jobs",
        list_generator(JOBS, search_fields=("title",), envelope="jobs"),
    )
"""
from __future__ import annotations

import hashlib
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from querycache.application.cache.keys import KeySerializer

__all__ = [
    "DEFAULT_LIMIT",
    "filter_by_equals",
    "filter_by_search",
    "list_generator",
    "paginate",
    "stable_id",
]

DEFAULT_LIMIT = 10


def _coerce_positive(value: Any, default: int) -> int:
    if value is None:
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return max(1, number)


def filter_by_search(
    items: Iterable[Mapping[str, Any]],
    term: str | None,
    fields: Sequence[str],
) -> list[Mapping[str, Any]]:
    """Keep items where any of *fields* contains *term*, ignoring case."""
    items = list(items)
    if not term:
        return items
    needle = str(term).casefold()
    return [
        item
        for item in items
        if any(needle in str(item.get(field, "")).casefold() for field in fields)
    ]


def filter_by_equals(
    items: Iterable[Mapping[str, Any]],
    field: str,
    value: Any,
) -> list[Mapping[str, Any]]:
    items = list(items)
    if value is None:
        return items
    return [item for item in items if item.get(field) == value]


def paginate(
    items: Sequence[Any],
    page: Any = None,
    limit: Any = None,
    *,
    default_limit: int = DEFAULT_LIMIT,
) -> tuple[list[Any], int, int]:
    """Slice *items* for a 1-based *page*; returns ``(slice, page, limit)``."""
    page_number = _coerce_positive(page, 1)
    size = _coerce_positive(limit, default_limit)
    start = (page_number - 1) * size
    return list(items[start:start + size]), page_number, size


def stable_id(*parts: Any) -> str:
    """Deterministic short id derived from *parts* (no clock, no randomness)."""
    canonical = KeySerializer.dumps(KeySerializer.normalize(list(parts)))
    return hashlib.sha256(canonical.encode()).hexdigest()[:12]


def list_generator(
    items: Sequence[Mapping[str, Any]],
    *,
    search_fields: Sequence[str] = ("name",),
    substring_fields: Sequence[str] = (),
    equals_fields: Sequence[str] = (),
    envelope: str | None = None,
    default_limit: int = DEFAULT_LIMIT,
) -> Callable[[Mapping[str, Any]], Any]:
    """Build a generator over a fixed list.

    ``search`` matches any of *search_fields*; every argument named in
    *substring_fields* is a case-insensitive substring filter on the field of
    the same name and every argument in *equals_fields* an exact filter.
    ``page``/``limit`` slice the result. With *envelope* the result is
    ``{envelope: [...], "total": n, "page": p, "limit": l}`` with ``total``
    counted before slicing; without it a plain list is returned.
    """
    snapshot = [dict(item) for item in items]

    def generate(args: Mapping[str, Any]) -> Any:
        args = args or {}
        matches: list[Mapping[str, Any]] = filter_by_search(snapshot, args.get("search"), search_fields)
        for field in substring_fields:
            matches = filter_by_search(matches, args.get(field), (field,))
        for field in equals_fields:
            matches = filter_by_equals(matches, field, args.get(field))
        window, page, limit = paginate(
            matches, args.get("page"), args.get("limit"), default_limit=default_limit
        )
        if envelope is None:
            return window
        return {envelope: window, "total": len(matches), "page": page, "limit": limit}

    return generate
