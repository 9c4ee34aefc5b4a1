"""Application cache – stable cache keys for (endpoint, args) pairs."""
from __future__ import annotations

import inspect
import json
import math
from collections.abc import Mapping
from typing import Any

from querycache.kernel.errors import SerializationError

__all__ = ["CacheKey", "KeySerializer", "serialize_key"]

type CacheKey = str

_PRIMITIVES = (str, int, float, bool)


class KeySerializer:
    """Turns query arguments into canonical data and deterministic key strings.

    Mapping keys are sorted recursively, so two argument objects holding the
    same pairs in a different insertion order produce the same key.
    ``None``-valued mapping fields are dropped; ``None`` and ``{}`` as whole
    arguments are equivalent.
    """

    @classmethod
    def normalize(cls, args: Any) -> Any:
        """Return *args* as plain JSON data with sorted mapping keys."""
        if args is None:
            return {}
        return cls._canonical(args, "args", set())

    @classmethod
    def serialize(cls, endpoint: str, args: Any = None) -> CacheKey:
        return cls.key(endpoint, cls.normalize(args))

    @classmethod
    def key(cls, endpoint: str, canonical: Any) -> CacheKey:
        """Key for arguments already passed through :meth:`normalize`."""
        return f"{endpoint}({cls.dumps(canonical)})"

    @staticmethod
    def dumps(canonical: Any) -> str:
        return json.dumps(canonical, sort_keys=True, separators=(",", ":"), ensure_ascii=False)

    @classmethod
    def _canonical(cls, value: Any, path: str, seen: set[int]) -> Any:
        if value is None or isinstance(value, _PRIMITIVES):
            if isinstance(value, float) and not math.isfinite(value):
                raise SerializationError(
                    f"Non-finite number at {path}", path=path, value_type="float"
                )
            return value

        if callable(value) or inspect.isawaitable(value):
            raise SerializationError(
                f"Cannot serialize {type(value).__name__} at {path}",
                path=path,
                value_type=type(value).__name__,
            )

        if isinstance(value, Mapping | list | tuple):
            marker = id(value)
            if marker in seen:
                raise SerializationError(f"Cyclic reference at {path}", path=path, value_type="cycle")
            seen.add(marker)
            try:
                if isinstance(value, Mapping):
                    return cls._canonical_mapping(value, path, seen)
                return [cls._canonical(item, f"{path}[{i}]", seen) for i, item in enumerate(value)]
            finally:
                seen.discard(marker)

        raise SerializationError(
            f"Unsupported argument type {type(value).__name__} at {path}",
            path=path,
            value_type=type(value).__name__,
        )

    @classmethod
    def _canonical_mapping(cls, value: Mapping[Any, Any], path: str, seen: set[int]) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for name in value:
            if not isinstance(name, str):
                raise SerializationError(
                    f"Mapping keys must be strings at {path}, got {type(name).__name__}",
                    path=path,
                    value_type=type(name).__name__,
                )
        for name in sorted(value):
            item = value[name]
            if item is None:
                continue
            result[name] = cls._canonical(item, f"{path}.{name}", seen)
        return result


serialize_key = KeySerializer.serialize
