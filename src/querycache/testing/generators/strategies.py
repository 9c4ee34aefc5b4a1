"""Testing generators – Hypothesis property-based testing strategies.

Requires the ``hypothesis`` package:

    pip install hypothesis
    # or
    pip install "querycache[test]"
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from hypothesis.strategies import SearchStrategy  # type: ignore[import-untyped]

    from querycache.application.cache.tags import Tag


def _require_hypothesis() -> Any:
    """Lazy import guard – raises a clear error when hypothesis is absent."""
    try:
        import hypothesis.strategies as st  # type: ignore[import-untyped]
        return st
    except ImportError as exc:
        raise ImportError(
            "Install 'hypothesis' to use property-based testing strategies: "
            "pip install hypothesis"
        ) from exc


_TAG_TYPES: tuple[str, ...] = ("Job", "SavedJob", "Application", "User", "UserProfile")


def json_values(max_leaves: int = 20) -> "SearchStrategy[Any]":
    """Arbitrarily nested JSON-compatible values (finite floats only)."""
    st = _require_hypothesis()
    scalars = (
        st.none()
        | st.booleans()
        | st.integers()
        | st.floats(allow_nan=False, allow_infinity=False)
        | st.text(max_size=12)
    )
    return st.recursive(
        scalars,
        lambda children: st.lists(children, max_size=4)
        | st.dictionaries(st.text(max_size=8), children, max_size=4),
        max_leaves=max_leaves,
    )


def json_args(max_size: int = 6) -> "SearchStrategy[dict[str, Any]]":
    """Query argument mappings as a host application would pass them.

    Example::

        @given(json_args())
        def test_key_is_stable(args):
            assert serialize_key("jobs", args) == serialize_key("jobs", dict(args))
    """
    st = _require_hypothesis()
    return st.dictionaries(st.text(min_size=1, max_size=10), json_values(), max_size=max_size)


def tags(types: tuple[str, ...] | list[str] | None = None) -> "SearchStrategy[Tag]":
    """Tags with and without ids drawn from *types* (job-board types by default)."""
    from querycache.application.cache.tags import Tag

    st = _require_hypothesis()
    selected = list(types) if types is not None else list(_TAG_TYPES)
    ids = st.none() | st.integers(min_value=1, max_value=50).map(str)
    return st.builds(Tag, type=st.sampled_from(selected), id=ids)


__all__ = ["json_args", "json_values", "tags"]
