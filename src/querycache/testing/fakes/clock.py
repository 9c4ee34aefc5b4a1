"""Testing fakes – FakeClock factory."""
from __future__ import annotations

from datetime import UTC, datetime

from querycache.kernel.time import FrozenClock

DEFAULT_START = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


def FakeClock(start: datetime = DEFAULT_START) -> FrozenClock:
    """Return a ``FrozenClock`` pinned to *start* (2026-01-01 12:00 UTC by default).

    Advance it to age cache entries past the retention window::

        clock = FakeClock()
        clock.advance(seconds=61)
    """
    return FrozenClock(start)


__all__ = ["DEFAULT_START", "FakeClock"]
