"""Frozen clock for governance tests.

Proxy windows and voting deadlines are compared against the injected
clock, so a test reaches a boundary by moving this clock rather than by
sleeping:

    >>> clock = FakeTimeAuthority()
    >>> grant_ends = clock.now() + timedelta(hours=1)
    >>> clock.advance(delta=timedelta(hours=1))
    >>> clock.now() == grant_ends
    True
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from src.application.ports.time_authority import TimeAuthorityProtocol

# Monday 09:00 UTC, a typical meeting start.
DEFAULT_TEST_TIME = datetime(2026, 3, 2, 9, 0, 0, tzinfo=timezone.utc)


def _aware(dt: datetime) -> datetime:
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)


class FakeTimeAuthority(TimeAuthorityProtocol):
    """Clock that only moves when told to."""

    def __init__(self, frozen_at: datetime | None = None) -> None:
        self._now = _aware(frozen_at or DEFAULT_TEST_TIME)
        self._elapsed = 0.0

    def now(self) -> datetime:
        return self._now

    def utcnow(self) -> datetime:
        return self._now

    def monotonic(self) -> float:
        return self._elapsed

    def advance(
        self,
        seconds: float | int | None = None,
        delta: timedelta | None = None,
    ) -> None:
        """Move forward by `delta`, or by `seconds` when no delta is given.

        Raises:
            ValueError: Neither amount given, or the amount is negative.
        """
        if delta is None:
            if seconds is None:
                raise ValueError("advance() needs seconds or delta")
            delta = timedelta(seconds=seconds)
        if delta < timedelta(0):
            raise ValueError(f"clock cannot move backwards ({delta}); use set_time()")
        self._now += delta
        self._elapsed += delta.total_seconds()

    def set_time(self, dt: datetime) -> None:
        """Jump to `dt`. The monotonic reading is left alone."""
        self._now = _aware(dt)

    def __repr__(self) -> str:
        return f"FakeTimeAuthority(now={self._now.isoformat()})"
