"""Clock port for the governance services.

Proxy effective windows, voting deadlines, transition timestamps and
audit `occurred_at` values are all read from one injected clock so that a
test can freeze time at a deadline boundary instead of sleeping.
"""

from abc import ABC, abstractmethod
from datetime import datetime


class TimeAuthorityProtocol(ABC):
    """Source of wall-clock and monotonic time.

    TimeAuthorityService reads the system clock; tests use
    tests.helpers.fake_time_authority.FakeTimeAuthority.
    """

    @abstractmethod
    def now(self) -> datetime:
        """Current instant as a timezone-aware UTC datetime."""

    @abstractmethod
    def utcnow(self) -> datetime:
        """Alias of now(), kept for callers that spell it this way."""

    @abstractmethod
    def monotonic(self) -> float:
        """Seconds on a clock that never goes backwards.

        Only differences are meaningful. Used for sweep durations, never
        for stored timestamps.
        """
