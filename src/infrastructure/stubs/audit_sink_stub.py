"""In-memory stub for AuditSinkPort.

Records every emitted event. Tests can make the sink fail or stall to
verify that engine operations are unaffected by audit problems.
"""

from __future__ import annotations

import asyncio

from src.domain.events.governance_event import GovernanceEvent


class AuditSinkStub:
    """In-memory implementation of AuditSinkPort."""

    def __init__(self) -> None:
        self._events: list[GovernanceEvent] = []
        self._failure: Exception | None = None
        self._delay_seconds: float = 0.0

    async def emit(self, event: GovernanceEvent) -> None:
        if self._delay_seconds:
            await asyncio.sleep(self._delay_seconds)
        if self._failure is not None:
            raise self._failure
        self._events.append(event)

    # Test helpers

    def fail_with(self, error: Exception | None) -> None:
        """Make subsequent emits raise `error` (None restores normal behavior)."""
        self._failure = error

    def stall_for(self, seconds: float) -> None:
        """Delay each emit by `seconds`."""
        self._delay_seconds = seconds

    @property
    def events(self) -> list[GovernanceEvent]:
        return list(self._events)

    def events_of_type(self, event_type: str) -> list[GovernanceEvent]:
        return [e for e in self._events if e.event_type == event_type]

    def clear(self) -> None:
        """Clear recorded events (for testing)."""
        self._events.clear()
