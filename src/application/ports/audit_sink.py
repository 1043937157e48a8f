"""Audit sink port.

Every state transition, grant, vote and outcome is emitted to an external
audit log. Emission is a side channel: a failing sink must never change
the outcome of the engine operation that produced the event.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Protocol

from src.domain.events.governance_event import GovernanceEvent


class AuditSinkPort(Protocol):
    """Protocol for fire-and-forget audit emission."""

    @abstractmethod
    async def emit(self, event: GovernanceEvent) -> None:
        """Deliver an event to the audit log.

        Implementations may raise; callers contain the failure.
        """
        ...
