"""Audit event envelope.

Every state transition, grant, vote and outcome is emitted to the audit
sink wrapped in a GovernanceEvent. Payloads are frozen dataclasses defined
per area (workflow, proxy, voting, resolution) and serialized with their
own `to_dict()`.

Developer Golden Rules:
1. USE to_dict() - Never use asdict() for event serialization
2. INCLUDE schema_version - All envelopes carry schema_version
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol
from uuid import UUID, uuid4

GOVERNANCE_EVENT_SCHEMA_VERSION: str = "1.0.0"


class EventPayload(Protocol):
    """Anything serializable into an event envelope."""

    def to_dict(self) -> dict[str, Any]: ...


@dataclass(frozen=True, eq=True)
class GovernanceEvent:
    """Envelope for an audit event.

    Attributes:
        event_id: Unique identifier for this event.
        event_type: Dotted type string, e.g. "meeting.workflow.transitioned".
        meeting_id: Meeting the event belongs to.
        occurred_at: When the change took effect (UTC).
        payload: Serialized payload.
        correlation_id: Request correlation id, when one is bound.
    """

    event_id: UUID
    event_type: str
    meeting_id: UUID
    occurred_at: datetime
    payload: dict[str, Any] = field(default_factory=dict)
    correlation_id: str | None = None
    schema_version: str = GOVERNANCE_EVENT_SCHEMA_VERSION

    @classmethod
    def create(
        cls,
        event_type: str,
        meeting_id: UUID,
        payload: EventPayload,
        occurred_at: datetime,
        correlation_id: str | None = None,
    ) -> GovernanceEvent:
        return cls(
            event_id=uuid4(),
            event_type=event_type,
            meeting_id=meeting_id,
            occurred_at=occurred_at,
            payload=payload.to_dict(),
            correlation_id=correlation_id,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_id": str(self.event_id),
            "event_type": self.event_type,
            "meeting_id": str(self.meeting_id),
            "occurred_at": self.occurred_at.isoformat(),
            "payload": dict(self.payload),
            "correlation_id": self.correlation_id,
            "schema_version": self.schema_version,
        }
