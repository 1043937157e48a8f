"""Resolution event payloads."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from uuid import UUID

RESOLUTION_PROPOSED_EVENT_TYPE: str = "resolution.record.proposed"
RESOLUTION_STATUS_CHANGED_EVENT_TYPE: str = "resolution.record.status_changed"
RESOLUTION_OUTCOME_RECORDED_EVENT_TYPE: str = "resolution.outcome.recorded"


@dataclass(frozen=True, eq=True)
class ResolutionProposedEvent:
    """Payload emitted when a resolution is proposed or supersedes another."""

    resolution_id: UUID
    resolution_number: str
    proposer: str
    seconder: str | None
    classification: str
    supersedes_id: UUID | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "resolution_id": str(self.resolution_id),
            "resolution_number": self.resolution_number,
            "proposer": self.proposer,
            "seconder": self.seconder,
            "classification": self.classification,
            "supersedes_id": str(self.supersedes_id) if self.supersedes_id else None,
        }


@dataclass(frozen=True, eq=True)
class ResolutionStatusChangedEvent:
    """Payload emitted for seconding, tabling, withdrawal and outcomes."""

    resolution_id: UUID
    from_status: str
    to_status: str
    actor: str
    session_item_id: UUID | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "resolution_id": str(self.resolution_id),
            "from_status": self.from_status,
            "to_status": self.to_status,
            "actor": self.actor,
            "session_item_id": (
                str(self.session_item_id) if self.session_item_id else None
            ),
        }
