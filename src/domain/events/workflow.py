"""Workflow event payloads.

- MeetingOpenedEvent: meeting and workflow instance created
- StageTransitionedEvent: any recorded StageTransition (advance, fail,
  recover, cancel, completion)
- QuorumRecordedEvent: attendance recorded against quorum
- MeetingArchivedEvent: meeting archived after a terminal workflow
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

from src.domain.models.meeting import StageTransition

MEETING_OPENED_EVENT_TYPE: str = "meeting.workflow.opened"
STAGE_TRANSITIONED_EVENT_TYPE: str = "meeting.workflow.transitioned"
QUORUM_RECORDED_EVENT_TYPE: str = "meeting.quorum.recorded"
MEETING_ARCHIVED_EVENT_TYPE: str = "meeting.record.archived"


@dataclass(frozen=True, eq=True)
class MeetingOpenedEvent:
    """Payload emitted when a meeting and its workflow instance are created."""

    meeting_id: UUID
    instance_id: UUID
    organization_id: str
    workflow_type: str
    stage_sequence: tuple[str, ...]
    controller: str
    quorum_required: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "meeting_id": str(self.meeting_id),
            "instance_id": str(self.instance_id),
            "organization_id": self.organization_id,
            "workflow_type": self.workflow_type,
            "stage_sequence": list(self.stage_sequence),
            "controller": self.controller,
            "quorum_required": self.quorum_required,
        }


@dataclass(frozen=True, eq=True)
class StageTransitionedEvent:
    """Payload wrapping an immutable StageTransition record."""

    transition: StageTransition

    def to_dict(self) -> dict[str, Any]:
        return self.transition.to_dict()


@dataclass(frozen=True, eq=True)
class QuorumRecordedEvent:
    """Payload emitted when attendance is recorded."""

    instance_id: UUID
    attendance_count: int
    quorum_required: int
    quorum_achieved: bool
    recorded_by: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "instance_id": str(self.instance_id),
            "attendance_count": self.attendance_count,
            "quorum_required": self.quorum_required,
            "quorum_achieved": self.quorum_achieved,
            "recorded_by": self.recorded_by,
        }


@dataclass(frozen=True, eq=True)
class MeetingArchivedEvent:
    """Payload emitted when a meeting is archived."""

    meeting_id: UUID
    archived_by: str
    archived_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "meeting_id": str(self.meeting_id),
            "archived_by": self.archived_by,
            "archived_at": self.archived_at.isoformat(),
        }
