"""Meeting and workflow domain models.

A meeting is driven through an ordered sequence of procedural stages by a
WorkflowInstance. Alternate procedures (AGM, emergency, committee) are
first-class configurations selected by WorkflowType, not a single global
sequence.

Every stage change is recorded as an immutable StageTransition.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from src.domain.errors.workflow import InvalidStageSequenceError
from src.domain.primitives.prevent_delete import DeletePreventionMixin

# Actor recorded on transitions the engine performs on its own behalf
SYSTEM_ACTOR: str = "system"


# =============================================================================
# Enums
# =============================================================================


class MeetingStatus(Enum):
    """Lifecycle of the meeting record itself."""

    SCHEDULED = "scheduled"
    IN_SESSION = "in_session"
    ADJOURNED = "adjourned"
    ARCHIVED = "archived"


class WorkflowType(Enum):
    """Procedure families with their own default stage sequences."""

    STANDARD_BOARD = "standard_board"
    AGM = "agm"
    EMERGENCY = "emergency"
    COMMITTEE = "committee"
    CUSTOM = "custom"


class WorkflowStage(Enum):
    """Procedural stages a meeting moves through."""

    PRE_MEETING = "pre_meeting"
    OPENING = "opening"
    ROLL_CALL = "roll_call"
    QUORUM_CHECK = "quorum_check"
    AGENDA_APPROVAL = "agenda_approval"
    REGULAR_BUSINESS = "regular_business"
    VOTING_SESSION = "voting_session"
    NEW_BUSINESS = "new_business"
    EXECUTIVE_SESSION = "executive_session"
    CLOSING = "closing"
    POST_MEETING = "post_meeting"


class WorkflowStatus(Enum):
    """Status of a workflow instance."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    WAITING = "waiting"  # A voting session is attached
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (WorkflowStatus.COMPLETED, WorkflowStatus.CANCELLED)


class TransitionType(Enum):
    """How a stage transition was triggered."""

    MANUAL = "manual"
    AUTOMATIC = "automatic"
    TIMEOUT = "timeout"
    ERROR = "error"


# =============================================================================
# Stage sequences
# =============================================================================

DEFAULT_STAGE_SEQUENCE: tuple[WorkflowStage, ...] = (
    WorkflowStage.PRE_MEETING,
    WorkflowStage.OPENING,
    WorkflowStage.ROLL_CALL,
    WorkflowStage.QUORUM_CHECK,
    WorkflowStage.AGENDA_APPROVAL,
    WorkflowStage.REGULAR_BUSINESS,
    WorkflowStage.VOTING_SESSION,
    WorkflowStage.NEW_BUSINESS,
    WorkflowStage.CLOSING,
    WorkflowStage.POST_MEETING,
)

DEFAULT_STAGE_SEQUENCES: dict[WorkflowType, tuple[WorkflowStage, ...]] = {
    WorkflowType.STANDARD_BOARD: DEFAULT_STAGE_SEQUENCE,
    WorkflowType.AGM: DEFAULT_STAGE_SEQUENCE,
    WorkflowType.EMERGENCY: (
        WorkflowStage.PRE_MEETING,
        WorkflowStage.OPENING,
        WorkflowStage.ROLL_CALL,
        WorkflowStage.QUORUM_CHECK,
        WorkflowStage.REGULAR_BUSINESS,
        WorkflowStage.VOTING_SESSION,
        WorkflowStage.CLOSING,
        WorkflowStage.POST_MEETING,
    ),
    WorkflowType.COMMITTEE: (
        WorkflowStage.PRE_MEETING,
        WorkflowStage.OPENING,
        WorkflowStage.ROLL_CALL,
        WorkflowStage.REGULAR_BUSINESS,
        WorkflowStage.VOTING_SESSION,
        WorkflowStage.CLOSING,
        WorkflowStage.POST_MEETING,
    ),
    WorkflowType.CUSTOM: (
        WorkflowStage.PRE_MEETING,
        WorkflowStage.REGULAR_BUSINESS,
        WorkflowStage.CLOSING,
        WorkflowStage.POST_MEETING,
    ),
}

DEFAULT_VOTING_STAGES: frozenset[WorkflowStage] = frozenset(
    {WorkflowStage.VOTING_SESSION}
)


def stage_sequence_for(
    workflow_type: WorkflowType,
    stage_sequence: tuple[WorkflowStage, ...] | list[WorkflowStage] | None = None,
) -> tuple[WorkflowStage, ...]:
    """Return the stage sequence to use for a new workflow.

    An explicit sequence always wins over the workflow type default.

    Raises:
        InvalidStageSequenceError: If the sequence is empty or repeats a stage.
    """
    sequence = (
        tuple(stage_sequence)
        if stage_sequence is not None
        else DEFAULT_STAGE_SEQUENCES[workflow_type]
    )
    if not sequence:
        raise InvalidStageSequenceError("Stage sequence must not be empty")
    if len(set(sequence)) != len(sequence):
        raise InvalidStageSequenceError(
            "Stage sequence must not repeat stages: "
            + ", ".join(stage.value for stage in sequence)
        )
    return sequence


# =============================================================================
# Models
# =============================================================================


@dataclass
class Meeting(DeletePreventionMixin):
    """A scheduled meeting of an organization.

    Identity is immutable. Meetings are archived once their workflow is
    terminal and are never hard-deleted.
    """

    meeting_id: UUID
    organization_id: str
    title: str
    status: MeetingStatus
    created_at: datetime
    workflow_instance_id: UUID | None = None
    archived_at: datetime | None = None

    @classmethod
    def create(
        cls,
        organization_id: str,
        title: str,
        created_at: datetime | None = None,
    ) -> Meeting:
        return cls(
            meeting_id=uuid4(),
            organization_id=organization_id,
            title=title,
            status=MeetingStatus.SCHEDULED,
            created_at=created_at or datetime.now(timezone.utc),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "meeting_id": str(self.meeting_id),
            "organization_id": self.organization_id,
            "title": self.title,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
            "workflow_instance_id": (
                str(self.workflow_instance_id) if self.workflow_instance_id else None
            ),
            "archived_at": self.archived_at.isoformat() if self.archived_at else None,
        }


@dataclass
class WorkflowInstance:
    """Procedural state machine state for one meeting.

    Invariant: 0 <= current_stage_index < len(stage_sequence).

    `version` is incremented on every persisted change and used for
    compare-and-swap writes.
    """

    instance_id: UUID
    meeting_id: UUID
    workflow_type: WorkflowType
    stage_sequence: tuple[WorkflowStage, ...]
    controller: str
    quorum_required: int
    created_at: datetime
    auto_progression: bool = False
    current_stage_index: int = 0
    status: WorkflowStatus = WorkflowStatus.NOT_STARTED
    quorum_achieved: bool = False
    attendance_count: int | None = None
    quorum_checked_at: datetime | None = None
    active_voting_session_id: UUID | None = None
    has_error: bool = False
    error_message: str | None = None
    failed_at_index: int | None = None
    status_before_failure: WorkflowStatus | None = None
    recovery_attempted: bool = False
    version: int = 0
    started_at: datetime | None = None
    completed_at: datetime | None = None

    def __post_init__(self) -> None:
        if not self.stage_sequence:
            raise InvalidStageSequenceError("Stage sequence must not be empty")
        if not 0 <= self.current_stage_index < len(self.stage_sequence):
            raise InvalidStageSequenceError(
                f"current_stage_index {self.current_stage_index} outside "
                f"0..{len(self.stage_sequence) - 1}"
            )
        if self.quorum_required < 0:
            raise InvalidStageSequenceError("quorum_required must be >= 0")

    @classmethod
    def create(
        cls,
        meeting_id: UUID,
        controller: str,
        quorum_required: int,
        workflow_type: WorkflowType = WorkflowType.STANDARD_BOARD,
        stage_sequence: tuple[WorkflowStage, ...] | list[WorkflowStage] | None = None,
        auto_progression: bool = False,
        created_at: datetime | None = None,
    ) -> WorkflowInstance:
        return cls(
            instance_id=uuid4(),
            meeting_id=meeting_id,
            workflow_type=workflow_type,
            stage_sequence=stage_sequence_for(workflow_type, stage_sequence),
            controller=controller,
            quorum_required=quorum_required,
            auto_progression=auto_progression,
            created_at=created_at or datetime.now(timezone.utc),
        )

    @property
    def current_stage(self) -> WorkflowStage:
        return self.stage_sequence[self.current_stage_index]

    @property
    def is_last_stage(self) -> bool:
        return self.current_stage_index == len(self.stage_sequence) - 1

    @property
    def next_stage(self) -> WorkflowStage | None:
        if self.is_last_stage:
            return None
        return self.stage_sequence[self.current_stage_index + 1]

    @property
    def progress_percentage(self) -> Decimal:
        """Share of the sequence already passed, 0 to 100."""
        if self.status == WorkflowStatus.COMPLETED:
            return Decimal(100)
        if len(self.stage_sequence) == 1:
            return Decimal(0)
        return (
            Decimal(self.current_stage_index)
            / Decimal(len(self.stage_sequence) - 1)
            * 100
        ).quantize(Decimal("0.01"))

    def to_dict(self) -> dict[str, Any]:
        return {
            "instance_id": str(self.instance_id),
            "meeting_id": str(self.meeting_id),
            "workflow_type": self.workflow_type.value,
            "stage_sequence": [stage.value for stage in self.stage_sequence],
            "current_stage_index": self.current_stage_index,
            "current_stage": self.current_stage.value,
            "status": self.status.value,
            "controller": self.controller,
            "auto_progression": self.auto_progression,
            "quorum_required": self.quorum_required,
            "quorum_achieved": self.quorum_achieved,
            "attendance_count": self.attendance_count,
            "active_voting_session_id": (
                str(self.active_voting_session_id)
                if self.active_voting_session_id
                else None
            ),
            "has_error": self.has_error,
            "error_message": self.error_message,
            "recovery_attempted": self.recovery_attempted,
            "progress_percentage": str(self.progress_percentage),
            "version": self.version,
        }


@dataclass(frozen=True)
class StageTransition:
    """Immutable audit record of one workflow state change.

    `to_stage` is None when the transition leaves the sequence (completion,
    failure or cancellation) rather than entering a stage.
    """

    transition_id: UUID
    workflow_instance_id: UUID
    from_stage: WorkflowStage | None
    to_stage: WorkflowStage | None
    from_status: WorkflowStatus
    to_status: WorkflowStatus
    from_stage_index: int
    to_stage_index: int
    transition_type: TransitionType
    triggered_by: str
    timestamp: datetime
    conditions_met: dict[str, Any] = field(default_factory=dict)
    reason: str | None = None

    @classmethod
    def create(
        cls,
        instance: WorkflowInstance,
        *,
        from_stage: WorkflowStage | None,
        to_stage: WorkflowStage | None,
        from_status: WorkflowStatus,
        from_stage_index: int,
        triggered_by: str,
        timestamp: datetime,
        transition_type: TransitionType = TransitionType.MANUAL,
        conditions_met: dict[str, Any] | None = None,
        reason: str | None = None,
    ) -> StageTransition:
        return cls(
            transition_id=uuid4(),
            workflow_instance_id=instance.instance_id,
            from_stage=from_stage,
            to_stage=to_stage,
            from_status=from_status,
            to_status=instance.status,
            from_stage_index=from_stage_index,
            to_stage_index=instance.current_stage_index,
            transition_type=transition_type,
            triggered_by=triggered_by,
            timestamp=timestamp,
            conditions_met=dict(conditions_met or {}),
            reason=reason,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "transition_id": str(self.transition_id),
            "workflow_instance_id": str(self.workflow_instance_id),
            "from_stage": self.from_stage.value if self.from_stage else None,
            "to_stage": self.to_stage.value if self.to_stage else None,
            "from_status": self.from_status.value,
            "to_status": self.to_status.value,
            "from_stage_index": self.from_stage_index,
            "to_stage_index": self.to_stage_index,
            "transition_type": self.transition_type.value,
            "triggered_by": self.triggered_by,
            "conditions_met": dict(self.conditions_met),
            "reason": self.reason,
            "timestamp": self.timestamp.isoformat(),
        }
