"""Meeting and workflow API request/response models."""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any
from uuid import UUID

from pydantic import BaseModel, Field, PlainSerializer

from src.domain.models.meeting import WorkflowStage, WorkflowType

# Custom datetime serializer for ISO 8601 with Z suffix (Pydantic v2)
DateTimeWithZ = Annotated[
    datetime,
    PlainSerializer(
        lambda v: v.isoformat().replace("+00:00", "Z") if v else None, return_type=str
    ),
]


class OpenMeetingRequest(BaseModel):
    """Request to open a meeting and create its workflow instance."""

    organization_id: str = Field(..., min_length=1, description="Owning organization")
    title: str = Field(..., min_length=1, max_length=500, description="Meeting title")
    controller: str = Field(
        ..., min_length=1, description="Identity authorized to advance stages"
    )
    quorum_required: int = Field(..., ge=0, description="Attendance needed for quorum")
    workflow_type: WorkflowType = Field(
        default=WorkflowType.STANDARD_BOARD, description="Procedure type"
    )
    stage_sequence: list[WorkflowStage] | None = Field(
        default=None,
        description="Explicit stage order; defaults to the procedure's sequence",
    )
    auto_progression: bool = Field(
        default=False, description="Allow the system actor to advance stages"
    )


class AdvanceStageRequest(BaseModel):
    """Request to advance a workflow to its next stage."""

    requested_by: str = Field(..., min_length=1, description="Caller identity")
    expected_stage_index: int | None = Field(
        default=None,
        ge=0,
        description="Stage index the caller believes is current; stale values are rejected",
    )
    conditions_met: dict[str, Any] | None = Field(
        default=None, description="Caller-asserted conditions recorded on the transition"
    )


class RecordQuorumRequest(BaseModel):
    """Request to record attendance against the quorum requirement."""

    attendance_count: int = Field(..., ge=0, description="Members present")
    recorded_by: str = Field(..., min_length=1, description="Caller identity")


class WorkflowActionRequest(BaseModel):
    """Request body for fail, recover and cancel."""

    requested_by: str = Field(..., min_length=1, description="Caller identity")
    reason: str | None = Field(default=None, max_length=2000, description="Why")


class ArchiveMeetingRequest(BaseModel):
    archived_by: str = Field(..., min_length=1, description="Caller identity")


class MeetingResponse(BaseModel):
    """Meeting record."""

    meeting_id: UUID
    organization_id: str
    title: str
    status: str
    created_at: DateTimeWithZ
    workflow_instance_id: UUID | None = None
    archived_at: DateTimeWithZ | None = None


class WorkflowInstanceResponse(BaseModel):
    """Workflow instance state."""

    instance_id: UUID
    meeting_id: UUID
    workflow_type: str
    stage_sequence: list[str]
    current_stage_index: int = Field(..., ge=0)
    current_stage: str
    status: str
    controller: str
    auto_progression: bool
    quorum_required: int
    quorum_achieved: bool
    attendance_count: int
    active_voting_session_id: UUID | None = None
    has_error: bool
    error_message: str | None = None
    recovery_attempted: bool
    progress_percentage: Decimal
    version: int


class OpenMeetingResponse(BaseModel):
    """Result of opening a meeting."""

    meeting: MeetingResponse
    workflow: WorkflowInstanceResponse


class StageTransitionResponse(BaseModel):
    """One immutable workflow transition record."""

    transition_id: UUID
    workflow_instance_id: UUID
    from_stage: str | None = None
    to_stage: str | None = None
    from_status: str
    to_status: str
    from_stage_index: int
    to_stage_index: int
    transition_type: str
    triggered_by: str
    conditions_met: dict[str, Any]
    reason: str | None = None
    timestamp: DateTimeWithZ


class StageTransitionListResponse(BaseModel):
    transitions: list[StageTransitionResponse]
