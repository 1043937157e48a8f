"""Workflow domain errors.

Raised by the workflow engine when a stage operation is not legal for the
current state of a meeting's workflow instance.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from src.domain.exceptions import GovernanceError


class WorkflowError(GovernanceError):
    """Base error for workflow state machine operations."""

    pass


class MeetingNotFoundError(WorkflowError):
    """Raised when a meeting does not exist.

    HTTP Status: 404 Not Found
    """

    kind = "NotFound"
    title = "Meeting Not Found"
    http_status = 404
    invariant = "meeting must exist"

    def __init__(self, meeting_id: UUID) -> None:
        self.meeting_id = meeting_id
        super().__init__(f"Meeting not found: {meeting_id}")


class WorkflowNotFoundError(WorkflowError):
    """Raised when a workflow instance does not exist.

    HTTP Status: 404 Not Found
    """

    kind = "NotFound"
    title = "Workflow Not Found"
    http_status = 404
    invariant = "workflow instance must exist"

    def __init__(self, instance_id: UUID) -> None:
        self.instance_id = instance_id
        super().__init__(f"Workflow instance not found: {instance_id}")


class InvalidStageSequenceError(WorkflowError):
    """Raised when a stage sequence is empty or repeats a stage."""

    kind = "InvalidStage"
    title = "Invalid Stage Sequence"
    http_status = 422
    invariant = "stage sequence is non-empty with unique stages"


class InvalidStageError(WorkflowError):
    """Raised when an operation is not legal in the current workflow stage.

    Surfaced to the caller, never retried automatically.

    HTTP Status: 409 Conflict

    Attributes:
        instance_id: The workflow instance.
        current_stage: Stage tag value at the time of the request.
        status: Workflow status value at the time of the request.
    """

    kind = "InvalidStage"
    title = "Invalid Stage"
    http_status = 409

    def __init__(
        self,
        instance_id: UUID,
        current_stage: str,
        status: str,
        reason: str,
        invariant: str = "operation must be legal in the current stage",
    ) -> None:
        self.instance_id = instance_id
        self.current_stage = current_stage
        self.status = status
        super().__init__(
            f"Workflow {instance_id} at stage {current_stage} ({status}): {reason}",
            invariant=invariant,
        )

    def to_rfc7807_dict(self) -> dict[str, Any]:
        result = super().to_rfc7807_dict()
        result["current_stage"] = self.current_stage
        result["workflow_status"] = self.status
        return result


class StageLockedError(WorkflowError):
    """Raised when an open voting session pins the workflow to a voting stage.

    HTTP Status: 409 Conflict

    Attributes:
        instance_id: The workflow instance.
        voting_session_id: The session holding the lock.
    """

    kind = "StageLocked"
    title = "Stage Locked"
    http_status = 409
    invariant = "an open voting session blocks leaving the voting stage"

    def __init__(
        self, instance_id: UUID, voting_session_id: UUID, attempted: str
    ) -> None:
        self.instance_id = instance_id
        self.voting_session_id = voting_session_id
        self.attempted = attempted
        super().__init__(
            f"Workflow {instance_id} is locked by voting session "
            f"{voting_session_id}; cannot {attempted}"
        )

    def to_rfc7807_dict(self) -> dict[str, Any]:
        result = super().to_rfc7807_dict()
        result["voting_session_id"] = str(self.voting_session_id)
        return result


class QuorumNotMetError(WorkflowError):
    """Raised when an advance is blocked because quorum is not achieved.

    Recovery: call record_quorum again once more members are present.

    HTTP Status: 409 Conflict
    """

    kind = "QuorumNotMet"
    title = "Quorum Not Met"
    http_status = 409
    invariant = "quorum must be recorded and achieved before voting or leaving quorum_check"

    def __init__(
        self,
        instance_id: UUID,
        quorum_required: int,
        attendance_count: int | None,
    ) -> None:
        self.instance_id = instance_id
        self.quorum_required = quorum_required
        self.attendance_count = attendance_count
        recorded = (
            "no attendance recorded"
            if attendance_count is None
            else f"attendance {attendance_count}"
        )
        super().__init__(
            f"Workflow {instance_id} requires quorum of {quorum_required}, "
            f"{recorded}"
        )

    def to_rfc7807_dict(self) -> dict[str, Any]:
        result = super().to_rfc7807_dict()
        result["quorum_required"] = self.quorum_required
        result["attendance_count"] = self.attendance_count
        return result


class NotControllerError(WorkflowError):
    """Raised when someone other than the controller drives the workflow.

    HTTP Status: 403 Forbidden
    """

    kind = "NotController"
    title = "Not Workflow Controller"
    http_status = 403
    invariant = "only the controller (or auto progression) may advance stages"

    def __init__(self, instance_id: UUID, requested_by: str) -> None:
        self.instance_id = instance_id
        self.requested_by = requested_by
        super().__init__(
            f"{requested_by} is not the controller of workflow {instance_id}"
        )


class StaleWorkflowStateError(WorkflowError):
    """Raised when a caller acts on a stage index that is no longer current.

    Two concurrent advances from the same index: exactly one wins, the other
    receives this error.

    HTTP Status: 409 Conflict
    """

    kind = "StaleWorkflowState"
    title = "Stale Workflow State"
    http_status = 409
    invariant = "current_stage_index advances by exactly one per transition"

    def __init__(
        self,
        instance_id: UUID,
        expected_stage_index: int | None,
        current_stage_index: int,
    ) -> None:
        self.instance_id = instance_id
        self.expected_stage_index = expected_stage_index
        self.current_stage_index = current_stage_index
        if expected_stage_index is None:
            detail = (
                f"Workflow {instance_id} has another advance in flight "
                f"(stage index {current_stage_index})"
            )
        else:
            detail = (
                f"Workflow {instance_id} expected at stage index "
                f"{expected_stage_index} but is at {current_stage_index}"
            )
        super().__init__(detail)

    def to_rfc7807_dict(self) -> dict[str, Any]:
        result = super().to_rfc7807_dict()
        result["expected_stage_index"] = self.expected_stage_index
        result["current_stage_index"] = self.current_stage_index
        return result


class RecoveryExhaustedError(WorkflowError):
    """Raised when recover is requested after the single recovery was used.

    HTTP Status: 409 Conflict
    """

    kind = "RecoveryExhausted"
    title = "Recovery Exhausted"
    http_status = 409
    invariant = "a failed workflow may be recovered at most once"

    def __init__(self, instance_id: UUID) -> None:
        self.instance_id = instance_id
        super().__init__(f"Workflow {instance_id} has already been recovered once")
