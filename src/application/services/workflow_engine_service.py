"""Workflow engine service.

Drives a meeting through its ordered stage sequence. Every change of
stage or status is:

1. serialized per workflow instance (keyed lock),
2. written with compare-and-swap on the instance version,
3. recorded as one immutable StageTransition,
4. emitted to the audit sink.

Guards on advance:
- only the controller (or the system actor when auto progression is on)
- never from a terminal or failed workflow
- never away from a voting stage while a voting session is attached
- never past quorum_check, nor into a voting stage, without achieved quorum
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

from src.application.ports.meeting_repository import MeetingRepositoryProtocol
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.ports.workflow_repository import WorkflowRepositoryProtocol
from src.application.services.audit_publisher import AuditPublisher
from src.application.services.base import LoggingMixin
from src.application.services.keyed_lock import KeyedLockRegistry
from src.domain.errors.workflow import (
    InvalidStageError,
    MeetingNotFoundError,
    NotControllerError,
    QuorumNotMetError,
    RecoveryExhaustedError,
    StageLockedError,
    StaleWorkflowStateError,
    WorkflowNotFoundError,
)
from src.domain.events.workflow import (
    MEETING_ARCHIVED_EVENT_TYPE,
    MEETING_OPENED_EVENT_TYPE,
    QUORUM_RECORDED_EVENT_TYPE,
    STAGE_TRANSITIONED_EVENT_TYPE,
    MeetingArchivedEvent,
    MeetingOpenedEvent,
    QuorumRecordedEvent,
    StageTransitionedEvent,
)
from src.domain.models.meeting import (
    DEFAULT_VOTING_STAGES,
    SYSTEM_ACTOR,
    Meeting,
    MeetingStatus,
    StageTransition,
    TransitionType,
    WorkflowInstance,
    WorkflowStage,
    WorkflowStatus,
    WorkflowType,
)


@dataclass(frozen=True)
class OpenedMeeting:
    """Result of opening a meeting."""

    meeting: Meeting
    instance: WorkflowInstance


class WorkflowEngineService(LoggingMixin):
    """Procedural state machine for meetings."""

    def __init__(
        self,
        meetings: MeetingRepositoryProtocol,
        workflows: WorkflowRepositoryProtocol,
        time_authority: TimeAuthorityProtocol,
        audit: AuditPublisher,
        locks: KeyedLockRegistry,
        voting_stages: frozenset[WorkflowStage] = DEFAULT_VOTING_STAGES,
    ) -> None:
        self._meetings = meetings
        self._workflows = workflows
        self._time = time_authority
        self._audit = audit
        self._locks = locks
        self._voting_stages = voting_stages
        # instance_id -> advance calls currently running
        self._advancing: dict[UUID, int] = {}
        self._init_logger()

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def is_voting_stage(self, stage: WorkflowStage | None) -> bool:
        return stage is not None and stage in self._voting_stages

    async def get_instance(self, instance_id: UUID) -> WorkflowInstance:
        instance = await self._workflows.get(instance_id)
        if instance is None:
            raise WorkflowNotFoundError(instance_id)
        return instance

    async def get_meeting(self, meeting_id: UUID) -> Meeting:
        meeting = await self._meetings.get(meeting_id)
        if meeting is None:
            raise MeetingNotFoundError(meeting_id)
        return meeting

    async def list_transitions(self, instance_id: UUID) -> list[StageTransition]:
        await self.get_instance(instance_id)
        return await self._workflows.list_transitions(instance_id)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def open_meeting(
        self,
        organization_id: str,
        title: str,
        controller: str,
        quorum_required: int,
        workflow_type: WorkflowType = WorkflowType.STANDARD_BOARD,
        stage_sequence: list[WorkflowStage] | None = None,
        auto_progression: bool = False,
    ) -> OpenedMeeting:
        """Create a meeting and its workflow instance at the first stage.

        The stage sequence is the caller's, or the default for the workflow
        type when none is given.

        Raises:
            InvalidStageSequenceError: If the sequence is empty or repeats a stage.
        """
        log = self._log_operation(
            "open_meeting",
            organization_id=organization_id,
            workflow_type=workflow_type.value,
        )
        now = self._time.now()
        meeting = Meeting.create(organization_id, title, created_at=now)
        instance = WorkflowInstance.create(
            meeting_id=meeting.meeting_id,
            controller=controller,
            quorum_required=quorum_required,
            workflow_type=workflow_type,
            stage_sequence=stage_sequence,
            auto_progression=auto_progression,
            created_at=now,
        )
        meeting.workflow_instance_id = instance.instance_id

        await self._meetings.add(meeting)
        await self._workflows.add(instance)

        await self._audit.publish(
            MEETING_OPENED_EVENT_TYPE,
            meeting.meeting_id,
            MeetingOpenedEvent(
                meeting_id=meeting.meeting_id,
                instance_id=instance.instance_id,
                organization_id=organization_id,
                workflow_type=workflow_type.value,
                stage_sequence=tuple(s.value for s in instance.stage_sequence),
                controller=controller,
                quorum_required=quorum_required,
            ),
        )
        log.info(
            "meeting_opened",
            meeting_id=str(meeting.meeting_id),
            instance_id=str(instance.instance_id),
            stages=len(instance.stage_sequence),
        )
        return OpenedMeeting(meeting=meeting, instance=instance)

    async def advance(
        self,
        instance_id: UUID,
        requested_by: str,
        expected_stage_index: int | None = None,
        conditions_met: dict[str, Any] | None = None,
    ) -> StageTransition:
        """Move the workflow to the next stage, or complete it from the last stage.

        Args:
            instance_id: Workflow instance to advance.
            requested_by: Caller identity; must be the controller, or
                SYSTEM_ACTOR when auto progression is enabled.
            expected_stage_index: Index the caller believes is current.
                When given and stale the call fails instead of skipping
                a stage. When omitted, the call fails if another advance
                of the same instance is already running.
            conditions_met: Caller-asserted conditions recorded on the
                transition.

        Raises:
            StaleWorkflowStateError: expected_stage_index is not current, or
                it was omitted while another advance was in flight.
            NotControllerError: Caller may not drive this workflow.
            InvalidStageError: Workflow is terminal or failed.
            StageLockedError: A voting session pins the current stage.
            QuorumNotMetError: Quorum gate not satisfied.
        """
        # Registered before the first await so a concurrent caller sees it
        in_flight = self._advancing.get(instance_id, 0)
        self._advancing[instance_id] = in_flight + 1
        try:
            return await self._advance(
                instance_id,
                requested_by,
                expected_stage_index,
                conditions_met,
                concurrent=in_flight > 0,
            )
        finally:
            self._advancing[instance_id] -= 1
            if not self._advancing[instance_id]:
                del self._advancing[instance_id]

    async def _advance(
        self,
        instance_id: UUID,
        requested_by: str,
        expected_stage_index: int | None,
        conditions_met: dict[str, Any] | None,
        concurrent: bool,
    ) -> StageTransition:
        log = self._log_operation(
            "advance", instance_id=str(instance_id), requested_by=requested_by
        )
        if expected_stage_index is None and concurrent:
            instance = await self.get_instance(instance_id)
            log.info(
                "stage_advance_concurrent",
                current_stage_index=instance.current_stage_index,
            )
            raise StaleWorkflowStateError(
                instance_id, None, instance.current_stage_index
            )
        async with self._locks.hold(f"workflow:{instance_id}"):
            instance = await self.get_instance(instance_id)
            if (
                expected_stage_index is not None
                and expected_stage_index != instance.current_stage_index
            ):
                log.info(
                    "stage_advance_stale",
                    expected_stage_index=expected_stage_index,
                    current_stage_index=instance.current_stage_index,
                )
                raise StaleWorkflowStateError(
                    instance_id, expected_stage_index, instance.current_stage_index
                )

            transition_type = self._authorize_advance(instance, requested_by)
            if instance.status.is_terminal or instance.status == WorkflowStatus.FAILED:
                raise InvalidStageError(
                    instance_id,
                    instance.current_stage.value,
                    instance.status.value,
                    "cannot advance a terminal or failed workflow",
                )

            current = instance.current_stage
            target = instance.next_stage
            if instance.active_voting_session_id is not None and not self.is_voting_stage(
                target
            ):
                raise StageLockedError(
                    instance_id, instance.active_voting_session_id, "leave the voting stage"
                )
            if current == WorkflowStage.QUORUM_CHECK and not instance.quorum_achieved:
                raise QuorumNotMetError(
                    instance_id, instance.quorum_required, instance.attendance_count
                )
            if self.is_voting_stage(target) and not instance.quorum_achieved:
                raise QuorumNotMetError(
                    instance_id, instance.quorum_required, instance.attendance_count
                )

            now = self._time.now()
            from_status = instance.status
            from_index = instance.current_stage_index
            if target is None:
                instance.status = WorkflowStatus.COMPLETED
                instance.completed_at = now
            else:
                instance.current_stage_index += 1
                if instance.status == WorkflowStatus.NOT_STARTED:
                    instance.status = WorkflowStatus.IN_PROGRESS
                    instance.started_at = now

            conditions: dict[str, Any] = {"quorum_achieved": instance.quorum_achieved}
            conditions.update(conditions_met or {})
            transition = await self._commit(
                instance,
                from_stage=current,
                to_stage=target,
                from_status=from_status,
                from_index=from_index,
                triggered_by=requested_by,
                transition_type=transition_type,
                conditions_met=conditions,
                timestamp=now,
            )

        await self._sync_meeting_status(instance)
        log.info(
            "stage_advanced",
            from_stage=current.value,
            to_stage=target.value if target else None,
            status=instance.status.value,
        )
        return transition

    async def record_quorum(
        self, instance_id: UUID, attendance_count: int, recorded_by: str
    ) -> WorkflowInstance:
        """Record attendance and set quorum_achieved = attendance >= quorum_required.

        May be called again after more members arrive.

        Raises:
            InvalidStageError: If the workflow is terminal.
            ValueError: If attendance_count is negative.
        """
        if attendance_count < 0:
            raise ValueError(f"attendance_count must be >= 0, got {attendance_count}")
        log = self._log_operation(
            "record_quorum", instance_id=str(instance_id), recorded_by=recorded_by
        )
        async with self._locks.hold(f"workflow:{instance_id}"):
            instance = await self.get_instance(instance_id)
            if instance.status.is_terminal:
                raise _invalid_stage(instance, "cannot record quorum")
            instance.attendance_count = attendance_count
            instance.quorum_achieved = attendance_count >= instance.quorum_required
            instance.quorum_checked_at = self._time.now()
            instance = await self._workflows.update(instance, instance.version)

        await self._audit.publish(
            QUORUM_RECORDED_EVENT_TYPE,
            instance.meeting_id,
            QuorumRecordedEvent(
                instance_id=instance_id,
                attendance_count=attendance_count,
                quorum_required=instance.quorum_required,
                quorum_achieved=instance.quorum_achieved,
                recorded_by=recorded_by,
            ),
        )
        log.info(
            "quorum_recorded",
            attendance_count=attendance_count,
            quorum_required=instance.quorum_required,
            quorum_achieved=instance.quorum_achieved,
        )
        return instance

    async def fail(
        self, instance_id: UUID, reason: str, triggered_by: str = SYSTEM_ACTOR
    ) -> StageTransition:
        """Move the workflow to failed from any non-terminal stage.

        The failed stage index and prior status are kept so recover() can
        restore them exactly.

        Raises:
            InvalidStageError: If the workflow is terminal or already failed.
        """
        log = self._log_operation("fail", instance_id=str(instance_id), reason=reason)
        async with self._locks.hold(f"workflow:{instance_id}"):
            instance = await self.get_instance(instance_id)
            if instance.status.is_terminal or instance.status == WorkflowStatus.FAILED:
                raise _invalid_stage(instance, "cannot fail a terminal or failed workflow")

            from_status = instance.status
            instance.status_before_failure = from_status
            instance.failed_at_index = instance.current_stage_index
            instance.status = WorkflowStatus.FAILED
            instance.has_error = True
            instance.error_message = reason
            transition = await self._commit(
                instance,
                from_stage=instance.current_stage,
                to_stage=None,
                from_status=from_status,
                from_index=instance.current_stage_index,
                triggered_by=triggered_by,
                transition_type=TransitionType.ERROR,
                reason=reason,
            )
        log.warning("workflow_failed", stage=instance.current_stage.value)
        return transition

    async def recover(self, instance_id: UUID, requested_by: str) -> StageTransition:
        """Re-enter the stage the workflow failed in and clear the error.

        Only one recovery is allowed per workflow instance.

        Raises:
            NotControllerError: Caller is not the controller.
            InvalidStageError: Workflow is not failed.
            RecoveryExhaustedError: A recovery was already used.
        """
        log = self._log_operation(
            "recover", instance_id=str(instance_id), requested_by=requested_by
        )
        async with self._locks.hold(f"workflow:{instance_id}"):
            instance = await self.get_instance(instance_id)
            self._authorize_advance(instance, requested_by)
            if instance.status != WorkflowStatus.FAILED:
                raise _invalid_stage(instance, "only a failed workflow can be recovered")
            if instance.recovery_attempted:
                raise RecoveryExhaustedError(instance_id)

            restored_index = (
                instance.failed_at_index
                if instance.failed_at_index is not None
                else instance.current_stage_index
            )
            instance.current_stage_index = restored_index
            instance.status = instance.status_before_failure or WorkflowStatus.IN_PROGRESS
            instance.has_error = False
            instance.error_message = None
            instance.recovery_attempted = True
            instance.failed_at_index = None
            instance.status_before_failure = None
            transition = await self._commit(
                instance,
                from_stage=None,
                to_stage=instance.current_stage,
                from_status=WorkflowStatus.FAILED,
                from_index=restored_index,
                triggered_by=requested_by,
                transition_type=TransitionType.MANUAL,
                reason="recovered",
            )
        log.info(
            "workflow_recovered",
            stage=instance.current_stage.value,
            status=instance.status.value,
        )
        return transition

    async def cancel(
        self, instance_id: UUID, requested_by: str, reason: str
    ) -> StageTransition:
        """Cancel the workflow. Not allowed while a voting session is attached.

        Raises:
            NotControllerError: Caller is not the controller.
            InvalidStageError: Workflow is already terminal.
            StageLockedError: A voting session is attached.
        """
        log = self._log_operation(
            "cancel", instance_id=str(instance_id), requested_by=requested_by
        )
        async with self._locks.hold(f"workflow:{instance_id}"):
            instance = await self.get_instance(instance_id)
            self._authorize_advance(instance, requested_by)
            if instance.status.is_terminal:
                raise _invalid_stage(instance, "workflow is already terminal")
            if instance.active_voting_session_id is not None:
                raise StageLockedError(
                    instance_id, instance.active_voting_session_id, "cancel the meeting"
                )
            from_status = instance.status
            instance.status = WorkflowStatus.CANCELLED
            instance.completed_at = self._time.now()
            transition = await self._commit(
                instance,
                from_stage=instance.current_stage,
                to_stage=None,
                from_status=from_status,
                from_index=instance.current_stage_index,
                triggered_by=requested_by,
                transition_type=TransitionType.MANUAL,
                reason=reason,
            )
        await self._sync_meeting_status(instance)
        log.info("workflow_cancelled", reason=reason)
        return transition

    async def archive_meeting(self, meeting_id: UUID, archived_by: str) -> Meeting:
        """Archive a meeting whose workflow is terminal. Idempotent.

        Raises:
            InvalidStageError: If the workflow is still running.
        """
        meeting = await self.get_meeting(meeting_id)
        if meeting.status == MeetingStatus.ARCHIVED:
            return meeting
        instance = await self._workflows.get_by_meeting(meeting_id)
        if instance is not None and not instance.status.is_terminal:
            raise _invalid_stage(
                instance, "meeting can be archived only after its workflow ends"
            )
        now = self._time.now()
        meeting.status = MeetingStatus.ARCHIVED
        meeting.archived_at = now
        await self._meetings.update(meeting)
        await self._audit.publish(
            MEETING_ARCHIVED_EVENT_TYPE,
            meeting_id,
            MeetingArchivedEvent(meeting_id, archived_by, now),
        )
        self._log_operation("archive_meeting", meeting_id=str(meeting_id)).info(
            "meeting_archived"
        )
        return meeting

    # -------------------------------------------------------------------------
    # Voting session coupling
    # -------------------------------------------------------------------------

    async def attach_voting_session(
        self, instance_id: UUID, session_id: UUID, opened_by: str
    ) -> WorkflowInstance:
        """Pin the workflow to its voting stage while a session is active.

        Raises:
            InvalidStageError: Current stage is not a voting stage, or the
                workflow is not running.
            StageLockedError: Another session is already attached.
        """
        async with self._locks.hold(f"workflow:{instance_id}"):
            instance = await self.get_instance(instance_id)
            if instance.status not in (WorkflowStatus.IN_PROGRESS, WorkflowStatus.WAITING):
                raise _invalid_stage(instance, "workflow is not in progress")
            if not self.is_voting_stage(instance.current_stage):
                raise InvalidStageError(
                    instance_id,
                    instance.current_stage.value,
                    instance.status.value,
                    "voting sessions may only be opened in a voting stage",
                    invariant="voting requires a voting stage",
                )
            if instance.active_voting_session_id is not None:
                raise StageLockedError(
                    instance_id, instance.active_voting_session_id, "open another session"
                )
            from_status = instance.status
            instance.active_voting_session_id = session_id
            instance.status = WorkflowStatus.WAITING
            await self._commit(
                instance,
                from_stage=instance.current_stage,
                to_stage=instance.current_stage,
                from_status=from_status,
                from_index=instance.current_stage_index,
                triggered_by=opened_by,
                transition_type=TransitionType.AUTOMATIC,
                conditions_met={"voting_session_id": str(session_id)},
                reason="voting_session_attached",
            )
        return instance

    async def release_voting_session(
        self, instance_id: UUID, session_id: UUID, released_by: str
    ) -> WorkflowInstance:
        """Detach a finished session. No-op if the session is not attached."""
        async with self._locks.hold(f"workflow:{instance_id}"):
            instance = await self.get_instance(instance_id)
            if instance.active_voting_session_id != session_id:
                return instance
            from_status = instance.status
            instance.active_voting_session_id = None
            if instance.status == WorkflowStatus.WAITING:
                instance.status = WorkflowStatus.IN_PROGRESS
            if instance.status_before_failure == WorkflowStatus.WAITING:
                instance.status_before_failure = WorkflowStatus.IN_PROGRESS
            await self._commit(
                instance,
                from_stage=instance.current_stage,
                to_stage=instance.current_stage,
                from_status=from_status,
                from_index=instance.current_stage_index,
                triggered_by=released_by,
                transition_type=TransitionType.AUTOMATIC,
                conditions_met={"voting_session_id": str(session_id)},
                reason="voting_session_released",
            )
        return instance

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _authorize_advance(
        self, instance: WorkflowInstance, requested_by: str
    ) -> TransitionType:
        if requested_by == instance.controller:
            return TransitionType.MANUAL
        if requested_by == SYSTEM_ACTOR and instance.auto_progression:
            return TransitionType.AUTOMATIC
        raise NotControllerError(instance.instance_id, requested_by)

    async def _commit(
        self,
        instance: WorkflowInstance,
        *,
        from_stage: WorkflowStage | None,
        to_stage: WorkflowStage | None,
        from_status: WorkflowStatus,
        from_index: int,
        triggered_by: str,
        transition_type: TransitionType,
        conditions_met: dict[str, Any] | None = None,
        reason: str | None = None,
        timestamp: datetime | None = None,
    ) -> StageTransition:
        """CAS-write the instance, append its transition and emit it."""
        stored = await self._workflows.update(instance, instance.version)
        instance.version = stored.version
        transition = StageTransition.create(
            stored,
            from_stage=from_stage,
            to_stage=to_stage,
            from_status=from_status,
            from_stage_index=from_index,
            triggered_by=triggered_by,
            timestamp=timestamp or self._time.now(),
            transition_type=transition_type,
            conditions_met=conditions_met,
            reason=reason,
        )
        await self._workflows.append_transition(transition)
        await self._audit.publish(
            STAGE_TRANSITIONED_EVENT_TYPE,
            stored.meeting_id,
            StageTransitionedEvent(transition),
        )
        return transition

    async def _sync_meeting_status(self, instance: WorkflowInstance) -> None:
        meeting = await self._meetings.get(instance.meeting_id)
        if meeting is None or meeting.status == MeetingStatus.ARCHIVED:
            return
        if instance.status.is_terminal:
            status = MeetingStatus.ADJOURNED
        elif instance.status == WorkflowStatus.NOT_STARTED:
            status = MeetingStatus.SCHEDULED
        else:
            status = MeetingStatus.IN_SESSION
        if meeting.status != status:
            meeting.status = status
            await self._meetings.update(meeting)


def _invalid_stage(instance: WorkflowInstance, reason: str) -> InvalidStageError:
    return InvalidStageError(
        instance.instance_id,
        instance.current_stage.value,
        instance.status.value,
        reason,
    )
