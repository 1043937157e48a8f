"""Resolution registry service.

Stores the catalog of resolutions a meeting votes on and their outcome
record. Outcomes are written only by voting session closure; a repeated
write for the same session item is an idempotent no-op when it agrees with
the stored outcome and an error when it does not.
"""

from __future__ import annotations

from uuid import UUID

from src.application.ports.meeting_repository import MeetingRepositoryProtocol
from src.application.ports.resolution_repository import ResolutionRepositoryProtocol
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.services.audit_publisher import AuditPublisher
from src.application.services.base import LoggingMixin
from src.application.services.keyed_lock import KeyedLockRegistry
from src.domain.errors.resolution import (
    InvalidResolutionTransitionError,
    OutcomeAlreadyRecordedError,
    ResolutionNotFoundError,
    ResolutionOnBallotError,
    SelfSecondError,
)
from src.domain.errors.voting import ResolutionNotVotableError
from src.domain.errors.workflow import MeetingNotFoundError
from src.domain.events.resolution import (
    RESOLUTION_OUTCOME_RECORDED_EVENT_TYPE,
    RESOLUTION_PROPOSED_EVENT_TYPE,
    RESOLUTION_STATUS_CHANGED_EVENT_TYPE,
    ResolutionProposedEvent,
    ResolutionStatusChangedEvent,
)
from src.domain.models.resolution import (
    VOTABLE_STATUSES,
    Resolution,
    ResolutionClassification,
    ResolutionStatus,
    format_resolution_number,
)
from src.domain.models.voting_session import ItemOutcome
from src.domain.primitives.ensure_atomicity import AtomicOperationContext


class ResolutionRegistryService(LoggingMixin):
    """Resolution catalog and outcome record."""

    def __init__(
        self,
        resolutions: ResolutionRepositoryProtocol,
        meetings: MeetingRepositoryProtocol,
        time_authority: TimeAuthorityProtocol,
        audit: AuditPublisher,
        locks: KeyedLockRegistry,
    ) -> None:
        self._resolutions = resolutions
        self._meetings = meetings
        self._time = time_authority
        self._audit = audit
        self._locks = locks
        self._init_logger()

    @staticmethod
    def _key(resolution_id: UUID) -> str:
        return f"resolution:{resolution_id}"

    async def get(self, resolution_id: UUID) -> Resolution:
        resolution = await self._resolutions.get(resolution_id)
        if resolution is None:
            raise ResolutionNotFoundError(resolution_id)
        return resolution

    async def get_outcome(self, resolution_id: UUID) -> ItemOutcome | None:
        return (await self.get(resolution_id)).outcome

    async def list_for_meeting(self, meeting_id: UUID) -> list[Resolution]:
        return await self._resolutions.list_for_meeting(meeting_id)

    async def ensure_votable(self, resolution_id: UUID, meeting_id: UUID) -> Resolution:
        """Return the resolution if it can be put to a vote in this meeting.

        Raises:
            ResolutionNotFoundError: Unknown resolution or another meeting's.
            ResolutionNotVotableError: Status is not proposed or tabled.
        """
        resolution = await self.get(resolution_id)
        if resolution.meeting_id != meeting_id:
            raise ResolutionNotFoundError(resolution_id)
        if resolution.status not in VOTABLE_STATUSES:
            raise ResolutionNotVotableError(resolution_id, resolution.status.value)
        return resolution

    async def attach_to_session(
        self, resolution_ids: list[UUID], session_id: UUID, meeting_id: UUID
    ) -> None:
        """Pin resolutions to a voting session until it closes or is cancelled.

        While pinned a resolution cannot be tabled, withdrawn or superseded,
        so every item of the session can still take its outcome. All or
        none are pinned.

        Raises:
            ResolutionNotFoundError: Unknown resolution or another meeting's.
            ResolutionNotVotableError: Not votable, or on another session.
        """
        async with AtomicOperationContext("attach_resolutions") as ctx:
            for resolution_id in resolution_ids:
                async with self._locks.hold(self._key(resolution_id)):
                    resolution = await self.ensure_votable(resolution_id, meeting_id)
                    if resolution.voting_session_id == session_id:
                        continue
                    if resolution.voting_session_id is not None:
                        raise ResolutionNotVotableError(
                            resolution_id,
                            f"on voting session {resolution.voting_session_id}",
                        )
                    resolution.voting_session_id = session_id
                    await self._resolutions.update(resolution)
                ctx.add_rollback(
                    lambda rid=resolution_id: self.release_from_session([rid], session_id)
                )

    async def release_from_session(
        self, resolution_ids: list[UUID], session_id: UUID
    ) -> None:
        """Unpin resolutions held by `session_id`. Others are left alone."""
        for resolution_id in resolution_ids:
            async with self._locks.hold(self._key(resolution_id)):
                resolution = await self.get(resolution_id)
                if resolution.voting_session_id != session_id:
                    continue
                resolution.voting_session_id = None
                await self._resolutions.update(resolution)

    async def check_outcome(self, resolution_id: UUID, outcome: ItemOutcome) -> bool:
        """Verify `record_outcome` would accept `outcome`, without writing.

        Returns:
            True when the outcome is already recorded (a replay).

        Raises:
            OutcomeAlreadyRecordedError: A different result is recorded.
            InvalidResolutionTransitionError: The status cannot take the outcome.
        """
        return _outcome_target(await self.get(resolution_id), outcome) is None

    async def propose(
        self,
        meeting_id: UUID,
        title: str,
        text: str,
        proposer: str,
        seconder: str | None = None,
        classification: ResolutionClassification = ResolutionClassification.MOTION,
        supersedes_id: UUID | None = None,
    ) -> Resolution:
        """Record a new resolution with the next R-NNN number for the meeting.

        Raises:
            MeetingNotFoundError: If the meeting does not exist.
            SelfSecondError: If the proposer seconds their own resolution.
        """
        if seconder is not None and seconder == proposer:
            raise SelfSecondError(proposer)
        if await self._meetings.get(meeting_id) is None:
            raise MeetingNotFoundError(meeting_id)

        sequence = await self._resolutions.next_sequence(meeting_id)
        resolution = Resolution.create(
            meeting_id=meeting_id,
            resolution_number=format_resolution_number(sequence),
            title=title,
            text=text,
            proposer=proposer,
            classification=classification,
            seconder=seconder,
            supersedes_id=supersedes_id,
            created_at=self._time.now(),
        )
        await self._resolutions.add(resolution)

        await self._audit.publish(
            RESOLUTION_PROPOSED_EVENT_TYPE,
            meeting_id,
            ResolutionProposedEvent(
                resolution_id=resolution.resolution_id,
                resolution_number=resolution.resolution_number,
                proposer=proposer,
                seconder=seconder,
                classification=classification.value,
                supersedes_id=supersedes_id,
            ),
        )
        self._log_operation(
            "propose", meeting_id=str(meeting_id), proposer=proposer
        ).info(
            "resolution_proposed",
            resolution_id=str(resolution.resolution_id),
            resolution_number=resolution.resolution_number,
        )
        return resolution

    async def second(self, resolution_id: UUID, seconder: str) -> Resolution:
        """Record a seconder. Seconding an already-seconded resolution by the same person is a no-op."""
        async with self._locks.hold(self._key(resolution_id)):
            resolution = await self.get(resolution_id)
            if seconder == resolution.proposer:
                raise SelfSecondError(seconder)
            if resolution.seconder == seconder:
                return resolution
            if resolution.status not in VOTABLE_STATUSES:
                raise ResolutionNotVotableError(resolution_id, resolution.status.value)
            resolution.seconder = seconder
            resolution.seconded_at = self._time.now()
            await self._resolutions.update(resolution)
        self._log_operation("second", resolution_id=str(resolution_id)).info(
            "resolution_seconded", seconder=seconder
        )
        return resolution

    async def record_outcome(self, resolution_id: UUID, outcome: ItemOutcome) -> Resolution:
        """Write a session item's outcome into the resolution.

        Raises:
            ResolutionNotFoundError: Unknown resolution.
            OutcomeAlreadyRecordedError: The item already recorded a different result.
            InvalidResolutionTransitionError: The resolution's status is final.
        """
        log = self._log_operation(
            "record_outcome",
            resolution_id=str(resolution_id),
            session_item_id=str(outcome.session_item_id),
        )
        async with self._locks.hold(self._key(resolution_id)):
            resolution = await self.get(resolution_id)
            target = _outcome_target(resolution, outcome)
            if target is None:
                log.info("outcome_replay_ignored")
                return resolution
            from_status = resolution.status
            resolution.status = target
            resolution.outcomes.append(outcome)
            resolution.decided_at = outcome.decided_at
            if resolution.voting_session_id == outcome.session_id:
                resolution.voting_session_id = None
            await self._resolutions.update(resolution)

        await self._audit.publish(
            RESOLUTION_OUTCOME_RECORDED_EVENT_TYPE,
            resolution.meeting_id,
            ResolutionStatusChangedEvent(
                resolution_id=resolution_id,
                from_status=from_status.value,
                to_status=target.value,
                actor=str(outcome.session_id),
                session_item_id=outcome.session_item_id,
            ),
        )
        log.info("resolution_decided", status=target.value, passed=outcome.passed)
        return resolution

    async def table(self, resolution_id: UUID, actor: str) -> Resolution:
        return await self._transition(resolution_id, ResolutionStatus.TABLED, actor)

    async def withdraw(self, resolution_id: UUID, actor: str) -> Resolution:
        return await self._transition(resolution_id, ResolutionStatus.WITHDRAWN, actor)

    async def reopen(self, resolution_id: UUID, actor: str) -> Resolution:
        """Bring a tabled resolution back to proposed."""
        return await self._transition(resolution_id, ResolutionStatus.PROPOSED, actor)

    async def supersede(
        self,
        resolution_id: UUID,
        title: str,
        text: str,
        proposer: str,
        seconder: str | None = None,
    ) -> Resolution:
        """Create a new resolution replacing an existing one.

        The original keeps its recorded outcome. An undecided original is
        marked amended so it can no longer be put to a vote.
        """
        async with self._locks.hold(self._key(resolution_id)):
            original = await self.get(resolution_id)
            if original.voting_session_id is not None:
                raise ResolutionOnBallotError(resolution_id, original.voting_session_id)
            replacement = await self.propose(
                meeting_id=original.meeting_id,
                title=title,
                text=text,
                proposer=proposer,
                seconder=seconder,
                classification=original.classification,
                supersedes_id=resolution_id,
            )
            from_status = original.status
            original.superseded_by_id = replacement.resolution_id
            amended = original.can_transition_to(ResolutionStatus.AMENDED)
            if amended:
                original.status = ResolutionStatus.AMENDED
            await self._resolutions.update(original)

        if amended:
            await self._audit.publish(
                RESOLUTION_STATUS_CHANGED_EVENT_TYPE,
                original.meeting_id,
                ResolutionStatusChangedEvent(
                    resolution_id, from_status.value, original.status.value, proposer
                ),
            )
        return replacement

    async def _transition(
        self, resolution_id: UUID, target: ResolutionStatus, actor: str
    ) -> Resolution:
        async with self._locks.hold(self._key(resolution_id)):
            resolution = await self.get(resolution_id)
            if resolution.status == target:
                return resolution
            if resolution.voting_session_id is not None:
                raise ResolutionOnBallotError(resolution_id, resolution.voting_session_id)
            if not resolution.can_transition_to(target):
                raise InvalidResolutionTransitionError(
                    resolution_id, resolution.status.value, target.value
                )
            from_status = resolution.status
            resolution.status = target
            await self._resolutions.update(resolution)

        await self._audit.publish(
            RESOLUTION_STATUS_CHANGED_EVENT_TYPE,
            resolution.meeting_id,
            ResolutionStatusChangedEvent(
                resolution_id, from_status.value, target.value, actor
            ),
        )
        self._log_operation("transition", resolution_id=str(resolution_id)).info(
            "resolution_status_changed",
            from_status=from_status.value,
            to_status=target.value,
            actor=actor,
        )
        return resolution


def _outcome_target(
    resolution: Resolution, outcome: ItemOutcome
) -> ResolutionStatus | None:
    """Status `outcome` moves the resolution to, or None for a replay."""
    existing = resolution.outcome_for_item(outcome.session_item_id)
    if existing is not None:
        if existing.passed == outcome.passed and existing.round == outcome.round:
            return None
        raise OutcomeAlreadyRecordedError(resolution.resolution_id, outcome.session_item_id)

    target = ResolutionStatus.PASSED if outcome.passed else ResolutionStatus.REJECTED
    if not resolution.can_transition_to(target):
        raise InvalidResolutionTransitionError(
            resolution.resolution_id, resolution.status.value, target.value
        )
    return target
