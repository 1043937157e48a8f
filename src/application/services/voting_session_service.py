"""Voting session service.

Manages bounded voting events: opening a session against a voting stage,
collecting aggregated ballots, tallying at close and writing outcomes back
to the resolution registry.

Ballot aggregation:
    A caster's ballot carries their own weight (when they are eligible and
    have not delegated it away) plus the weight of every grantor whose
    effective holder they are. One identity is represented at most once per
    item and round, so proxy votes are never double counted.

Tally rules at close:
    quorum_achieved = voters_participated >= required_quorum
    pass_percentage = votes_for / (votes_for + votes_against) * 100
    passed = quorum_achieved and pass_percentage >= threshold

Abstentions are excluded from the pass percentage denominator. With no
decisive votes the item does not pass. When unanimous consent is
required an item passes only if no weight is cast against it, whatever
the threshold.

A session with proxy voting disabled ignores the proxy graph: every
eligible voter casts only their own weight.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.ports.voting_repository import VotingRepositoryProtocol
from src.application.services.audit_publisher import AuditPublisher
from src.application.services.base import LoggingMixin
from src.application.services.keyed_lock import KeyedLockRegistry
from src.application.services.proxy_graph_service import ProxyGraphService
from src.application.services.resolution_registry_service import (
    ResolutionRegistryService,
)
from src.application.services.role_registry_service import RoleRegistryService
from src.application.services.workflow_engine_service import WorkflowEngineService
from src.config.governance_config import DEFAULT_GOVERNANCE_CONFIG, GovernanceConfig
from src.domain.errors.proxy import ProxyInstructionNotFollowedError
from src.domain.errors.voting import (
    CancellationNotPermittedError,
    ChoiceNotPermittedError,
    DeadlinePassedError,
    DuplicateVoteError,
    EmptyBallotError,
    IneligibleVoterError,
    ResolutionNotVotableError,
    RoundNotOpenError,
    SessionItemNotFoundError,
    SessionNotOpenError,
    TallyError,
    VotingSessionNotFoundError,
)
from src.domain.errors.workflow import InvalidStageError, WorkflowNotFoundError
from src.domain.events.voting import (
    BALLOT_CAST_EVENT_TYPE,
    VOTING_ROUND_OPENED_EVENT_TYPE,
    VOTING_SESSION_CANCELLED_EVENT_TYPE,
    VOTING_SESSION_CLOSED_EVENT_TYPE,
    VOTING_SESSION_OPENED_EVENT_TYPE,
    VOTING_SESSION_STARTED_EVENT_TYPE,
    BallotCastEvent,
    VotingSessionClosedEvent,
    VotingSessionOpenedEvent,
    VotingSessionStatusEvent,
)
from src.domain.models.ballot import Ballot
from src.domain.models.meeting_role import Capability
from src.domain.models.voting_session import (
    AnonymityLevel,
    ItemOutcome,
    ItemTally,
    SessionItem,
    SessionItemSpec,
    SessionStatus,
    VoteChoice,
    VotingSession,
    VotingSessionConfig,
)
from src.domain.primitives.ensure_atomicity import AtomicOperationContext

INELIGIBLE_NOTHING_TO_CAST = (
    "not an eligible voter for this session and holds no usable proxy"
)


@dataclass(frozen=True)
class ControlledWeight:
    """Weight a caster controls on one item and round.

    Attributes:
        own_weight: Caster's snapshot weight, 0 when delegated away or
            already represented.
        proxied: grantor -> (effective weight, root grant id).
        grant_ids: Every grant traversed for `proxied`, counted on use.
        candidates: Identities the caster could represent before skipping
            those already represented.
        instructions: grantor -> choice an instructed proxy requires.
    """

    own_weight: Decimal
    proxied: dict[str, tuple[Decimal, UUID]]
    grant_ids: list[UUID]
    candidates: int
    instructions: dict[str, VoteChoice]


class VotingSessionService(LoggingMixin):
    """Voting session lifecycle, ballot collection and tally."""

    def __init__(
        self,
        workflow_engine: WorkflowEngineService,
        role_registry: RoleRegistryService,
        proxy_graph: ProxyGraphService,
        resolution_registry: ResolutionRegistryService,
        voting: VotingRepositoryProtocol,
        time_authority: TimeAuthorityProtocol,
        audit: AuditPublisher,
        locks: KeyedLockRegistry,
        config: GovernanceConfig = DEFAULT_GOVERNANCE_CONFIG,
    ) -> None:
        self._workflow = workflow_engine
        self._roles = role_registry
        self._proxies = proxy_graph
        self._resolutions = resolution_registry
        self._voting = voting
        self._time = time_authority
        self._audit = audit
        self._locks = locks
        self._default_threshold = config.default_pass_threshold_percent
        self._inclusive_threshold = config.inclusive_threshold
        self._init_logger()

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def get_session(self, session_id: UUID) -> VotingSession:
        session = await self._voting.get_session(session_id)
        if session is None:
            raise VotingSessionNotFoundError(session_id)
        return session

    async def get_item(self, session_id: UUID, item_id: UUID) -> SessionItem:
        item = await self._voting.get_item(item_id)
        if item is None or item.session_id != session_id:
            raise SessionItemNotFoundError(session_id, item_id)
        return item

    async def list_items(self, session_id: UUID) -> list[SessionItem]:
        await self.get_session(session_id)
        return await self._voting.list_items(session_id)

    async def get_tally(self, session_id: UUID, item_id: UUID) -> ItemTally:
        """Aggregate tally for an item: the recorded one once closed, else the live count."""
        item = await self.get_item(session_id, item_id)
        if item.outcome is not None:
            return item.outcome.tally
        return _tally(await self._voting.list_ballots(item_id, item.round))

    async def get_ballots(
        self, session_id: UUID, item_id: UUID, requester: str
    ) -> list[dict[str, Any]]:
        """Ballots for an item, with the voter mapping only where the requester may see it.

        PUBLIC: every voter is visible.
        ANONYMOUS, CONFIDENTIAL: visible to administrators and to each
        voter for their own ballot.
        SECRET: visible only to each voter for their own ballot.

        A ballot whose voter is withheld shows only its choice and round.
        """
        session = await self.get_session(session_id)
        await self.get_item(session_id, item_id)
        ballots = await self._voting.list_ballots(item_id)

        if session.anonymity_level == AnonymityLevel.PUBLIC:
            return [b.to_dict() for b in ballots]

        is_admin = False
        if session.anonymity_level != AnonymityLevel.SECRET:
            is_admin = await self._is_session_admin(session, requester)
        return [
            b.to_dict(include_voter=is_admin or b.voter_id == requester) for b in ballots
        ]

    async def list_sessions_for_workflow(
        self, workflow_instance_id: UUID
    ) -> list[VotingSession]:
        return await self._voting.list_sessions_for_workflow(workflow_instance_id)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def open_session(
        self,
        meeting_id: UUID,
        workflow_instance_id: UUID,
        items: list[SessionItemSpec],
        config: VotingSessionConfig,
        opened_by: str,
    ) -> VotingSession:
        """Open a voting session on one or more resolutions.

        Eligible voters and their weights are snapshotted now; later role or
        membership changes do not affect this session.

        Raises:
            EmptyBallotError: No items.
            WorkflowNotFoundError: Unknown instance or another meeting's.
            InvalidStageError: Workflow is not at a voting stage.
            StageLockedError: Another session is attached to the workflow.
            ResolutionNotVotableError: A resolution is decided or repeated.
        """
        if not items:
            raise EmptyBallotError()
        log = self._log_operation(
            "open_session",
            meeting_id=str(meeting_id),
            workflow_instance_id=str(workflow_instance_id),
        )

        instance = await self._workflow.get_instance(workflow_instance_id)
        if instance.meeting_id != meeting_id:
            raise WorkflowNotFoundError(workflow_instance_id)
        if not self._workflow.is_voting_stage(instance.current_stage):
            raise InvalidStageError(
                workflow_instance_id,
                instance.current_stage.value,
                instance.status.value,
                "voting sessions may only be opened in a voting stage",
                invariant="voting requires a voting stage",
            )

        seen: set[UUID] = set()
        for spec in items:
            if spec.resolution_id in seen:
                raise ResolutionNotVotableError(spec.resolution_id, "already on this ballot")
            seen.add(spec.resolution_id)
            await self._resolutions.ensure_votable(spec.resolution_id, meeting_id)

        now = self._time.now()
        eligible = await self._roles.eligible_voters(meeting_id)
        session = VotingSession.create(
            meeting_id=meeting_id,
            workflow_instance_id=workflow_instance_id,
            config=config,
            required_quorum=(
                config.required_quorum
                if config.required_quorum is not None
                else instance.quorum_required
            ),
            pass_threshold_percent=(
                config.pass_threshold_percent
                if config.pass_threshold_percent is not None
                else self._default_threshold
            ),
            eligible_voters=eligible,
            opened_by=opened_by,
            created_at=now,
        )
        session_items = [
            SessionItem.create(session.session_id, spec, position)
            for position, spec in enumerate(items, start=1)
        ]
        session.item_ids = [i.item_id for i in session_items]
        if config.start_immediately:
            session.status = SessionStatus.OPEN
            session.opened_at = now

        async with AtomicOperationContext("open_voting_session") as ctx:
            await self._workflow.attach_voting_session(
                workflow_instance_id, session.session_id, opened_by
            )
            ctx.add_rollback(
                lambda: self._workflow.release_voting_session(
                    workflow_instance_id, session.session_id, opened_by
                )
            )
            resolution_ids = [spec.resolution_id for spec in items]
            await self._resolutions.attach_to_session(
                resolution_ids, session.session_id, meeting_id
            )
            ctx.add_rollback(
                lambda: self._resolutions.release_from_session(
                    resolution_ids, session.session_id
                )
            )
            await self._voting.add_session(session, session_items)

        await self._audit.publish(
            VOTING_SESSION_OPENED_EVENT_TYPE,
            meeting_id,
            VotingSessionOpenedEvent(
                session_id=session.session_id,
                workflow_instance_id=workflow_instance_id,
                status=session.status.value,
                anonymity_level=session.anonymity_level.value,
                voting_method=session.voting_method.value,
                eligible_voter_count=session.eligible_voter_count,
                required_quorum=session.required_quorum,
                resolution_ids=tuple(spec.resolution_id for spec in items),
            ),
        )
        log.info(
            "voting_session_opened",
            session_id=str(session.session_id),
            status=session.status.value,
            eligible_voter_count=session.eligible_voter_count,
            item_count=len(session_items),
        )
        return session

    async def start_session(self, session_id: UUID, started_by: str) -> VotingSession:
        """Move a preparing session to open. Starting an open session is a no-op."""
        async with self._locks.hold(f"session:{session_id}"):
            session = await self.get_session(session_id)
            if session.status == SessionStatus.OPEN:
                return session
            if session.status != SessionStatus.PREPARING:
                raise SessionNotOpenError(session_id, session.status.value)
            session.status = SessionStatus.OPEN
            session.opened_at = self._time.now()
            session = await self._voting.update_session(session, session.version)

        await self._audit.publish(
            VOTING_SESSION_STARTED_EVENT_TYPE,
            session.meeting_id,
            VotingSessionStatusEvent(session_id, session.status.value, started_by),
        )
        return session

    async def cast_ballot(
        self,
        session_id: UUID,
        item_id: UUID,
        voter_id: str,
        choice: VoteChoice,
        round: int = 1,
        instruction_override_reason: str | None = None,
    ) -> Ballot:
        """Cast one aggregated ballot for the voter and everyone they hold a proxy for.

        Each proxy used is counted against its grant before the ballot is
        stored, under the grantor's lock, and released again if the ballot
        is not stored.

        Raises:
            SessionNotOpenError: Session is not open.
            DeadlinePassedError: Voting deadline has passed.
            RoundNotOpenError: `round` is not the item's current round.
            ChoiceNotPermittedError: Abstention when the session forbids it.
            DuplicateVoteError: Voter, or everyone they could represent,
                already voted on this item and round.
            IneligibleVoterError: Voter has no eligible weight and no proxy.
            ProxyInstructionNotFollowedError: The choice departs from a
                grantor's instruction and no override reason is given.
            ProxyUseConflictError: A proxy was used up, revoked or expired
                while the ballot was being cast.
        """
        log = self._log_operation(
            "cast_ballot", session_id=str(session_id), item_id=str(item_id)
        )
        session = await self._require_open(session_id)
        item = await self.get_item(session_id, item_id)

        async with self._locks.hold(f"item:{item_id}"):
            # Re-read under the item lock; close takes this lock before tallying
            session = await self._require_open(session_id)
            item = await self.get_item(session_id, item_id)
            now = self._time.now()
            if session.deadline_passed(now):
                raise DeadlinePassedError(session_id, session.voting_deadline)
            if round != item.round:
                raise RoundNotOpenError(item_id, round, item.round)
            if choice == VoteChoice.ABSTAIN and not session.allow_abstentions:
                raise ChoiceNotPermittedError(
                    f"Abstentions are not permitted in voting session {session_id}"
                )

            existing = await self._voting.list_ballots(item_id, round)
            already: set[str] = set()
            for prior in existing:
                if prior.voter_id == voter_id:
                    raise DuplicateVoteError(item_id, voter_id, round, prior.ballot_id)
                already.update(prior.represented)

            control = await self._controlled_weight(session, item, voter_id, now, already)
            if control.own_weight == 0 and not control.proxied:
                if control.candidates:
                    raise DuplicateVoteError(item_id, voter_id, round)
                raise IneligibleVoterError(session_id, voter_id, INELIGIBLE_NOTHING_TO_CAST)

            departed = sorted(g for g, c in control.instructions.items() if c != choice)
            if departed and instruction_override_reason is None:
                log.info("ballot_rejected_instruction", grantors=departed)
                raise ProxyInstructionNotFollowedError(
                    departed[0], control.instructions[departed[0]].value, choice.value
                )

            async with AtomicOperationContext("cast_ballot") as ctx:
                executed = await self._proxies.reserve_proxy_use(control.grant_ids, now)
                ctx.add_rollback(
                    lambda: self._proxies.release_proxy_use(control.grant_ids)
                )
                ballot = Ballot.create(
                    session_id=session_id,
                    session_item_id=item_id,
                    voter_id=voter_id,
                    choice=choice,
                    own_weight=control.own_weight,
                    proxied=control.proxied,
                    sequence=await self._voting.next_ballot_sequence(session_id),
                    round=round,
                    cast_at=now,
                    proxy_instructions_followed=(
                        not departed if control.instructions else None
                    ),
                    instruction_override_reason=(
                        instruction_override_reason if departed else None
                    ),
                )
                await self._voting.add_ballot(ballot)

        await self._proxies.announce_executed(executed)
        await self._audit.publish(
            BALLOT_CAST_EVENT_TYPE,
            session.meeting_id,
            BallotCastEvent.from_ballot(ballot, session.anonymity_level),
        )
        log.info(
            "ballot_cast",
            ballot_id=str(ballot.ballot_id),
            weight=str(ballot.weight),
            proxied_count=len(ballot.cast_as_proxy_for),
            round=round,
        )
        return ballot

    async def open_new_round(
        self, session_id: UUID, item_id: UUID, opened_by: str
    ) -> SessionItem:
        """Start a fresh round for an item. Earlier rounds' ballots are kept but no longer tallied."""
        await self._require_open(session_id)
        async with self._locks.hold(f"item:{item_id}"):
            session = await self._require_open(session_id)
            item = await self.get_item(session_id, item_id)
            item.round += 1
            await self._voting.update_item(item)

        await self._audit.publish(
            VOTING_ROUND_OPENED_EVENT_TYPE,
            session.meeting_id,
            VotingSessionStatusEvent(
                session_id, session.status.value, opened_by, item_id=item_id, round=item.round
            ),
        )
        self._log_operation("open_new_round", session_id=str(session_id)).info(
            "voting_round_opened", item_id=str(item_id), round=item.round
        )
        return item

    async def close(self, session_id: UUID, closed_by: str) -> list[ItemOutcome]:
        """Close voting, tally every item and record outcomes.

        Closing a completed session returns its recorded outcomes. A session
        left in closed or counting by an interrupted close is resumed.

        Raises:
            SessionNotOpenError: Session is preparing or cancelled.
            TallyError: An item's tally exceeds the eligible snapshot; the
                session stays in counting and nothing is recorded.
            InvalidResolutionTransitionError: A resolution can no longer take
                its outcome; checked for every item before any is written.
        """
        log = self._log_operation("close", session_id=str(session_id), closed_by=closed_by)
        async with self._locks.hold(f"session:{session_id}"):
            session = await self.get_session(session_id)
            if session.status == SessionStatus.COMPLETED:
                items = await self._voting.list_items(session_id)
                return [i.outcome for i in items if i.outcome is not None]
            if session.status not in (
                SessionStatus.OPEN,
                SessionStatus.CLOSED,
                SessionStatus.COUNTING,
            ):
                raise SessionNotOpenError(session_id, session.status.value)

            now = self._time.now()
            if session.status == SessionStatus.OPEN:
                session.status = SessionStatus.CLOSED
                session.closed_at = now
                session = await self._voting.update_session(session, session.version)
            if session.status == SessionStatus.CLOSED:
                session.status = SessionStatus.COUNTING
                session = await self._voting.update_session(session, session.version)

            items = await self._voting.list_items(session_id)
            outcomes: list[ItemOutcome] = []
            for item in items:
                async with self._locks.hold(f"item:{item.item_id}"):
                    ballots = await self._voting.list_ballots(item.item_id, item.round)
                outcome = item.outcome or self._decide(session, item, _tally(ballots), now)
                outcomes.append(outcome)

            # Every resolution must accept its outcome before any is written
            for outcome in outcomes:
                await self._resolutions.check_outcome(outcome.resolution_id, outcome)

            for item, outcome in zip(items, outcomes):
                item.tally = outcome.tally
                item.outcome = outcome
                await self._voting.update_item(item)
                await self._resolutions.record_outcome(item.resolution_id, outcome)

            await self._workflow.release_voting_session(
                session.workflow_instance_id, session_id, closed_by
            )
            session.status = SessionStatus.COMPLETED
            session.completed_at = self._time.now()
            session = await self._voting.update_session(session, session.version)

        await self._audit.publish(
            VOTING_SESSION_CLOSED_EVENT_TYPE,
            session.meeting_id,
            VotingSessionClosedEvent(session_id, closed_by, tuple(outcomes)),
        )
        log.info(
            "voting_session_closed",
            passed=sum(1 for o in outcomes if o.passed),
            rejected=sum(1 for o in outcomes if not o.passed),
        )
        return outcomes

    async def cancel(
        self, session_id: UUID, cancelled_by: str, reason: str | None = None
    ) -> VotingSession:
        """Cancel a preparing or open session. Cancelling twice is a no-op.

        Raises:
            CancellationNotPermittedError: Counting has begun or finished.
        """
        async with self._locks.hold(f"session:{session_id}"):
            session = await self.get_session(session_id)
            if session.status == SessionStatus.CANCELLED:
                return session
            if session.status not in (SessionStatus.PREPARING, SessionStatus.OPEN):
                raise CancellationNotPermittedError(session_id, session.status.value)
            session.status = SessionStatus.CANCELLED
            session.cancelled_at = self._time.now()
            session.cancellation_reason = reason
            session = await self._voting.update_session(session, session.version)
            await self._workflow.release_voting_session(
                session.workflow_instance_id, session_id, cancelled_by
            )
            await self._resolutions.release_from_session(
                [item.resolution_id for item in await self._voting.list_items(session_id)],
                session_id,
            )

        await self._audit.publish(
            VOTING_SESSION_CANCELLED_EVENT_TYPE,
            session.meeting_id,
            VotingSessionStatusEvent(session_id, session.status.value, cancelled_by, reason),
        )
        self._log_operation("cancel", session_id=str(session_id)).info(
            "voting_session_cancelled", reason=reason
        )
        return session

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    async def _require_open(self, session_id: UUID) -> VotingSession:
        session = await self.get_session(session_id)
        if session.status != SessionStatus.OPEN:
            raise SessionNotOpenError(session_id, session.status.value)
        return session

    async def _is_session_admin(self, session: VotingSession, requester: str) -> bool:
        instance = await self._workflow.get_instance(session.workflow_instance_id)
        if instance.controller == requester:
            return True
        return await self._roles.has_capability(
            session.meeting_id, requester, Capability.CLOSE_VOTING
        )

    async def _controlled_weight(
        self,
        session: VotingSession,
        item: SessionItem,
        voter_id: str,
        at: datetime,
        already: set[str],
    ) -> ControlledWeight:
        """Weight the voter controls on this item, skipping identities already represented."""
        meeting_id = session.meeting_id
        candidates = 0

        own_weight = Decimal(0)
        snapshot_weight = session.eligible_voters.get(voter_id)
        if not session.allow_proxy_voting:
            if snapshot_weight is None:
                return ControlledWeight(own_weight, {}, [], 0, {})
            if voter_id not in already:
                own_weight = snapshot_weight
            return ControlledWeight(own_weight, {}, [], 1, {})

        if snapshot_weight is not None:
            holder = await self._proxies.resolve_effective_holder(
                meeting_id, voter_id, at, item.resolution_id
            )
            if holder == voter_id:
                candidates += 1
                if voter_id not in already:
                    own_weight = snapshot_weight

        proxied: dict[str, tuple[Decimal, UUID]] = {}
        used_grants: list[UUID] = []
        instructions: dict[str, VoteChoice] = {}
        chains = await self._proxies.represented_grantors(
            meeting_id, voter_id, at, item.resolution_id
        )
        for grantor, chain in chains.items():
            grantor_weight = session.eligible_voters.get(grantor)
            if grantor_weight is None:
                continue
            candidates += 1
            if grantor in already:
                continue
            proxied[grantor] = (
                min(chain.effective_weight, grantor_weight),
                chain.root_grant_id,
            )
            for grant in chain.grants:
                if grant.grant_id not in used_grants:
                    used_grants.append(grant.grant_id)
                # The instruction nearest the grantor binds the rest of the chain
                instruction = grant.instruction_for(item.resolution_id)
                if instruction is not None and grantor not in instructions:
                    instructions[grantor] = instruction
        return ControlledWeight(own_weight, proxied, used_grants, candidates, instructions)

    def _decide(
        self, session: VotingSession, item: SessionItem, tally: ItemTally, at: datetime
    ) -> ItemOutcome:
        if tally.counted_weight > session.eligible_weight_total:
            self._log_operation("close", session_id=str(session.session_id)).error(
                "tally_guard_tripped",
                item_id=str(item.item_id),
                measure="weight",
                counted=str(tally.counted_weight),
            )
            raise TallyError(
                session.session_id,
                item.item_id,
                tally.counted_weight,
                session.eligible_weight_total,
                "weight",
            )
        if tally.voters_participated > session.eligible_voter_count:
            self._log_operation("close", session_id=str(session.session_id)).error(
                "tally_guard_tripped",
                item_id=str(item.item_id),
                measure="voters",
                counted=tally.voters_participated,
            )
            raise TallyError(
                session.session_id,
                item.item_id,
                tally.voters_participated,
                session.eligible_voter_count,
                "voters",
            )

        threshold = (
            item.threshold_override
            if item.threshold_override is not None
            else session.pass_threshold_percent
        )
        quorum_achieved = tally.voters_participated >= session.required_quorum
        decisive = tally.votes_for + tally.votes_against
        pass_percentage = tally.votes_for / decisive * 100 if decisive > 0 else None
        if pass_percentage is None:
            meets_threshold = False
        elif session.require_unanimous_consent:
            meets_threshold = tally.votes_against == 0
        elif self._inclusive_threshold:
            meets_threshold = pass_percentage >= threshold
        else:
            meets_threshold = pass_percentage > threshold

        return ItemOutcome(
            session_id=session.session_id,
            session_item_id=item.item_id,
            resolution_id=item.resolution_id,
            round=item.round,
            tally=tally,
            required_quorum=session.required_quorum,
            quorum_achieved=quorum_achieved,
            threshold_percent=threshold,
            pass_percentage=pass_percentage,
            passed=quorum_achieved and meets_threshold,
            decided_at=at,
        )


def _tally(ballots: list[Ballot]) -> ItemTally:
    """Weighted sums per choice. Absent ballots do not count as participation."""
    totals = {choice: Decimal(0) for choice in VoteChoice}
    participated = 0
    for ballot in ballots:
        totals[ballot.choice] += ballot.weight
        if ballot.choice != VoteChoice.ABSENT:
            participated += len(ballot.represented)
    return ItemTally(
        votes_for=totals[VoteChoice.FOR],
        votes_against=totals[VoteChoice.AGAINST],
        votes_abstain=totals[VoteChoice.ABSTAIN],
        votes_absent=totals[VoteChoice.ABSENT],
        voters_participated=participated,
        ballots_cast=len(ballots),
    )
