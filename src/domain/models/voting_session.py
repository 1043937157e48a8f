"""Voting session domain models.

A VotingSession is one bounded voting event bound to a workflow instance.
It holds one SessionItem per resolution and a snapshot of eligible voters
taken at open time; later membership changes do not affect it.

Ballots are aggregated: a holder's own weight and every proxied grantor's
weight go into one Ballot row, so a grantor is never counted twice.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

DEFAULT_PASS_THRESHOLD_PERCENT = Decimal("50.0")


class SessionStatus(Enum):
    """Lifecycle of a voting session."""

    PREPARING = "preparing"
    OPEN = "open"
    CLOSED = "closed"
    COUNTING = "counting"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_finished(self) -> bool:
        return self in (SessionStatus.COMPLETED, SessionStatus.CANCELLED)


class VotingMethod(Enum):
    """How votes are physically collected."""

    VOICE = "voice"
    SHOW_OF_HANDS = "show_of_hands"
    SECRET_BALLOT = "secret_ballot"
    ELECTRONIC = "electronic"
    ROLL_CALL = "roll_call"
    WRITTEN_BALLOT = "written_ballot"


class AnonymityLevel(Enum):
    """Who may see the ballot-to-voter mapping.

    PUBLIC: everyone.
    ANONYMOUS / CONFIDENTIAL: administrators and the voter themself.
    SECRET: only the voter themself.
    """

    PUBLIC = "public"
    ANONYMOUS = "anonymous"
    SECRET = "secret"
    CONFIDENTIAL = "confidential"


class VoteChoice(Enum):
    """Ballot choices."""

    FOR = "for"
    AGAINST = "against"
    ABSTAIN = "abstain"
    ABSENT = "absent"


@dataclass(frozen=True)
class VotingSessionConfig:
    """Caller-supplied parameters for opening a session.

    None for `pass_threshold_percent` or `required_quorum` means the
    configured default and the workflow's quorum respectively.

    With `allow_proxy_voting` off every ballot carries only its caster's own
    weight. With `require_unanimous_consent` an item passes only when no
    weight is cast against it, whatever the threshold.
    """

    voting_method: VotingMethod = VotingMethod.ELECTRONIC
    anonymity_level: AnonymityLevel = AnonymityLevel.PUBLIC
    pass_threshold_percent: Decimal | None = None
    required_quorum: int | None = None
    voting_deadline: datetime | None = None
    allow_abstentions: bool = True
    allow_proxy_voting: bool = True
    require_unanimous_consent: bool = False
    start_immediately: bool = True


@dataclass(frozen=True)
class SessionItemSpec:
    """One resolution to put to the vote, with an optional threshold override."""

    resolution_id: UUID
    threshold_override: Decimal | None = None


@dataclass(frozen=True)
class ItemTally:
    """Weighted totals for one item and round."""

    votes_for: Decimal = Decimal(0)
    votes_against: Decimal = Decimal(0)
    votes_abstain: Decimal = Decimal(0)
    votes_absent: Decimal = Decimal(0)
    voters_participated: int = 0
    ballots_cast: int = 0

    @property
    def counted_weight(self) -> Decimal:
        return self.votes_for + self.votes_against + self.votes_abstain

    def to_dict(self) -> dict[str, Any]:
        return {
            "votes_for": str(self.votes_for),
            "votes_against": str(self.votes_against),
            "votes_abstain": str(self.votes_abstain),
            "votes_absent": str(self.votes_absent),
            "voters_participated": self.voters_participated,
            "ballots_cast": self.ballots_cast,
        }


@dataclass(frozen=True)
class ItemOutcome:
    """Result of tallying one session item at close."""

    session_id: UUID
    session_item_id: UUID
    resolution_id: UUID
    round: int
    tally: ItemTally
    required_quorum: int
    quorum_achieved: bool
    threshold_percent: Decimal
    pass_percentage: Decimal | None
    passed: bool
    decided_at: datetime

    @property
    def resolution_status(self) -> str:
        return "passed" if self.passed else "rejected"

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": str(self.session_id),
            "session_item_id": str(self.session_item_id),
            "resolution_id": str(self.resolution_id),
            "round": self.round,
            **self.tally.to_dict(),
            "required_quorum": self.required_quorum,
            "quorum_achieved": self.quorum_achieved,
            "threshold_percent": str(self.threshold_percent),
            "pass_percentage": (
                str(self.pass_percentage) if self.pass_percentage is not None else None
            ),
            "passed": self.passed,
            "decided_at": self.decided_at.isoformat(),
        }


@dataclass
class SessionItem:
    """One resolution's vote within a session."""

    item_id: UUID
    session_id: UUID
    resolution_id: UUID
    position: int
    threshold_override: Decimal | None = None
    round: int = 1
    tally: ItemTally = field(default_factory=ItemTally)
    outcome: ItemOutcome | None = None

    @classmethod
    def create(
        cls, session_id: UUID, spec: SessionItemSpec, position: int
    ) -> SessionItem:
        return cls(
            item_id=uuid4(),
            session_id=session_id,
            resolution_id=spec.resolution_id,
            position=position,
            threshold_override=spec.threshold_override,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "item_id": str(self.item_id),
            "session_id": str(self.session_id),
            "resolution_id": str(self.resolution_id),
            "position": self.position,
            "threshold_override": (
                str(self.threshold_override)
                if self.threshold_override is not None
                else None
            ),
            "round": self.round,
            "tally": self.tally.to_dict(),
            "outcome": self.outcome.to_dict() if self.outcome else None,
        }


@dataclass
class VotingSession:
    """A bounded voting event inside a meeting.

    `eligible_voters` maps user_id to the voting weight resolved at open
    time. `eligible_voter_count` and `eligible_weight_total` are derived
    from that snapshot and bound every item's tally.
    """

    session_id: UUID
    meeting_id: UUID
    workflow_instance_id: UUID
    status: SessionStatus
    voting_method: VotingMethod
    anonymity_level: AnonymityLevel
    required_quorum: int
    pass_threshold_percent: Decimal
    eligible_voters: dict[str, Decimal]
    item_ids: list[UUID]
    created_at: datetime
    opened_by: str
    allow_abstentions: bool = True
    allow_proxy_voting: bool = True
    require_unanimous_consent: bool = False
    voting_deadline: datetime | None = None
    opened_at: datetime | None = None
    closed_at: datetime | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None
    version: int = 0

    @classmethod
    def create(
        cls,
        meeting_id: UUID,
        workflow_instance_id: UUID,
        config: VotingSessionConfig,
        required_quorum: int,
        pass_threshold_percent: Decimal,
        eligible_voters: dict[str, Decimal],
        opened_by: str,
        created_at: datetime | None = None,
    ) -> VotingSession:
        return cls(
            session_id=uuid4(),
            meeting_id=meeting_id,
            workflow_instance_id=workflow_instance_id,
            status=SessionStatus.PREPARING,
            voting_method=config.voting_method,
            anonymity_level=config.anonymity_level,
            required_quorum=required_quorum,
            pass_threshold_percent=Decimal(pass_threshold_percent),
            eligible_voters=dict(eligible_voters),
            item_ids=[],
            created_at=created_at or datetime.now(timezone.utc),
            opened_by=opened_by,
            allow_abstentions=config.allow_abstentions,
            allow_proxy_voting=config.allow_proxy_voting,
            require_unanimous_consent=config.require_unanimous_consent,
            voting_deadline=config.voting_deadline,
        )

    @property
    def eligible_voter_count(self) -> int:
        return len(self.eligible_voters)

    @property
    def eligible_weight_total(self) -> Decimal:
        return sum(self.eligible_voters.values(), Decimal(0))

    def deadline_passed(self, at: datetime) -> bool:
        return self.voting_deadline is not None and at > self.voting_deadline

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": str(self.session_id),
            "meeting_id": str(self.meeting_id),
            "workflow_instance_id": str(self.workflow_instance_id),
            "status": self.status.value,
            "voting_method": self.voting_method.value,
            "anonymity_level": self.anonymity_level.value,
            "required_quorum": self.required_quorum,
            "eligible_voter_count": self.eligible_voter_count,
            "eligible_weight_total": str(self.eligible_weight_total),
            "pass_threshold_percent": str(self.pass_threshold_percent),
            "allow_abstentions": self.allow_abstentions,
            "allow_proxy_voting": self.allow_proxy_voting,
            "require_unanimous_consent": self.require_unanimous_consent,
            "item_ids": [str(i) for i in self.item_ids],
            "voting_deadline": (
                self.voting_deadline.isoformat() if self.voting_deadline else None
            ),
            "opened_at": self.opened_at.isoformat() if self.opened_at else None,
            "closed_at": self.closed_at.isoformat() if self.closed_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }
