"""Voting session event payloads.

Ballot events carry the voter mapping, weight and sequence only for public
sessions; for every other anonymity level the audit trail records that a
ballot with a given choice was cast, and nothing that identifies the caster.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from src.domain.models.ballot import Ballot
from src.domain.models.voting_session import AnonymityLevel, ItemOutcome

VOTING_SESSION_OPENED_EVENT_TYPE: str = "voting.session.opened"
VOTING_SESSION_STARTED_EVENT_TYPE: str = "voting.session.started"
BALLOT_CAST_EVENT_TYPE: str = "voting.ballot.cast"
VOTING_SESSION_CLOSED_EVENT_TYPE: str = "voting.session.closed"
VOTING_SESSION_CANCELLED_EVENT_TYPE: str = "voting.session.cancelled"
VOTING_ROUND_OPENED_EVENT_TYPE: str = "voting.item.round_opened"


@dataclass(frozen=True, eq=True)
class VotingSessionOpenedEvent:
    """Payload emitted when a session is created."""

    session_id: UUID
    workflow_instance_id: UUID
    status: str
    anonymity_level: str
    voting_method: str
    eligible_voter_count: int
    required_quorum: int
    resolution_ids: tuple[UUID, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": str(self.session_id),
            "workflow_instance_id": str(self.workflow_instance_id),
            "status": self.status,
            "anonymity_level": self.anonymity_level,
            "voting_method": self.voting_method,
            "eligible_voter_count": self.eligible_voter_count,
            "required_quorum": self.required_quorum,
            "resolution_ids": [str(r) for r in self.resolution_ids],
        }


@dataclass(frozen=True, eq=True)
class BallotCastEvent:
    """Payload emitted for every accepted ballot.

    Built with `from_ballot`, which keeps only what the session's anonymity
    level discloses; the event never holds the ballot itself.
    """

    ballot_id: UUID
    session_id: UUID
    session_item_id: UUID
    choice: str
    round: int
    disclosed: tuple[tuple[str, Any], ...] = ()

    @classmethod
    def from_ballot(cls, ballot: Ballot, anonymity_level: AnonymityLevel) -> BallotCastEvent:
        disclosed: tuple[tuple[str, Any], ...] = ()
        if anonymity_level == AnonymityLevel.PUBLIC:
            disclosed = (
                ("voter_id", ballot.voter_id),
                ("weight", str(ballot.weight)),
                ("own_weight", str(ballot.own_weight)),
                ("cast_as_proxy_for", tuple(ballot.cast_as_proxy_for)),
                ("represented_count", len(ballot.represented)),
                ("sequence", ballot.sequence),
                ("proxy_instructions_followed", ballot.proxy_instructions_followed),
            )
        return cls(
            ballot_id=ballot.ballot_id,
            session_id=ballot.session_id,
            session_item_id=ballot.session_item_id,
            choice=ballot.choice.value,
            round=ballot.round,
            disclosed=disclosed,
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "ballot_id": str(self.ballot_id),
            "session_id": str(self.session_id),
            "session_item_id": str(self.session_item_id),
            "choice": self.choice,
            "round": self.round,
        }
        for key, value in self.disclosed:
            result[key] = list(value) if isinstance(value, tuple) else value
        return result


@dataclass(frozen=True, eq=True)
class VotingSessionStatusEvent:
    """Payload for start, cancellation and round changes."""

    session_id: UUID
    status: str
    actor: str
    reason: str | None = None
    item_id: UUID | None = None
    round: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": str(self.session_id),
            "status": self.status,
            "actor": self.actor,
            "reason": self.reason,
            "item_id": str(self.item_id) if self.item_id else None,
            "round": self.round,
        }


@dataclass(frozen=True, eq=True)
class VotingSessionClosedEvent:
    """Payload emitted when a session completes, with every item outcome."""

    session_id: UUID
    closed_by: str
    outcomes: tuple[ItemOutcome, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": str(self.session_id),
            "closed_by": self.closed_by,
            "outcomes": [o.to_dict() for o in self.outcomes],
        }
