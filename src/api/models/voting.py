"""Voting session API request/response models."""

from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field

from src.api.models.meeting import DateTimeWithZ
from src.domain.models.voting_session import AnonymityLevel, VoteChoice, VotingMethod


class SessionItemRequest(BaseModel):
    """One resolution to put to the vote."""

    resolution_id: UUID
    threshold_override: Decimal | None = Field(
        default=None, gt=0, le=100, description="Pass threshold percent for this item"
    )


class OpenVotingSessionRequest(BaseModel):
    """Request to open a voting session against a workflow's voting stage."""

    meeting_id: UUID
    workflow_instance_id: UUID
    items: list[SessionItemRequest] = Field(
        ..., description="Resolutions on the ballot; must not be empty"
    )
    opened_by: str = Field(..., min_length=1)
    voting_method: VotingMethod = Field(default=VotingMethod.ELECTRONIC)
    anonymity_level: AnonymityLevel = Field(default=AnonymityLevel.PUBLIC)
    pass_threshold_percent: Decimal | None = Field(default=None, gt=0, le=100)
    required_quorum: int | None = Field(default=None, ge=0)
    voting_deadline: DateTimeWithZ | None = None
    allow_abstentions: bool = True
    allow_proxy_voting: bool = True
    require_unanimous_consent: bool = False
    start_immediately: bool = True


class CastBallotRequest(BaseModel):
    """Request to cast a ballot on one session item."""

    voter_id: str = Field(..., min_length=1, description="Identity casting the ballot")
    choice: VoteChoice
    round: int = Field(default=1, ge=1)
    instruction_override_reason: str | None = Field(
        default=None,
        min_length=1,
        max_length=2000,
        description="Why the ballot departs from a grantor's proxy instruction",
    )


class SessionActionRequest(BaseModel):
    """Request body for start, close, cancel and new rounds."""

    actor: str = Field(..., min_length=1, description="Caller identity")
    reason: str | None = Field(default=None, max_length=2000)


class VotingSessionResponse(BaseModel):
    """Voting session state."""

    session_id: UUID
    meeting_id: UUID
    workflow_instance_id: UUID
    status: str
    voting_method: str
    anonymity_level: str
    required_quorum: int
    eligible_voter_count: int
    eligible_weight_total: Decimal
    pass_threshold_percent: Decimal
    allow_abstentions: bool
    allow_proxy_voting: bool
    require_unanimous_consent: bool
    item_ids: list[UUID]
    voting_deadline: DateTimeWithZ | None = None
    opened_at: DateTimeWithZ | None = None
    closed_at: DateTimeWithZ | None = None
    completed_at: DateTimeWithZ | None = None


class BallotResponse(BaseModel):
    """A ballot. Only choice and round remain where anonymity withholds the voter."""

    ballot_id: UUID
    session_item_id: UUID
    choice: str
    round: int
    weight: Decimal | None = None
    sequence: int | None = None
    cast_at: DateTimeWithZ | None = None
    voter_id: str | None = None
    own_weight: Decimal | None = None
    cast_as_proxy_for: list[str] | None = None
    proxy_instructions_followed: bool | None = None
    instruction_override_reason: str | None = None


class BallotListResponse(BaseModel):
    ballots: list[BallotResponse]


class TallyResponse(BaseModel):
    """Aggregate weighted tally for one item."""

    votes_for: Decimal
    votes_against: Decimal
    votes_abstain: Decimal
    votes_absent: Decimal
    voters_participated: int
    ballots_cast: int


class ItemOutcomeResponse(BaseModel):
    """Decided outcome of one session item."""

    session_id: UUID
    session_item_id: UUID
    resolution_id: UUID
    round: int
    votes_for: Decimal
    votes_against: Decimal
    votes_abstain: Decimal
    votes_absent: Decimal
    voters_participated: int
    ballots_cast: int
    required_quorum: int
    quorum_achieved: bool
    threshold_percent: Decimal
    pass_percentage: Decimal | None = None
    passed: bool
    decided_at: DateTimeWithZ


class CloseSessionResponse(BaseModel):
    session_id: UUID
    outcomes: list[ItemOutcomeResponse]


class SessionItemResponse(BaseModel):
    item_id: UUID
    session_id: UUID
    resolution_id: UUID
    position: int
    threshold_override: Decimal | None = None
    round: int
    tally: TallyResponse
    outcome: ItemOutcomeResponse | None = None


class SessionItemListResponse(BaseModel):
    items: list[SessionItemResponse]
