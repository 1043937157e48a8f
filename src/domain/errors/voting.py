"""Voting session domain errors.

Ballot rejections are caller-visible and never silently retried: a
duplicate vote must never overwrite the first ballot.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from src.domain.exceptions import GovernanceError


class VotingError(GovernanceError):
    """Base error for voting session operations."""

    pass


class VotingSessionNotFoundError(VotingError):
    """Raised when a voting session does not exist.

    HTTP Status: 404 Not Found
    """

    kind = "NotFound"
    title = "Voting Session Not Found"
    http_status = 404
    invariant = "voting session must exist"

    def __init__(self, session_id: UUID) -> None:
        self.session_id = session_id
        super().__init__(f"Voting session not found: {session_id}")


class SessionItemNotFoundError(VotingError):
    """Raised when an item does not belong to the session.

    HTTP Status: 404 Not Found
    """

    kind = "NotFound"
    title = "Session Item Not Found"
    http_status = 404
    invariant = "session item must belong to the session"

    def __init__(self, session_id: UUID, item_id: UUID) -> None:
        self.session_id = session_id
        self.item_id = item_id
        super().__init__(f"Item {item_id} is not part of voting session {session_id}")


class EmptyBallotError(VotingError):
    """Raised when a voting session is opened without any items.

    HTTP Status: 422 Unprocessable Entity
    """

    kind = "EmptyBallot"
    title = "Empty Ballot"
    http_status = 422
    invariant = "a voting session has at least one item"

    def __init__(self) -> None:
        super().__init__("A voting session requires at least one resolution")


class DuplicateVoteError(VotingError):
    """Raised when an identity is already represented for an item and round.

    HTTP Status: 409 Conflict

    Attributes:
        item_id: The session item.
        voter_id: The identity that was already represented.
        round: The voting round.
        existing_ballot_id: The ballot already holding the identity.
    """

    kind = "DuplicateVote"
    title = "Duplicate Vote"
    http_status = 409
    invariant = "unique (session_item_id, voter_id, round)"

    def __init__(
        self,
        item_id: UUID,
        voter_id: str,
        round: int,
        existing_ballot_id: UUID | None = None,
    ) -> None:
        self.item_id = item_id
        self.voter_id = voter_id
        self.round = round
        self.existing_ballot_id = existing_ballot_id
        super().__init__(
            f"{voter_id} is already represented on item {item_id} in round {round}"
        )

    def to_rfc7807_dict(self) -> dict[str, Any]:
        result = super().to_rfc7807_dict()
        result["item_id"] = str(self.item_id)
        result["round"] = self.round
        if self.existing_ballot_id is not None:
            result["existing_ballot_id"] = str(self.existing_ballot_id)
        return result


class IneligibleVoterError(VotingError):
    """Raised when a voter has no own vote and no resolved proxy.

    HTTP Status: 403 Forbidden
    """

    kind = "Ineligible"
    title = "Ineligible Voter"
    http_status = 403
    invariant = "a ballot carries the voter's own eligible weight or a resolved proxy"

    def __init__(self, session_id: UUID, voter_id: str, reason: str) -> None:
        self.session_id = session_id
        self.voter_id = voter_id
        super().__init__(
            f"{voter_id} is not eligible to vote in session {session_id}: {reason}"
        )


class SessionNotOpenError(VotingError):
    """Raised when a ballot or start targets a session in the wrong status.

    HTTP Status: 409 Conflict
    """

    kind = "SessionNotOpen"
    title = "Session Not Open"
    http_status = 409
    invariant = "ballots are accepted only while the session is open"

    def __init__(self, session_id: UUID, status: str) -> None:
        self.session_id = session_id
        self.status = status
        super().__init__(f"Voting session {session_id} is {status}, not open")

    def to_rfc7807_dict(self) -> dict[str, Any]:
        result = super().to_rfc7807_dict()
        result["session_status"] = self.status
        return result


class DeadlinePassedError(VotingError):
    """Raised when a ballot arrives after the session's voting deadline.

    The session does not close itself; closing stays an explicit action.

    HTTP Status: 409 Conflict
    """

    kind = "DeadlinePassed"
    title = "Voting Deadline Passed"
    http_status = 409
    invariant = "no ballots after voting_deadline"

    def __init__(self, session_id: UUID, deadline: datetime) -> None:
        self.session_id = session_id
        self.deadline = deadline
        super().__init__(
            f"Voting deadline {deadline.isoformat()} for session {session_id} has passed"
        )

    def to_rfc7807_dict(self) -> dict[str, Any]:
        result = super().to_rfc7807_dict()
        result["voting_deadline"] = self.deadline.isoformat()
        return result


class ChoiceNotPermittedError(VotingError):
    """Raised when a choice is disabled for the session (e.g. abstentions)."""

    kind = "ChoiceNotPermitted"
    title = "Choice Not Permitted"
    http_status = 422
    invariant = "choice must be permitted by the session configuration"


class ResolutionNotVotableError(VotingError):
    """Raised when a session item references a resolution that cannot be voted."""

    kind = "InvalidStage"
    title = "Resolution Not Votable"
    http_status = 409
    invariant = "only proposed or tabled resolutions may be put to a vote"

    def __init__(self, resolution_id: UUID, status: str) -> None:
        self.resolution_id = resolution_id
        self.status = status
        super().__init__(
            f"Resolution {resolution_id} is {status} and cannot be voted on"
        )


class TallyError(VotingError):
    """Raised when a tally fails its consistency checks at close.

    Fatal for the session: it remains in counting for manual investigation
    rather than completing with bad data.

    HTTP Status: 500 Internal Server Error
    """

    kind = "TallyError"
    title = "Tally Consistency Violation"
    http_status = 500
    invariant = "votes_for + votes_against + votes_abstain <= eligible total"

    def __init__(
        self,
        session_id: UUID,
        item_id: UUID,
        counted: Decimal | int,
        limit: Decimal | int,
        measure: str,
    ) -> None:
        self.session_id = session_id
        self.item_id = item_id
        self.counted = counted
        self.limit = limit
        self.measure = measure
        super().__init__(
            f"Item {item_id} in session {session_id} counted {counted} "
            f"{measure}, exceeding eligible {limit}"
        )

    def to_rfc7807_dict(self) -> dict[str, Any]:
        result = super().to_rfc7807_dict()
        result["item_id"] = str(self.item_id)
        result["measure"] = self.measure
        result["counted"] = str(self.counted)
        result["limit"] = str(self.limit)
        return result


class CancellationNotPermittedError(VotingError):
    """Raised when cancelling a session once counting has begun.

    HTTP Status: 409 Conflict
    """

    kind = "CancellationNotPermitted"
    title = "Cancellation Not Permitted"
    http_status = 409
    invariant = "only preparing or open sessions may be cancelled"

    def __init__(self, session_id: UUID, status: str) -> None:
        self.session_id = session_id
        self.status = status
        super().__init__(
            f"Voting session {session_id} is {status} and can no longer be cancelled"
        )


class RoundNotOpenError(VotingError):
    """Raised when a ballot targets a round other than the item's current round.

    HTTP Status: 409 Conflict
    """

    kind = "RoundNotOpen"
    title = "Round Not Open"
    http_status = 409
    invariant = "ballots are cast in the item's current round"

    def __init__(self, item_id: UUID, requested_round: int, current_round: int) -> None:
        self.item_id = item_id
        self.requested_round = requested_round
        self.current_round = current_round
        super().__init__(
            f"Item {item_id} is voting in round {current_round}, not {requested_round}"
        )
