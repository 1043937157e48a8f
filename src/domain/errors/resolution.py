"""Resolution registry errors."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from src.domain.exceptions import GovernanceError


class ResolutionError(GovernanceError):
    """Base error for resolution operations."""

    pass


class ResolutionNotFoundError(ResolutionError):
    """Raised when a resolution does not exist.

    HTTP Status: 404 Not Found
    """

    kind = "NotFound"
    title = "Resolution Not Found"
    http_status = 404
    invariant = "resolution must exist"

    def __init__(self, resolution_id: UUID) -> None:
        self.resolution_id = resolution_id
        super().__init__(f"Resolution not found: {resolution_id}")


class SelfSecondError(ResolutionError):
    """Raised when a proposer tries to second their own resolution."""

    kind = "SelfSecond"
    title = "Self Second"
    http_status = 422
    invariant = "seconder != proposer"

    def __init__(self, proposer: str) -> None:
        self.proposer = proposer
        super().__init__(f"{proposer} cannot second their own resolution")


class InvalidResolutionTransitionError(ResolutionError):
    """Raised when a resolution status change is not permitted.

    HTTP Status: 409 Conflict
    """

    kind = "InvalidResolutionTransition"
    title = "Invalid Resolution Transition"
    http_status = 409
    invariant = "resolution status follows proposed -> outcome, tabled -> proposed|withdrawn"

    def __init__(
        self, resolution_id: UUID, from_status: str, to_status: str
    ) -> None:
        self.resolution_id = resolution_id
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Resolution {resolution_id} cannot move from {from_status} to {to_status}"
        )

    def to_rfc7807_dict(self) -> dict[str, Any]:
        result = super().to_rfc7807_dict()
        result["from_status"] = self.from_status
        result["to_status"] = self.to_status
        return result


class OutcomeAlreadyRecordedError(ResolutionError):
    """Raised when a conflicting outcome is written for an already voted item.

    HTTP Status: 409 Conflict
    """

    kind = "OutcomeAlreadyRecorded"
    title = "Outcome Already Recorded"
    http_status = 409
    invariant = "a resolution outcome is set exactly once per voting round"

    def __init__(self, resolution_id: UUID, session_item_id: UUID) -> None:
        self.resolution_id = resolution_id
        self.session_item_id = session_item_id
        super().__init__(
            f"Resolution {resolution_id} already has a different outcome "
            f"for session item {session_item_id}"
        )


class ResolutionOnBallotError(ResolutionError):
    """Raised when a resolution is tabled, withdrawn or superseded while a
    voting session is deciding it.

    HTTP Status: 409 Conflict
    """

    kind = "StageLocked"
    title = "Resolution On Ballot"
    http_status = 409
    invariant = "a resolution on a preparing or open session keeps its status until close or cancel"

    def __init__(self, resolution_id: UUID, session_id: UUID) -> None:
        self.resolution_id = resolution_id
        self.session_id = session_id
        super().__init__(
            f"Resolution {resolution_id} is on voting session {session_id}"
        )

    def to_rfc7807_dict(self) -> dict[str, Any]:
        result = super().to_rfc7807_dict()
        result["session_id"] = str(self.session_id)
        return result
