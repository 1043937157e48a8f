"""Meeting role errors."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from src.domain.exceptions import GovernanceError


class MeetingRoleNotFoundError(GovernanceError):
    """Raised when a meeting role does not exist.

    HTTP Status: 404 Not Found
    """

    kind = "NotFound"
    title = "Meeting Role Not Found"
    http_status = 404
    invariant = "meeting role must exist"

    def __init__(self, role_id: UUID) -> None:
        self.role_id = role_id
        super().__init__(f"Meeting role not found: {role_id}")


class InvalidVotingWeightError(GovernanceError):
    """Raised when a role or grant is given a non-positive voting weight."""

    kind = "InvalidVotingWeight"
    title = "Invalid Voting Weight"
    http_status = 422
    invariant = "voting weight is positive"


class InvalidRoleTransitionError(GovernanceError):
    """Raised when a role cannot be handed over or restored from its status.

    HTTP Status: 409 Conflict
    """

    kind = "InvalidRoleTransition"
    title = "Invalid Role Transition"
    http_status = 409
    invariant = "only an active role is handed over, to someone else"

    def __init__(self, role_id: UUID, status: str, action: str) -> None:
        self.role_id = role_id
        self.status = status
        self.action = action
        super().__init__(f"Cannot {action} role {role_id} while it is {status}")

    def to_rfc7807_dict(self) -> dict[str, Any]:
        result = super().to_rfc7807_dict()
        result["role_status"] = self.status
        return result
