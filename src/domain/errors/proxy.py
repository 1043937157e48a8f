"""Proxy graph domain errors.

Proxy graph invariant violations are permanently rejected and never
retried: a grant that would point at its own grantor, exceed the maximum
delegation depth, or close a cycle can never become valid by waiting.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from src.domain.exceptions import GovernanceError


class ProxyError(GovernanceError):
    """Base error for proxy grant operations."""

    http_status = 422


class ProxyGrantNotFoundError(ProxyError):
    """Raised when a proxy grant does not exist.

    HTTP Status: 404 Not Found
    """

    kind = "NotFound"
    title = "Proxy Grant Not Found"
    http_status = 404
    invariant = "proxy grant must exist"

    def __init__(self, grant_id: UUID) -> None:
        self.grant_id = grant_id
        super().__init__(f"Proxy grant not found: {grant_id}")


class SelfProxyError(ProxyError):
    """Raised when a grantor tries to appoint themselves as proxy holder."""

    kind = "SelfProxy"
    title = "Self Proxy"
    invariant = "grantor != holder"

    def __init__(self, grantor: str) -> None:
        self.grantor = grantor
        super().__init__(f"{grantor} cannot grant a proxy to themselves")


class ChainTooDeepError(ProxyError):
    """Raised when a sub-delegation would exceed the maximum chain depth.

    Attributes:
        depth: Depth the new grant would have had.
        max_depth: Configured maximum.
    """

    kind = "ChainTooDeep"
    title = "Delegation Chain Too Deep"

    def __init__(self, depth: int, max_depth: int) -> None:
        self.depth = depth
        self.max_depth = max_depth
        super().__init__(
            f"Delegation chain depth {depth} exceeds maximum of {max_depth}",
            invariant=f"chain_depth <= {max_depth}",
        )

    def to_rfc7807_dict(self) -> dict[str, Any]:
        result = super().to_rfc7807_dict()
        result["depth"] = self.depth
        result["max_depth"] = self.max_depth
        return result


class CycleDetectedError(ProxyError):
    """Raised when a delegation chain loops back on itself.

    Grants are validated against cycles on creation; traversal repeats the
    check because stored data may predate that validation.
    """

    kind = "CycleDetected"
    title = "Delegation Cycle Detected"
    invariant = "delegation chains are acyclic and terminate"

    def __init__(self, meeting_id: UUID, grantor: str, path: list[str]) -> None:
        self.meeting_id = meeting_id
        self.grantor = grantor
        self.path = path
        super().__init__(
            f"Delegation cycle detected for {grantor} in meeting {meeting_id}: "
            + " -> ".join(path)
        )

    def to_rfc7807_dict(self) -> dict[str, Any]:
        result = super().to_rfc7807_dict()
        result["path"] = list(self.path)
        return result


class SubDelegationNotPermittedError(ProxyError):
    """Raised when a sub-delegation is not allowed by its parent grant."""

    kind = "SubDelegationNotPermitted"
    title = "Sub-Delegation Not Permitted"
    invariant = "sub-delegation requires an active parent held by the grantor with can_sub_delegate"

    def __init__(self, parent_grant_id: UUID, reason: str) -> None:
        self.parent_grant_id = parent_grant_id
        super().__init__(
            f"Cannot sub-delegate from grant {parent_grant_id}: {reason}"
        )


class InvalidProxyWindowError(ProxyError):
    """Raised when a grant's effective window ends before it starts."""

    kind = "InvalidProxyWindow"
    title = "Invalid Proxy Window"
    invariant = "effective_window.end > effective_window.start"


class InvalidProxyInstructionsError(ProxyError):
    """Raised when voting instructions do not fit the grant's type or scope."""

    kind = "InvalidProxyInstructions"
    title = "Invalid Proxy Instructions"
    invariant = "only instructed proxies carry voting instructions, each within scope"


class ProxyInstructionNotFollowedError(ProxyError):
    """Raised when a holder votes against a grantor's instruction without a reason.

    A holder may depart from an instructed proxy only by recording why.
    """

    kind = "ProxyInstructionNotFollowed"
    title = "Proxy Instruction Not Followed"
    invariant = "a ballot departing from an instruction records an override reason"

    def __init__(self, grantor: str, instructed: str, choice: str) -> None:
        self.grantor = grantor
        self.instructed = instructed
        self.choice = choice
        super().__init__(
            f"{grantor} instructed a '{instructed}' vote but the ballot is '{choice}'; "
            "an override reason is required"
        )

    def to_rfc7807_dict(self) -> dict[str, Any]:
        result = super().to_rfc7807_dict()
        result["grantor"] = self.grantor
        result["instructed"] = self.instructed
        return result


class ProxyUseConflictError(ProxyError):
    """Raised when a grant stops being usable while a ballot is being cast.

    Another ballot used up the grant's last vote, or the grant was revoked
    or expired in between. Casting again resolves against the current graph.

    HTTP Status: 409 Conflict
    """

    kind = "ProxyUseConflict"
    title = "Proxy Use Conflict"
    http_status = 409
    invariant = "votes_cast <= max_votes_allowed and only active grants are used"

    def __init__(self, grant_id: UUID, reason: str) -> None:
        self.grant_id = grant_id
        super().__init__(f"Proxy grant {grant_id} cannot be used: {reason}")
