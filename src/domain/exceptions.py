"""Base exception classes for the governance engine domain layer."""

from __future__ import annotations

import re
from typing import Any

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


class GovernanceError(Exception):
    """Base exception for all domain errors.

    All domain-specific exceptions MUST inherit from this class so that every
    rejection reaching a caller carries a taxonomy kind and the rule that was
    violated, never a bare internal exception.

    Class attributes:
        kind: Taxonomy name surfaced to callers (e.g. "QuorumNotMet").
        title: Short human readable summary for problem details.
        http_status: Status code used when the error crosses the HTTP boundary.
        invariant: Default description of the rule violated.
    """

    kind: str = "GovernanceError"
    title: str = "Governance Error"
    http_status: int = 400
    invariant: str = ""

    def __init__(self, message: str = "", *, invariant: str | None = None) -> None:
        """Initialize the exception with an optional message.

        Args:
            message: Human-readable error description.
            invariant: Overrides the class level invariant description.
        """
        if invariant is not None:
            self.invariant = invariant
        super().__init__(message)

    @property
    def type_urn(self) -> str:
        slug = _CAMEL_BOUNDARY.sub("-", self.kind).lower()
        return f"urn:governance:error:{slug}"

    def to_rfc7807_dict(self) -> dict[str, Any]:
        """Serialize to RFC 7807 problem details with governance extensions.

        Returns:
            Dictionary with type, title, status, detail, kind and invariant.
        """
        return {
            "type": self.type_urn,
            "title": self.title,
            "status": self.http_status,
            "detail": str(self),
            "kind": self.kind,
            "invariant": self.invariant,
        }
