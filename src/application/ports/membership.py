"""Membership port.

Organization identity and membership are owned by an external system. The
engine consumes two lookups and never writes membership data.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Protocol


class MembershipPort(Protocol):
    """Protocol for organization membership lookups."""

    @abstractmethod
    async def is_active_member(self, organization_id: str, user_id: str) -> bool:
        """Return True if the user is an active member of the organization."""
        ...

    @abstractmethod
    async def role_of(self, organization_id: str, user_id: str) -> str | None:
        """Return the user's organization-level role, or None for non-members."""
        ...
