"""In-memory stub for MembershipPort.

Membership is owned by an external identity system. This stub holds a
table of (organization_id, user_id) -> (role, active) for tests and local
development.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class StoredMembership:
    """In-memory membership row."""

    role: str
    active: bool = True


class MembershipStub:
    """In-memory implementation of MembershipPort.

    When `default_active` is True, unknown users are treated as active
    members with role "member". Local API wiring uses this; tests register
    members explicitly.
    """

    def __init__(self, default_active: bool = False) -> None:
        self._default_active = default_active
        self._members: dict[tuple[str, str], StoredMembership] = {}

    def add_member(
        self, organization_id: str, user_id: str, role: str = "member", active: bool = True
    ) -> None:
        """Register a member. Call this in tests before resolving weights."""
        self._members[(organization_id, user_id)] = StoredMembership(role, active)

    def deactivate(self, organization_id: str, user_id: str) -> None:
        membership = self._members.get((organization_id, user_id))
        if membership is not None:
            membership.active = False

    async def is_active_member(self, organization_id: str, user_id: str) -> bool:
        membership = self._members.get((organization_id, user_id))
        if membership is None:
            return self._default_active
        return membership.active

    async def role_of(self, organization_id: str, user_id: str) -> str | None:
        membership = self._members.get((organization_id, user_id))
        if membership is None:
            return "member" if self._default_active else None
        return membership.role

    def clear(self) -> None:
        """Clear all members (for testing)."""
        self._members.clear()
