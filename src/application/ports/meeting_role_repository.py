"""Meeting role repository port."""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from src.domain.models.meeting_role import MeetingRole


class MeetingRoleRepositoryProtocol(Protocol):
    """Protocol for meeting role storage."""

    async def add(self, role: MeetingRole) -> None:
        """Store a role assignment."""
        ...

    async def get(self, role_id: UUID) -> MeetingRole | None:
        """Return a role assignment, or None."""
        ...

    async def update(self, role: MeetingRole) -> None:
        """Replace a stored role assignment.

        Raises:
            MeetingRoleNotFoundError: If the role does not exist.
        """
        ...

    async def list_for_meeting(self, meeting_id: UUID) -> list[MeetingRole]:
        """Return every role assignment in a meeting."""
        ...

    async def list_for_user(self, meeting_id: UUID, user_id: str) -> list[MeetingRole]:
        """Return the roles a user holds, or acts in by delegation or substitution."""
        ...
