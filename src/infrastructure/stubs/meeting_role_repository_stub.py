"""In-memory stub for MeetingRoleRepositoryProtocol."""

from __future__ import annotations

import copy
from uuid import UUID

from src.domain.errors.role import MeetingRoleNotFoundError
from src.domain.models.meeting_role import MeetingRole


class MeetingRoleRepositoryStub:
    """In-memory implementation of MeetingRoleRepositoryProtocol."""

    def __init__(self) -> None:
        self._roles: dict[UUID, MeetingRole] = {}

    async def add(self, role: MeetingRole) -> None:
        self._roles[role.role_id] = copy.deepcopy(role)

    async def get(self, role_id: UUID) -> MeetingRole | None:
        role = self._roles.get(role_id)
        return copy.deepcopy(role) if role is not None else None

    async def update(self, role: MeetingRole) -> None:
        if role.role_id not in self._roles:
            raise MeetingRoleNotFoundError(role.role_id)
        self._roles[role.role_id] = copy.deepcopy(role)

    async def list_for_meeting(self, meeting_id: UUID) -> list[MeetingRole]:
        return [
            copy.deepcopy(r) for r in self._roles.values() if r.meeting_id == meeting_id
        ]

    async def list_for_user(self, meeting_id: UUID, user_id: str) -> list[MeetingRole]:
        return [
            copy.deepcopy(r)
            for r in self._roles.values()
            if r.meeting_id == meeting_id and r.involves(user_id)
        ]

    def clear(self) -> None:
        """Clear all roles (for testing)."""
        self._roles.clear()
