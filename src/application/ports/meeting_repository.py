"""Meeting repository port."""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from src.domain.models.meeting import Meeting


class MeetingRepositoryProtocol(Protocol):
    """Protocol for meeting storage.

    Meetings are never deleted; archival is an update.
    """

    async def add(self, meeting: Meeting) -> None:
        """Store a new meeting."""
        ...

    async def get(self, meeting_id: UUID) -> Meeting | None:
        """Return the meeting, or None if unknown."""
        ...

    async def update(self, meeting: Meeting) -> None:
        """Replace the stored meeting.

        Raises:
            MeetingNotFoundError: If the meeting does not exist.
        """
        ...
