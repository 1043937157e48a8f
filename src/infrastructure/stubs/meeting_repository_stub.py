"""In-memory stub for MeetingRepositoryProtocol."""

from __future__ import annotations

import copy
from uuid import UUID

from src.domain.errors.workflow import MeetingNotFoundError
from src.domain.models.meeting import Meeting


class MeetingRepositoryStub:
    """In-memory implementation of MeetingRepositoryProtocol."""

    def __init__(self) -> None:
        self._meetings: dict[UUID, Meeting] = {}

    async def add(self, meeting: Meeting) -> None:
        self._meetings[meeting.meeting_id] = copy.deepcopy(meeting)

    async def get(self, meeting_id: UUID) -> Meeting | None:
        meeting = self._meetings.get(meeting_id)
        return copy.deepcopy(meeting) if meeting is not None else None

    async def update(self, meeting: Meeting) -> None:
        if meeting.meeting_id not in self._meetings:
            raise MeetingNotFoundError(meeting.meeting_id)
        self._meetings[meeting.meeting_id] = copy.deepcopy(meeting)

    def clear(self) -> None:
        """Clear all meetings (for testing)."""
        self._meetings.clear()
