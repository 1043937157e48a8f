"""Resolution repository port."""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from src.domain.models.resolution import Resolution


class ResolutionRepositoryProtocol(Protocol):
    """Protocol for resolution storage.

    Resolution numbers are unique per meeting.
    """

    async def add(self, resolution: Resolution) -> None:
        """Store a new resolution.

        Raises:
            ConcurrentModificationError: If the resolution number is taken.
        """
        ...

    async def get(self, resolution_id: UUID) -> Resolution | None:
        """Return a copy of the resolution, or None."""
        ...

    async def update(self, resolution: Resolution) -> None:
        """Replace a stored resolution.

        Raises:
            ResolutionNotFoundError: If the resolution does not exist.
        """
        ...

    async def list_for_meeting(self, meeting_id: UUID) -> list[Resolution]:
        """Return a meeting's resolutions ordered by resolution number."""
        ...

    async def next_sequence(self, meeting_id: UUID) -> int:
        """Reserve and return the next resolution sequence for a meeting."""
        ...
