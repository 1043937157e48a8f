"""In-memory stub for ResolutionRepositoryProtocol.

Enforces the unique (meeting_id, resolution_number) constraint.
"""

from __future__ import annotations

import copy
from uuid import UUID

from src.domain.errors.concurrent_modification import ConcurrentModificationError
from src.domain.errors.resolution import ResolutionNotFoundError
from src.domain.models.resolution import Resolution


class ResolutionRepositoryStub:
    """In-memory implementation of ResolutionRepositoryProtocol."""

    def __init__(self) -> None:
        self._resolutions: dict[UUID, Resolution] = {}
        self._sequences: dict[UUID, int] = {}

    async def add(self, resolution: Resolution) -> None:
        for other in self._resolutions.values():
            if (
                other.meeting_id == resolution.meeting_id
                and other.resolution_number == resolution.resolution_number
            ):
                raise ConcurrentModificationError(
                    aggregate="resolution_number",
                    aggregate_id=other.resolution_id,
                    expected_version=0,
                    actual_version=1,
                )
        self._resolutions[resolution.resolution_id] = copy.deepcopy(resolution)

    async def get(self, resolution_id: UUID) -> Resolution | None:
        resolution = self._resolutions.get(resolution_id)
        return copy.deepcopy(resolution) if resolution is not None else None

    async def update(self, resolution: Resolution) -> None:
        if resolution.resolution_id not in self._resolutions:
            raise ResolutionNotFoundError(resolution.resolution_id)
        self._resolutions[resolution.resolution_id] = copy.deepcopy(resolution)

    async def list_for_meeting(self, meeting_id: UUID) -> list[Resolution]:
        resolutions = [r for r in self._resolutions.values() if r.meeting_id == meeting_id]
        resolutions.sort(key=lambda r: r.resolution_number)
        return [copy.deepcopy(r) for r in resolutions]

    async def next_sequence(self, meeting_id: UUID) -> int:
        self._sequences[meeting_id] = self._sequences.get(meeting_id, 0) + 1
        return self._sequences[meeting_id]

    def clear(self) -> None:
        """Clear all resolutions (for testing)."""
        self._resolutions.clear()
        self._sequences.clear()
