"""Workflow instance repository port.

Supports atomic read-modify-write of a WorkflowInstance through
compare-and-swap on its version, and append-only storage of
StageTransition history.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from src.domain.models.meeting import StageTransition, WorkflowInstance


class WorkflowRepositoryProtocol(Protocol):
    """Protocol for workflow instance and transition storage."""

    async def add(self, instance: WorkflowInstance) -> None:
        """Store a new workflow instance at version 0."""
        ...

    async def get(self, instance_id: UUID) -> WorkflowInstance | None:
        """Return a copy of the instance, or None if unknown."""
        ...

    async def get_by_meeting(self, meeting_id: UUID) -> WorkflowInstance | None:
        """Return the meeting's workflow instance, or None."""
        ...

    async def update(
        self, instance: WorkflowInstance, expected_version: int
    ) -> WorkflowInstance:
        """Write the instance if the stored version equals expected_version.

        Returns:
            The stored instance with its version incremented.

        Raises:
            WorkflowNotFoundError: If the instance does not exist.
            ConcurrentModificationError: If the stored version differs.
        """
        ...

    async def append_transition(self, transition: StageTransition) -> None:
        """Append a transition record. Records are never updated or removed."""
        ...

    async def list_transitions(self, instance_id: UUID) -> list[StageTransition]:
        """Return transitions for an instance in append order."""
        ...
