"""In-memory stub for WorkflowRepositoryProtocol.

Simulates the database behavior the engine relies on:
- compare-and-swap on WorkflowInstance.version
- append-only transition history
"""

from __future__ import annotations

import copy
from uuid import UUID

from src.domain.errors.concurrent_modification import ConcurrentModificationError
from src.domain.errors.workflow import WorkflowNotFoundError
from src.domain.models.meeting import StageTransition, WorkflowInstance


class WorkflowRepositoryStub:
    """In-memory implementation of WorkflowRepositoryProtocol.

    Stored instances are deep-copied on the way in and out so callers can
    never mutate stored state without going through update().
    """

    def __init__(self) -> None:
        self._instances: dict[UUID, WorkflowInstance] = {}
        self._by_meeting: dict[UUID, UUID] = {}
        self._transitions: dict[UUID, list[StageTransition]] = {}

    async def add(self, instance: WorkflowInstance) -> None:
        self._instances[instance.instance_id] = copy.deepcopy(instance)
        self._by_meeting[instance.meeting_id] = instance.instance_id
        self._transitions.setdefault(instance.instance_id, [])

    async def get(self, instance_id: UUID) -> WorkflowInstance | None:
        instance = self._instances.get(instance_id)
        return copy.deepcopy(instance) if instance is not None else None

    async def get_by_meeting(self, meeting_id: UUID) -> WorkflowInstance | None:
        instance_id = self._by_meeting.get(meeting_id)
        if instance_id is None:
            return None
        return await self.get(instance_id)

    async def update(
        self, instance: WorkflowInstance, expected_version: int
    ) -> WorkflowInstance:
        stored = self._instances.get(instance.instance_id)
        if stored is None:
            raise WorkflowNotFoundError(instance.instance_id)
        if stored.version != expected_version:
            raise ConcurrentModificationError(
                aggregate="workflow_instance",
                aggregate_id=instance.instance_id,
                expected_version=expected_version,
                actual_version=stored.version,
            )
        written = copy.deepcopy(instance)
        written.version = expected_version + 1
        self._instances[instance.instance_id] = written
        return copy.deepcopy(written)

    async def append_transition(self, transition: StageTransition) -> None:
        self._transitions.setdefault(transition.workflow_instance_id, []).append(
            transition
        )

    async def list_transitions(self, instance_id: UUID) -> list[StageTransition]:
        return list(self._transitions.get(instance_id, []))

    def clear(self) -> None:
        """Clear all stored data (for testing)."""
        self._instances.clear()
        self._by_meeting.clear()
        self._transitions.clear()
