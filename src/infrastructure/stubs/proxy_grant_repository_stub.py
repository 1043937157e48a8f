"""In-memory stub for ProxyGrantRepositoryProtocol.

Simulates the partial unique index on (meeting_id, grantor) WHERE
status = 'active': a write that would leave two active grants for one
grantor is rejected.
"""

from __future__ import annotations

import copy
from uuid import UUID

from src.domain.errors.concurrent_modification import ConcurrentModificationError
from src.domain.errors.proxy import ProxyGrantNotFoundError
from src.domain.models.proxy_grant import ProxyGrant, ProxyStatus


class ProxyGrantRepositoryStub:
    """In-memory implementation of ProxyGrantRepositoryProtocol."""

    def __init__(self) -> None:
        self._grants: dict[UUID, ProxyGrant] = {}

    def _check_single_active(self, grant: ProxyGrant) -> None:
        if not grant.is_active:
            return
        for other in self._grants.values():
            if (
                other.grant_id != grant.grant_id
                and other.is_active
                and other.meeting_id == grant.meeting_id
                and other.grantor == grant.grantor
            ):
                raise ConcurrentModificationError(
                    aggregate="proxy_grant_set",
                    aggregate_id=other.grant_id,
                    expected_version=0,
                    actual_version=1,
                )

    async def add(self, grant: ProxyGrant) -> None:
        self._check_single_active(grant)
        self._grants[grant.grant_id] = copy.deepcopy(grant)

    async def get(self, grant_id: UUID) -> ProxyGrant | None:
        grant = self._grants.get(grant_id)
        return copy.deepcopy(grant) if grant is not None else None

    async def update(self, grant: ProxyGrant) -> None:
        if grant.grant_id not in self._grants:
            raise ProxyGrantNotFoundError(grant.grant_id)
        self._check_single_active(grant)
        self._grants[grant.grant_id] = copy.deepcopy(grant)

    async def get_active_for_grantor(
        self, meeting_id: UUID, grantor: str
    ) -> ProxyGrant | None:
        for grant in self._grants.values():
            if grant.is_active and grant.meeting_id == meeting_id and grant.grantor == grantor:
                return copy.deepcopy(grant)
        return None

    async def list_for_meeting(
        self, meeting_id: UUID, status: ProxyStatus | None = None
    ) -> list[ProxyGrant]:
        grants = [
            g
            for g in self._grants.values()
            if g.meeting_id == meeting_id and (status is None or g.status == status)
        ]
        grants.sort(key=lambda g: g.created_at)
        return [copy.deepcopy(g) for g in grants]

    async def list_active(self) -> list[ProxyGrant]:
        return [copy.deepcopy(g) for g in self._grants.values() if g.is_active]

    # Test helpers

    def force_insert(self, grant: ProxyGrant) -> None:
        """Store a grant without any validation (to simulate legacy data)."""
        self._grants[grant.grant_id] = copy.deepcopy(grant)

    def clear(self) -> None:
        """Clear all grants (for testing)."""
        self._grants.clear()
