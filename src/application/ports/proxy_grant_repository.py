"""Proxy grant repository port.

Grants form an arena keyed by grant_id. The store enforces at most one
ACTIVE grant per (meeting_id, grantor) so that correctness does not rest on
service-level locking alone.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from src.domain.models.proxy_grant import ProxyGrant, ProxyStatus


class ProxyGrantRepositoryProtocol(Protocol):
    """Protocol for proxy grant storage."""

    async def add(self, grant: ProxyGrant) -> None:
        """Store a new grant.

        Raises:
            ConcurrentModificationError: If the grantor already has an
                active grant in the meeting.
        """
        ...

    async def get(self, grant_id: UUID) -> ProxyGrant | None:
        """Return a copy of the grant, or None."""
        ...

    async def update(self, grant: ProxyGrant) -> None:
        """Replace a stored grant.

        Raises:
            ProxyGrantNotFoundError: If the grant does not exist.
            ConcurrentModificationError: If the update would leave two
                active grants for the grantor.
        """
        ...

    async def get_active_for_grantor(
        self, meeting_id: UUID, grantor: str
    ) -> ProxyGrant | None:
        """Return the grantor's active grant in the meeting, or None."""
        ...

    async def list_for_meeting(
        self, meeting_id: UUID, status: ProxyStatus | None = None
    ) -> list[ProxyGrant]:
        """Return grants in a meeting, optionally filtered by status."""
        ...

    async def list_active(self) -> list[ProxyGrant]:
        """Return every active grant across meetings."""
        ...
