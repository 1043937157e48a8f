"""Voting repository port.

Stores voting sessions, session items and ballots. Ballot insertion
enforces uniqueness of (session_item_id, voter_id, round) and of every
represented identity per item and round, so two concurrent submissions can
never both be stored.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from src.domain.models.ballot import Ballot
from src.domain.models.voting_session import SessionItem, VotingSession


class VotingRepositoryProtocol(Protocol):
    """Protocol for voting session, item and ballot storage."""

    async def add_session(self, session: VotingSession, items: list[SessionItem]) -> None:
        """Store a new session together with its items."""
        ...

    async def get_session(self, session_id: UUID) -> VotingSession | None:
        """Return a copy of the session, or None."""
        ...

    async def update_session(
        self, session: VotingSession, expected_version: int
    ) -> VotingSession:
        """Compare-and-swap write of a session.

        Raises:
            VotingSessionNotFoundError: If the session does not exist.
            ConcurrentModificationError: If the stored version differs.
        """
        ...

    async def list_sessions_for_workflow(
        self, workflow_instance_id: UUID
    ) -> list[VotingSession]:
        """Return every session opened against a workflow instance."""
        ...

    async def get_item(self, item_id: UUID) -> SessionItem | None:
        """Return a copy of the item, or None."""
        ...

    async def list_items(self, session_id: UUID) -> list[SessionItem]:
        """Return a session's items in position order."""
        ...

    async def update_item(self, item: SessionItem) -> None:
        """Replace a stored item."""
        ...

    async def next_ballot_sequence(self, session_id: UUID) -> int:
        """Return the next ballot sequence number for the session, from 1."""
        ...

    async def add_ballot(self, ballot: Ballot) -> None:
        """Insert a ballot.

        Raises:
            DuplicateVoteError: If the voter or any represented identity
                already appears on a ballot for the same item and round.
        """
        ...

    async def list_ballots(self, item_id: UUID, round: int | None = None) -> list[Ballot]:
        """Return an item's ballots in sequence order, optionally for one round."""
        ...
