"""In-memory stub for VotingRepositoryProtocol.

Simulates the database behavior including:
- Unique constraint on (session_item_id, voter_id, round)
- No identity represented twice per item and round (proxy aggregation)
- Compare-and-swap on VotingSession.version
- Monotonic ballot sequence per session
"""

from __future__ import annotations

import asyncio
import copy
from uuid import UUID

from src.domain.errors.concurrent_modification import ConcurrentModificationError
from src.domain.errors.voting import (
    DuplicateVoteError,
    SessionItemNotFoundError,
    VotingSessionNotFoundError,
)
from src.domain.models.ballot import Ballot
from src.domain.models.voting_session import SessionItem, VotingSession


class VotingRepositoryStub:
    """In-memory implementation of VotingRepositoryProtocol."""

    def __init__(self) -> None:
        self._sessions: dict[UUID, VotingSession] = {}
        self._items: dict[UUID, SessionItem] = {}
        self._ballots: dict[UUID, list[Ballot]] = {}
        self._sequences: dict[UUID, int] = {}
        self._lock = asyncio.Lock()

    async def add_session(self, session: VotingSession, items: list[SessionItem]) -> None:
        self._sessions[session.session_id] = copy.deepcopy(session)
        for item in items:
            self._items[item.item_id] = copy.deepcopy(item)
            self._ballots.setdefault(item.item_id, [])
        self._sequences.setdefault(session.session_id, 0)

    async def get_session(self, session_id: UUID) -> VotingSession | None:
        session = self._sessions.get(session_id)
        return copy.deepcopy(session) if session is not None else None

    async def update_session(
        self, session: VotingSession, expected_version: int
    ) -> VotingSession:
        stored = self._sessions.get(session.session_id)
        if stored is None:
            raise VotingSessionNotFoundError(session.session_id)
        if stored.version != expected_version:
            raise ConcurrentModificationError(
                aggregate="voting_session",
                aggregate_id=session.session_id,
                expected_version=expected_version,
                actual_version=stored.version,
            )
        written = copy.deepcopy(session)
        written.version = expected_version + 1
        self._sessions[session.session_id] = written
        return copy.deepcopy(written)

    async def list_sessions_for_workflow(
        self, workflow_instance_id: UUID
    ) -> list[VotingSession]:
        sessions = [
            s
            for s in self._sessions.values()
            if s.workflow_instance_id == workflow_instance_id
        ]
        sessions.sort(key=lambda s: s.created_at)
        return [copy.deepcopy(s) for s in sessions]

    async def get_item(self, item_id: UUID) -> SessionItem | None:
        item = self._items.get(item_id)
        return copy.deepcopy(item) if item is not None else None

    async def list_items(self, session_id: UUID) -> list[SessionItem]:
        items = [i for i in self._items.values() if i.session_id == session_id]
        items.sort(key=lambda i: i.position)
        return [copy.deepcopy(i) for i in items]

    async def update_item(self, item: SessionItem) -> None:
        if item.item_id not in self._items:
            raise SessionItemNotFoundError(item.session_id, item.item_id)
        self._items[item.item_id] = copy.deepcopy(item)

    async def next_ballot_sequence(self, session_id: UUID) -> int:
        async with self._lock:
            self._sequences[session_id] = self._sequences.get(session_id, 0) + 1
            return self._sequences[session_id]

    async def add_ballot(self, ballot: Ballot) -> None:
        async with self._lock:
            represented = set(ballot.represented)
            for existing in self._ballots.setdefault(ballot.session_item_id, []):
                if existing.round != ballot.round:
                    continue
                clash = represented & set(existing.represented)
                if existing.voter_id == ballot.voter_id:
                    clash.add(ballot.voter_id)
                if clash:
                    raise DuplicateVoteError(
                        item_id=ballot.session_item_id,
                        voter_id=sorted(clash)[0],
                        round=ballot.round,
                        existing_ballot_id=existing.ballot_id,
                    )
            self._ballots[ballot.session_item_id].append(ballot)

    async def list_ballots(self, item_id: UUID, round: int | None = None) -> list[Ballot]:
        ballots = [
            b for b in self._ballots.get(item_id, []) if round is None or b.round == round
        ]
        return sorted(ballots, key=lambda b: b.sequence)

    # Test helpers

    def force_ballot(self, ballot: Ballot) -> None:
        """Store a ballot bypassing uniqueness checks (to simulate corrupt data)."""
        self._ballots.setdefault(ballot.session_item_id, []).append(ballot)

    def clear(self) -> None:
        """Clear all stored data (for testing)."""
        self._sessions.clear()
        self._items.clear()
        self._ballots.clear()
        self._sequences.clear()
