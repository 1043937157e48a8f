"""Unit tests for the in-memory governance repositories.

The services rely on these stubs enforcing the same constraints as the
database: version compare-and-swap and ballot uniqueness per represented
identity.
"""

from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID, uuid4

import pytest

from src.domain.errors.concurrent_modification import ConcurrentModificationError
from src.domain.errors.voting import DuplicateVoteError
from src.domain.models.ballot import Ballot
from src.domain.models.meeting import WorkflowInstance
from src.domain.models.voting_session import VoteChoice
from src.infrastructure.stubs.membership_stub import MembershipStub
from src.infrastructure.stubs.voting_repository_stub import VotingRepositoryStub
from src.infrastructure.stubs.workflow_repository_stub import WorkflowRepositoryStub

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


def _ballot(
    item_id: UUID,
    voter_id: str,
    *,
    own: Decimal = Decimal(1),
    proxied: tuple[str, ...] = (),
    round: int = 1,
) -> Ballot:
    return Ballot.create(
        session_id=uuid4(),
        session_item_id=item_id,
        voter_id=voter_id,
        choice=VoteChoice.FOR,
        own_weight=own,
        proxied={g: (Decimal(1), uuid4()) for g in proxied},
        sequence=1,
        round=round,
        cast_at=NOW,
    )


class TestWorkflowRepositoryStub:
    """Tests for workflow compare-and-swap."""

    @pytest.mark.asyncio
    async def test_update_bumps_version(self) -> None:
        repo = WorkflowRepositoryStub()
        instance = WorkflowInstance.create(uuid4(), "chair-1", 1, created_at=NOW)
        await repo.add(instance)

        written = await repo.update(instance, expected_version=0)

        assert written.version == 1
        assert (await repo.get(instance.instance_id)).version == 1

    @pytest.mark.asyncio
    async def test_stale_version_rejected(self) -> None:
        repo = WorkflowRepositoryStub()
        instance = WorkflowInstance.create(uuid4(), "chair-1", 1, created_at=NOW)
        await repo.add(instance)
        await repo.update(instance, expected_version=0)

        with pytest.raises(ConcurrentModificationError) as exc_info:
            await repo.update(instance, expected_version=0)

        assert exc_info.value.actual_version == 1

    @pytest.mark.asyncio
    async def test_returned_copies_are_detached(self) -> None:
        repo = WorkflowRepositoryStub()
        instance = WorkflowInstance.create(uuid4(), "chair-1", 1, created_at=NOW)
        await repo.add(instance)

        loaded = await repo.get(instance.instance_id)
        loaded.current_stage_index = 3

        assert (await repo.get(instance.instance_id)).current_stage_index == 0
        assert (await repo.get_by_meeting(instance.meeting_id)) is not None


class TestVotingRepositoryStub:
    """Tests for ballot uniqueness."""

    @pytest.mark.asyncio
    async def test_same_voter_twice_rejected(self) -> None:
        repo = VotingRepositoryStub()
        item_id = uuid4()
        await repo.add_ballot(_ballot(item_id, "alice"))

        with pytest.raises(DuplicateVoteError):
            await repo.add_ballot(_ballot(item_id, "alice"))

    @pytest.mark.asyncio
    async def test_represented_identity_clash_rejected(self) -> None:
        repo = VotingRepositoryStub()
        item_id = uuid4()
        await repo.add_ballot(_ballot(item_id, "bob", proxied=("alice",)))

        with pytest.raises(DuplicateVoteError) as exc_info:
            await repo.add_ballot(_ballot(item_id, "alice"))

        assert exc_info.value.voter_id == "alice"

    @pytest.mark.asyncio
    async def test_new_round_accepts_same_voter(self) -> None:
        repo = VotingRepositoryStub()
        item_id = uuid4()
        await repo.add_ballot(_ballot(item_id, "alice"))
        await repo.add_ballot(_ballot(item_id, "alice", round=2))

        assert len(await repo.list_ballots(item_id)) == 2
        assert len(await repo.list_ballots(item_id, round=2)) == 1

    @pytest.mark.asyncio
    async def test_sequence_is_monotonic(self) -> None:
        repo = VotingRepositoryStub()
        session_id = uuid4()

        first = await repo.next_ballot_sequence(session_id)
        second = await repo.next_ballot_sequence(session_id)

        assert (first, second) == (1, 2)


class TestMembershipStub:
    @pytest.mark.asyncio
    async def test_unknown_user_is_not_member(self) -> None:
        membership = MembershipStub()

        assert not await membership.is_active_member("org", "mallory")
        assert await membership.role_of("org", "mallory") is None

    @pytest.mark.asyncio
    async def test_default_active(self) -> None:
        membership = MembershipStub(default_active=True)

        assert await membership.is_active_member("org", "anyone")
        assert await membership.role_of("org", "anyone") == "member"

    @pytest.mark.asyncio
    async def test_deactivate(self) -> None:
        membership = MembershipStub()
        membership.add_member("org", "alice", role="director")
        membership.deactivate("org", "alice")

        assert not await membership.is_active_member("org", "alice")
        assert await membership.role_of("org", "alice") == "director"
