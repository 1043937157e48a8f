"""Unit tests for ResolutionRegistryService."""

from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from uuid import uuid4

import pytest

from src.domain.errors.resolution import (
    InvalidResolutionTransitionError,
    OutcomeAlreadyRecordedError,
    ResolutionNotFoundError,
    ResolutionOnBallotError,
    SelfSecondError,
)
from src.domain.errors.voting import ResolutionNotVotableError
from src.domain.errors.workflow import MeetingNotFoundError
from src.domain.events.resolution import (
    RESOLUTION_OUTCOME_RECORDED_EVENT_TYPE,
    RESOLUTION_PROPOSED_EVENT_TYPE,
)
from src.domain.models.resolution import Resolution, ResolutionStatus
from src.domain.models.voting_session import ItemOutcome, ItemTally
from tests.helpers.governance_harness import CHAIR, GovernanceHarness


def _outcome(harness: GovernanceHarness, resolution: Resolution, passed: bool) -> ItemOutcome:
    return ItemOutcome(
        session_id=uuid4(),
        session_item_id=uuid4(),
        resolution_id=resolution.resolution_id,
        round=1,
        tally=ItemTally(votes_for=Decimal(3), votes_against=Decimal(1), voters_participated=4),
        required_quorum=3,
        quorum_achieved=True,
        threshold_percent=Decimal(50),
        pass_percentage=Decimal(75),
        passed=passed,
        decided_at=harness.time.now(),
    )


class TestPropose:
    """Test ResolutionRegistryService.propose() and second()."""

    @pytest.mark.asyncio
    async def test_numbers_are_sequential_per_meeting(
        self, harness: GovernanceHarness
    ) -> None:
        opened = await harness.open_meeting()
        other = await harness.open_meeting()

        first = await harness.propose(opened, "First")
        second = await harness.propose(opened, "Second")
        elsewhere = await harness.propose(other, "Elsewhere")

        assert first.resolution_number == "R-001"
        assert second.resolution_number == "R-002"
        assert elsewhere.resolution_number == "R-001"
        assert first.status == ResolutionStatus.PROPOSED
        assert len(harness.audit_sink.events_of_type(RESOLUTION_PROPOSED_EVENT_TYPE)) == 3

    @pytest.mark.asyncio
    async def test_self_second_rejected(self, harness: GovernanceHarness) -> None:
        opened = await harness.open_meeting()

        with pytest.raises(SelfSecondError):
            await harness.resolution_registry.propose(
                opened.meeting.meeting_id, "Title", "Text", proposer="alice", seconder="alice"
            )

    @pytest.mark.asyncio
    async def test_unknown_meeting(self, harness: GovernanceHarness) -> None:
        with pytest.raises(MeetingNotFoundError):
            await harness.resolution_registry.propose(uuid4(), "Title", "Text", "alice")

    @pytest.mark.asyncio
    async def test_second_is_idempotent(self, harness: GovernanceHarness) -> None:
        """The same seconder twice is a no-op; the proposer cannot second."""
        opened = await harness.open_meeting()
        resolution = await harness.propose(opened)

        first = await harness.resolution_registry.second(resolution.resolution_id, "bob")
        again = await harness.resolution_registry.second(resolution.resolution_id, "bob")

        assert first.seconder == "bob"
        assert again.seconded_at == first.seconded_at
        with pytest.raises(SelfSecondError):
            await harness.resolution_registry.second(resolution.resolution_id, CHAIR)

    @pytest.mark.asyncio
    async def test_get_unknown(self, harness: GovernanceHarness) -> None:
        with pytest.raises(ResolutionNotFoundError):
            await harness.resolution_registry.get(uuid4())


class TestRecordOutcome:
    """Test ResolutionRegistryService.record_outcome()."""

    @pytest.mark.asyncio
    async def test_outcome_sets_status(self, harness: GovernanceHarness) -> None:
        opened = await harness.open_meeting()
        resolution = await harness.propose(opened)
        outcome = _outcome(harness, resolution, passed=True)

        recorded = await harness.resolution_registry.record_outcome(
            resolution.resolution_id, outcome
        )

        assert recorded.status == ResolutionStatus.PASSED
        assert recorded.decided_at == outcome.decided_at
        assert await harness.resolution_registry.get_outcome(
            resolution.resolution_id
        ) == outcome
        events = harness.audit_sink.events_of_type(RESOLUTION_OUTCOME_RECORDED_EVENT_TYPE)
        assert events[0].payload["to_status"] == "passed"

    @pytest.mark.asyncio
    async def test_replay_of_same_outcome_is_noop(self, harness: GovernanceHarness) -> None:
        opened = await harness.open_meeting()
        resolution = await harness.propose(opened)
        outcome = _outcome(harness, resolution, passed=False)

        await harness.resolution_registry.record_outcome(resolution.resolution_id, outcome)
        replay = await harness.resolution_registry.record_outcome(
            resolution.resolution_id, outcome
        )

        assert replay.status == ResolutionStatus.REJECTED
        assert len(replay.outcomes) == 1

    @pytest.mark.asyncio
    async def test_conflicting_outcome_rejected(self, harness: GovernanceHarness) -> None:
        opened = await harness.open_meeting()
        resolution = await harness.propose(opened)
        outcome = _outcome(harness, resolution, passed=True)
        await harness.resolution_registry.record_outcome(resolution.resolution_id, outcome)

        with pytest.raises(OutcomeAlreadyRecordedError):
            await harness.resolution_registry.record_outcome(
                resolution.resolution_id, replace(outcome, passed=False)
            )

    @pytest.mark.asyncio
    async def test_decided_resolution_takes_no_new_outcome(
        self, harness: GovernanceHarness
    ) -> None:
        """A second item deciding an already passed resolution is refused."""
        opened = await harness.open_meeting()
        resolution = await harness.propose(opened)
        await harness.resolution_registry.record_outcome(
            resolution.resolution_id, _outcome(harness, resolution, passed=True)
        )

        with pytest.raises(InvalidResolutionTransitionError):
            await harness.resolution_registry.record_outcome(
                resolution.resolution_id, _outcome(harness, resolution, passed=True)
            )


class TestStatusTransitions:
    """Test table, withdraw, reopen and supersede."""

    @pytest.mark.asyncio
    async def test_table_and_reopen(self, harness: GovernanceHarness) -> None:
        opened = await harness.open_meeting()
        resolution = await harness.propose(opened)
        resolution_id = resolution.resolution_id

        tabled = await harness.resolution_registry.table(resolution_id, CHAIR)
        tabled_again = await harness.resolution_registry.table(resolution_id, CHAIR)
        reopened = await harness.resolution_registry.reopen(resolution_id, CHAIR)

        assert tabled.status == ResolutionStatus.TABLED
        assert tabled_again.status == ResolutionStatus.TABLED
        assert reopened.status == ResolutionStatus.PROPOSED

    @pytest.mark.asyncio
    async def test_tabled_resolution_is_still_votable(
        self, harness: GovernanceHarness
    ) -> None:
        opened = await harness.open_meeting()
        resolution = await harness.propose(opened)
        await harness.resolution_registry.table(resolution.resolution_id, CHAIR)

        votable = await harness.resolution_registry.ensure_votable(
            resolution.resolution_id, opened.meeting.meeting_id
        )

        assert votable.status == ResolutionStatus.TABLED

    @pytest.mark.asyncio
    async def test_other_meetings_resolution_not_found(
        self, harness: GovernanceHarness
    ) -> None:
        opened = await harness.open_meeting()
        other = await harness.open_meeting()
        resolution = await harness.propose(opened)

        with pytest.raises(ResolutionNotFoundError):
            await harness.resolution_registry.ensure_votable(
                resolution.resolution_id, other.meeting.meeting_id
            )

    @pytest.mark.asyncio
    async def test_withdrawn_is_final(self, harness: GovernanceHarness) -> None:
        opened = await harness.open_meeting()
        resolution = await harness.propose(opened)
        await harness.resolution_registry.withdraw(resolution.resolution_id, CHAIR)

        with pytest.raises(InvalidResolutionTransitionError):
            await harness.resolution_registry.table(resolution.resolution_id, CHAIR)
        with pytest.raises(ResolutionNotVotableError):
            await harness.resolution_registry.second(resolution.resolution_id, "bob")

    @pytest.mark.asyncio
    async def test_supersede_amends_undecided_original(
        self, harness: GovernanceHarness
    ) -> None:
        opened = await harness.open_meeting()
        original = await harness.propose(opened, "Budget v1")

        replacement = await harness.resolution_registry.supersede(
            original.resolution_id, "Budget v2", "Resolved: budget v2.", proposer=CHAIR
        )

        stored = await harness.resolution_registry.get(original.resolution_id)
        assert replacement.supersedes_id == original.resolution_id
        assert replacement.resolution_number == "R-002"
        assert stored.superseded_by_id == replacement.resolution_id
        assert stored.status == ResolutionStatus.AMENDED

    @pytest.mark.asyncio
    async def test_supersede_keeps_decided_outcome(self, harness: GovernanceHarness) -> None:
        """A passed resolution keeps its status and outcome when replaced."""
        opened = await harness.open_meeting()
        original = await harness.propose(opened)
        await harness.resolution_registry.record_outcome(
            original.resolution_id, _outcome(harness, original, passed=True)
        )

        await harness.resolution_registry.supersede(
            original.resolution_id, "Revised", "Resolved: revised.", proposer=CHAIR
        )

        stored = await harness.resolution_registry.get(original.resolution_id)
        assert stored.status == ResolutionStatus.PASSED
        assert stored.outcome is not None


class TestSessionPinning:
    """Test attach_to_session(), release_from_session() and check_outcome()."""

    @pytest.mark.asyncio
    async def test_pinned_resolution_cannot_be_tabled_or_withdrawn(
        self, harness: GovernanceHarness
    ) -> None:
        opened = await harness.open_meeting()
        resolution = await harness.propose(opened)
        session_id = uuid4()
        await harness.resolution_registry.attach_to_session(
            [resolution.resolution_id], session_id, opened.meeting.meeting_id
        )

        with pytest.raises(ResolutionOnBallotError) as exc_info:
            await harness.resolution_registry.withdraw(resolution.resolution_id, CHAIR)
        with pytest.raises(ResolutionOnBallotError):
            await harness.resolution_registry.table(resolution.resolution_id, CHAIR)
        with pytest.raises(ResolutionOnBallotError):
            await harness.resolution_registry.supersede(
                resolution.resolution_id, "Revised", "Resolved: revised.", proposer=CHAIR
            )

        assert exc_info.value.http_status == 409
        assert exc_info.value.to_rfc7807_dict()["session_id"] == str(session_id)
        stored = await harness.resolution_registry.get(resolution.resolution_id)
        assert stored.status == ResolutionStatus.PROPOSED
        assert stored.voting_session_id == session_id
        # A rejected supersede leaves no replacement behind
        listed = await harness.resolution_registry.list_for_meeting(opened.meeting.meeting_id)
        assert len(listed) == 1

    @pytest.mark.asyncio
    async def test_release_allows_withdraw_again(self, harness: GovernanceHarness) -> None:
        opened = await harness.open_meeting()
        resolution = await harness.propose(opened)
        session_id = uuid4()
        await harness.resolution_registry.attach_to_session(
            [resolution.resolution_id], session_id, opened.meeting.meeting_id
        )

        # Another session's release is ignored
        await harness.resolution_registry.release_from_session(
            [resolution.resolution_id], uuid4()
        )
        still_pinned = await harness.resolution_registry.get(resolution.resolution_id)
        await harness.resolution_registry.release_from_session(
            [resolution.resolution_id], session_id
        )
        withdrawn = await harness.resolution_registry.withdraw(resolution.resolution_id, CHAIR)

        assert still_pinned.voting_session_id == session_id
        assert withdrawn.status == ResolutionStatus.WITHDRAWN
        assert withdrawn.voting_session_id is None

    @pytest.mark.asyncio
    async def test_attach_is_all_or_nothing(self, harness: GovernanceHarness) -> None:
        """A resolution already on another session unpins the ones attached before it."""
        opened = await harness.open_meeting()
        free = await harness.propose(opened, "Free")
        busy = await harness.propose(opened, "Busy")
        await harness.resolution_registry.attach_to_session(
            [busy.resolution_id], uuid4(), opened.meeting.meeting_id
        )

        with pytest.raises(ResolutionNotVotableError):
            await harness.resolution_registry.attach_to_session(
                [free.resolution_id, busy.resolution_id], uuid4(), opened.meeting.meeting_id
            )

        stored = await harness.resolution_registry.get(free.resolution_id)
        assert stored.voting_session_id is None

    @pytest.mark.asyncio
    async def test_outcome_clears_pin(self, harness: GovernanceHarness) -> None:
        opened = await harness.open_meeting()
        resolution = await harness.propose(opened)
        outcome = _outcome(harness, resolution, passed=True)
        await harness.resolution_registry.attach_to_session(
            [resolution.resolution_id], outcome.session_id, opened.meeting.meeting_id
        )

        assert await harness.resolution_registry.check_outcome(
            resolution.resolution_id, outcome
        ) is False
        decided = await harness.resolution_registry.record_outcome(
            resolution.resolution_id, outcome
        )

        assert decided.status == ResolutionStatus.PASSED
        assert decided.voting_session_id is None
        assert await harness.resolution_registry.check_outcome(
            resolution.resolution_id, outcome
        ) is True

    @pytest.mark.asyncio
    async def test_check_outcome_rejects_final_status_without_writing(
        self, harness: GovernanceHarness
    ) -> None:
        opened = await harness.open_meeting()
        resolution = await harness.propose(opened)
        await harness.resolution_registry.withdraw(resolution.resolution_id, CHAIR)

        with pytest.raises(InvalidResolutionTransitionError):
            await harness.resolution_registry.check_outcome(
                resolution.resolution_id, _outcome(harness, resolution, passed=True)
            )

        stored = await harness.resolution_registry.get(resolution.resolution_id)
        assert stored.status == ResolutionStatus.WITHDRAWN
        assert stored.outcome is None
