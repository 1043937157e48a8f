"""Unit tests for RoleRegistryService.

Voting weight resolution combines meeting roles with external
organization membership. Multiple voting roles resolve to the highest
weight, never the sum.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest

from src.application.services.role_registry_service import (
    INELIGIBLE_NO_VOTING_ROLE,
    INELIGIBLE_NOT_MEMBER,
)
from src.domain.errors.role import (
    InvalidRoleTransitionError,
    InvalidVotingWeightError,
    MeetingRoleNotFoundError,
)
from src.domain.errors.voting import IneligibleVoterError
from src.domain.errors.workflow import MeetingNotFoundError
from src.domain.models.meeting_role import Capability, RoleStatus, RoleTag
from src.domain.models.voting_session import VoteChoice
from tests.helpers.governance_harness import ORG, GovernanceHarness


class TestAssignRole:
    """Test RoleRegistryService.assign_role()."""

    @pytest.mark.asyncio
    async def test_default_capabilities_follow_role_tag(
        self, harness: GovernanceHarness
    ) -> None:
        """A chair gets the presiding capabilities; an observer gets none."""
        opened = await harness.open_meeting()
        meeting_id = opened.meeting.meeting_id

        chair = await harness.role_registry.assign_role(meeting_id, "chair-1", RoleTag.CHAIR)
        observer = await harness.role_registry.assign_role(
            meeting_id, "olga", RoleTag.OBSERVER
        )

        assert Capability.CLOSE_VOTING in chair.capabilities
        assert chair.can_vote
        assert observer.capabilities == frozenset()
        assert not observer.can_vote

    @pytest.mark.asyncio
    async def test_explicit_capabilities_override_defaults(
        self, harness: GovernanceHarness
    ) -> None:
        opened = await harness.open_meeting()

        role = await harness.role_registry.assign_role(
            opened.meeting.meeting_id,
            "gina",
            RoleTag.GUEST,
            capabilities=frozenset({Capability.VOTE}),
        )

        assert role.can_vote

    @pytest.mark.asyncio
    async def test_non_positive_weight_rejected(self, harness: GovernanceHarness) -> None:
        opened = await harness.open_meeting()

        with pytest.raises(InvalidVotingWeightError):
            await harness.role_registry.assign_role(
                opened.meeting.meeting_id,
                "alice",
                RoleTag.BOARD_MEMBER,
                voting_weight=Decimal(0),
            )

    @pytest.mark.asyncio
    async def test_unknown_meeting(self, harness: GovernanceHarness) -> None:
        with pytest.raises(MeetingNotFoundError):
            await harness.role_registry.assign_role(uuid4(), "alice", RoleTag.BOARD_MEMBER)


class TestResolveVotingWeight:
    """Test RoleRegistryService.resolve_voting_weight()."""

    @pytest.mark.asyncio
    async def test_highest_weight_wins(self, harness: GovernanceHarness) -> None:
        """Treasurer at 2.0 and board member at 1.0 resolve to 2.0."""
        opened = await harness.open_meeting()
        meeting_id = opened.meeting.meeting_id
        await harness.add_voter(opened, "tom", "1.0")
        await harness.role_registry.assign_role(
            meeting_id, "tom", RoleTag.TREASURER, voting_weight=Decimal("2.0")
        )

        resolved = await harness.role_registry.resolve_voting_weight(meeting_id, "tom")

        assert resolved.eligible is True
        assert resolved.weight == Decimal("2.0")

    @pytest.mark.asyncio
    async def test_non_member_ineligible(self, harness: GovernanceHarness) -> None:
        """A role without organization membership confers no vote."""
        opened = await harness.open_meeting()
        meeting_id = opened.meeting.meeting_id
        await harness.role_registry.assign_role(meeting_id, "ex", RoleTag.BOARD_MEMBER)

        resolved = await harness.role_registry.resolve_voting_weight(meeting_id, "ex")

        assert resolved.eligible is False
        assert resolved.weight == Decimal(0)
        assert resolved.reason == INELIGIBLE_NOT_MEMBER

    @pytest.mark.asyncio
    async def test_member_without_voting_role(self, harness: GovernanceHarness) -> None:
        opened = await harness.open_meeting()
        await harness.add_voter(opened, "olga", role_tag=RoleTag.OBSERVER)

        resolved = await harness.role_registry.resolve_voting_weight(
            opened.meeting.meeting_id, "olga"
        )

        assert resolved.eligible is False
        assert resolved.reason == INELIGIBLE_NO_VOTING_ROLE

    @pytest.mark.asyncio
    async def test_deactivated_role_stops_counting(
        self, harness: GovernanceHarness
    ) -> None:
        """Deactivation is idempotent and removes the vote."""
        opened = await harness.open_meeting()
        meeting_id = opened.meeting.meeting_id
        harness.membership.add_member(ORG, "alice")
        role = await harness.role_registry.assign_role(
            meeting_id, "alice", RoleTag.BOARD_MEMBER
        )

        await harness.role_registry.deactivate_role(role.role_id)
        again = await harness.role_registry.deactivate_role(role.role_id)
        resolved = await harness.role_registry.resolve_voting_weight(meeting_id, "alice")

        assert again.status == RoleStatus.INACTIVE
        assert resolved.eligible is False

    @pytest.mark.asyncio
    async def test_deactivate_unknown_role(self, harness: GovernanceHarness) -> None:
        with pytest.raises(MeetingRoleNotFoundError):
            await harness.role_registry.deactivate_role(uuid4())

    @pytest.mark.asyncio
    async def test_lapsed_membership(self, harness: GovernanceHarness) -> None:
        """Deactivating the organization membership makes the user ineligible."""
        opened = await harness.open_meeting()
        await harness.add_voter(opened, "alice")
        harness.membership.deactivate(ORG, "alice")

        resolved = await harness.role_registry.resolve_voting_weight(
            opened.meeting.meeting_id, "alice"
        )

        assert resolved.reason == INELIGIBLE_NOT_MEMBER


class TestEligibleVoters:
    """Test RoleRegistryService.eligible_voters() and has_capability()."""

    @pytest.mark.asyncio
    async def test_snapshot_lists_only_eligible(self, harness: GovernanceHarness) -> None:
        opened = await harness.open_meeting()
        meeting_id = opened.meeting.meeting_id
        await harness.add_voter(opened, "alice", "1.5")
        await harness.add_voter(opened, "olga", role_tag=RoleTag.OBSERVER)
        await harness.role_registry.assign_role(meeting_id, "ex", RoleTag.BOARD_MEMBER)

        eligible = await harness.role_registry.eligible_voters(meeting_id)

        assert eligible == {"alice": Decimal("1.5")}

    @pytest.mark.asyncio
    async def test_has_capability(self, harness: GovernanceHarness) -> None:
        opened = await harness.open_meeting()
        meeting_id = opened.meeting.meeting_id
        await harness.role_registry.assign_role(meeting_id, "sec", RoleTag.SECRETARY)

        assert await harness.role_registry.has_capability(
            meeting_id, "sec", Capability.DECLARE_QUORUM
        )
        assert not await harness.role_registry.has_capability(
            meeting_id, "sec", Capability.CLOSE_VOTING
        )


class TestHandOver:
    """Test delegate_role(), substitute_role() and restore_role()."""

    @pytest.mark.asyncio
    async def test_delegation_lends_procedure_but_keeps_vote(
        self, harness: GovernanceHarness
    ) -> None:
        """The delegate may close voting; the holder still casts the vote."""
        opened = await harness.open_meeting()
        meeting_id = opened.meeting.meeting_id
        harness.membership.add_member(ORG, "ann")
        harness.membership.add_member(ORG, "vic")
        role = await harness.role_registry.assign_role(meeting_id, "ann", RoleTag.CHAIR)

        delegated = await harness.role_registry.delegate_role(
            role.role_id, "vic", "chair recused on item 3"
        )
        registry = harness.role_registry

        assert delegated.status == RoleStatus.DELEGATED
        assert delegated.handover_reason == "chair recused on item 3"
        assert await registry.has_capability(meeting_id, "vic", Capability.CLOSE_VOTING)
        assert not await registry.has_capability(meeting_id, "ann", Capability.CLOSE_VOTING)
        assert not await registry.has_capability(meeting_id, "vic", Capability.VOTE)
        assert (await registry.resolve_voting_weight(meeting_id, "ann")).eligible
        assert not (await registry.resolve_voting_weight(meeting_id, "vic")).eligible
        assert [r.role_id for r in await registry.roles_for(meeting_id, "vic")] == [
            role.role_id
        ]

    @pytest.mark.asyncio
    async def test_substitute_votes_with_role_weight(
        self, harness: GovernanceHarness
    ) -> None:
        """A substitute takes the role's vote and weight; the holder has neither."""
        opened = await harness.open_meeting()
        meeting_id = opened.meeting.meeting_id
        harness.membership.add_member(ORG, "tom")
        harness.membership.add_member(ORG, "sam")
        role = await harness.role_registry.assign_role(
            meeting_id, "tom", RoleTag.TREASURER, voting_weight=Decimal("2.0")
        )

        await harness.role_registry.substitute_role(role.role_id, "sam")
        eligible = await harness.role_registry.eligible_voters(meeting_id)
        held = await harness.role_registry.resolve_voting_weight(meeting_id, "tom")

        assert eligible == {"sam": Decimal("2.0")}
        assert held.eligible is False
        assert held.reason == INELIGIBLE_NO_VOTING_ROLE

    @pytest.mark.asyncio
    async def test_substitute_must_be_member(self, harness: GovernanceHarness) -> None:
        opened = await harness.open_meeting()
        meeting_id = opened.meeting.meeting_id
        harness.membership.add_member(ORG, "tom")
        role = await harness.role_registry.assign_role(
            meeting_id, "tom", RoleTag.BOARD_MEMBER
        )

        await harness.role_registry.substitute_role(role.role_id, "outsider")

        assert await harness.role_registry.eligible_voters(meeting_id) == {}

    @pytest.mark.asyncio
    async def test_restore_returns_role_to_holder(self, harness: GovernanceHarness) -> None:
        opened = await harness.open_meeting()
        meeting_id = opened.meeting.meeting_id
        harness.membership.add_member(ORG, "tom")
        harness.membership.add_member(ORG, "sam")
        role = await harness.role_registry.assign_role(
            meeting_id, "tom", RoleTag.BOARD_MEMBER
        )
        await harness.role_registry.substitute_role(role.role_id, "sam")

        restored = await harness.role_registry.restore_role(role.role_id)
        again = await harness.role_registry.restore_role(role.role_id)

        assert restored.status == RoleStatus.ACTIVE
        assert restored.substituted_by is None
        assert again.status == RoleStatus.ACTIVE
        assert await harness.role_registry.eligible_voters(meeting_id) == {
            "tom": Decimal("1.0")
        }

    @pytest.mark.asyncio
    async def test_only_active_role_is_handed_over(
        self, harness: GovernanceHarness
    ) -> None:
        """A handed-over role must be restored before it changes hands again."""
        opened = await harness.open_meeting()
        role = await harness.role_registry.assign_role(
            opened.meeting.meeting_id, "tom", RoleTag.BOARD_MEMBER
        )
        await harness.role_registry.delegate_role(role.role_id, "vic")

        with pytest.raises(InvalidRoleTransitionError) as exc_info:
            await harness.role_registry.substitute_role(role.role_id, "sam")

        assert exc_info.value.http_status == 409
        assert exc_info.value.to_rfc7807_dict()["role_status"] == "delegated"

    @pytest.mark.asyncio
    async def test_cannot_hand_over_to_holder(self, harness: GovernanceHarness) -> None:
        opened = await harness.open_meeting()
        role = await harness.role_registry.assign_role(
            opened.meeting.meeting_id, "tom", RoleTag.BOARD_MEMBER
        )

        with pytest.raises(InvalidRoleTransitionError):
            await harness.role_registry.delegate_role(role.role_id, "tom")

    @pytest.mark.asyncio
    async def test_inactive_role_cannot_be_restored(
        self, harness: GovernanceHarness
    ) -> None:
        opened = await harness.open_meeting()
        role = await harness.role_registry.assign_role(
            opened.meeting.meeting_id, "tom", RoleTag.BOARD_MEMBER
        )
        await harness.role_registry.deactivate_role(role.role_id)

        with pytest.raises(InvalidRoleTransitionError):
            await harness.role_registry.restore_role(role.role_id)

    @pytest.mark.asyncio
    async def test_substitution_after_open_keeps_snapshot(
        self, harness: GovernanceHarness
    ) -> None:
        """A session keeps the voters it was opened with."""
        opened = await harness.open_meeting()
        role = await harness.add_voter(opened, "tom")
        harness.membership.add_member(ORG, "sam")
        resolution = await harness.propose(opened)
        session = await harness.open_session(opened, [resolution])

        await harness.role_registry.substitute_role(role.role_id, "sam")
        ballot = await harness.voting_sessions.cast_ballot(
            session.session_id, session.item_ids[0], "tom", VoteChoice.FOR
        )
        with pytest.raises(IneligibleVoterError):
            await harness.voting_sessions.cast_ballot(
                session.session_id, session.item_ids[0], "sam", VoteChoice.FOR
            )

        assert ballot.weight == Decimal("1.0")
