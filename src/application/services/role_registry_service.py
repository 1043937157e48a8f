"""Role registry service.

Resolves a participant's meeting roles into a voting weight and procedural
authority. Weight resolution is a side-effect-free lookup combining the
engine's MeetingRole records with external organization membership.

When a user holds several active voting roles the highest weight applies;
weights from different roles are never summed. A role handed over by
substitution votes through its substitute; a delegated role keeps its
vote with the holder and lends only its procedural capabilities.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from src.application.ports.meeting_repository import MeetingRepositoryProtocol
from src.application.ports.meeting_role_repository import MeetingRoleRepositoryProtocol
from src.application.ports.membership import MembershipPort
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.services.base import LoggingMixin
from src.domain.errors.role import InvalidRoleTransitionError, MeetingRoleNotFoundError
from src.domain.errors.workflow import MeetingNotFoundError
from src.domain.models.meeting import Meeting
from src.domain.models.meeting_role import (
    DEFAULT_VOTING_WEIGHT,
    Capability,
    MeetingRole,
    RoleStatus,
    RoleTag,
)


@dataclass(frozen=True)
class VotingWeight:
    """Result of resolving a participant's voting weight.

    Attributes:
        weight: Highest weight among active voting roles, 0 when ineligible.
        eligible: Whether the participant may vote in their own right.
        reason: Why the participant is ineligible, if they are.
    """

    weight: Decimal
    eligible: bool
    reason: str | None = None


INELIGIBLE_NOT_MEMBER = "not an active member of the organization"
INELIGIBLE_NO_VOTING_ROLE = "no active meeting role with voting capability"


class RoleRegistryService(LoggingMixin):
    """Meeting role assignment and voting weight resolution."""

    def __init__(
        self,
        roles: MeetingRoleRepositoryProtocol,
        meetings: MeetingRepositoryProtocol,
        membership: MembershipPort,
        time_authority: TimeAuthorityProtocol,
    ) -> None:
        self._roles = roles
        self._meetings = meetings
        self._membership = membership
        self._time = time_authority
        self._init_logger()

    async def _require_meeting(self, meeting_id: UUID) -> Meeting:
        meeting = await self._meetings.get(meeting_id)
        if meeting is None:
            raise MeetingNotFoundError(meeting_id)
        return meeting

    async def assign_role(
        self,
        meeting_id: UUID,
        user_id: str,
        role_tag: RoleTag,
        voting_weight: Decimal = DEFAULT_VOTING_WEIGHT,
        capabilities: frozenset[Capability] | None = None,
        assigned_by: str | None = None,
    ) -> MeetingRole:
        """Assign a role to a participant.

        Capabilities default to the role tag's standard set.

        Raises:
            MeetingNotFoundError: If the meeting does not exist.
            InvalidVotingWeightError: If the weight is not positive.
        """
        log = self._log_operation(
            "assign_role",
            meeting_id=str(meeting_id),
            user_id=user_id,
            role_tag=role_tag.value,
        )
        await self._require_meeting(meeting_id)
        role = MeetingRole.create(
            meeting_id=meeting_id,
            user_id=user_id,
            role_tag=role_tag,
            voting_weight=voting_weight,
            capabilities=capabilities,
            assigned_by=assigned_by,
            assigned_at=self._time.now(),
        )
        await self._roles.add(role)
        log.info("role_assigned", role_id=str(role.role_id), weight=str(role.voting_weight))
        return role

    async def _require_role(self, role_id: UUID) -> MeetingRole:
        role = await self._roles.get(role_id)
        if role is None:
            raise MeetingRoleNotFoundError(role_id)
        return role

    async def deactivate_role(self, role_id: UUID) -> MeetingRole:
        """Mark a role inactive, ending any hand-over. Idempotent."""
        role = await self._require_role(role_id)
        if role.status != RoleStatus.INACTIVE:
            role.status = RoleStatus.INACTIVE
            role.delegated_to = None
            role.substituted_by = None
            role.handover_reason = None
            await self._roles.update(role)
            self._log_operation("deactivate_role", role_id=str(role_id)).info(
                "role_deactivated"
            )
        return role

    async def delegate_role(
        self, role_id: UUID, delegate: str, reason: str | None = None
    ) -> MeetingRole:
        """Hand a role's procedural capabilities to another participant.

        The holder keeps the role's vote. Sessions already open keep the
        voter snapshot they were opened with.

        Raises:
            MeetingRoleNotFoundError: If the role does not exist.
            InvalidRoleTransitionError: If the role is not active or
                `delegate` is the holder.
        """
        role = await self._handover(role_id, delegate, "delegate")
        role.status = RoleStatus.DELEGATED
        role.delegated_to = delegate
        role.handover_reason = reason
        await self._roles.update(role)
        self._log_operation(
            "delegate_role", role_id=str(role_id), user_id=role.user_id
        ).info("role_delegated", delegated_to=delegate)
        return role

    async def substitute_role(
        self, role_id: UUID, substitute: str, reason: str | None = None
    ) -> MeetingRole:
        """Let another participant exercise a role in full, vote and weight included.

        Raises:
            MeetingRoleNotFoundError: If the role does not exist.
            InvalidRoleTransitionError: If the role is not active or
                `substitute` is the holder.
        """
        role = await self._handover(role_id, substitute, "substitute")
        role.status = RoleStatus.SUBSTITUTED
        role.substituted_by = substitute
        role.handover_reason = reason
        await self._roles.update(role)
        self._log_operation(
            "substitute_role", role_id=str(role_id), user_id=role.user_id
        ).info("role_substituted", substituted_by=substitute)
        return role

    async def restore_role(self, role_id: UUID) -> MeetingRole:
        """Return a delegated or substituted role to its holder.

        Idempotent for a role that is already active.

        Raises:
            MeetingRoleNotFoundError: If the role does not exist.
            InvalidRoleTransitionError: If the role is inactive.
        """
        role = await self._require_role(role_id)
        if role.status == RoleStatus.INACTIVE:
            raise InvalidRoleTransitionError(role_id, role.status.value, "restore")
        if role.status != RoleStatus.ACTIVE:
            role.status = RoleStatus.ACTIVE
            role.delegated_to = None
            role.substituted_by = None
            role.handover_reason = None
            await self._roles.update(role)
            self._log_operation("restore_role", role_id=str(role_id)).info(
                "role_restored"
            )
        return role

    async def _handover(self, role_id: UUID, to_user: str, action: str) -> MeetingRole:
        role = await self._require_role(role_id)
        if role.status != RoleStatus.ACTIVE:
            raise InvalidRoleTransitionError(role_id, role.status.value, action)
        if to_user == role.user_id:
            raise InvalidRoleTransitionError(role_id, "held by that user", action)
        return role

    async def roles_for(self, meeting_id: UUID, user_id: str) -> list[MeetingRole]:
        """Roles the user holds or acts in, hand-overs included."""
        return await self._roles.list_for_user(meeting_id, user_id)

    async def resolve_voting_weight(self, meeting_id: UUID, user_id: str) -> VotingWeight:
        """Resolve a participant's own voting weight for a meeting.

        Ineligible when the participant is not an active member of the
        meeting's organization or casts the vote of no role. A substitute
        votes with the substituted role's weight.

        Raises:
            MeetingNotFoundError: If the meeting does not exist.
        """
        meeting = await self._require_meeting(meeting_id)
        if not await self._membership.is_active_member(meeting.organization_id, user_id):
            return VotingWeight(Decimal(0), False, INELIGIBLE_NOT_MEMBER)

        roles = await self._roles.list_for_meeting(meeting_id)
        weights = [r.voting_weight for r in roles if r.voter == user_id]
        if not weights:
            return VotingWeight(Decimal(0), False, INELIGIBLE_NO_VOTING_ROLE)
        return VotingWeight(max(weights), True)

    async def has_capability(
        self, meeting_id: UUID, user_id: str, capability: Capability
    ) -> bool:
        roles = await self._roles.list_for_meeting(meeting_id)
        return any(r.holds(user_id, capability) for r in roles)

    async def eligible_voters(self, meeting_id: UUID) -> dict[str, Decimal]:
        """Snapshot every eligible voter and their weight.

        Returns:
            Mapping of user_id to resolved weight, eligible voters only.
        """
        meeting = await self._require_meeting(meeting_id)
        best: dict[str, Decimal] = {}
        for role in await self._roles.list_for_meeting(meeting_id):
            voter = role.voter
            if voter is None:
                continue
            current = best.get(voter)
            if current is None or role.voting_weight > current:
                best[voter] = role.voting_weight

        eligible: dict[str, Decimal] = {}
        for user_id, weight in best.items():
            if await self._membership.is_active_member(meeting.organization_id, user_id):
                eligible[user_id] = weight
        return eligible
