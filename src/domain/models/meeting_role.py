"""Meeting role domain model.

A participant may hold several roles in one meeting (e.g. treasurer and
board member). Voting weight and procedural authority come from the roles
that are active and carry the relevant capability. A role can be handed
over for part of a meeting: delegated (procedure only) or substituted
(procedure and vote).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from src.domain.errors.role import InvalidVotingWeightError


class RoleTag(Enum):
    """Roles a participant can hold in a meeting."""

    CHAIR = "chair"
    VICE_CHAIR = "vice_chair"
    SECRETARY = "secretary"
    TREASURER = "treasurer"
    PARLIAMENTARIAN = "parliamentarian"
    BOARD_MEMBER = "board_member"
    OBSERVER = "observer"
    GUEST = "guest"
    ADVISOR = "advisor"
    LEGAL_COUNSEL = "legal_counsel"


class RoleStatus(Enum):
    """Status of a role assignment."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    DELEGATED = "delegated"
    SUBSTITUTED = "substituted"


class Capability(Enum):
    """Authority a role can confer within a meeting."""

    VOTE = "vote"
    START_VOTING = "start_voting"
    CLOSE_VOTING = "close_voting"
    ASSIGN_SPEAKERS = "assign_speakers"
    MANAGE_AGENDA = "manage_agenda"
    DECLARE_QUORUM = "declare_quorum"
    ADJOURN_MEETING = "adjourn_meeting"


_PRESIDING = frozenset(
    {
        Capability.VOTE,
        Capability.START_VOTING,
        Capability.CLOSE_VOTING,
        Capability.ASSIGN_SPEAKERS,
        Capability.MANAGE_AGENDA,
        Capability.DECLARE_QUORUM,
        Capability.ADJOURN_MEETING,
    }
)

DEFAULT_ROLE_CAPABILITIES: dict[RoleTag, frozenset[Capability]] = {
    RoleTag.CHAIR: _PRESIDING,
    RoleTag.VICE_CHAIR: _PRESIDING,
    RoleTag.SECRETARY: frozenset({Capability.VOTE, Capability.DECLARE_QUORUM}),
    RoleTag.TREASURER: frozenset({Capability.VOTE}),
    RoleTag.PARLIAMENTARIAN: frozenset(
        {Capability.VOTE, Capability.DECLARE_QUORUM, Capability.ASSIGN_SPEAKERS}
    ),
    RoleTag.BOARD_MEMBER: frozenset({Capability.VOTE}),
    RoleTag.OBSERVER: frozenset(),
    RoleTag.GUEST: frozenset(),
    RoleTag.ADVISOR: frozenset(),
    RoleTag.LEGAL_COUNSEL: frozenset(),
}

DEFAULT_VOTING_WEIGHT = Decimal("1.0")


@dataclass
class MeetingRole:
    """A participant's role in one meeting.

    A DELEGATED role hands its procedural capabilities to `delegated_to`
    while the holder keeps the vote. A SUBSTITUTED role is exercised in
    full by `substituted_by`, vote and weight included. Either hand-over
    ends when the role is restored to ACTIVE.
    """

    role_id: UUID
    meeting_id: UUID
    user_id: str
    role_tag: RoleTag
    voting_weight: Decimal
    capabilities: frozenset[Capability]
    status: RoleStatus
    assigned_at: datetime
    assigned_by: str | None = None
    delegated_to: str | None = None
    substituted_by: str | None = None
    handover_reason: str | None = None

    def __post_init__(self) -> None:
        if self.voting_weight <= 0:
            raise InvalidVotingWeightError(
                f"Voting weight must be positive, got {self.voting_weight}"
            )

    @classmethod
    def create(
        cls,
        meeting_id: UUID,
        user_id: str,
        role_tag: RoleTag,
        voting_weight: Decimal = DEFAULT_VOTING_WEIGHT,
        capabilities: frozenset[Capability] | None = None,
        assigned_by: str | None = None,
        assigned_at: datetime | None = None,
    ) -> MeetingRole:
        return cls(
            role_id=uuid4(),
            meeting_id=meeting_id,
            user_id=user_id,
            role_tag=role_tag,
            voting_weight=Decimal(voting_weight),
            capabilities=(
                frozenset(capabilities)
                if capabilities is not None
                else DEFAULT_ROLE_CAPABILITIES[role_tag]
            ),
            status=RoleStatus.ACTIVE,
            assigned_at=assigned_at or datetime.now(timezone.utc),
            assigned_by=assigned_by,
        )

    @property
    def is_active(self) -> bool:
        return self.status == RoleStatus.ACTIVE

    @property
    def voter(self) -> str | None:
        """Who casts this role's vote, or None when the role confers none."""
        if Capability.VOTE not in self.capabilities:
            return None
        if self.status == RoleStatus.SUBSTITUTED:
            return self.substituted_by
        if self.status in (RoleStatus.ACTIVE, RoleStatus.DELEGATED):
            return self.user_id
        return None

    @property
    def acting_user(self) -> str | None:
        """Who exercises the role's procedural capabilities."""
        if self.status == RoleStatus.ACTIVE:
            return self.user_id
        if self.status == RoleStatus.DELEGATED:
            return self.delegated_to
        if self.status == RoleStatus.SUBSTITUTED:
            return self.substituted_by
        return None

    @property
    def can_vote(self) -> bool:
        return self.voter is not None

    def grants(self, capability: Capability) -> bool:
        return self.holds(self.user_id, capability)

    def holds(self, user_id: str, capability: Capability) -> bool:
        """Whether `user_id` may exercise `capability` through this role."""
        if capability not in self.capabilities:
            return False
        if capability == Capability.VOTE:
            return self.voter == user_id
        return self.acting_user == user_id

    def involves(self, user_id: str) -> bool:
        return user_id in (self.user_id, self.delegated_to, self.substituted_by)

    def to_dict(self) -> dict[str, Any]:
        return {
            "role_id": str(self.role_id),
            "meeting_id": str(self.meeting_id),
            "user_id": self.user_id,
            "role_tag": self.role_tag.value,
            "voting_weight": str(self.voting_weight),
            "capabilities": sorted(c.value for c in self.capabilities),
            "status": self.status.value,
            "assigned_at": self.assigned_at.isoformat(),
            "assigned_by": self.assigned_by,
            "delegated_to": self.delegated_to,
            "substituted_by": self.substituted_by,
            "handover_reason": self.handover_reason,
        }
