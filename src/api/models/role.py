"""Meeting role API request/response models."""

from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field

from src.api.models.meeting import DateTimeWithZ
from src.domain.models.meeting_role import Capability, RoleTag


class AssignRoleRequest(BaseModel):
    """Request to assign a role to a participant."""

    user_id: str = Field(..., min_length=1, description="Participant identity")
    role_tag: RoleTag = Field(..., description="Role to assign")
    voting_weight: Decimal = Field(
        default=Decimal("1.0"), gt=0, description="Weight of this role's vote"
    )
    capabilities: list[Capability] | None = Field(
        default=None, description="Explicit capabilities; defaults to the role's set"
    )
    assigned_by: str | None = Field(default=None, description="Caller identity")


class MeetingRoleResponse(BaseModel):
    """One role assignment."""

    role_id: UUID
    meeting_id: UUID
    user_id: str
    role_tag: str
    voting_weight: Decimal
    capabilities: list[str]
    status: str
    assigned_at: DateTimeWithZ
    assigned_by: str | None = None
    delegated_to: str | None = None
    substituted_by: str | None = None
    handover_reason: str | None = None


class VotingWeightResponse(BaseModel):
    """Resolved voting weight for a participant."""

    meeting_id: UUID
    user_id: str
    weight: Decimal = Field(..., ge=0)
    eligible: bool
    reason: str | None = None


class HandOverRoleRequest(BaseModel):
    """Request to delegate or substitute a role to another participant."""

    user_id: str = Field(..., min_length=1, description="Participant taking over")
    reason: str | None = Field(default=None, max_length=2000, description="Why")
