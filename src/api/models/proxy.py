"""Proxy grant API request/response models."""

from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from src.api.models.meeting import DateTimeWithZ
from src.domain.models.proxy_grant import ProxyType
from src.domain.models.voting_session import VoteChoice


class GrantProxyRequest(BaseModel):
    """Request to delegate a grantor's vote to a holder."""

    grantor: str = Field(..., min_length=1, description="Identity delegating authority")
    holder: str = Field(..., min_length=1, description="Identity receiving authority")
    effective_from: DateTimeWithZ = Field(..., description="Start of the effective window")
    effective_until: DateTimeWithZ = Field(..., description="End of the effective window")
    voting_weight: Decimal = Field(default=Decimal("1.0"), gt=0)
    can_sub_delegate: bool = Field(
        default=False, description="Whether the holder may delegate onward"
    )
    parent_grant_id: UUID | None = Field(
        default=None, description="Grant being sub-delegated, held by the grantor"
    )
    proxy_type: ProxyType = Field(default=ProxyType.GENERAL)
    resolution_ids: list[UUID] | None = Field(
        default=None, description="Restrict the grant to these resolutions"
    )
    max_votes_allowed: int | None = Field(
        default=None, ge=1, description="Ballots after which the grant is executed"
    )
    voting_instructions: dict[UUID, VoteChoice] = Field(
        default_factory=dict,
        description="Choice per resolution the holder must cast; instructed proxies only",
    )

    @model_validator(mode="after")
    def _window_is_ordered(self) -> "GrantProxyRequest":
        if self.effective_until <= self.effective_from:
            raise ValueError("effective_until must be after effective_from")
        return self


class RevokeProxyRequest(BaseModel):
    revoked_by: str = Field(..., min_length=1, description="Caller identity")
    reason: str = Field(default="revoked", min_length=1, max_length=500)


class ProxyGrantResponse(BaseModel):
    """One proxy grant."""

    grant_id: UUID
    meeting_id: UUID
    grantor: str
    holder: str
    proxy_type: str
    effective_from: DateTimeWithZ
    effective_until: DateTimeWithZ
    voting_weight: Decimal
    resolution_ids: list[UUID] | None = None
    can_sub_delegate: bool
    parent_grant_id: UUID | None = None
    chain_depth: int = Field(..., ge=1, le=5)
    max_votes_allowed: int | None = None
    voting_instructions: dict[UUID, str] = Field(default_factory=dict)
    votes_cast: int
    status: str
    sub_delegated_to: str | None = None
    revocation_reason: str | None = None
    revoked_by: str | None = None
    revoked_at: DateTimeWithZ | None = None


class ProxyGrantListResponse(BaseModel):
    grants: list[ProxyGrantResponse]


class EffectiveHolderResponse(BaseModel):
    """Who ultimately votes for a grantor at a point in time."""

    meeting_id: UUID
    grantor: str
    holder: str
    delegated: bool
    chain: list[UUID] = Field(
        default_factory=list, description="Grant IDs traversed, grantor's grant first"
    )


class ExpireSweepResponse(BaseModel):
    expired_grant_ids: list[UUID]
