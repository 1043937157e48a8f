"""Resolution API request/response models."""

from uuid import UUID

from pydantic import BaseModel, Field

from src.api.models.meeting import DateTimeWithZ
from src.api.models.voting import ItemOutcomeResponse
from src.domain.models.resolution import ResolutionClassification


class ProposeResolutionRequest(BaseModel):
    """Request to propose a resolution in a meeting."""

    title: str = Field(..., min_length=1, max_length=500)
    text: str = Field(..., min_length=1, description="Formal resolution text")
    proposer: str = Field(..., min_length=1)
    seconder: str | None = Field(default=None, min_length=1)
    classification: ResolutionClassification = Field(
        default=ResolutionClassification.MOTION
    )


class SecondResolutionRequest(BaseModel):
    seconder: str = Field(..., min_length=1)


class ResolutionActionRequest(BaseModel):
    """Request body for table, withdraw and reopen."""

    actor: str = Field(..., min_length=1)


class SupersedeResolutionRequest(BaseModel):
    """Request to replace a resolution with a new one referencing it."""

    title: str = Field(..., min_length=1, max_length=500)
    text: str = Field(..., min_length=1)
    proposer: str = Field(..., min_length=1)
    seconder: str | None = Field(default=None, min_length=1)


class ResolutionResponse(BaseModel):
    """One resolution with its latest outcome."""

    resolution_id: UUID
    meeting_id: UUID
    resolution_number: str
    title: str
    text: str
    classification: str
    proposer: str
    seconder: str | None = None
    status: str
    supersedes_id: UUID | None = None
    superseded_by_id: UUID | None = None
    outcome: ItemOutcomeResponse | None = None
    created_at: DateTimeWithZ
    decided_at: DateTimeWithZ | None = None
    voting_session_id: UUID | None = None


class ResolutionListResponse(BaseModel):
    resolutions: list[ResolutionResponse]
