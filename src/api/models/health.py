"""Health response model."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = Field(description='"healthy" while the API is serving')
    service: str = "meeting-governance"
    proxy_expiry_running: bool = Field(
        description="Whether the background proxy expiry sweep is running"
    )
