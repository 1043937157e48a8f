"""Resolution domain model.

Resolutions are the motions a voting session decides. Status is set by the
voting outcome exactly once per voting round. Supersession creates a new
Resolution referencing the old one instead of rewriting history.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from src.domain.models.voting_session import ItemOutcome


class ResolutionStatus(Enum):
    """Status of a resolution through its lifecycle."""

    PROPOSED = "proposed"
    PASSED = "passed"
    REJECTED = "rejected"
    TABLED = "tabled"
    WITHDRAWN = "withdrawn"
    AMENDED = "amended"


class ResolutionClassification(Enum):
    """Subject classification of a resolution."""

    MOTION = "motion"
    AMENDMENT = "amendment"
    POLICY = "policy"
    DIRECTIVE = "directive"
    APPOINTMENT = "appointment"
    FINANCIAL = "financial"
    STRATEGIC = "strategic"
    OTHER = "other"


ALLOWED_RESOLUTION_TRANSITIONS: dict[ResolutionStatus, frozenset[ResolutionStatus]] = {
    ResolutionStatus.PROPOSED: frozenset(
        {
            ResolutionStatus.PASSED,
            ResolutionStatus.REJECTED,
            ResolutionStatus.TABLED,
            ResolutionStatus.WITHDRAWN,
            ResolutionStatus.AMENDED,
        }
    ),
    ResolutionStatus.TABLED: frozenset(
        {
            ResolutionStatus.PROPOSED,
            ResolutionStatus.WITHDRAWN,
            # Re-voting a tabled resolution records its outcome directly
            ResolutionStatus.PASSED,
            ResolutionStatus.REJECTED,
        }
    ),
    ResolutionStatus.PASSED: frozenset(),
    ResolutionStatus.REJECTED: frozenset(),
    ResolutionStatus.WITHDRAWN: frozenset(),
    ResolutionStatus.AMENDED: frozenset(),
}

VOTABLE_STATUSES: frozenset[ResolutionStatus] = frozenset(
    {ResolutionStatus.PROPOSED, ResolutionStatus.TABLED}
)


def format_resolution_number(sequence: int) -> str:
    return f"R-{sequence:03d}"


@dataclass
class Resolution:
    """A motion or resolution before a meeting."""

    resolution_id: UUID
    meeting_id: UUID
    resolution_number: str
    title: str
    text: str
    classification: ResolutionClassification
    proposer: str
    status: ResolutionStatus
    created_at: datetime
    seconder: str | None = None
    seconded_at: datetime | None = None
    supersedes_id: UUID | None = None
    superseded_by_id: UUID | None = None
    outcomes: list[ItemOutcome] = field(default_factory=list)
    decided_at: datetime | None = None
    # Preparing or open session deciding this resolution
    voting_session_id: UUID | None = None

    @classmethod
    def create(
        cls,
        meeting_id: UUID,
        resolution_number: str,
        title: str,
        text: str,
        proposer: str,
        classification: ResolutionClassification = ResolutionClassification.MOTION,
        seconder: str | None = None,
        supersedes_id: UUID | None = None,
        created_at: datetime | None = None,
    ) -> Resolution:
        now = created_at or datetime.now(timezone.utc)
        return cls(
            resolution_id=uuid4(),
            meeting_id=meeting_id,
            resolution_number=resolution_number,
            title=title,
            text=text,
            classification=classification,
            proposer=proposer,
            status=ResolutionStatus.PROPOSED,
            created_at=now,
            seconder=seconder,
            seconded_at=now if seconder else None,
            supersedes_id=supersedes_id,
        )

    @property
    def outcome(self) -> ItemOutcome | None:
        """Most recent recorded outcome."""
        return self.outcomes[-1] if self.outcomes else None

    def can_transition_to(self, status: ResolutionStatus) -> bool:
        return status in ALLOWED_RESOLUTION_TRANSITIONS[self.status]

    def outcome_for_item(self, session_item_id: UUID) -> ItemOutcome | None:
        for outcome in self.outcomes:
            if outcome.session_item_id == session_item_id:
                return outcome
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "resolution_id": str(self.resolution_id),
            "meeting_id": str(self.meeting_id),
            "resolution_number": self.resolution_number,
            "title": self.title,
            "text": self.text,
            "classification": self.classification.value,
            "proposer": self.proposer,
            "seconder": self.seconder,
            "status": self.status.value,
            "supersedes_id": str(self.supersedes_id) if self.supersedes_id else None,
            "superseded_by_id": (
                str(self.superseded_by_id) if self.superseded_by_id else None
            ),
            "outcome": self.outcome.to_dict() if self.outcome else None,
            "created_at": self.created_at.isoformat(),
            "decided_at": self.decided_at.isoformat() if self.decided_at else None,
            "voting_session_id": (
                str(self.voting_session_id) if self.voting_session_id else None
            ),
        }
