"""Proxy grant domain model.

A ProxyGrant delegates one identity's voting authority in a meeting to a
holder. A holder may sub-delegate onward when the grant allows it, forming
a chain. Grants are stored as a flat arena keyed by grant_id;
`parent_grant_id` is a back-reference only.

Invariants:
- grantor != holder
- chain_depth == parent.chain_depth + 1 when parented, else 1
- chain_depth <= MAX_PROXY_CHAIN_DEPTH
- at most one ACTIVE grant per (meeting_id, grantor)
- only INSTRUCTED grants carry voting_instructions, and they carry at least one
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from src.domain.errors.proxy import (
    InvalidProxyInstructionsError,
    InvalidProxyWindowError,
    SelfProxyError,
)
from src.domain.errors.role import InvalidVotingWeightError
from src.domain.models.voting_session import VoteChoice

MAX_PROXY_CHAIN_DEPTH: int = 5

# Revocation reason recorded when a newer grant replaces an active one
SUPERSEDED_REASON: str = "superseded"


class ProxyType(Enum):
    """How much discretion the holder has."""

    GENERAL = "general"
    SPECIFIC = "specific"
    INSTRUCTED = "instructed"
    DISCRETIONARY = "discretionary"


class ProxyStatus(Enum):
    """Lifecycle of a proxy grant."""

    ACTIVE = "active"
    REVOKED = "revoked"
    EXPIRED = "expired"
    EXECUTED = "executed"


@dataclass(frozen=True)
class EffectiveWindow:
    """Closed interval during which a grant may be exercised."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.end <= self.start:
            raise InvalidProxyWindowError(
                f"Proxy window end {self.end.isoformat()} must be after "
                f"start {self.start.isoformat()}"
            )

    def contains(self, at: datetime) -> bool:
        return self.start <= at <= self.end

    def elapsed(self, at: datetime) -> bool:
        return self.end < at


@dataclass(frozen=True)
class ProxyScope:
    """Restricts a grant to specific resolutions; None means every resolution."""

    resolution_ids: frozenset[UUID] | None = None

    def covers(self, resolution_id: UUID | None) -> bool:
        if self.resolution_ids is None or resolution_id is None:
            return True
        return resolution_id in self.resolution_ids


@dataclass
class ProxyGrant:
    """A delegation of voting authority within one meeting."""

    grant_id: UUID
    meeting_id: UUID
    grantor: str
    holder: str
    window: EffectiveWindow
    voting_weight: Decimal
    created_at: datetime
    proxy_type: ProxyType = ProxyType.GENERAL
    scope: ProxyScope = field(default_factory=ProxyScope)
    # resolution_id -> choice the holder must cast; instructed grants only
    voting_instructions: dict[UUID, VoteChoice] = field(default_factory=dict)
    can_sub_delegate: bool = False
    parent_grant_id: UUID | None = None
    chain_depth: int = 1
    max_votes_allowed: int | None = None
    votes_cast: int = 0
    status: ProxyStatus = ProxyStatus.ACTIVE
    sub_delegated_to: str | None = None
    revocation_reason: str | None = None
    revoked_by: str | None = None
    revoked_at: datetime | None = None
    expired_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.grantor == self.holder:
            raise SelfProxyError(self.grantor)
        if self.voting_weight <= 0:
            raise InvalidVotingWeightError(
                f"Proxy weight must be positive, got {self.voting_weight}"
            )
        self._check_instructions()

    @classmethod
    def create(
        cls,
        meeting_id: UUID,
        grantor: str,
        holder: str,
        window: EffectiveWindow,
        voting_weight: Decimal,
        can_sub_delegate: bool = False,
        parent: ProxyGrant | None = None,
        proxy_type: ProxyType = ProxyType.GENERAL,
        resolution_ids: frozenset[UUID] | None = None,
        max_votes_allowed: int | None = None,
        voting_instructions: dict[UUID, VoteChoice] | None = None,
        created_at: datetime | None = None,
    ) -> ProxyGrant:
        return cls(
            grant_id=uuid4(),
            meeting_id=meeting_id,
            grantor=grantor,
            holder=holder,
            window=window,
            voting_weight=Decimal(voting_weight),
            created_at=created_at or datetime.now(timezone.utc),
            proxy_type=proxy_type,
            scope=ProxyScope(
                frozenset(resolution_ids) if resolution_ids is not None else None
            ),
            can_sub_delegate=can_sub_delegate,
            parent_grant_id=parent.grant_id if parent else None,
            chain_depth=parent.chain_depth + 1 if parent else 1,
            max_votes_allowed=max_votes_allowed,
            voting_instructions=dict(voting_instructions or {}),
        )

    @property
    def is_active(self) -> bool:
        return self.status == ProxyStatus.ACTIVE

    def is_usable_at(self, at: datetime, resolution_id: UUID | None = None) -> bool:
        """True when the grant is active, in its window and covers the resolution."""
        return (
            self.is_active
            and self.window.contains(at)
            and self.scope.covers(resolution_id)
            and not self.limit_reached
        )

    @property
    def limit_reached(self) -> bool:
        return (
            self.max_votes_allowed is not None
            and self.votes_cast >= self.max_votes_allowed
        )

    def instruction_for(self, resolution_id: UUID | None) -> VoteChoice | None:
        if resolution_id is None:
            return None
        return self.voting_instructions.get(resolution_id)

    def _check_instructions(self) -> None:
        if self.proxy_type != ProxyType.INSTRUCTED:
            if self.voting_instructions:
                raise InvalidProxyInstructionsError(
                    f"A {self.proxy_type.value} proxy cannot carry voting instructions"
                )
            return
        if not self.voting_instructions:
            raise InvalidProxyInstructionsError(
                "An instructed proxy needs at least one voting instruction"
            )
        outside = [r for r in self.voting_instructions if not self.scope.covers(r)]
        if outside:
            raise InvalidProxyInstructionsError(
                "Instructions name resolutions outside the grant's scope: "
                + ", ".join(str(r) for r in outside)
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "grant_id": str(self.grant_id),
            "meeting_id": str(self.meeting_id),
            "grantor": self.grantor,
            "holder": self.holder,
            "proxy_type": self.proxy_type.value,
            "effective_from": self.window.start.isoformat(),
            "effective_until": self.window.end.isoformat(),
            "voting_weight": str(self.voting_weight),
            "resolution_ids": (
                sorted(str(r) for r in self.scope.resolution_ids)
                if self.scope.resolution_ids is not None
                else None
            ),
            "can_sub_delegate": self.can_sub_delegate,
            "parent_grant_id": str(self.parent_grant_id) if self.parent_grant_id else None,
            "chain_depth": self.chain_depth,
            "voting_instructions": {
                str(r): c.value for r, c in self.voting_instructions.items()
            },
            "max_votes_allowed": self.max_votes_allowed,
            "votes_cast": self.votes_cast,
            "status": self.status.value,
            "sub_delegated_to": self.sub_delegated_to,
            "revocation_reason": self.revocation_reason,
            "revoked_by": self.revoked_by,
            "revoked_at": self.revoked_at.isoformat() if self.revoked_at else None,
        }
