"""Ballot domain model.

A Ballot is the single row an identity casts for one session item and
round. When the caster is the effective holder of proxies, the proxied
grantors are listed in `cast_as_proxy_for` and their weight is folded into
`weight`.

`proxy_instructions_followed` is None unless an instructed proxy covers the
ballot's resolution. It is False when the caster departed from at least one
instruction, in which case `instruction_override_reason` says why.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from src.domain.models.voting_session import VoteChoice


@dataclass(frozen=True)
class Ballot:
    """Immutable ballot record. Unique per (session_item_id, voter_id, round)."""

    ballot_id: UUID
    session_id: UUID
    session_item_id: UUID
    voter_id: str
    choice: VoteChoice
    weight: Decimal
    own_weight: Decimal
    cast_as_proxy_for: tuple[str, ...]
    proxy_grant_ids: tuple[UUID, ...]
    sequence: int
    round: int
    cast_at: datetime
    proxy_instructions_followed: bool | None = None
    instruction_override_reason: str | None = None

    @classmethod
    def create(
        cls,
        session_id: UUID,
        session_item_id: UUID,
        voter_id: str,
        choice: VoteChoice,
        own_weight: Decimal,
        proxied: dict[str, tuple[Decimal, UUID]],
        sequence: int,
        round: int,
        cast_at: datetime,
        proxy_instructions_followed: bool | None = None,
        instruction_override_reason: str | None = None,
    ) -> Ballot:
        """Build an aggregated ballot.

        Args:
            proxied: grantor -> (effective weight, grant id of the grantor's root grant).
        """
        grantors = tuple(sorted(proxied))
        weight = own_weight + sum((proxied[g][0] for g in grantors), Decimal(0))
        return cls(
            ballot_id=uuid4(),
            session_id=session_id,
            session_item_id=session_item_id,
            voter_id=voter_id,
            choice=choice,
            weight=weight,
            own_weight=own_weight,
            cast_as_proxy_for=grantors,
            proxy_grant_ids=tuple(proxied[g][1] for g in grantors),
            sequence=sequence,
            round=round,
            cast_at=cast_at,
            proxy_instructions_followed=proxy_instructions_followed,
            instruction_override_reason=instruction_override_reason,
        )

    @property
    def represented(self) -> tuple[str, ...]:
        """Every identity this ballot speaks for."""
        own = (self.voter_id,) if self.own_weight > 0 else ()
        return own + self.cast_as_proxy_for

    def to_dict(self, *, include_voter: bool = True) -> dict[str, Any]:
        """Serialize the ballot.

        Without the voter only the choice is disclosed: weight, sequence and
        cast time would let a reader match the ballot to its caster.
        """
        result: dict[str, Any] = {
            "ballot_id": str(self.ballot_id),
            "session_item_id": str(self.session_item_id),
            "choice": self.choice.value,
            "round": self.round,
        }
        if include_voter:
            result["weight"] = str(self.weight)
            result["sequence"] = self.sequence
            result["cast_at"] = self.cast_at.isoformat()
            result["voter_id"] = self.voter_id
            result["own_weight"] = str(self.own_weight)
            result["cast_as_proxy_for"] = list(self.cast_as_proxy_for)
            result["proxy_instructions_followed"] = self.proxy_instructions_followed
            result["instruction_override_reason"] = self.instruction_override_reason
        return result
