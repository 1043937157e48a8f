"""Proxy grant event payloads."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from uuid import UUID

PROXY_GRANTED_EVENT_TYPE: str = "proxy.grant.created"
PROXY_REVOKED_EVENT_TYPE: str = "proxy.grant.revoked"
PROXY_EXPIRED_EVENT_TYPE: str = "proxy.grant.expired"
PROXY_EXECUTED_EVENT_TYPE: str = "proxy.grant.executed"


@dataclass(frozen=True, eq=True)
class ProxyGrantedEvent:
    """Payload emitted when a grant is created.

    `superseded_grant_id` is set when the grant auto-revoked a prior one.
    """

    grant_id: UUID
    grantor: str
    holder: str
    chain_depth: int
    parent_grant_id: UUID | None
    superseded_grant_id: UUID | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "grant_id": str(self.grant_id),
            "grantor": self.grantor,
            "holder": self.holder,
            "chain_depth": self.chain_depth,
            "parent_grant_id": str(self.parent_grant_id) if self.parent_grant_id else None,
            "superseded_grant_id": (
                str(self.superseded_grant_id) if self.superseded_grant_id else None
            ),
        }


@dataclass(frozen=True, eq=True)
class ProxyRevokedEvent:
    """Payload emitted when a grant is revoked explicitly or superseded."""

    grant_id: UUID
    grantor: str
    revoked_by: str
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "grant_id": str(self.grant_id),
            "grantor": self.grantor,
            "revoked_by": self.revoked_by,
            "reason": self.reason,
        }


@dataclass(frozen=True, eq=True)
class ProxyStatusChangedEvent:
    """Payload emitted when a grant expires or is fully executed."""

    grant_id: UUID
    grantor: str
    status: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "grant_id": str(self.grant_id),
            "grantor": self.grantor,
            "status": self.status,
        }
