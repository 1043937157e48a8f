"""Unit tests for audit event envelopes and payloads."""

from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from src.domain.events.governance_event import (
    GOVERNANCE_EVENT_SCHEMA_VERSION,
    GovernanceEvent,
)
from src.domain.events.proxy import PROXY_GRANTED_EVENT_TYPE, ProxyGrantedEvent
from src.domain.events.voting import BallotCastEvent
from src.domain.models.ballot import Ballot
from src.domain.models.voting_session import AnonymityLevel, VoteChoice

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


def _proxy_ballot() -> Ballot:
    return Ballot.create(
        session_id=uuid4(),
        session_item_id=uuid4(),
        voter_id="bob",
        choice=VoteChoice.AGAINST,
        own_weight=Decimal(1),
        proxied={"alice": (Decimal(1), uuid4())},
        sequence=3,
        round=1,
        cast_at=NOW,
    )


class TestGovernanceEvent:
    """Tests for the GovernanceEvent envelope."""

    def test_create_serializes_payload(self) -> None:
        meeting_id = uuid4()
        grant_id = uuid4()
        payload = ProxyGrantedEvent(
            grant_id=grant_id,
            grantor="alice",
            holder="bob",
            chain_depth=1,
            parent_grant_id=None,
            superseded_grant_id=None,
        )

        event = GovernanceEvent.create(
            PROXY_GRANTED_EVENT_TYPE, meeting_id, payload, NOW, correlation_id="req-1"
        )

        assert event.payload["grant_id"] == str(grant_id)
        assert event.payload["parent_grant_id"] is None
        assert event.schema_version == GOVERNANCE_EVENT_SCHEMA_VERSION
        data = event.to_dict()
        assert data["event_type"] == "proxy.grant.created"
        assert data["meeting_id"] == str(meeting_id)
        assert data["correlation_id"] == "req-1"
        assert data["occurred_at"] == NOW.isoformat()

    def test_envelope_is_immutable(self) -> None:
        event = GovernanceEvent(
            event_id=uuid4(), event_type="x", meeting_id=uuid4(), occurred_at=NOW
        )

        with pytest.raises(AttributeError):
            event.event_type = "y"  # type: ignore[misc]


class TestBallotCastEvent:
    """Voter identity appears in ballot events for public sessions only."""

    def test_public_includes_voter(self) -> None:
        data = BallotCastEvent.from_ballot(_proxy_ballot(), AnonymityLevel.PUBLIC).to_dict()

        assert data["voter_id"] == "bob"
        assert data["cast_as_proxy_for"] == ["alice"]
        assert data["represented_count"] == 2
        assert data["weight"] == "2"
        assert data["sequence"] == 3

    @pytest.mark.parametrize(
        "level",
        [AnonymityLevel.ANONYMOUS, AnonymityLevel.SECRET, AnonymityLevel.CONFIDENTIAL],
    )
    def test_non_public_omits_voter(self, level: AnonymityLevel) -> None:
        event = BallotCastEvent.from_ballot(_proxy_ballot(), level)
        data = event.to_dict()

        assert set(data) == {"ballot_id", "session_id", "session_item_id", "choice", "round"}
        assert data["choice"] == "against"
        assert "bob" not in repr(event)
