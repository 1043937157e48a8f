"""Unit tests for the ProxyGrant domain model."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from src.domain.errors.proxy import InvalidProxyWindowError, SelfProxyError
from src.domain.errors.role import InvalidVotingWeightError
from src.domain.models.proxy_grant import (
    EffectiveWindow,
    ProxyGrant,
    ProxyScope,
    ProxyStatus,
)

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)
WINDOW = EffectiveWindow(NOW, NOW + timedelta(hours=2))


class TestEffectiveWindow:
    """Tests for EffectiveWindow."""

    def test_bounds_are_inclusive(self) -> None:
        assert WINDOW.contains(NOW)
        assert WINDOW.contains(NOW + timedelta(hours=2))
        assert not WINDOW.contains(NOW - timedelta(seconds=1))

    def test_elapsed_only_after_end(self) -> None:
        assert not WINDOW.elapsed(NOW + timedelta(hours=2))
        assert WINDOW.elapsed(NOW + timedelta(hours=2, seconds=1))

    def test_end_must_follow_start(self) -> None:
        with pytest.raises(InvalidProxyWindowError):
            EffectiveWindow(NOW, NOW)


class TestProxyScope:
    def test_unscoped_covers_everything(self) -> None:
        assert ProxyScope().covers(uuid4())

    def test_scoped_covers_listed_only(self) -> None:
        listed = uuid4()
        scope = ProxyScope(frozenset({listed}))

        assert scope.covers(listed)
        assert not scope.covers(uuid4())


class TestProxyGrant:
    """Tests for ProxyGrant invariants."""

    def test_root_grant_depth(self) -> None:
        grant = ProxyGrant.create(uuid4(), "alice", "bob", WINDOW, Decimal(1), created_at=NOW)

        assert grant.chain_depth == 1
        assert grant.parent_grant_id is None
        assert grant.status == ProxyStatus.ACTIVE

    def test_child_depth_follows_parent(self) -> None:
        parent = ProxyGrant.create(
            uuid4(), "alice", "bob", WINDOW, Decimal(1), can_sub_delegate=True
        )

        child = ProxyGrant.create(
            parent.meeting_id, "bob", "carol", WINDOW, Decimal(1), parent=parent
        )

        assert child.chain_depth == 2
        assert child.parent_grant_id == parent.grant_id

    def test_self_proxy_rejected(self) -> None:
        with pytest.raises(SelfProxyError):
            ProxyGrant.create(uuid4(), "alice", "alice", WINDOW, Decimal(1))

    def test_weight_must_be_positive(self) -> None:
        with pytest.raises(InvalidVotingWeightError):
            ProxyGrant.create(uuid4(), "alice", "bob", WINDOW, Decimal(0))

    def test_usage_limit(self) -> None:
        grant = ProxyGrant.create(
            uuid4(), "alice", "bob", WINDOW, Decimal(1), max_votes_allowed=2
        )
        grant.votes_cast = 2

        assert grant.limit_reached
        assert not grant.is_usable_at(NOW)

    def test_revoked_grant_not_usable(self) -> None:
        grant = ProxyGrant.create(uuid4(), "alice", "bob", WINDOW, Decimal(1))
        grant.status = ProxyStatus.REVOKED

        assert not grant.is_usable_at(NOW + timedelta(minutes=5))

    def test_to_dict_serializes_weight_as_string(self) -> None:
        grant = ProxyGrant.create(uuid4(), "alice", "bob", WINDOW, Decimal("0.5"))

        data = grant.to_dict()

        assert data["voting_weight"] == "0.5"
        assert data["resolution_ids"] is None
        assert data["status"] == "active"
