"""Unit tests for the governance API routes.

Drives a meeting through the HTTP surface on the in-memory dependency
wiring and checks that domain rejections surface as problem details.
"""

from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from src.api.dependencies.governance import reset_governance_dependencies
from src.api.main import app

CHAIR = "chair-1"


@pytest.fixture
def client() -> TestClient:
    """Test client over fresh singletons. The lifespan is not entered."""
    reset_governance_dependencies()
    yield TestClient(app, raise_server_exceptions=False)
    reset_governance_dependencies()


def _open_meeting(client: TestClient, quorum_required: int = 1) -> dict[str, Any]:
    response = client.post(
        "/v1/meetings",
        json={
            "organization_id": "org-acme",
            "title": "Board meeting",
            "controller": CHAIR,
            "quorum_required": quorum_required,
        },
    )
    assert response.status_code == 201
    return response.json()


def _advance_to_voting(client: TestClient, instance_id: str) -> None:
    for index in range(6):
        if index == 3:
            response = client.post(
                f"/v1/workflows/{instance_id}/quorum",
                json={"attendance_count": 2, "recorded_by": CHAIR},
            )
            assert response.status_code == 200
        response = client.post(
            f"/v1/workflows/{instance_id}/advance",
            json={"requested_by": CHAIR, "expected_stage_index": index},
        )
        assert response.status_code == 200, response.json()


def _assign_voter(client: TestClient, meeting_id: str, user_id: str) -> None:
    response = client.post(
        f"/v1/meetings/{meeting_id}/roles",
        json={"user_id": user_id, "role_tag": "board_member", "voting_weight": "1.0"},
    )
    assert response.status_code == 201


class TestHealth:
    def test_health(self, client: TestClient) -> None:
        response = client.get("/v1/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["proxy_expiry_running"] is False

    def test_correlation_id_echoed(self, client: TestClient) -> None:
        response = client.get("/v1/health", headers={"X-Correlation-ID": "req-9"})

        assert response.headers["X-Correlation-ID"] == "req-9"


class TestMeetingRoutes:
    """Tests for meeting and workflow endpoints."""

    def test_open_meeting(self, client: TestClient) -> None:
        body = _open_meeting(client)

        assert body["meeting"]["status"] == "scheduled"
        assert body["workflow"]["current_stage"] == "pre_meeting"
        assert body["workflow"]["status"] == "not_started"

    def test_unknown_meeting_is_404(self, client: TestClient) -> None:
        response = client.get(f"/v1/meetings/{uuid4()}")

        assert response.status_code == 404
        assert response.json()["detail"]["kind"] == "NotFound"

    def test_delete_meeting_is_405(self, client: TestClient) -> None:
        meeting_id = _open_meeting(client)["meeting"]["meeting_id"]

        response = client.delete(f"/v1/meetings/{meeting_id}")

        assert response.status_code == 405
        assert response.json()["detail"]["kind"] == "DeletionProhibited"

    def test_non_controller_is_403(self, client: TestClient) -> None:
        instance_id = _open_meeting(client)["workflow"]["instance_id"]

        response = client.post(
            f"/v1/workflows/{instance_id}/advance", json={"requested_by": "mallory"}
        )

        assert response.status_code == 403
        assert response.json()["detail"]["kind"] == "NotController"

    def test_stale_stage_index_is_409(self, client: TestClient) -> None:
        instance_id = _open_meeting(client)["workflow"]["instance_id"]
        client.post(f"/v1/workflows/{instance_id}/advance", json={"requested_by": CHAIR})

        response = client.post(
            f"/v1/workflows/{instance_id}/advance",
            json={"requested_by": CHAIR, "expected_stage_index": 0},
        )

        assert response.status_code == 409
        assert response.json()["detail"]["kind"] == "StaleWorkflowState"

    def test_quorum_blocks_leaving_quorum_check(self, client: TestClient) -> None:
        instance_id = _open_meeting(client, quorum_required=3)["workflow"]["instance_id"]
        for _ in range(3):
            client.post(
                f"/v1/workflows/{instance_id}/advance", json={"requested_by": CHAIR}
            )

        response = client.post(
            f"/v1/workflows/{instance_id}/advance", json={"requested_by": CHAIR}
        )

        assert response.status_code == 409
        detail = response.json()["detail"]
        assert detail["kind"] == "QuorumNotMet"
        assert detail["quorum_required"] == 3
        assert detail["type"] == "urn:governance:error:quorum-not-met"

    def test_transitions_listed_in_order(self, client: TestClient) -> None:
        instance_id = _open_meeting(client)["workflow"]["instance_id"]
        client.post(f"/v1/workflows/{instance_id}/advance", json={"requested_by": CHAIR})

        response = client.get(f"/v1/workflows/{instance_id}/transitions")

        transitions = response.json()["transitions"]
        assert [t["to_stage"] for t in transitions] == ["opening"]

    def test_malformed_request_is_422(self, client: TestClient) -> None:
        response = client.post("/v1/meetings", json={"title": "missing fields"})

        assert response.status_code == 422


class TestRoleRoutes:
    """Tests for role assignment and hand-over endpoints."""

    def test_substitute_carries_weight_until_restored(self, client: TestClient) -> None:
        meeting_id = _open_meeting(client)["meeting"]["meeting_id"]
        role = client.post(
            f"/v1/meetings/{meeting_id}/roles",
            json={"user_id": "tom", "role_tag": "treasurer", "voting_weight": "2.0"},
        ).json()
        base = f"/v1/meetings/{meeting_id}/roles"

        response = client.post(
            f"{base}/{role['role_id']}/substitute",
            json={"user_id": "sam", "reason": "travelling"},
        )
        weight = client.get(f"{base}/users/sam/weight").json()
        restored = client.post(f"{base}/{role['role_id']}/restore")

        assert response.status_code == 200
        assert response.json()["status"] == "substituted"
        assert response.json()["substituted_by"] == "sam"
        assert weight["eligible"] is True
        assert weight["weight"] == "2.0"
        assert restored.json()["status"] == "active"
        assert restored.json()["substituted_by"] is None

    def test_handing_over_twice_is_409(self, client: TestClient) -> None:
        meeting_id = _open_meeting(client)["meeting"]["meeting_id"]
        base = f"/v1/meetings/{meeting_id}/roles"
        role = client.post(base, json={"user_id": "ann", "role_tag": "chair"}).json()
        client.post(f"{base}/{role['role_id']}/delegate", json={"user_id": "vic"})

        response = client.post(
            f"{base}/{role['role_id']}/substitute", json={"user_id": "sam"}
        )

        assert response.status_code == 409
        assert response.json()["detail"]["kind"] == "InvalidRoleTransition"


class TestProxyRoutes:
    """Tests for proxy endpoints."""

    def test_grant_and_resolve_holder(self, client: TestClient) -> None:
        meeting_id = _open_meeting(client)["meeting"]["meeting_id"]
        now = datetime.now(timezone.utc)

        response = client.post(
            f"/v1/meetings/{meeting_id}/proxies",
            json={
                "grantor": "alice",
                "holder": "bob",
                "effective_from": (now - timedelta(minutes=5)).isoformat(),
                "effective_until": (now + timedelta(hours=2)).isoformat(),
            },
        )
        assert response.status_code == 201

        holder = client.get(f"/v1/meetings/{meeting_id}/proxies/holders/alice")

        assert holder.status_code == 200
        assert holder.json()["holder"] == "bob"
        assert holder.json()["delegated"] is True

    def test_self_proxy_is_422(self, client: TestClient) -> None:
        meeting_id = _open_meeting(client)["meeting"]["meeting_id"]
        now = datetime.now(timezone.utc)

        response = client.post(
            f"/v1/meetings/{meeting_id}/proxies",
            json={
                "grantor": "alice",
                "holder": "alice",
                "effective_from": now.isoformat(),
                "effective_until": (now + timedelta(hours=1)).isoformat(),
            },
        )

        assert response.status_code == 422
        assert response.json()["detail"]["kind"] == "SelfProxy"

    def test_expire_sweep_with_nothing_to_expire(self, client: TestClient) -> None:
        response = client.post("/v1/proxies/expire-sweep")

        assert response.status_code == 200
        assert response.json()["expired_grant_ids"] == []


class TestVotingRoutes:
    """End to end vote over HTTP."""

    def test_vote_and_close(self, client: TestClient) -> None:
        opened = _open_meeting(client)
        meeting_id = opened["meeting"]["meeting_id"]
        instance_id = opened["workflow"]["instance_id"]
        _assign_voter(client, meeting_id, "alice")
        _assign_voter(client, meeting_id, "bob")
        _advance_to_voting(client, instance_id)
        resolution = client.post(
            f"/v1/meetings/{meeting_id}/resolutions",
            json={"title": "Approve budget", "text": "Resolved.", "proposer": "alice"},
        ).json()
        assert resolution["resolution_number"] == "R-001"

        session = client.post(
            "/v1/voting-sessions",
            json={
                "meeting_id": meeting_id,
                "workflow_instance_id": instance_id,
                "items": [{"resolution_id": resolution["resolution_id"]}],
                "opened_by": CHAIR,
            },
        )
        assert session.status_code == 201, session.json()
        session_id = session.json()["session_id"]
        assert session.json()["status"] == "open"
        assert session.json()["eligible_voter_count"] == 2
        item_id = session.json()["item_ids"][0]

        ballots_url = f"/v1/voting-sessions/{session_id}/items/{item_id}/ballots"
        assert client.post(ballots_url, json={"voter_id": "alice", "choice": "for"}).status_code == 201
        duplicate = client.post(ballots_url, json={"voter_id": "alice", "choice": "against"})
        assert duplicate.status_code == 409
        assert duplicate.json()["detail"]["kind"] == "DuplicateVote"
        outsider = client.post(ballots_url, json={"voter_id": "mallory", "choice": "for"})
        assert outsider.status_code == 403
        assert outsider.json()["detail"]["kind"] == "Ineligible"

        locked = client.post(
            f"/v1/workflows/{instance_id}/advance", json={"requested_by": CHAIR}
        )
        assert locked.status_code == 409
        assert locked.json()["detail"]["kind"] == "StageLocked"

        closed = client.post(
            f"/v1/voting-sessions/{session_id}/close", json={"actor": CHAIR}
        )
        assert closed.status_code == 200
        outcome = closed.json()["outcomes"][0]
        assert outcome["passed"] is True
        assert outcome["voters_participated"] == 1

        decided = client.get(f"/v1/resolutions/{resolution['resolution_id']}")
        assert decided.json()["status"] == "passed"

    def test_open_session_outside_voting_stage_is_409(self, client: TestClient) -> None:
        opened = _open_meeting(client)
        meeting_id = opened["meeting"]["meeting_id"]
        resolution = client.post(
            f"/v1/meetings/{meeting_id}/resolutions",
            json={"title": "Approve budget", "text": "Resolved.", "proposer": "alice"},
        ).json()

        response = client.post(
            "/v1/voting-sessions",
            json={
                "meeting_id": meeting_id,
                "workflow_instance_id": opened["workflow"]["instance_id"],
                "items": [{"resolution_id": resolution["resolution_id"]}],
                "opened_by": CHAIR,
            },
        )

        assert response.status_code == 409
        assert response.json()["detail"]["kind"] == "InvalidStage"
