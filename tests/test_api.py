"""
Pytest tests for the FastAPI surface (/risk/evaluate, /risk/override, /user/{id}, /health).

Uses the client fixture: injected services over a temporary SQLite DB, in-process rules, stub explainer.
"""

from __future__ import annotations

from conftest import StubPolicy

from backend_paypilot.core.exceptions import PersistenceFailure, PolicyUnavailable

EVALUATE_BODY = {"userId": "alice", "amount": 400, "balance": 1000, "category": "shopping", "daysToRent": 3}


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_evaluate_block_with_explanation(client):
    r = client.post("/risk/evaluate", json=EVALUATE_BODY)
    assert r.status_code == 200
    data = r.json()
    assert data["riskScore"] == 70
    assert data["decision"] == "BLOCK"
    assert data["reasons"] == [
        "High spend compared to balance",
        "Discretionary spending category",
        "Payment close to rent due date",
    ]
    assert data["aiRequired"] is True
    assert data["explanation"] == "Calm explanation."
    assert data["trustScore"] == 100
    assert data["overrideCount"] == 0
    assert data["degraded"] is False


def test_evaluate_does_not_create_user(client):
    client.post("/risk/evaluate", json=EVALUATE_BODY)
    assert client.get("/user/alice").status_code == 404


def test_evaluate_policy_outage_is_degraded_success(client, services):
    services.orchestrator._policy = StubPolicy(error=PolicyUnavailable("Policy engine failed with status 502"))
    r = client.post("/risk/evaluate", json=EVALUATE_BODY)
    assert r.status_code == 200
    data = r.json()
    assert data["decision"] == "WARN"
    assert data["message"] == "Policy engine unavailable"
    assert data["aiRequired"] is False
    assert data["explanation"] is None
    assert data["degraded"] is True
    assert "502" in data["error"]


def test_evaluate_internal_fault_returns_degraded_payload(client, user_repository, monkeypatch):
    def _boom(user_id):
        raise PersistenceFailure("db down")

    monkeypatch.setattr(user_repository, "get_user", _boom)
    r = client.post("/risk/evaluate", json=EVALUATE_BODY)
    assert r.status_code == 500
    data = r.json()
    assert data["error"] == "db down"
    assert data["decision"] == "WARN"
    assert data["message"] == "Policy engine unavailable"
    assert data["aiRequired"] is False
    assert data["policy"]["decision"] == "WARN"


def test_evaluate_negative_amount_is_400(client):
    r = client.post("/risk/evaluate", json={**EVALUATE_BODY, "amount": -5})
    assert r.status_code == 400
    assert "amount" in r.json()["error"]


def test_evaluate_missing_field_is_400(client):
    body = dict(EVALUATE_BODY)
    body.pop("balance")
    r = client.post("/risk/evaluate", json=body)
    assert r.status_code == 400
    assert r.json()["error"] == "Invalid request body"


def test_override_then_profile(client):
    r = client.post("/risk/override", json={"userId": "alice", "riskScore": 70, "decision": "BLOCK"})
    assert r.status_code == 200
    assert r.json() == {"status": "override recorded", "userId": "alice", "trustScore": 95, "overrideCount": 1}

    client.post("/risk/override", json={"userId": "alice", "riskScore": 45, "decision": "WARN"})
    profile = client.get("/user/alice").json()
    assert profile["userId"] == "alice"
    assert profile["trustScore"] == 90
    assert profile["lastOverrideAt"] is not None
    assert [(o["riskScore"], o["decision"]) for o in profile["overrides"]] == [(70, "BLOCK"), (45, "WARN")]


def test_override_feeds_next_evaluation(client):
    for _ in range(2):
        client.post("/risk/override", json={"userId": "bob", "riskScore": 70, "decision": "BLOCK"})
    data = client.post("/risk/evaluate", json={**EVALUATE_BODY, "userId": "bob"}).json()
    # 25 + 15 + 30 + 20 (two overrides) - 5 (trust 90)
    assert data["riskScore"] == 85
    assert data["overrideCount"] == 2
    assert data["trustScore"] == 90


def test_override_missing_user_id_is_400(client):
    r = client.post("/risk/override", json={"riskScore": 70, "decision": "BLOCK"})
    assert r.status_code == 400
    assert r.json() == {"error": "userId is required"}


def test_override_processing_failure_is_500(client, user_repository, monkeypatch):
    def _boom(user):
        raise PersistenceFailure("disk full")

    monkeypatch.setattr(user_repository, "save_user", _boom)
    r = client.post("/risk/override", json={"userId": "carol", "riskScore": 70, "decision": "BLOCK"})
    assert r.status_code == 500
    assert r.json() == {"error": "disk full"}


def test_profile_unknown_user_is_404(client):
    r = client.get("/user/nobody")
    assert r.status_code == 404
    assert r.json() == {"error": "User not found"}


def test_profile_applies_recovery(client, clock):
    client.post("/risk/override", json={"userId": "dora", "riskScore": 70, "decision": "BLOCK"})
    clock.advance(days=31)
    profile = client.get("/user/dora").json()
    assert profile["trustScore"] == 100
    assert profile["lastOverrideAt"] is None
    assert len(profile["overrides"]) == 1
