"""
Pytest fixtures for PayPilot tests. Uses a temporary SQLite DB for user trust state.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from backend_paypilot.core.clock import FixedClock
from backend_paypilot.core.exceptions import ExplanationUnavailable, PolicyUnavailable
from backend_paypilot.explainer.base import ExplanationRequest, Explainer
from backend_paypilot.policy.base import DecisionPolicy, PolicyDecision
from backend_paypilot.policy.rules import RuleDecisionPolicy

START = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


class StubPolicy(DecisionPolicy):
    """Returns a fixed decision (or raises) and records the scores it was asked about."""

    def __init__(self, decision: PolicyDecision | None = None, error: Exception | None = None) -> None:
        self.decision = decision or PolicyDecision(decision="WARN", message="Be careful", ai_required=True)
        self.error = error
        self.calls: list[int] = []

    def decide(self, risk_score: int) -> PolicyDecision:
        self.calls.append(risk_score)
        if self.error is not None:
            raise self.error
        return self.decision


class StubExplainer(Explainer):
    def __init__(self, text: str = "Calm explanation.", error: Exception | None = None) -> None:
        self.text = text
        self.error = error
        self.requests: list[ExplanationRequest] = []

    def explain(self, request: ExplanationRequest) -> str:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def clock():
    return FixedClock(START)


@pytest.fixture
def user_repository(tmp_path):
    """Fresh SQLite-backed repository per test."""
    from backend_paypilot.database.user_store import get_user_repository

    repository = get_user_repository(f"sqlite:///{tmp_path / 'paypilot.db'}")
    yield repository
    repository.close()


@pytest.fixture
def rule_policy():
    return RuleDecisionPolicy()


@pytest.fixture
def stub_explainer():
    return StubExplainer()


@pytest.fixture
def recorder(user_repository, clock):
    from backend_paypilot.services.override_service import OverrideRecorder

    return OverrideRecorder(user_repository, clock)


@pytest.fixture
def make_orchestrator(user_repository, clock, rule_policy, stub_explainer):
    """Factory: orchestrator over the temp DB with overridable policy/explainer."""
    from backend_paypilot.services.evaluation import EvaluationOrchestrator

    built = []

    def _make(policy=None, explainer=None, explain_timeout_sec=2.0):
        orchestrator = EvaluationOrchestrator(
            user_repository,
            policy or rule_policy,
            explainer or stub_explainer,
            clock,
            explain_timeout_sec=explain_timeout_sec,
        )
        built.append(orchestrator)
        return orchestrator

    yield _make
    for orchestrator in built:
        orchestrator.close()


@pytest.fixture
def orchestrator(make_orchestrator):
    return make_orchestrator()


@pytest.fixture
def services(user_repository, rule_policy, stub_explainer, orchestrator, recorder):
    from backend_paypilot.api_server.dependencies import AppServices

    return AppServices(
        repository=user_repository,
        policy=rule_policy,
        explainer=stub_explainer,
        orchestrator=orchestrator,
        recorder=recorder,
    )


@pytest.fixture
def client(services):
    """FastAPI TestClient over injected services (no network, temp DB)."""
    from fastapi.testclient import TestClient

    from backend_paypilot.api_server.server import create_app

    with TestClient(create_app(services)) as test_client:
        yield test_client
