"""
Service container: external clients and engine services built once per process.

The lifespan builds it from settings and closes it on shutdown; tests pass a
pre-built container to create_app().
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx
from fastapi import Request

from backend_paypilot.config.settings import POLICY_MODE_RULES, Settings
from backend_paypilot.core.clock import Clock, SystemClock
from backend_paypilot.database.user_store import UserRepository, get_user_repository
from backend_paypilot.explainer.base import Explainer
from backend_paypilot.explainer.gemini import GeminiExplainer, build_gemini_client
from backend_paypilot.paypilot_logging import get_logger
from backend_paypilot.policy.base import DecisionPolicy
from backend_paypilot.policy.rules import RuleDecisionPolicy
from backend_paypilot.policy.webhook import WebhookDecisionPolicy
from backend_paypilot.services.evaluation import EvaluationOrchestrator
from backend_paypilot.services.override_service import OverrideRecorder

logger = get_logger(__name__)


@dataclass
class AppServices:
    repository: UserRepository
    policy: DecisionPolicy
    explainer: Explainer
    orchestrator: EvaluationOrchestrator
    recorder: OverrideRecorder

    def close(self) -> None:
        self.orchestrator.close()
        self.policy.close()
        self.explainer.close()
        self.repository.close()


def build_policy(settings: Settings) -> DecisionPolicy:
    if settings.policy_mode == POLICY_MODE_RULES:
        return RuleDecisionPolicy()
    client = httpx.Client(timeout=settings.policy_timeout_sec)
    return WebhookDecisionPolicy(client, settings.policy_webhook_url)


def build_services(settings: Settings, clock: Clock | None = None) -> AppServices:
    clock = clock or SystemClock()
    repository = get_user_repository(settings.database_url)
    policy = build_policy(settings)
    explainer = GeminiExplainer(
        build_gemini_client(settings.gemini_api_key, settings.explainer_timeout_sec),
        model=settings.gemini_model,
    )
    orchestrator = EvaluationOrchestrator(
        repository,
        policy,
        explainer,
        clock,
        explain_timeout_sec=settings.explainer_timeout_sec,
    )
    logger.info(
        "services_built",
        policy_mode=settings.policy_mode,
        explainer_enabled=bool(settings.gemini_api_key),
    )
    return AppServices(
        repository=repository,
        policy=policy,
        explainer=explainer,
        orchestrator=orchestrator,
        recorder=OverrideRecorder(repository, clock),
    )


def get_services(request: Request) -> AppServices:
    """Dependency: the app-scoped service container."""
    return request.app.state.services
