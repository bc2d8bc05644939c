"""
Evaluation orchestrator — the single entry point for scoring a proposed spend.

Flow per request:
  load user -> apply recovery (persist if changed) -> score -> decision policy
  -> [aiRequired: explanation, best-effort] -> result

Evaluation never creates a user: an unknown id scores with overrideCount=0 and
trustScore=100. A failing policy yields a DEGRADED result (WARN, "Policy engine
unavailable", aiRequired=False). A failing or slow explainer yields the fixed
fallback text. Persistence failures and invariant violations propagate.
"""

from __future__ import annotations

from concurrent.futures import Executor, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from typing import Any

from backend_paypilot.analytics.risk_engine import (
    SCORE_MAX,
    SCORE_MIN,
    TIERS,
    RiskResult,
    calculate_risk,
)
from backend_paypilot.analytics.trust_engine import apply_trust_recovery
from backend_paypilot.core.clock import Clock
from backend_paypilot.core.exceptions import (
    ExplanationUnavailable,
    InvariantViolation,
    PolicyUnavailable,
)
from backend_paypilot.database.models import DEFAULT_TRUST_SCORE, User
from backend_paypilot.database.user_store import UserRepository
from backend_paypilot.explainer.base import FALLBACK_EXPLANATION, ExplanationRequest, Explainer
from backend_paypilot.paypilot_logging import get_logger
from backend_paypilot.policy.base import DecisionPolicy, PolicyDecision
from backend_paypilot.services.validation import validate_transaction

logger = get_logger(__name__)

DEFAULT_EXPLAIN_TIMEOUT_SEC = 10.0
EXPLAINER_WORKERS = 4


@dataclass(frozen=True)
class EvaluationRequest:
    user_id: str | None
    amount: float
    balance: float
    category: str
    days_to_rent: float


@dataclass(frozen=True)
class EvaluationResult:
    risk_score: int
    reasons: list[str]
    tier: str
    decision: str
    message: str
    ai_required: bool
    trust_score: int
    override_count: int
    explanation: str | None = None
    degraded: bool = False
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "riskScore": self.risk_score,
            "reasons": list(self.reasons),
            "tier": self.tier,
            "decision": self.decision,
            "message": self.message,
            "aiRequired": self.ai_required,
            "explanation": self.explanation,
            "trustScore": self.trust_score,
            "overrideCount": self.override_count,
            "degraded": self.degraded,
            "error": self.error,
        }


@dataclass
class TrustSnapshot:
    trust_score: int = DEFAULT_TRUST_SCORE
    override_count: int = 0
    user: User | None = field(default=None, repr=False)


class EvaluationOrchestrator:
    def __init__(
        self,
        repository: UserRepository,
        policy: DecisionPolicy,
        explainer: Explainer,
        clock: Clock,
        *,
        explain_timeout_sec: float = DEFAULT_EXPLAIN_TIMEOUT_SEC,
        executor: Executor | None = None,
    ) -> None:
        self._repository = repository
        self._policy = policy
        self._explainer = explainer
        self._clock = clock
        self._explain_timeout_sec = explain_timeout_sec
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=EXPLAINER_WORKERS, thread_name_prefix="explainer"
        )

    def load_trust(self, user_id: str | None) -> TrustSnapshot:
        """Read trust state, applying and persisting quiet-period recovery first."""
        if not user_id:
            return TrustSnapshot()
        with self._repository.user_lock(user_id):
            user = self._repository.get_user(user_id)
            if user is None:
                return TrustSnapshot()
            refreshed = apply_trust_recovery(user, self._clock.now())
            if refreshed is not user:
                refreshed = self._repository.save_user(refreshed)
        return TrustSnapshot(
            trust_score=refreshed.trust_score,
            override_count=refreshed.override_count,
            user=refreshed,
        )

    def evaluate(self, request: EvaluationRequest) -> EvaluationResult:
        validate_transaction(request.amount, request.balance, request.category, request.days_to_rent)
        user_id = request.user_id.strip() if request.user_id else None

        snapshot = self.load_trust(user_id)
        risk = calculate_risk(
            amount=request.amount,
            balance=request.balance,
            category=request.category,
            override_count=snapshot.override_count,
            trust_score=snapshot.trust_score,
            days_to_rent=request.days_to_rent,
        )
        _check_risk_invariants(risk)

        try:
            policy = self._policy.decide(risk.risk_score)
        except PolicyUnavailable as e:
            logger.warning("policy_unavailable", user_id=user_id, risk_score=risk.risk_score, error=str(e))
            return self._degraded(risk, snapshot, str(e))
        except Exception as e:
            logger.exception("policy_failed", user_id=user_id, risk_score=risk.risk_score, error=str(e))
            return self._degraded(risk, snapshot, str(e))

        explanation = None
        if policy.ai_required:
            explanation = self._explain(
                ExplanationRequest(
                    risk_score=risk.risk_score,
                    decision=policy.decision,
                    trust_score=snapshot.trust_score,
                    override_count=snapshot.override_count,
                    reasons=list(risk.reasons),
                ),
                user_id,
            )

        logger.info(
            "evaluation_completed",
            user_id=user_id,
            risk_score=risk.risk_score,
            tier=risk.tier,
            decision=policy.decision,
            ai_required=policy.ai_required,
        )
        return EvaluationResult(
            risk_score=risk.risk_score,
            reasons=list(risk.reasons),
            tier=risk.tier,
            decision=policy.decision,
            message=policy.message,
            ai_required=policy.ai_required,
            trust_score=snapshot.trust_score,
            override_count=snapshot.override_count,
            explanation=explanation,
        )

    def _degraded(self, risk: RiskResult, snapshot: TrustSnapshot, error: str) -> EvaluationResult:
        fallback = PolicyDecision.degraded()
        return EvaluationResult(
            risk_score=risk.risk_score,
            reasons=list(risk.reasons),
            tier=risk.tier,
            decision=fallback.decision,
            message=fallback.message,
            ai_required=fallback.ai_required,
            trust_score=snapshot.trust_score,
            override_count=snapshot.override_count,
            degraded=True,
            error=error,
        )

    def _explain(self, request: ExplanationRequest, user_id: str | None) -> str:
        """Wait at most explain_timeout_sec; any failure becomes the fallback text."""
        future = self._executor.submit(self._explainer.explain, request)
        try:
            return future.result(timeout=self._explain_timeout_sec)
        except FutureTimeoutError:
            logger.warning("explanation_fallback", user_id=user_id, reason="timeout", timeout_sec=self._explain_timeout_sec)
        except ExplanationUnavailable as e:
            logger.warning("explanation_fallback", user_id=user_id, reason=str(e))
        except Exception as e:
            logger.exception("explanation_fallback", user_id=user_id, reason=str(e))
        return FALLBACK_EXPLANATION

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=False)


def _check_risk_invariants(risk: RiskResult) -> None:
    if not SCORE_MIN <= risk.risk_score <= SCORE_MAX:
        raise InvariantViolation(f"risk score {risk.risk_score} outside [{SCORE_MIN}, {SCORE_MAX}]")
    if risk.tier not in TIERS:
        raise InvariantViolation(f"unknown tier {risk.tier!r}")
