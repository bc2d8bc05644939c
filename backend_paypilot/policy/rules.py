"""
In-process decision rules: decision follows the risk tier.

Used when no remote rule service is configured (POLICY_MODE=rules) and in tests.
"""

from __future__ import annotations

from backend_paypilot.analytics.risk_engine import TIER_ALLOW, TIER_BLOCK, TIER_WARN, tier_for_score
from backend_paypilot.policy.base import DecisionPolicy, PolicyDecision

TIER_MESSAGES = {
    TIER_ALLOW: "Transaction looks safe to proceed.",
    TIER_WARN: "This transaction carries some risk. Review it before proceeding.",
    TIER_BLOCK: "This transaction is high risk and has been blocked.",
}


class RuleDecisionPolicy(DecisionPolicy):
    def decide(self, risk_score: int) -> PolicyDecision:
        tier = tier_for_score(risk_score)
        return PolicyDecision(
            decision=tier,
            message=TIER_MESSAGES[tier],
            ai_required=tier in (TIER_WARN, TIER_BLOCK),
        )
