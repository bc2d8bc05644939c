"""
Risk engine: additive rule scoring for a proposed spend.

Each rule adds (or removes) a fixed weight and a human-readable reason. Rules are
independent and always evaluated in the same order, so the reasons list order is
stable. Score is clamped to 0-100, then mapped to ALLOW / WARN / BLOCK.

Inputs must already be validated (finite numbers, non-negative amount).
"""

from __future__ import annotations

from dataclasses import dataclass, field

from backend_paypilot.paypilot_logging import get_logger

logger = get_logger(__name__)

SCORE_MIN = 0
SCORE_MAX = 100

HIGH_SPEND_RATIO = 0.3
DISCRETIONARY_CATEGORY = "shopping"
RENT_PROXIMITY_DAYS = 7
OVERRIDE_COUNT_THRESHOLD = 1
LOW_TRUST_BELOW = 50
HIGH_TRUST_ABOVE = 80
FULL_TRUST = 100

HIGH_SPEND_WEIGHT = 25
DISCRETIONARY_WEIGHT = 15
RENT_PROXIMITY_WEIGHT = 30
MULTIPLE_OVERRIDES_WEIGHT = 20
LOW_TRUST_WEIGHT = 10
HIGH_TRUST_WEIGHT = -5

REASON_HIGH_SPEND = "High spend compared to balance"
REASON_DISCRETIONARY = "Discretionary spending category"
REASON_RENT_PROXIMITY = "Payment close to rent due date"
REASON_MULTIPLE_OVERRIDES = "Multiple recent overrides"
REASON_LOW_TRUST = "Low trust due to past overrides"
REASON_HIGH_TRUST = "High trust due to responsible past behavior"

TIER_ALLOW = "ALLOW"
TIER_WARN = "WARN"
TIER_BLOCK = "BLOCK"
TIERS = (TIER_ALLOW, TIER_WARN, TIER_BLOCK)

BLOCK_THRESHOLD = 70
WARN_THRESHOLD = 40


@dataclass(frozen=True)
class RiskResult:
    risk_score: int
    tier: str
    reasons: list[str] = field(default_factory=list)


def tier_for_score(score: int) -> str:
    """Lower bound of each tier is inclusive: >=70 BLOCK, >=40 WARN, else ALLOW."""
    if score >= BLOCK_THRESHOLD:
        return TIER_BLOCK
    if score >= WARN_THRESHOLD:
        return TIER_WARN
    return TIER_ALLOW


def calculate_risk(
    amount: float,
    balance: float,
    category: str,
    override_count: int,
    trust_score: int,
    days_to_rent: float,
) -> RiskResult:
    """
    Score a transaction against balance, category, rent timing and behavioral history.

    Rule 1 compares amount to 30% of balance multiplicatively, so a zero balance
    only triggers it for a positive amount. Returns RiskResult(risk_score, tier, reasons).
    """
    score = 0
    reasons: list[str] = []

    if amount > HIGH_SPEND_RATIO * balance:
        score += HIGH_SPEND_WEIGHT
        reasons.append(REASON_HIGH_SPEND)

    if category == DISCRETIONARY_CATEGORY:
        score += DISCRETIONARY_WEIGHT
        reasons.append(REASON_DISCRETIONARY)

    if days_to_rent <= RENT_PROXIMITY_DAYS:
        score += RENT_PROXIMITY_WEIGHT
        reasons.append(REASON_RENT_PROXIMITY)

    if override_count > OVERRIDE_COUNT_THRESHOLD:
        score += MULTIPLE_OVERRIDES_WEIGHT
        reasons.append(REASON_MULTIPLE_OVERRIDES)

    # Trust adjustment
    if trust_score < LOW_TRUST_BELOW:
        score += LOW_TRUST_WEIGHT
        reasons.append(REASON_LOW_TRUST)

    # Full trust is the neutral baseline; the credit applies strictly between 80 and 100.
    if HIGH_TRUST_ABOVE < trust_score < FULL_TRUST:
        score += HIGH_TRUST_WEIGHT
        reasons.append(REASON_HIGH_TRUST)

    score = max(SCORE_MIN, min(SCORE_MAX, score))
    tier = tier_for_score(score)

    logger.debug(
        "risk_engine_result",
        score=score,
        tier=tier,
        reasons=reasons,
        override_count=override_count,
        trust_score=trust_score,
    )
    return RiskResult(risk_score=score, tier=tier, reasons=reasons)
