"""
Caller-input checks run before any scoring or state change.
"""

from __future__ import annotations

import math
from typing import Any

from backend_paypilot.analytics.risk_engine import SCORE_MAX, SCORE_MIN, TIERS
from backend_paypilot.core.exceptions import ValidationError


def validate_user_id(user_id: Any) -> str:
    """Return the stripped user id; raise ValidationError when missing or blank."""
    if user_id is None or not isinstance(user_id, str) or not user_id.strip():
        raise ValidationError("userId is required")
    return user_id.strip()


def require_finite(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{name} must be a number")
    if not math.isfinite(value):
        raise ValidationError(f"{name} must be a finite number")
    return value


def validate_transaction(amount: Any, balance: Any, category: Any, days_to_rent: Any) -> None:
    amount = require_finite("amount", amount)
    if amount < 0:
        raise ValidationError("amount must not be negative")
    require_finite("balance", balance)
    require_finite("daysToRent", days_to_rent)
    if not isinstance(category, str):
        raise ValidationError("category must be a string")


def validate_override_fields(risk_score: Any, decision: Any) -> tuple[int | None, str | None]:
    """riskScore and decision are optional; when given they must be in range / a known tier."""
    if risk_score is not None:
        score = require_finite("riskScore", risk_score)
        if score != int(score) or not SCORE_MIN <= score <= SCORE_MAX:
            raise ValidationError("riskScore must be an integer between 0 and 100")
        risk_score = int(score)
    if decision is not None:
        if not isinstance(decision, str) or decision.strip().upper() not in TIERS:
            raise ValidationError("decision must be one of ALLOW, WARN, BLOCK")
        decision = decision.strip().upper()
    return risk_score, decision
