"""
PayPilot analytics engine.

Pure scoring and trust-state transitions; no I/O.
Modules: risk_engine (transaction risk), trust_engine (trust decay and recovery).
"""

from backend_paypilot.analytics.risk_engine import RiskResult, calculate_risk, tier_for_score
from backend_paypilot.analytics.trust_engine import (
    apply_override,
    apply_trust_decay,
    apply_trust_recovery,
    days_since,
)

__all__ = [
    "RiskResult",
    "calculate_risk",
    "tier_for_score",
    "apply_override",
    "apply_trust_decay",
    "apply_trust_recovery",
    "days_since",
]
