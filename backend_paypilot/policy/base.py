"""
Decision policy contract.

Given a risk score, an authority returns {decision, message, aiRequired}. It must
answer deterministically for the same score and never touch engine state.
Unavailability is reported by raising PolicyUnavailable.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from backend_paypilot.analytics.risk_engine import TIER_WARN, TIERS
from backend_paypilot.core.exceptions import PolicyUnavailable

DEGRADED_MESSAGE = "Policy engine unavailable"


@dataclass(frozen=True)
class PolicyDecision:
    decision: str
    message: str = ""
    ai_required: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"decision": self.decision, "message": self.message, "aiRequired": self.ai_required}

    @classmethod
    def from_payload(cls, payload: Any) -> PolicyDecision:
        """
        Parse a policy response body. decision is required and must be a known
        tier (case-insensitive); message defaults to "", aiRequired to False.
        """
        if not isinstance(payload, dict):
            raise PolicyUnavailable("Policy response is not a JSON object")
        decision = str(payload.get("decision") or "").strip().upper()
        if decision not in TIERS:
            raise PolicyUnavailable(f"Policy returned unknown decision {payload.get('decision')!r}")
        message = payload.get("message")
        ai_required = payload.get("aiRequired", False)
        if not isinstance(ai_required, bool):
            raise PolicyUnavailable("Policy aiRequired must be a boolean")
        return cls(decision=decision, message=str(message) if message is not None else "", ai_required=ai_required)

    @classmethod
    def degraded(cls) -> PolicyDecision:
        """Safe default used when the authority cannot be consulted."""
        return cls(decision=TIER_WARN, message=DEGRADED_MESSAGE, ai_required=False)


class DecisionPolicy(ABC):
    """Source of the final decision for a risk score."""

    @abstractmethod
    def decide(self, risk_score: int) -> PolicyDecision:
        """Return the decision for risk_score or raise PolicyUnavailable."""
        ...

    def close(self) -> None:
        """Release any held resources."""
