"""
Explainer contract and request payload.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

FALLBACK_EXPLANATION = "This transaction carries financial risk based on your recent activity."


@dataclass(frozen=True)
class ExplanationRequest:
    risk_score: int
    decision: str
    trust_score: int
    override_count: int
    reasons: list[str] = field(default_factory=list)


class Explainer(ABC):
    @abstractmethod
    def explain(self, request: ExplanationRequest) -> str:
        """Return non-empty explanation text or raise ExplanationUnavailable."""
        ...

    def close(self) -> None:
        """Release any held resources."""
