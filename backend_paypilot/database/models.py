"""
Domain models for the trust state.

User records and their append-only override history. Used by the repository
layer and the engines; no ORM coupling so stores stay swappable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

DEFAULT_TRUST_SCORE = 100
TRUST_SCORE_MIN = 0
TRUST_SCORE_MAX = 100


@dataclass(frozen=True)
class Override:
    """One recorded decision the user proceeded against. Never mutated."""

    date: datetime
    risk_score: int | None
    decision: str | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "riskScore": self.risk_score,
            "decision": self.decision,
        }


@dataclass
class User:
    """Per-user trust state."""

    user_id: str
    trust_score: int = DEFAULT_TRUST_SCORE
    last_override_at: datetime | None = None
    """None means no pending decay/recovery cycle."""
    overrides: list[Override] = field(default_factory=list)
    """Chronological; insertion order is the only order."""
    version: int = 0
    """Stored version this record was loaded at; 0 for a record never saved."""

    @property
    def override_count(self) -> int:
        return len(self.overrides)

    def to_dict(self) -> dict[str, Any]:
        return {
            "userId": self.user_id,
            "trustScore": self.trust_score,
            "lastOverrideAt": self.last_override_at.isoformat() if self.last_override_at else None,
            "overrides": [o.to_dict() for o in self.overrides],
        }
