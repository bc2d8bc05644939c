"""
Trust engine: per-user trust score transitions.

Decay: every recorded override costs 5 points (floor 0) and restarts the
recovery clock. Recovery: once 30 days (inclusive) have passed since the last
override and the score is below 100, add 10 points (ceiling 100) and clear the
clock, so one quiet period recovers once.

Functions return new User objects and never touch storage; callers persist.
"""

from __future__ import annotations

import dataclasses
from datetime import datetime, timedelta

from backend_paypilot.database.models import (
    TRUST_SCORE_MAX,
    TRUST_SCORE_MIN,
    Override,
    User,
)
from backend_paypilot.paypilot_logging import get_logger

logger = get_logger(__name__)

MS_PER_DAY = 86_400_000
RECOVERY_QUIET_DAYS = 30
RECOVERY_POINTS = 10
DECAY_POINTS = 5

_ONE_MS = timedelta(milliseconds=1)


def days_since(earlier: datetime, now: datetime) -> float:
    """Fractional days between two instants, from whole-millisecond difference."""
    elapsed_ms = (now - earlier) // _ONE_MS
    return elapsed_ms / MS_PER_DAY


def apply_trust_decay(trust_score: int) -> int:
    return max(trust_score - DECAY_POINTS, TRUST_SCORE_MIN)


def apply_trust_recovery(user: User | None, now: datetime) -> User | None:
    """
    Return the user with quiet-period recovery applied.

    The same object comes back when nothing changes (absent user, no pending
    cycle, window not elapsed, or already at 100); a new object otherwise.
    """
    if user is None or user.last_override_at is None:
        return user

    elapsed_days = days_since(user.last_override_at, now)
    if elapsed_days >= RECOVERY_QUIET_DAYS and user.trust_score < TRUST_SCORE_MAX:
        recovered = min(user.trust_score + RECOVERY_POINTS, TRUST_SCORE_MAX)
        logger.info(
            "trust_recovered",
            user_id=user.user_id,
            trust_before=user.trust_score,
            trust_after=recovered,
            days_since_override=round(elapsed_days, 3),
        )
        return dataclasses.replace(user, trust_score=recovered, last_override_at=None)
    return user


def apply_override(user: User, override: Override) -> User:
    """
    Append the override, restart the recovery clock at its date and decay trust.

    A pending recovery window is discarded: the most recent override always wins.
    """
    return dataclasses.replace(
        user,
        overrides=[*user.overrides, override],
        last_override_at=override.date,
        trust_score=apply_trust_decay(user.trust_score),
    )
