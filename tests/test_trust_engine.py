"""
Pytest tests for trust decay and quiet-period recovery.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from backend_paypilot.analytics.trust_engine import (
    apply_override,
    apply_trust_decay,
    apply_trust_recovery,
    days_since,
)
from backend_paypilot.database.models import Override, User

NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)


def _user(trust_score=85, days_ago=None, **kwargs):
    last = NOW - timedelta(days=days_ago) if days_ago is not None else None
    return User(user_id="u1", trust_score=trust_score, last_override_at=last, **kwargs)


def test_recovery_after_31_quiet_days():
    user = _user(trust_score=85, days_ago=31)
    recovered = apply_trust_recovery(user, NOW)
    assert recovered.trust_score == 95
    assert recovered.last_override_at is None
    # input untouched
    assert user.trust_score == 85


def test_recovery_boundary_exactly_30_days_inclusive():
    recovered = apply_trust_recovery(_user(days_ago=30), NOW)
    assert recovered.trust_score == 95
    assert recovered.last_override_at is None


def test_no_recovery_one_millisecond_short():
    user = User(user_id="u1", trust_score=85, last_override_at=NOW - timedelta(days=30) + timedelta(milliseconds=1))
    assert apply_trust_recovery(user, NOW) is user


def test_recovery_capped_at_100():
    recovered = apply_trust_recovery(_user(trust_score=95, days_ago=45), NOW)
    assert recovered.trust_score == 100


def test_no_recovery_at_full_trust():
    user = _user(trust_score=100, days_ago=60)
    assert apply_trust_recovery(user, NOW) is user


def test_no_pending_cycle_or_absent_user_is_noop():
    user = _user(trust_score=60)
    assert apply_trust_recovery(user, NOW) is user
    assert apply_trust_recovery(None, NOW) is None


def test_recovery_fires_once_per_quiet_period():
    once = apply_trust_recovery(_user(trust_score=70, days_ago=90), NOW)
    twice = apply_trust_recovery(once, NOW + timedelta(days=90))
    assert once.trust_score == 80
    assert twice is once


def test_days_since_is_fractional():
    assert days_since(NOW - timedelta(hours=36), NOW) == pytest.approx(1.5)


def test_decay_floor():
    assert apply_trust_decay(100) == 95
    assert apply_trust_decay(3) == 0
    assert apply_trust_decay(0) == 0


def test_apply_override_appends_restarts_clock_and_decays():
    earlier = Override(date=NOW - timedelta(days=20), risk_score=70, decision="BLOCK")
    user = _user(trust_score=95, days_ago=20, overrides=[earlier])
    latest = Override(date=NOW, risk_score=45, decision="WARN")
    updated = apply_override(user, latest)
    assert updated.overrides == [earlier, latest]
    assert updated.last_override_at == NOW
    assert updated.trust_score == 90
    assert user.overrides == [earlier]


def test_n_overrides_without_recovery():
    user = User(user_id="u1")
    for n in range(1, 25):
        user = apply_override(user, Override(date=NOW, risk_score=50, decision="WARN"))
        assert user.trust_score == max(100 - 5 * n, 0)
