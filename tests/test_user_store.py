"""
Pytest tests for the SQLAlchemy user store (persistence, optimistic versioning, per-user locks).
"""

from __future__ import annotations

import dataclasses
import threading
from datetime import datetime, timezone

import pytest

from backend_paypilot.core.exceptions import ConcurrentUpdateError
from backend_paypilot.database.models import Override, User

WHEN = datetime(2024, 2, 10, 8, 30, tzinfo=timezone.utc)


def test_unknown_user_is_none(user_repository):
    assert user_repository.get_user("nobody") is None


def test_insert_and_load(user_repository):
    user = User(
        user_id="u1",
        trust_score=90,
        last_override_at=WHEN,
        overrides=[Override(date=WHEN, risk_score=70, decision="BLOCK")],
    )
    saved = user_repository.save_user(user)
    assert saved.version == 1
    loaded = user_repository.get_user("u1")
    assert loaded == saved
    assert loaded.overrides[0].date == WHEN


def test_update_bumps_version_and_appends(user_repository):
    saved = user_repository.save_user(User(user_id="u1"))
    more = dataclasses.replace(
        saved,
        trust_score=95,
        last_override_at=WHEN,
        overrides=[Override(date=WHEN, risk_score=50, decision="WARN")],
    )
    again = user_repository.save_user(more)
    assert again.version == 2
    assert again.trust_score == 95
    assert again.override_count == 1


def test_clearing_last_override_at(user_repository):
    saved = user_repository.save_user(User(user_id="u1", trust_score=80, last_override_at=WHEN))
    cleared = user_repository.save_user(dataclasses.replace(saved, trust_score=90, last_override_at=None))
    assert user_repository.get_user("u1").last_override_at is None
    assert cleared.trust_score == 90


def test_stale_version_rejected(user_repository):
    first = user_repository.save_user(User(user_id="u1"))
    user_repository.save_user(dataclasses.replace(first, trust_score=95))
    with pytest.raises(ConcurrentUpdateError):
        user_repository.save_user(dataclasses.replace(first, trust_score=50))
    assert user_repository.get_user("u1").trust_score == 95


def test_duplicate_create_rejected(user_repository):
    user_repository.save_user(User(user_id="u1"))
    with pytest.raises(ConcurrentUpdateError):
        user_repository.save_user(User(user_id="u1", trust_score=10))


def test_concurrent_overrides_same_user_are_serialized(recorder, user_repository):
    errors: list[Exception] = []

    def _worker():
        try:
            for _ in range(5):
                recorder.record_override("shared", 70, "BLOCK")
        except Exception as e:  # collected for the assertion below
            errors.append(e)

    threads = [threading.Thread(target=_worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    stored = user_repository.get_user("shared")
    assert stored.override_count == 20
    assert stored.trust_score == 0
    assert stored.version == 20


def test_millisecond_columns_are_64_bit_on_postgresql():
    from sqlalchemy.dialects import postgresql
    from sqlalchemy.schema import CreateTable

    from backend_paypilot.database.user_store import OverrideRow, UserRow, to_epoch_ms

    users_ddl = str(CreateTable(UserRow.__table__).compile(dialect=postgresql.dialect()))
    overrides_ddl = str(CreateTable(OverrideRow.__table__).compile(dialect=postgresql.dialect()))
    assert "last_override_at_ms BIGINT" in users_ddl
    assert "created_at_ms BIGINT NOT NULL" in overrides_ddl
    # Current epoch milliseconds do not fit a 32-bit INTEGER
    assert to_epoch_ms(WHEN) > 2**31 - 1
