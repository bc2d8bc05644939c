"""
Override recording: the user proceeded against a WARN/BLOCK decision.

Creates the user on first override, appends to the history, restarts the
recovery clock and decays trust, all in a single save under the per-user lock.
Not idempotent: each call appends and decays again.
"""

from __future__ import annotations

from typing import Any

from backend_paypilot.analytics.trust_engine import apply_override
from backend_paypilot.core.clock import Clock
from backend_paypilot.database.models import Override, User
from backend_paypilot.database.user_store import UserRepository
from backend_paypilot.paypilot_logging import bind_user
from backend_paypilot.services.validation import validate_override_fields, validate_user_id


class OverrideRecorder:
    def __init__(self, repository: UserRepository, clock: Clock) -> None:
        self._repository = repository
        self._clock = clock

    def record_override(self, user_id: Any, risk_score: Any = None, decision: Any = None) -> User:
        """Record one override and return the saved user. ValidationError leaves storage untouched."""
        user_id = validate_user_id(user_id)
        risk_score, decision = validate_override_fields(risk_score, decision)
        log = bind_user(user_id)

        with self._repository.user_lock(user_id):
            user = self._repository.get_user(user_id)
            if user is None:
                user = User(user_id=user_id)
                log.info("user_created_on_override")
            override = Override(date=self._clock.now(), risk_score=risk_score, decision=decision)
            saved = self._repository.save_user(apply_override(user, override))

        log.info(
            "override_recorded",
            risk_score=risk_score,
            decision=decision,
            trust_before=user.trust_score,
            trust_after=saved.trust_score,
            override_count=saved.override_count,
        )
        return saved
