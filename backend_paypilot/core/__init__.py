"""
Core utilities — time source and the application error taxonomy.
"""

from backend_paypilot.core.clock import Clock, FixedClock, SystemClock
from backend_paypilot.core.exceptions import (
    ConcurrentUpdateError,
    ExplanationUnavailable,
    InvariantViolation,
    PayPilotError,
    PersistenceFailure,
    PolicyUnavailable,
    ValidationError,
)

__all__ = [
    "Clock",
    "FixedClock",
    "SystemClock",
    "ConcurrentUpdateError",
    "ExplanationUnavailable",
    "InvariantViolation",
    "PayPilotError",
    "PersistenceFailure",
    "PolicyUnavailable",
    "ValidationError",
]
