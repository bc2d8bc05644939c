"""
Service layer — the two public operations of the engine.

EvaluationOrchestrator.evaluate(): trust read (with recovery) -> risk score ->
decision policy -> best-effort explanation.
OverrideRecorder.record_override(): append history, restart recovery clock, decay trust.
"""

from backend_paypilot.services.evaluation import (
    EvaluationOrchestrator,
    EvaluationRequest,
    EvaluationResult,
)
from backend_paypilot.services.override_service import OverrideRecorder

__all__ = [
    "EvaluationOrchestrator",
    "EvaluationRequest",
    "EvaluationResult",
    "OverrideRecorder",
]
