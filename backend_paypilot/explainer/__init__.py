"""
Explainer — optional natural-language rationale for a decision.

Best-effort: failures are reported as ExplanationUnavailable and replaced with
a neutral fallback by the evaluation flow.
"""

from backend_paypilot.explainer.base import (
    FALLBACK_EXPLANATION,
    ExplanationRequest,
    Explainer,
)
from backend_paypilot.explainer.gemini import GeminiExplainer, build_gemini_client

__all__ = [
    "FALLBACK_EXPLANATION",
    "ExplanationRequest",
    "Explainer",
    "GeminiExplainer",
    "build_gemini_client",
]
