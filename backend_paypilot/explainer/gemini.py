"""
Gemini-backed explainer (google-genai).

Explains a risk decision calmly and without judgement. Non-decisional: the text
never changes the decision. The genai client is built once at startup by
build_gemini_client() and injected; without an API key there is no client and
every call reports ExplanationUnavailable.
"""

from __future__ import annotations

from typing import Any

from google import genai
from google.genai import types

from backend_paypilot.core.exceptions import ExplanationUnavailable
from backend_paypilot.explainer.base import ExplanationRequest, Explainer
from backend_paypilot.paypilot_logging import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_WORDS = 120

PROMPT_TEMPLATE = """
You are a financial safety assistant.

Context:
- Risk Score: {risk_score}
- Decision: {decision}
- Trust Score: {trust_score}
- Past Overrides: {override_count}
- Risk Reasons: {reasons}

Explain clearly and calmly:
- Why this action is risky
- How past behavior influenced this
- What could happen if user proceeds
- Do NOT judge or shame
- Do NOT decide anything
- Keep it under {max_words} words
"""


def build_gemini_client(api_key: str | None, timeout_sec: float) -> genai.Client | None:
    """Return a genai client, or None when no API key is configured."""
    if not api_key:
        logger.warning("gemini_api_key_missing")
        return None
    return genai.Client(
        api_key=api_key,
        http_options=types.HttpOptions(timeout=int(timeout_sec * 1000)),
    )


def build_prompt(request: ExplanationRequest, max_words: int = DEFAULT_MAX_WORDS) -> str:
    return PROMPT_TEMPLATE.format(
        risk_score=request.risk_score,
        decision=request.decision,
        trust_score=request.trust_score,
        override_count=request.override_count,
        reasons=", ".join(request.reasons) or "none",
        max_words=max_words,
    )


class GeminiExplainer(Explainer):
    def __init__(self, client: Any | None, model: str, max_words: int = DEFAULT_MAX_WORDS) -> None:
        self._client = client
        self._model = model
        self._max_words = max_words

    def explain(self, request: ExplanationRequest) -> str:
        if self._client is None:
            raise ExplanationUnavailable("Missing Gemini API key")

        try:
            response = self._client.models.generate_content(
                model=self._model,
                contents=build_prompt(request, self._max_words),
            )
        except Exception as e:
            raise ExplanationUnavailable(f"Gemini request failed: {e}") from e

        text = (getattr(response, "text", None) or "").strip()
        if not text:
            raise ExplanationUnavailable("Empty Gemini response")
        logger.debug("gemini_explanation", model=self._model, words=len(text.split()))
        return text

    def close(self) -> None:
        close = getattr(self._client, "close", None)
        if callable(close):
            close()
