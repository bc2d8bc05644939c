"""
Remote decision policy: POST {"riskScore": n} to a rule-service webhook.

Any non-2xx status, transport error, timeout or malformed body is reported as
PolicyUnavailable. The httpx client is built once by the caller and injected.
"""

from __future__ import annotations

import httpx

from backend_paypilot.core.exceptions import PolicyUnavailable
from backend_paypilot.paypilot_logging import get_logger
from backend_paypilot.policy.base import DecisionPolicy, PolicyDecision

logger = get_logger(__name__)


class WebhookDecisionPolicy(DecisionPolicy):
    def __init__(self, client: httpx.Client, url: str) -> None:
        self._client = client
        self._url = url

    def decide(self, risk_score: int) -> PolicyDecision:
        try:
            resp = self._client.post(self._url, json={"riskScore": risk_score})
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPStatusError as e:
            logger.warning("policy_webhook_status", url=self._url, status_code=e.response.status_code)
            raise PolicyUnavailable(f"Policy engine failed with status {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.warning("policy_webhook_transport_error", url=self._url, error=str(e))
            raise PolicyUnavailable(f"Policy engine unreachable: {e}") from e
        except ValueError as e:
            logger.warning("policy_webhook_invalid_json", url=self._url, error=str(e))
            raise PolicyUnavailable("Policy engine returned invalid JSON") from e

        decision = PolicyDecision.from_payload(payload)
        logger.debug("policy_webhook_decision", risk_score=risk_score, decision=decision.decision)
        return decision

    def close(self) -> None:
        self._client.close()
