"""
FastAPI router: POST /risk/evaluate, POST /risk/override.

Evaluate always answers with a decision: a policy outage is a normal 200 with
degraded=true; any other fault is a 500 carrying the same safe WARN payload.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from backend_paypilot.api_server.dependencies import AppServices, get_services
from backend_paypilot.api_server.schemas import (
    EvaluateRequest,
    EvaluateResponse,
    OverrideRequest,
    OverrideResponse,
)
from backend_paypilot.core.exceptions import ValidationError
from backend_paypilot.paypilot_logging import get_logger
from backend_paypilot.policy.base import PolicyDecision
from backend_paypilot.services.evaluation import EvaluationRequest

logger = get_logger(__name__)

router = APIRouter(prefix="/risk", tags=["risk"])


def degraded_error_payload(error: str) -> dict[str, Any]:
    policy = PolicyDecision.degraded().to_dict()
    return {"error": error, **policy, "degraded": True, "policy": policy}


@router.post("/evaluate", response_model=EvaluateResponse)
def evaluate(body: EvaluateRequest, services: AppServices = Depends(get_services)) -> Any:
    """Score a proposed spend for the user and return the policy decision."""
    request = EvaluationRequest(
        user_id=body.user_id,
        amount=body.amount,
        balance=body.balance,
        category=body.category,
        days_to_rent=body.days_to_rent,
    )
    try:
        result = services.orchestrator.evaluate(request)
    except ValidationError:
        raise
    except Exception as e:
        logger.exception("evaluate_failed", user_id=body.user_id, error=str(e))
        return JSONResponse(status_code=500, content=degraded_error_payload(str(e)))
    return EvaluateResponse.model_validate(result.to_dict())


@router.post("/override", response_model=OverrideResponse)
def record_override(body: OverrideRequest, services: AppServices = Depends(get_services)) -> Any:
    """Record that the user proceeded against a WARN/BLOCK decision."""
    try:
        user = services.recorder.record_override(body.user_id, body.risk_score, body.decision)
    except ValidationError:
        raise
    except Exception as e:
        logger.exception("override_failed", user_id=body.user_id, error=str(e))
        return JSONResponse(status_code=500, content={"error": str(e)})
    return OverrideResponse(
        user_id=user.user_id,
        trust_score=user.trust_score,
        override_count=user.override_count,
    )
