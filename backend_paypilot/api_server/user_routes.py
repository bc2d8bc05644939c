"""
FastAPI router: GET /user/{user_id} — trust score and override history.

Recovery is applied (and persisted) before the read, as in evaluation. Unknown
users are a 404; reads never create a user.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from backend_paypilot.api_server.dependencies import AppServices, get_services
from backend_paypilot.api_server.schemas import UserProfileResponse
from backend_paypilot.core.exceptions import PersistenceFailure
from backend_paypilot.paypilot_logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["user"])


@router.get("/user/{user_id}", response_model=UserProfileResponse)
def get_user_profile(user_id: str, services: AppServices = Depends(get_services)) -> UserProfileResponse:
    user_id = user_id.strip()
    if not user_id:
        raise HTTPException(status_code=400, detail="userId is required")
    try:
        snapshot = services.orchestrator.load_trust(user_id)
    except PersistenceFailure as e:
        logger.exception("user_profile_failed", user_id=user_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to load user") from e
    if snapshot.user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return UserProfileResponse.model_validate(snapshot.user.to_dict())
