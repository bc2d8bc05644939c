"""
Request and response models. Wire names are camelCase; Python names snake_case.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class EvaluateRequest(_CamelModel):
    """POST /risk/evaluate body: the proposed spend and its financial context."""

    user_id: str | None = Field(None, alias="userId", max_length=128, description="User identifier; optional")
    amount: float = Field(..., description="Proposed spend")
    balance: float = Field(..., description="Current balance")
    category: str = Field(..., max_length=64, description="Spending category, e.g. shopping, food")
    days_to_rent: float = Field(..., alias="daysToRent", description="Days until rent is due")


class EvaluateResponse(_CamelModel):
    risk_score: int = Field(..., alias="riskScore", ge=0, le=100)
    reasons: list[str] = Field(default_factory=list)
    tier: str
    decision: str
    message: str = ""
    ai_required: bool = Field(False, alias="aiRequired")
    explanation: str | None = None
    trust_score: int = Field(..., alias="trustScore", ge=0, le=100)
    override_count: int = Field(..., alias="overrideCount", ge=0)
    degraded: bool = False
    error: str | None = None


class OverrideRequest(_CamelModel):
    """POST /risk/override body. userId is checked by the service so a missing one maps to 400."""

    user_id: str | None = Field(None, alias="userId", max_length=128)
    risk_score: float | None = Field(None, alias="riskScore")
    decision: str | None = Field(None, max_length=16)


class OverrideResponse(_CamelModel):
    status: str = "override recorded"
    user_id: str = Field(..., alias="userId")
    trust_score: int = Field(..., alias="trustScore", ge=0, le=100)
    override_count: int = Field(..., alias="overrideCount", ge=0)


class OverrideEntry(_CamelModel):
    date: str
    risk_score: int | None = Field(None, alias="riskScore")
    decision: str | None = None


class UserProfileResponse(_CamelModel):
    """GET /user/{userId} response: trust state and override history (oldest first)."""

    user_id: str = Field(..., alias="userId")
    trust_score: int = Field(..., alias="trustScore", ge=0, le=100)
    last_override_at: str | None = Field(None, alias="lastOverrideAt")
    overrides: list[OverrideEntry] = Field(default_factory=list)
