"""Pydantic request/response schemas for the insights API."""
from __future__ import annotations

from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")

PoolMemberRole = Literal["member", "chairperson", "secretary", "treasurer", "investments_officer"]


class ApiResponse(BaseModel, Generic[T]):
    """Uniform envelope for every response, success or failure."""
    success: bool = True
    data: T | None = None
    error: str | None = None


class Identity(BaseModel):
    id: str
    email: str = ""
    role: str


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class _CamelRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class LeaderPerformanceRequest(_CamelRequest):
    pool_id: str = Field(alias="poolId", min_length=1)
    user_id: str = Field(alias="userId", min_length=1)
    role: PoolMemberRole


class BatchReliabilityRequest(_CamelRequest):
    user_ids: list[str] = Field(alias="userIds")


class BatchRiskRequest(_CamelRequest):
    opportunity_ids: list[str] = Field(alias="opportunityIds")


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class ReliabilityScoreOut(BaseModel):
    overall_score: float
    milestone_score: float
    communication_score: float
    agreement_score: float
    time_score: float
    factors: dict[str, float]


class RiskAssessmentOut(BaseModel):
    overall_risk: float
    financial_risk: float
    market_risk: float
    team_risk: float
    entrepreneur_risk: float
    recommendations: list[str]


class LeaderPerformanceOut(BaseModel):
    overall_score: float
    meetings_score: float
    announcements_score: float
    investment_score: float
    satisfaction_score: float
    duties_performed: dict[str, int | float]


class ModelInfo(BaseModel):
    type: str
    loaded: bool


class ModelStatusOut(BaseModel):
    service_status: str
    version: str
    models: dict[str, ModelInfo]
    last_updated: str


class BatchOut(BaseModel):
    results: list[dict[str, Any]]
    errors: list[dict[str, Any]]
    total_processed: int
    successful: int
    failed: int
