from __future__ import annotations

import logging
import os
from collections.abc import Callable
from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import Any, Generator, TypeVar

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from insights import __version__
from insights.auth import current_identity, is_admin, require_admin
from insights.db import init_db, session_generator
from insights.models import Opportunity
from insights.schemas import (
    ApiResponse,
    BatchOut,
    BatchReliabilityRequest,
    BatchRiskRequest,
    Identity,
    LeaderPerformanceOut,
    LeaderPerformanceRequest,
    ModelStatusOut,
    ReliabilityScoreOut,
    RiskAssessmentOut,
)
from insights.services import (
    NotFoundError,
    ScoringError,
    ScoringService,
    get_entity,
    is_active_pool_member,
    model_status,
)

log = logging.getLogger(__name__)

R = TypeVar("R")


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(
    title="Insights",
    version=__version__,
    description=(
        "Heuristic scoring for the investment platform: entrepreneur reliability, "
        "opportunity risk, and pool-leader performance. Every response uses the "
        "envelope {success, data, error}. Requires a bearer token."
    ),
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Reliability", "description": "Entrepreneur reliability scores."},
        {"name": "Risk", "description": "Investment opportunity risk assessments."},
        {"name": "Pools", "description": "Pool leadership performance."},
        {"name": "Admin", "description": "Model status and batch scoring (super_admin only)."},
    ],
)


# ---------------------------------------------------------------------------
# Envelope for errors
# ---------------------------------------------------------------------------


def _error(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(
        {"success": False, "data": None, "error": message},
        status_code=status_code, headers=headers,
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    log.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error(500, "Internal server error")


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    problems = []
    for err in exc.errors():
        where = ".".join(str(p) for p in err.get("loc", ())[1:])
        problems.append(f"{where}: {err.get('msg')}" if where else str(err.get("msg")))
    return _error(400, "Invalid request: " + "; ".join(problems))


# ---------------------------------------------------------------------------
# Dependencies & Helpers
# ---------------------------------------------------------------------------


def db_session() -> Generator[Session, None, None]:
    yield from session_generator()


def _scored(fn: Callable[[], R]) -> R:
    """Run a scoring call, translating service errors into HTTP errors."""
    try:
        return fn()
    except NotFoundError as exc:
        raise HTTPException(404, str(exc)) from exc
    except ScoringError as exc:
        raise HTTPException(500, str(exc)) from exc


def _envelope(data: Any) -> dict[str, Any]:
    return {"success": True, "data": data, "error": None}


# ---------------------------------------------------------------------------
# Routes: Health
# ---------------------------------------------------------------------------


@app.get("/health", tags=["Admin"], summary="Liveness probe (no authentication)")
async def health():
    return _envelope({"status": "ok", "version": __version__})


# ---------------------------------------------------------------------------
# Routes: Scoring
# ---------------------------------------------------------------------------


@app.post("/api/ai/reliability-score/{user_id}", response_model=ApiResponse[ReliabilityScoreOut],
          tags=["Reliability"], summary="Recalculate and store a user's reliability score (self or admin)")
async def reliability_score(
    user_id: str,
    identity: Identity = Depends(current_identity),
    session: Session = Depends(db_session),
):
    if not (is_admin(identity) or identity.id == user_id):
        raise HTTPException(403, "Access denied")
    result = _scored(lambda: ScoringService(session).compute_reliability_score(user_id))
    return _envelope(asdict(result))


@app.post("/api/ai/risk-assessment/{opportunity_id}", response_model=ApiResponse[RiskAssessmentOut],
          tags=["Risk"], summary="Assess and store an opportunity's risk (admin or owning entrepreneur)")
async def risk_assessment(
    opportunity_id: str,
    identity: Identity = Depends(current_identity),
    session: Session = Depends(db_session),
):
    if not is_admin(identity):
        opportunity = get_entity(session, Opportunity, opportunity_id)
        if opportunity is None:
            raise HTTPException(404, f"Opportunity {opportunity_id} not found")
        if opportunity.entrepreneur_id != identity.id:
            raise HTTPException(403, "Access denied")
    result = _scored(lambda: ScoringService(session).assess_opportunity_risk(opportunity_id))
    return _envelope(asdict(result))


@app.post("/api/ai/leader-performance", response_model=ApiResponse[LeaderPerformanceOut],
          tags=["Pools"], summary="Evaluate a pool leadership role (admin or pool member)")
async def leader_performance(
    body: LeaderPerformanceRequest,
    identity: Identity = Depends(current_identity),
    session: Session = Depends(db_session),
):
    if not (is_admin(identity) or is_active_pool_member(session, body.pool_id, identity.id)):
        raise HTTPException(403, "Access denied")
    result = _scored(lambda: ScoringService(session).compute_leader_performance(
        body.pool_id, body.user_id, body.role,
    ))
    return _envelope(asdict(result))


# ---------------------------------------------------------------------------
# Routes: Admin
# ---------------------------------------------------------------------------


@app.get("/api/ai/model-status", response_model=ApiResponse[ModelStatusOut],
         tags=["Admin"], summary="Scoring model status")
async def get_model_status(identity: Identity = Depends(require_admin)):
    return _envelope(model_status())


@app.post("/api/ai/batch-reliability-scores", response_model=ApiResponse[BatchOut],
          tags=["Admin"], summary="Recalculate reliability scores for many users")
async def batch_reliability_scores(
    body: BatchReliabilityRequest,
    identity: Identity = Depends(require_admin),
    session: Session = Depends(db_session),
):
    return _envelope(ScoringService(session).batch_reliability_scores(body.user_ids))


@app.post("/api/ai/batch-risk-assessments", response_model=ApiResponse[BatchOut],
          tags=["Admin"], summary="Assess risk for many opportunities")
async def batch_risk_assessments(
    body: BatchRiskRequest,
    identity: Identity = Depends(require_admin),
    session: Session = Depends(db_session),
):
    return _envelope(ScoringService(session).batch_risk_assessments(body.opportunity_ids))


# ---------------------------------------------------------------------------
# Startup
# ---------------------------------------------------------------------------


def main():
    import uvicorn
    host = os.environ.get("INSIGHTS_HOST", "127.0.0.1")
    port = int(os.environ.get("INSIGHTS_PORT", "8002"))
    uvicorn.run("insights.app:app", host=host, port=port)


if __name__ == "__main__":
    main()
