from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import Any

from mcp.server.fastmcp import FastMCP

from insights import services
from insights.db import init_db, session_scope
from insights.models import POOL_MEMBER_ROLES
from insights.scorer import INDUSTRY_RISK, LEADER_WEIGHTS, RELIABILITY_WEIGHTS, RISK_WEIGHTS

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def insights_lifespan(server: FastMCP) -> AsyncIterator[None]:
    init_db()
    yield


mcp = FastMCP(
    "Insights",
    instructions=(
        "Insights computes heuristic scores for an investment platform. "
        "Use reliability_score(user_id) for entrepreneurs, risk_assessment(opportunity_id) "
        "for opportunities, and leader_performance(pool_id, user_id, role) for pool leadership. "
        "Each call recomputes from current data and stores the result."
    ),
    lifespan=insights_lifespan,
    json_response=True,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _score(fn: Callable[[services.ScoringService], Any]) -> dict:
    with session_scope() as session:
        try:
            return asdict(fn(services.ScoringService(session)))
        except services.ScoringError as exc:
            return {"error": str(exc)}


# ---------------------------------------------------------------------------
# Resource
# ---------------------------------------------------------------------------


@mcp.resource("insights://overview")
def insights_overview() -> str:
    """Overview of the three scores, their weights, and lookup tables."""
    return json.dumps({
        "system": "Insights: heuristic scoring for an investment platform",
        "scores": {
            "reliability": "Entrepreneur track record, 0-100 (higher = more reliable). Stored on users.reliability_score.",
            "risk": "Opportunity riskiness, 0-100 (higher = riskier). Stored on opportunities.risk_score.",
            "leader_performance": "Pool leadership activity and satisfaction, 0-100. Stored on pool_leader_performance.overall_score.",
        },
        "weights": {
            "reliability": RELIABILITY_WEIGHTS,
            "risk": RISK_WEIGHTS,
            "leader_performance": LEADER_WEIGHTS,
        },
        "industry_risk": INDUSTRY_RISK,
        "pool_roles": list(POOL_MEMBER_ROLES),
    }, indent=2)


# ---------------------------------------------------------------------------
# Tools: Scoring
# ---------------------------------------------------------------------------


@mcp.tool()
def reliability_score(user_id: str) -> dict:
    """Recalculate an entrepreneur's reliability score and store it on the user."""
    return _score(lambda svc: svc.compute_reliability_score(user_id))


@mcp.tool()
def risk_assessment(opportunity_id: str) -> dict:
    """Assess an opportunity's risk, store risk_score and the breakdown in ai_insights."""
    return _score(lambda svc: svc.assess_opportunity_risk(opportunity_id))


@mcp.tool()
def leader_performance(pool_id: str, user_id: str, role: str) -> dict:
    """Evaluate one pool leadership role.

    Args:
        pool_id: Investment pool id.
        user_id: The leader's user id.
        role: One of member, chairperson, secretary, treasurer, investments_officer.
    """
    if role not in POOL_MEMBER_ROLES:
        return {"error": "Invalid role"}
    return _score(lambda svc: svc.compute_leader_performance(pool_id, user_id, role))


# ---------------------------------------------------------------------------
# Tools: Admin
# ---------------------------------------------------------------------------


@mcp.tool()
def model_status() -> dict:
    """Report the status and version of the scoring models."""
    return services.model_status()


@mcp.tool()
def batch_reliability_scores(user_ids: list[str]) -> dict:
    """Recalculate reliability scores for several users; failures are listed, not raised."""
    with session_scope() as session:
        return services.ScoringService(session).batch_reliability_scores(user_ids)


@mcp.tool()
def batch_risk_assessments(opportunity_ids: list[str]) -> dict:
    """Assess risk for several opportunities; failures are listed, not raised."""
    with session_scope() as session:
        return services.ScoringService(session).batch_risk_assessments(opportunity_ids)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main():
    """Run the Insights MCP server over stdio."""
    mcp.run()


if __name__ == "__main__":
    main()
