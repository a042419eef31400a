"""Scoring engine: deterministic heuristics over a snapshot of platform rows.

Three independent metrics, each a weighted sum of 0-100 sub-scores:

- **Reliability** (entrepreneur): milestone completion, communication,
  agreement compliance, and timeliness of completed milestones.
- **Risk** (opportunity): financial thresholds, industry/location market risk,
  team size, and the inverse of the entrepreneur's reliability score.
- **Leader performance** (pool role): meetings called, announcements made,
  investment success rate, and member satisfaction.

Nothing here touches the database: callers pass ORM rows (or anything with the
same attributes) and persist the returned values themselves.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Iterable

# ---------------------------------------------------------------------------
# Weights and constants
# ---------------------------------------------------------------------------

RELIABILITY_WEIGHTS = {"milestone": 0.3, "communication": 0.2, "agreement": 0.3, "time": 0.2}
RISK_WEIGHTS = {"financial": 0.3, "market": 0.3, "team": 0.2, "entrepreneur": 0.2}
LEADER_WEIGHTS = {"meetings": 0.25, "announcements": 0.25, "investment": 0.3, "satisfaction": 0.2}

# Placeholder until communication logs are tracked.
COMMUNICATION_SCORE = 75.0
# Placeholder until locations are differentiated.
LOCATION_RISK = 40.0

INDUSTRY_RISK = {
    "technology": 60.0,
    "healthcare": 40.0,
    "finance": 50.0,
    "manufacturing": 45.0,
    "retail": 55.0,
    "agriculture": 35.0,
}
DEFAULT_INDUSTRY_RISK = 50.0

FUNDING_TARGET_THRESHOLD = 1_000_000
EXPECTED_ROI_THRESHOLD = 50
INVESTMENT_TERM_THRESHOLD = 24
SMALL_TEAM_SIZE = 3

MEETING_POINTS = 10
ANNOUNCEMENT_POINTS = 15

ACCEPTABLE_RISK_MESSAGE = "Risk level acceptable"


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def round2(value: float) -> float:
    return round(value, 2)


def _ratio_score(matching: int, total: int) -> float:
    if total == 0:
        return 0.0
    return matching / total * 100


def _as_date(value: date | datetime | str | None) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.fromisoformat(str(value)).date()


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass
class ReliabilityScore:
    overall_score: float
    milestone_score: float
    communication_score: float
    agreement_score: float
    time_score: float
    factors: dict[str, float] = field(default_factory=dict)


@dataclass
class RiskAssessment:
    overall_risk: float
    financial_risk: float
    market_risk: float
    team_risk: float
    entrepreneur_risk: float
    recommendations: list[str] = field(default_factory=list)


@dataclass
class LeaderPerformance:
    overall_score: float
    meetings_score: float
    announcements_score: float
    investment_score: float
    satisfaction_score: float
    duties_performed: dict[str, int | float] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Reliability
# ---------------------------------------------------------------------------


def milestone_score(milestones: list[Any]) -> float:
    """Share of milestones with status ``completed``."""
    completed = sum(1 for m in milestones if m.status == "completed")
    return _ratio_score(completed, len(milestones))


def agreement_score(agreements: list[Any]) -> float:
    """Share of agreements with status ``active``."""
    active = sum(1 for a in agreements if a.status == "active")
    return _ratio_score(active, len(agreements))


def time_score(milestones: list[Any]) -> float:
    """Share of milestones completed on or before their due date."""
    on_time = 0
    for m in milestones:
        completed = _as_date(m.completed_date)
        due = _as_date(m.due_date)
        if completed is not None and due is not None and completed <= due:
            on_time += 1
    return _ratio_score(on_time, len(milestones))


def communication_score() -> float:
    return COMMUNICATION_SCORE


def score_reliability(milestones: Iterable[Any], agreements: Iterable[Any]) -> ReliabilityScore:
    milestones = list(milestones)
    agreements = list(agreements)
    subs = {
        "milestone": milestone_score(milestones),
        "communication": communication_score(),
        "agreement": agreement_score(agreements),
        "time": time_score(milestones),
    }
    overall = clamp(sum(RELIABILITY_WEIGHTS[k] * v for k, v in subs.items()))
    return ReliabilityScore(
        overall_score=round2(overall),
        milestone_score=round2(subs["milestone"]),
        communication_score=round2(subs["communication"]),
        agreement_score=round2(subs["agreement"]),
        time_score=round2(subs["time"]),
        factors={
            "milestone_completion_rate": subs["milestone"],
            "communication_responsiveness": subs["communication"],
            "agreement_compliance": subs["agreement"],
            "time_management": subs["time"],
        },
    )


# ---------------------------------------------------------------------------
# Risk
# ---------------------------------------------------------------------------


def _above(value: float | None, threshold: float) -> bool:
    return value is not None and value > threshold


def financial_risk(opportunity: Any) -> float:
    factors = [
        70.0 if _above(opportunity.funding_target, FUNDING_TARGET_THRESHOLD) else 40.0,
        60.0 if _above(opportunity.expected_roi, EXPECTED_ROI_THRESHOLD) else 30.0,
        50.0 if _above(opportunity.investment_term_months, INVESTMENT_TERM_THRESHOLD) else 30.0,
    ]
    return sum(factors) / len(factors)


def industry_risk(industry: str | None) -> float:
    return INDUSTRY_RISK.get((industry or "").strip().lower(), DEFAULT_INDUSTRY_RISK)


def location_risk(location: str | None) -> float:
    return LOCATION_RISK


def market_risk(opportunity: Any) -> float:
    return (industry_risk(opportunity.industry) + location_risk(opportunity.location)) / 2


def team_risk(opportunity: Any) -> float:
    if not opportunity.team_size:
        return 50.0
    return 70.0 if opportunity.team_size < SMALL_TEAM_SIZE else 30.0


def entrepreneur_risk(reliability: float | None) -> float:
    """Inverse of the entrepreneur's reliability; an unscored entrepreneur is maximal risk."""
    return clamp(100.0 - (reliability or 0.0))


def risk_recommendations(financial: float, market: float, team: float, entrepreneur: float) -> list[str]:
    recommendations: list[str] = []
    if financial > 60:
        recommendations.append("Consider reducing funding target or extending timeline")
    if market > 50:
        recommendations.append("Conduct thorough market analysis before proceeding")
    if team > 60:
        recommendations.append("Strengthen team composition and experience")
    if entrepreneur > 70:
        recommendations.append("Request additional due diligence on entrepreneur")
    return recommendations or [ACCEPTABLE_RISK_MESSAGE]


def score_risk(opportunity: Any, entrepreneur: Any) -> RiskAssessment:
    subs = {
        "financial": financial_risk(opportunity),
        "market": market_risk(opportunity),
        "team": team_risk(opportunity),
        "entrepreneur": entrepreneur_risk(entrepreneur.reliability_score),
    }
    overall = clamp(sum(RISK_WEIGHTS[k] * v for k, v in subs.items()))
    return RiskAssessment(
        overall_risk=round2(overall),
        financial_risk=round2(subs["financial"]),
        market_risk=round2(subs["market"]),
        team_risk=round2(subs["team"]),
        entrepreneur_risk=round2(subs["entrepreneur"]),
        recommendations=risk_recommendations(
            subs["financial"], subs["market"], subs["team"], subs["entrepreneur"],
        ),
    )


# ---------------------------------------------------------------------------
# Leader performance
# ---------------------------------------------------------------------------


def score_leader(record: Any) -> LeaderPerformance:
    meetings = record.meetings_called or 0
    announcements = record.announcements_made or 0
    success_rate = record.investment_success_rate or 0.0
    satisfaction = record.member_satisfaction_score or 0.0

    subs = {
        "meetings": clamp(meetings * MEETING_POINTS),
        "announcements": clamp(announcements * ANNOUNCEMENT_POINTS),
        "investment": clamp(success_rate),
        "satisfaction": clamp(satisfaction * 100),
    }
    overall = clamp(sum(LEADER_WEIGHTS[k] * v for k, v in subs.items()))
    return LeaderPerformance(
        overall_score=round2(overall),
        meetings_score=round2(subs["meetings"]),
        announcements_score=round2(subs["announcements"]),
        investment_score=round2(subs["investment"]),
        satisfaction_score=round2(subs["satisfaction"]),
        duties_performed={
            "meetings_called": meetings,
            "announcements_made": announcements,
            "investment_success_rate": success_rate,
            "member_satisfaction_score": satisfaction,
        },
    )
