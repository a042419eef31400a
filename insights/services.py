"""Shared business logic for the insights API and MCP server."""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import asdict
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from insights import __version__
from insights.models import (
    Agreement,
    Milestone,
    Opportunity,
    PoolLeaderPerformance,
    PoolMember,
    User,
)
from insights.scorer import (
    LeaderPerformance,
    ReliabilityScore,
    RiskAssessment,
    score_leader,
    score_reliability,
    score_risk,
)
from insights.utils import merge_json_key

log = logging.getLogger(__name__)

RELIABILITY_FAILURE = "Failed to calculate reliability score"
RISK_FAILURE = "Failed to assess opportunity risk"
LEADER_FAILURE = "Failed to calculate leader performance"


class ScoringError(Exception):
    """A score could not be computed or persisted."""


class NotFoundError(ScoringError):
    """A referenced row does not exist (or a lookup is ambiguous)."""
    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


def get_entity(session: Session, model, entity_id: str):
    return session.execute(select(model).where(model.id == entity_id)).scalars().first()


def is_active_pool_member(session: Session, pool_id: str, user_id: str) -> bool:
    member = session.execute(
        select(PoolMember.id).where(
            PoolMember.pool_id == pool_id,
            PoolMember.user_id == user_id,
            PoolMember.is_active.is_(True),
        )
    ).first()
    return member is not None


# ---------------------------------------------------------------------------
# Scoring service
# ---------------------------------------------------------------------------


class ScoringService:
    """Reads platform rows, computes heuristic scores, and writes the derived values back.

    Every public operation recomputes from the current rows and commits its own
    write. Missing rows raise :class:`NotFoundError`; any other failure is
    rolled back, logged, and re-raised as a :class:`ScoringError` carrying a
    generic message.
    """

    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def _operation(self, failure: str, subject: str) -> Iterator[None]:
        try:
            yield
            self.session.commit()
        except NotFoundError as exc:
            self.session.rollback()
            log.warning("%s: %s", failure, exc)
            raise
        except Exception as exc:
            self.session.rollback()
            log.exception("%s (%s)", failure, subject)
            raise ScoringError(failure) from exc

    def _require(self, model, entity_id: str, label: str):
        obj = get_entity(self.session, model, entity_id)
        if obj is None:
            raise NotFoundError(label, entity_id)
        return obj

    # -- reliability --------------------------------------------------------

    def compute_reliability_score(self, user_id: str) -> ReliabilityScore:
        with self._operation(RELIABILITY_FAILURE, f"user {user_id}"):
            user = self._require(User, user_id, "User")
            milestones = self.session.execute(
                select(Milestone)
                .join(Opportunity, Milestone.opportunity_id == Opportunity.id)
                .where(Opportunity.entrepreneur_id == user_id)
            ).scalars().all()
            agreements = self.session.execute(
                select(Agreement).where(Agreement.entrepreneur_id == user_id)
            ).scalars().all()

            result = score_reliability(milestones, agreements)
            user.reliability_score = result.overall_score
            self.session.flush()
        return result

    # -- risk ---------------------------------------------------------------

    def assess_opportunity_risk(self, opportunity_id: str) -> RiskAssessment:
        with self._operation(RISK_FAILURE, f"opportunity {opportunity_id}"):
            opportunity = self._require(Opportunity, opportunity_id, "Opportunity")
            if opportunity.entrepreneur_id is None:
                raise NotFoundError("Entrepreneur for opportunity", opportunity_id)
            entrepreneur = self._require(User, opportunity.entrepreneur_id, "User")

            result = score_risk(opportunity, entrepreneur)
            opportunity.risk_score = result.overall_risk
            opportunity.ai_insights_json = merge_json_key(
                opportunity.ai_insights_json, "risk_assessment", asdict(result),
            )
            self.session.flush()
        return result

    # -- leader performance -------------------------------------------------

    def compute_leader_performance(self, pool_id: str, user_id: str, role: str) -> LeaderPerformance:
        subject = f"pool {pool_id}, user {user_id}, role {role}"
        with self._operation(LEADER_FAILURE, subject):
            rows = self.session.execute(
                select(PoolLeaderPerformance).where(
                    PoolLeaderPerformance.pool_id == pool_id,
                    PoolLeaderPerformance.user_id == user_id,
                    PoolLeaderPerformance.role == role,
                )
            ).scalars().all()
            if len(rows) != 1:
                raise NotFoundError("Leader performance record for", subject)
            record = rows[0]

            result = score_leader(record)
            record.overall_score = result.overall_score
            record.last_evaluation_date = datetime.now(UTC)
            self.session.flush()
        return result

    # -- batches ------------------------------------------------------------

    def _run_batch(
        self, ids: list[str], fn: Callable[[str], Any], id_key: str, result_key: str,
    ) -> dict[str, Any]:
        results: list[dict[str, Any]] = []
        errors: list[dict[str, Any]] = []
        for entity_id in ids:
            try:
                outcome = fn(entity_id)
            except ScoringError as exc:
                log.warning("Batch %s failed for %s: %s", result_key, entity_id, exc)
                errors.append({id_key: entity_id, "error": str(exc)})
                continue
            results.append({id_key: entity_id, result_key: asdict(outcome)})
        return {
            "results": results,
            "errors": errors,
            "total_processed": len(ids),
            "successful": len(results),
            "failed": len(errors),
        }

    def batch_reliability_scores(self, user_ids: list[str]) -> dict[str, Any]:
        return self._run_batch(user_ids, self.compute_reliability_score, "userId", "score")

    def batch_risk_assessments(self, opportunity_ids: list[str]) -> dict[str, Any]:
        return self._run_batch(opportunity_ids, self.assess_opportunity_risk, "opportunityId", "assessment")


def model_status() -> dict[str, Any]:
    """Static description of the scoring models; all of them are rule-based."""
    model = {"type": "business_logic", "loaded": True}
    return {
        "service_status": "operational",
        "version": __version__,
        "models": {
            "reliability_model": dict(model),
            "risk_model": dict(model),
            "performance_model": dict(model),
        },
        "last_updated": datetime.now(UTC).isoformat(),
    }
