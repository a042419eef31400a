"""Tests for the pure scoring heuristics (no database)."""
from __future__ import annotations

from datetime import date
from types import SimpleNamespace

import pytest

from insights import scorer


def _milestone(status: str, due: date, completed: date | None = None):
    return SimpleNamespace(status=status, due_date=due, completed_date=completed)


def _opportunity(**overrides):
    base = dict(
        funding_target=500_000, expected_roi=20, investment_term_months=12,
        industry="healthcare", location="Harare", team_size=5,
    )
    base.update(overrides)
    return SimpleNamespace(**base)


def _leader(**overrides):
    base = dict(
        meetings_called=0, announcements_made=0,
        investment_success_rate=0.0, member_satisfaction_score=0.0,
    )
    base.update(overrides)
    return SimpleNamespace(**base)


# ---------------------------------------------------------------------------
# Reliability
# ---------------------------------------------------------------------------


class TestReliability:
    def test_entrepreneur_track_record(self):
        due = date(2024, 6, 30)
        milestones = [
            _milestone("completed", due, date(2024, 6, 1)),
            _milestone("completed", due, date(2024, 6, 30)),  # on the due date counts
            _milestone("completed", due, date(2024, 5, 15)),
            _milestone("pending", due),
        ]
        agreements = [SimpleNamespace(status="active"), SimpleNamespace(status="inactive")]

        result = scorer.score_reliability(milestones, agreements)

        assert result.milestone_score == 75.0
        assert result.time_score == 75.0
        assert result.agreement_score == 50.0
        assert result.communication_score == 75.0
        assert result.overall_score == pytest.approx(67.5)

    def test_no_history_scores_zero(self):
        result = scorer.score_reliability([], [])
        assert result.milestone_score == 0
        assert result.agreement_score == 0
        assert result.time_score == 0
        # Only the communication placeholder contributes
        assert result.overall_score == pytest.approx(0.2 * scorer.COMMUNICATION_SCORE)

    def test_late_completion_not_on_time(self):
        due = date(2024, 1, 31)
        milestones = [_milestone("completed", due, date(2024, 2, 1))]
        assert scorer.time_score(milestones) == 0
        assert scorer.milestone_score(milestones) == 100

    def test_completed_date_without_status_counts_for_time(self):
        due = date(2024, 1, 31)
        milestones = [_milestone("in_review", due, date(2024, 1, 10))]
        assert scorer.time_score(milestones) == 100
        assert scorer.milestone_score(milestones) == 0

    def test_iso_string_dates(self):
        milestones = [_milestone("completed", "2024-03-01", "2024-02-28")]
        assert scorer.time_score(milestones) == 100

    def test_factors_keys(self):
        result = scorer.score_reliability([], [])
        assert set(result.factors) == {
            "milestone_completion_rate", "communication_responsiveness",
            "agreement_compliance", "time_management",
        }

    def test_weighted_sum_identity(self):
        due = date(2024, 6, 30)
        milestones = [
            _milestone("completed", due, date(2024, 7, 2)),
            _milestone("pending", due),
            _milestone("completed", due, date(2024, 6, 2)),
        ]
        agreements = [SimpleNamespace(status="active")] * 2 + [SimpleNamespace(status="terminated")]
        r = scorer.score_reliability(milestones, agreements)
        w = scorer.RELIABILITY_WEIGHTS
        expected = (w["milestone"] * r.milestone_score + w["communication"] * r.communication_score
                    + w["agreement"] * r.agreement_score + w["time"] * r.time_score)
        assert r.overall_score == pytest.approx(expected, abs=0.01)


# ---------------------------------------------------------------------------
# Risk
# ---------------------------------------------------------------------------


class TestRisk:
    def test_large_tech_raise_with_small_team(self):
        opp = _opportunity(
            funding_target=2_000_000, expected_roi=80, investment_term_months=36,
            industry="technology", team_size=2,
        )
        result = scorer.score_risk(opp, SimpleNamespace(reliability_score=60))

        assert result.financial_risk == 60
        assert result.market_risk == 50
        assert result.team_risk == 70
        assert result.entrepreneur_risk == 40
        assert result.overall_risk == pytest.approx(55)
        assert result.recommendations == ["Strengthen team composition and experience"]

    def test_low_risk_is_acceptable(self):
        opp = _opportunity(industry="agriculture", team_size=4)
        result = scorer.score_risk(opp, SimpleNamespace(reliability_score=90))
        assert result.recommendations == [scorer.ACCEPTABLE_RISK_MESSAGE]

    def test_all_recommendations_in_order(self):
        assert scorer.risk_recommendations(61, 51, 61, 71) == [
            "Consider reducing funding target or extending timeline",
            "Conduct thorough market analysis before proceeding",
            "Strengthen team composition and experience",
            "Request additional due diligence on entrepreneur",
        ]

    def test_recommendation_thresholds_are_strict(self):
        assert scorer.risk_recommendations(60, 50, 60, 70) == [scorer.ACCEPTABLE_RISK_MESSAGE]

    def test_riskiest_opportunity_and_entrepreneur(self):
        opp = _opportunity(
            funding_target=5_000_000, expected_roi=90, investment_term_months=48,
            industry="technology", team_size=1,
        )
        result = scorer.score_risk(opp, SimpleNamespace(reliability_score=10))
        # Financial and market risk top out at 60 and 50 with the current tables
        assert result.financial_risk == 60
        assert result.market_risk == 50
        assert result.recommendations == [
            "Strengthen team composition and experience",
            "Request additional due diligence on entrepreneur",
        ]

    def test_market_risk_mixes_industry_and_location(self):
        opp = _opportunity(industry="technology")
        assert scorer.market_risk(opp) == 50
        opp.industry = "retail"
        assert scorer.market_risk(opp) == pytest.approx(47.5)

    @pytest.mark.parametrize("industry,expected", [
        ("technology", 60), ("Healthcare", 40), ("FINANCE", 50),
        ("manufacturing", 45), ("retail", 55), ("agriculture", 35),
        ("space mining", 50), (None, 50), ("", 50),
    ])
    def test_industry_table(self, industry, expected):
        assert scorer.industry_risk(industry) == expected

    def test_location_is_constant(self):
        assert scorer.location_risk("Harare") == scorer.location_risk(None) == scorer.LOCATION_RISK

    @pytest.mark.parametrize("team_size,expected", [(None, 50), (0, 50), (1, 70), (2, 70), (3, 30), (12, 30)])
    def test_team_risk(self, team_size, expected):
        assert scorer.team_risk(_opportunity(team_size=team_size)) == expected

    def test_thresholds_are_strict(self):
        opp = _opportunity(funding_target=1_000_000, expected_roi=50, investment_term_months=24)
        assert scorer.financial_risk(opp) == pytest.approx((40 + 30 + 30) / 3)

    def test_missing_financials_treated_as_low(self):
        opp = _opportunity(expected_roi=None, investment_term_months=None)
        assert scorer.financial_risk(opp) == pytest.approx((40 + 30 + 30) / 3)

    def test_unscored_entrepreneur_is_maximum_risk(self):
        assert scorer.entrepreneur_risk(None) == 100

    def test_entrepreneur_risk_clamped(self):
        assert scorer.entrepreneur_risk(120) == 0
        assert scorer.entrepreneur_risk(-5) == 100


# ---------------------------------------------------------------------------
# Leader performance
# ---------------------------------------------------------------------------


class TestLeaderPerformance:
    def test_active_chairperson(self):
        record = _leader(
            meetings_called=4, announcements_made=3,
            investment_success_rate=80.0, member_satisfaction_score=0.9,
        )
        result = scorer.score_leader(record)
        assert result.meetings_score == 40
        assert result.announcements_score == 45
        assert result.investment_score == 80
        assert result.satisfaction_score == 90
        assert result.overall_score == pytest.approx(0.25 * 40 + 0.25 * 45 + 0.3 * 80 + 0.2 * 90)
        assert result.duties_performed == {
            "meetings_called": 4, "announcements_made": 3,
            "investment_success_rate": 80.0, "member_satisfaction_score": 0.9,
        }

    def test_counters_cap_at_100(self):
        result = scorer.score_leader(_leader(meetings_called=25, announcements_made=7))
        assert result.meetings_score == 100
        assert result.announcements_score == 100

    def test_out_of_range_inputs_clamped(self):
        result = scorer.score_leader(_leader(investment_success_rate=130.0, member_satisfaction_score=1.4))
        assert result.investment_score == 100
        assert result.satisfaction_score == 100
        assert result.overall_score <= 100

    def test_null_counters(self):
        result = scorer.score_leader(_leader(
            meetings_called=None, announcements_made=None,
            investment_success_rate=None, member_satisfaction_score=None,
        ))
        assert result.overall_score == 0


class TestRangeInvariant:
    @pytest.mark.parametrize("reliability", [None, 0, 35.5, 100])
    @pytest.mark.parametrize("team_size", [None, 1, 8])
    def test_risk_within_bounds(self, reliability, team_size):
        opp = _opportunity(funding_target=3_000_000, expected_roi=75, team_size=team_size)
        r = scorer.score_risk(opp, SimpleNamespace(reliability_score=reliability))
        for value in (r.overall_risk, r.financial_risk, r.market_risk, r.team_risk, r.entrepreneur_risk):
            assert 0 <= value <= 100
