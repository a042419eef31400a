"""Shared fixtures: in-memory SQLite database seeded with a small platform snapshot."""
from __future__ import annotations

import json
from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from insights.models import (
    Agreement,
    Base,
    InvestmentPool,
    Milestone,
    Opportunity,
    PoolLeaderPerformance,
    PoolMember,
    User,
)


@pytest.fixture()
def engine():
    """In-memory engine; StaticPool so every session shares the same database."""
    eng = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(eng)
    return eng


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def session(session_factory):
    sess = session_factory()
    try:
        yield sess
    finally:
        sess.close()


@pytest.fixture()
def seeded(session: Session) -> dict[str, str]:
    """Entrepreneur with 4 milestones (3 completed on time) and 2 agreements (1 active),
    a risky technology opportunity, and a pool with a chairperson record."""
    admin = User(id="admin-1", email="admin@pool.test", full_name="Ada Admin", role="super_admin")
    founder = User(
        id="founder-1", email="founder@pool.test", full_name="Farai Founder",
        role="entrepreneur", reliability_score=60.0,
    )
    investor = User(id="investor-1", email="investor@pool.test", full_name="Ivy Investor", role="investor")
    newcomer = User(id="newcomer-1", email="new@pool.test", full_name="Nia New", role="entrepreneur")
    session.add_all([admin, founder, investor, newcomer])

    opp = Opportunity(
        id="opp-1", title="Solar irrigation", entrepreneur_id="founder-1",
        funding_target=2_000_000, expected_roi=80, investment_term_months=36,
        industry="technology", location="Bulawayo", team_size=2,
        ai_insights_json=json.dumps({"summary": "Strong local demand", "tags": ["solar"]}),
    )
    orphan = Opportunity(id="opp-orphan", title="No owner", entrepreneur_id=None, funding_target=1000)
    session.add_all([opp, orphan])

    due = date(2024, 6, 30)
    session.add_all([
        Milestone(opportunity_id="opp-1", title="Prototype", status="completed",
                  due_date=due, completed_date=date(2024, 6, 1)),
        Milestone(opportunity_id="opp-1", title="Pilot", status="completed",
                  due_date=due, completed_date=date(2024, 6, 30)),
        Milestone(opportunity_id="opp-1", title="Permits", status="completed",
                  due_date=due, completed_date=date(2024, 5, 20)),
        Milestone(opportunity_id="opp-1", title="Launch", status="pending", due_date=due),
    ])
    session.add_all([
        Agreement(entrepreneur_id="founder-1", title="Term sheet", status="active"),
        Agreement(entrepreneur_id="founder-1", title="Old MOU", status="inactive"),
    ])

    pool = InvestmentPool(id="pool-1", name="Harvest Collective", target_amount=50_000)
    session.add(pool)
    session.add_all([
        PoolMember(pool_id="pool-1", user_id="investor-1", role="chairperson", is_active=True),
        PoolMember(pool_id="pool-1", user_id="founder-1", role="member", is_active=False),
    ])
    session.add(PoolLeaderPerformance(
        id="perf-1", pool_id="pool-1", user_id="investor-1", role="chairperson",
        meetings_called=4, announcements_made=3,
        investment_success_rate=80.0, member_satisfaction_score=0.9,
    ))
    session.commit()
    return {
        "admin": "admin-1", "founder": "founder-1", "investor": "investor-1",
        "newcomer": "newcomer-1", "opportunity": "opp-1", "orphan": "opp-orphan",
        "pool": "pool-1", "performance": "perf-1",
    }
