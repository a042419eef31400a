from __future__ import annotations

import uuid
from datetime import date, datetime

from sqlalchemy import Boolean, Date, DateTime, Float, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _uuid() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    pass


USER_ROLES = ("super_admin", "entrepreneur", "investor", "service_provider", "observer")
POOL_MEMBER_ROLES = ("member", "chairperson", "secretary", "treasurer", "investments_officer")


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    email: Mapped[str] = mapped_column(String(300), nullable=False)
    full_name: Mapped[str] = mapped_column(String(300), default="")
    role: Mapped[str] = mapped_column(String(30), default="investor")  # one of USER_ROLES
    reliability_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    opportunities: Mapped[list[Opportunity]] = relationship("Opportunity", back_populates="entrepreneur")
    agreements: Mapped[list[Agreement]] = relationship("Agreement", back_populates="entrepreneur")


class Opportunity(Base):
    __tablename__ = "opportunities"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    entrepreneur_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("users.id"), nullable=True)
    funding_target: Mapped[float] = mapped_column(Float, default=0.0)
    expected_roi: Mapped[float | None] = mapped_column(Float, nullable=True)
    investment_term_months: Mapped[int | None] = mapped_column(Integer, nullable=True)
    industry: Mapped[str | None] = mapped_column(String(100), nullable=True)
    location: Mapped[str | None] = mapped_column(String(200), nullable=True)
    team_size: Mapped[int | None] = mapped_column(Integer, nullable=True)
    risk_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    ai_insights_json: Mapped[str] = mapped_column(Text, default="{}")
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    entrepreneur: Mapped[User | None] = relationship("User", back_populates="opportunities")
    milestones: Mapped[list[Milestone]] = relationship("Milestone", back_populates="opportunity", cascade="all, delete-orphan")


class Milestone(Base):
    __tablename__ = "opportunity_milestones"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    opportunity_id: Mapped[str] = mapped_column(String(36), ForeignKey("opportunities.id"), nullable=False)
    title: Mapped[str] = mapped_column(String(300), default="")
    status: Mapped[str] = mapped_column(String(30), default="pending")  # "completed" | "pending" | ...
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    completed_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    opportunity: Mapped[Opportunity] = relationship("Opportunity", back_populates="milestones")


class Agreement(Base):
    __tablename__ = "agreements"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    entrepreneur_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False)
    title: Mapped[str] = mapped_column(String(300), default="")
    status: Mapped[str] = mapped_column(String(30), default="inactive")  # "active" | "inactive" | ...

    entrepreneur: Mapped[User] = relationship("User", back_populates="agreements")


class InvestmentPool(Base):
    __tablename__ = "investment_pools"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(300), nullable=False)
    target_amount: Mapped[float] = mapped_column(Float, default=0.0)

    members: Mapped[list[PoolMember]] = relationship("PoolMember", back_populates="pool", cascade="all, delete-orphan")


class PoolMember(Base):
    __tablename__ = "pool_members"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    pool_id: Mapped[str] = mapped_column(String(36), ForeignKey("investment_pools.id"), nullable=False)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False)
    role: Mapped[str] = mapped_column(String(30), default="member")  # one of POOL_MEMBER_ROLES
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    pool: Mapped[InvestmentPool] = relationship("InvestmentPool", back_populates="members")


class PoolLeaderPerformance(Base):
    __tablename__ = "pool_leader_performance"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    pool_id: Mapped[str] = mapped_column(String(36), ForeignKey("investment_pools.id"), nullable=False)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False)
    role: Mapped[str] = mapped_column(String(30), nullable=False)
    meetings_called: Mapped[int] = mapped_column(Integer, default=0)
    announcements_made: Mapped[int] = mapped_column(Integer, default=0)
    investment_success_rate: Mapped[float] = mapped_column(Float, default=0.0)  # 0-100
    member_satisfaction_score: Mapped[float] = mapped_column(Float, default=0.0)  # 0-1
    overall_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    last_evaluation_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
