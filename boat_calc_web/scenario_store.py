"""Saved financing plans, kept per browser session.

A plan records the inputs and totals of one calculation together with each
co-owner's net monthly amount, so the page can show who pays and who
receives without recomputing. Only the newest plans of each session are
kept.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import DateTime, ForeignKey, Numeric, String, create_engine, select
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship, sessionmaker

from boat_calc.data_models import FinancingParameters, FinancingResult
from boat_calc.formatter import role_for

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class SavedPlan(Base):
    __tablename__ = "saved_plans"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    session_token: Mapped[str] = mapped_column(String(64), index=True)
    name: Mapped[str] = mapped_column(String(255))
    purchase_price: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    annual_interest_rate_percent: Mapped[Decimal] = mapped_column(Numeric(7, 3))
    loan_term_years: Mapped[int]
    internal_loan_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    monthly_payment: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    total_interest: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    saved_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    shares: Mapped[List["SavedShare"]] = relationship(
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="SavedShare.position",
    )


class SavedShare(Base):
    """One co-owner's position in a saved plan."""

    __tablename__ = "saved_plan_shares"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    plan_id: Mapped[int] = mapped_column(ForeignKey("saved_plans.id", ondelete="CASCADE"), index=True)
    position: Mapped[int]
    display_name: Mapped[str] = mapped_column(String(255))
    upfront: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    net_monthly_payment: Mapped[Decimal] = mapped_column(Numeric(14, 2))

    plan: Mapped[SavedPlan] = relationship(back_populates="shares")


class ScenarioStore:
    """Database-backed list of saved plans per session token."""

    def __init__(self, url: str, *, keep_latest: int = 10) -> None:
        if keep_latest < 1:
            raise ValueError("keep_latest must be at least 1")
        self._engine = create_engine(url)
        Base.metadata.create_all(self._engine)
        self._session_factory = sessionmaker(self._engine, expire_on_commit=False)
        self.keep_latest = keep_latest

    def plans_for(self, session_token: Optional[str]) -> List[Dict[str, Any]]:
        """Return the session's plans, oldest first."""
        if not session_token:
            return []
        with self._session_factory() as session:
            plans = session.scalars(
                select(SavedPlan).where(SavedPlan.session_token == session_token).order_by(SavedPlan.id)
            )
            return [self._to_dict(plan) for plan in plans]

    def save(
        self,
        session_token: Optional[str],
        name: str,
        params: FinancingParameters,
        result: FinancingResult,
    ) -> Optional[int]:
        """Store a calculated plan and return its id, dropping the oldest beyond the limit."""
        if not session_token:
            return None
        plan = SavedPlan(
            session_token=session_token,
            name=name,
            purchase_price=params.purchase_price,
            annual_interest_rate_percent=params.annual_interest_rate_percent,
            loan_term_years=params.loan_term_years,
            internal_loan_amount=result.internal_loan_amount,
            monthly_payment=result.monthly_payment,
            total_interest=result.total_interest,
            shares=[
                SavedShare(
                    position=position,
                    display_name=person.display_name,
                    upfront=person.amount,
                    net_monthly_payment=person.net_monthly_payment,
                )
                for position, person in enumerate(result.breakdown)
            ],
        )
        with self._session_factory() as session:
            session.add(plan)
            session.flush()
            self._drop_oldest(session, session_token)
            session.commit()
            plan_id = plan.id
        logger.info("Saved plan %s (%s) with %d shares", plan_id, name, len(result.breakdown))
        return plan_id

    def delete(self, session_token: Optional[str], plan_id: int) -> None:
        if not session_token:
            return
        with self._session_factory() as session:
            plan = session.get(SavedPlan, plan_id)
            if plan is not None and plan.session_token == session_token:
                session.delete(plan)
                session.commit()

    def delete_all(self, session_token: Optional[str]) -> None:
        if not session_token:
            return
        with self._session_factory() as session:
            for plan in session.scalars(select(SavedPlan).where(SavedPlan.session_token == session_token)):
                session.delete(plan)
            session.commit()

    def _drop_oldest(self, session, session_token: str) -> None:
        stale = session.scalars(
            select(SavedPlan)
            .where(SavedPlan.session_token == session_token)
            .order_by(SavedPlan.id.desc())
            .offset(self.keep_latest)
        ).all()
        for plan in stale:
            session.delete(plan)
        if stale:
            logger.debug("Dropped %d old plan(s)", len(stale))

    @staticmethod
    def _to_dict(plan: SavedPlan) -> Dict[str, Any]:
        return {
            "id": plan.id,
            "name": plan.name,
            "purchase_price": plan.purchase_price,
            "rate": plan.annual_interest_rate_percent,
            "years": plan.loan_term_years,
            "internal_loan_amount": plan.internal_loan_amount,
            "monthly_payment": plan.monthly_payment,
            "total_interest": plan.total_interest,
            "saved_at": plan.saved_at,
            "shares": [
                {
                    "name": share.display_name,
                    "upfront": share.upfront,
                    "net_monthly_payment": share.net_monthly_payment,
                    "role": role_for(share.net_monthly_payment),
                }
                for share in plan.shares
            ],
        }


def create_scenario_store_from_env(url: Optional[str], keep_latest: int = 10) -> ScenarioStore:
    return ScenarioStore(url or "sqlite:///boat_calc.sqlite3", keep_latest=keep_latest)
