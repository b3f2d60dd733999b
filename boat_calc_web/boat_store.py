"""Persistence layer for the shared boat shortlist.

Family members add boats they found, vote them up or down and remove the ones
nobody wants. The list is shared by everyone using the same database and is
ranked by score (up votes minus down votes).
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import DateTime, Numeric, String, Text, create_engine, select
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker

logger = logging.getLogger(__name__)

VOTE_KINDS = ("up", "down")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class BoatModel(Base):
    __tablename__ = "boats"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255))
    price: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    year: Mapped[str] = mapped_column(String(16), default="")
    length: Mapped[str] = mapped_column(String(32), default="")
    engine: Mapped[str] = mapped_column(String(64), default="")
    finn_url: Mapped[str] = mapped_column(Text, default="")
    description: Mapped[str] = mapped_column(Text, default="")
    added_by: Mapped[str] = mapped_column(String(255), default="Family Member")
    votes_up: Mapped[int] = mapped_column(default=0)
    votes_down: Mapped[int] = mapped_column(default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


class BoatStore:
    """Database-backed boat shortlist."""

    def __init__(self, url: str) -> None:
        self._engine = create_engine(url)
        Base.metadata.create_all(self._engine)
        self._session_factory = sessionmaker(self._engine, expire_on_commit=False)

    def list_boats(self) -> List[Dict[str, Any]]:
        """Return all boats, best score first."""
        with self._session_factory() as session:
            rows = session.execute(
                select(BoatModel).order_by(
                    (BoatModel.votes_up - BoatModel.votes_down).desc(),
                    BoatModel.id.asc(),
                )
            ).scalars()
            return [self._to_dict(row) for row in rows]

    def add_boat(
        self,
        name: str,
        price,
        *,
        year: str = "",
        length: str = "",
        engine: str = "",
        finn_url: str = "",
        description: str = "",
        added_by: str = "Family Member",
    ) -> int:
        """Add a boat and return its id. Name and a non-negative price are required."""
        if not name or not name.strip():
            raise ValueError("Boat name is required")
        if price is None or price < 0:
            raise ValueError("Boat price must be a non-negative amount")
        row = BoatModel(
            name=name.strip(),
            price=price,
            year=year,
            length=length,
            engine=engine,
            finn_url=finn_url,
            description=description,
            added_by=added_by,
        )
        with self._session_factory() as session:
            session.add(row)
            session.commit()
            boat_id = row.id
        logger.info("Added boat %s (%s)", boat_id, row.name)
        return boat_id

    def vote(self, boat_id: int, kind: str) -> Optional[Dict[str, Any]]:
        """Register an up or down vote. Returns the updated boat, or None if unknown."""
        if kind not in VOTE_KINDS:
            raise ValueError(f"Vote must be one of {', '.join(VOTE_KINDS)}; got {kind}")
        with self._session_factory() as session:
            row = session.get(BoatModel, boat_id)
            if row is None:
                return None
            if kind == "up":
                row.votes_up += 1
            else:
                row.votes_down += 1
            session.commit()
            return self._to_dict(row)

    def remove_boat(self, boat_id: int) -> None:
        with self._session_factory() as session:
            row = session.get(BoatModel, boat_id)
            if row:
                session.delete(row)
                session.commit()

    def clear(self) -> None:
        with self._session_factory() as session:
            session.execute(BoatModel.__table__.delete())
            session.commit()

    @staticmethod
    def _to_dict(row: BoatModel) -> Dict[str, Any]:
        return {
            "id": row.id,
            "name": row.name,
            "price": row.price,
            "year": row.year,
            "length": row.length,
            "engine": row.engine,
            "finn_url": row.finn_url,
            "description": row.description,
            "added_by": row.added_by,
            "votes": {"up": row.votes_up, "down": row.votes_down},
            "score": row.votes_up - row.votes_down,
            "date_added": row.created_at.strftime("%d.%m.%Y"),
        }


def create_boat_store_from_env(url: Optional[str]) -> BoatStore:
    return BoatStore(url or "sqlite:///boat_calc.sqlite3")
