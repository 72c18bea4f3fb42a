"""Lot ORM — a cohort of pigs admitted together.

Invariants:
    - id is UUID primary key
    - code is globally unique
    - 0 <= current_live_count <= initial_count (enforced by CHECK constraint and by the engine)
    - status transitions: ACTIVE -> FINALIZED only

Design Decisions:
    - current_live_count is only touched through relative UPDATEs issued by the engine
    - Relationships use lazy="raise": every query states its eager loads explicitly,
      so no implicit IO happens inside async code
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from swinetrack.db.base import Base


class Lot(Base):
    """Lot aggregate — owns pens and pigs."""
    __tablename__ = "lots"
    __table_args__ = (
        CheckConstraint("initial_count > 0", name="ck_lots_initial_count_positive"),
        CheckConstraint(
            "current_live_count >= 0 AND current_live_count <= initial_count",
            name="ck_lots_live_count_bounds",
        ),
        CheckConstraint("site IN ('NURSERY', 'FINISHING')", name="ck_lots_site"),
        CheckConstraint("status IN ('ACTIVE', 'FINALIZED')", name="ck_lots_status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    code: Mapped[str] = mapped_column(
        String(32), nullable=False, unique=True, index=True,
    )
    admission_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    admission_week: Mapped[int | None] = mapped_column(Integer, nullable=True)
    initial_count: Mapped[int] = mapped_column(Integer, nullable=False)
    current_live_count: Mapped[int] = mapped_column(Integer, nullable=False)
    initial_average_weight: Mapped[float] = mapped_column(Float, nullable=False)
    initial_min_weight: Mapped[float] = mapped_column(Float, nullable=False)
    initial_max_weight: Mapped[float] = mapped_column(Float, nullable=False)
    site: Mapped[str] = mapped_column(String(16), nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default="ACTIVE", index=True,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    finalized_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    pens: Mapped[list["Pen"]] = relationship(
        "Pen", back_populates="lot", lazy="raise", order_by="Pen.number",
    )
    pigs: Mapped[list["Pig"]] = relationship(
        "Pig", back_populates="lot", lazy="raise", order_by="Pig.tag",
    )
