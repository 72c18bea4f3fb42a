"""Pig ORM — one animal, owned by one lot and located in one pen.

Invariants:
    - tag is globally unique
    - current_weight > 0 and initial_weight > 0 (CHECK constraints)
    - (pen_id, lot_id) references pens(id, lot_id): the pen always belongs to the pig's lot
    - state in ACTIVE | SICK | SOLD | DEAD; SOLD and DEAD are terminal

Design Decisions:
    - notes is free text only; history lives in pig_changes, never in notes
    - Pig.pen is view-only: relocation happens by writing pen_id inside the engine
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint, DateTime, Float, ForeignKey, ForeignKeyConstraint,
    Integer, String, Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from swinetrack.db.base import Base


class Pig(Base):
    """Pig entity — individual animal with a typed change log."""
    __tablename__ = "pigs"
    __table_args__ = (
        ForeignKeyConstraint(
            ["pen_id", "lot_id"], ["pens.id", "pens.lot_id"],
            name="fk_pigs_pen_same_lot",
        ),
        CheckConstraint("initial_weight > 0", name="ck_pigs_initial_weight_positive"),
        CheckConstraint("current_weight > 0", name="ck_pigs_current_weight_positive"),
        CheckConstraint(
            "state IN ('ACTIVE', 'SICK', 'SOLD', 'DEAD')", name="ck_pigs_state",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    tag: Mapped[str] = mapped_column(
        String(32), nullable=False, unique=True, index=True,
    )
    lot_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("lots.id"), nullable=False, index=True,
    )
    pen_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False, index=True,
    )
    initial_weight: Mapped[float] = mapped_column(Float, nullable=False)
    current_weight: Mapped[float] = mapped_column(Float, nullable=False)
    admission_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    week_of_life: Mapped[int | None] = mapped_column(Integer, nullable=True)
    state: Mapped[str] = mapped_column(
        String(16), nullable=False, default="ACTIVE", index=True,
    )
    last_weighed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
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

    lot: Mapped["Lot"] = relationship("Lot", back_populates="pigs", lazy="raise")
    pen: Mapped["Pen"] = relationship(
        "Pen", primaryjoin="foreign(Pig.pen_id) == Pen.id",
        viewonly=True, lazy="raise",
    )
    changes: Mapped[list["PigChange"]] = relationship(
        "PigChange", back_populates="pig", lazy="raise",
        cascade="all, delete-orphan", order_by="PigChange.sequence",
    )
