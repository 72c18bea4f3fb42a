"""Pen ORM — a physical enclosure belonging to one lot.

Invariants:
    - number is globally unique
    - 0 <= occupancy <= capacity, capacity > 0 (CHECK constraints)
    - average_weight is derived from ACTIVE pigs in the pen, written only by the engine
    - (id, lot_id) is unique so pigs can reference both in one composite foreign key

Design Decisions:
    - Composite key target (id, lot_id): the store itself rejects a pig whose pen
      belongs to another lot
    - Pen.pigs is view-only: pig location changes through pen_id, never through the collection
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint, DateTime, Float, ForeignKey, Integer, String, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from swinetrack.db.base import Base


class Pen(Base):
    """Pen entity — current location of pigs."""
    __tablename__ = "pens"
    __table_args__ = (
        UniqueConstraint("id", "lot_id", name="uq_pens_id_lot"),
        CheckConstraint("capacity > 0", name="ck_pens_capacity_positive"),
        CheckConstraint(
            "occupancy >= 0 AND occupancy <= capacity",
            name="ck_pens_occupancy_bounds",
        ),
        CheckConstraint(
            "pen_type IN ('NURSERY', 'FINISHING', 'INFIRMARY')",
            name="ck_pens_type",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    number: Mapped[str] = mapped_column(
        String(16), nullable=False, unique=True, index=True,
    )
    lot_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("lots.id"), nullable=False, index=True,
    )
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    occupancy: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    average_weight: Mapped[float] = mapped_column(
        Float, nullable=False, default=0.0,
    )
    pen_type: Mapped[str] = mapped_column(String(16), nullable=False)
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

    lot: Mapped["Lot"] = relationship("Lot", back_populates="pens", lazy="raise")
    pigs: Mapped[list["Pig"]] = relationship(
        "Pig", primaryjoin="Pen.id == foreign(Pig.pen_id)",
        viewonly=True, lazy="raise", order_by="Pig.tag",
    )
