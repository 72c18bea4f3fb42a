"""PigChange ORM — append-only change log of a pig's weight, state and pen.

Invariants:
    - (pig_id, sequence) is unique; sequence starts at 1 and increases per pig
    - Rows are inserted by the engine on the committed path only, never updated
    - old_value/new_value keep their JSON type (float for WEIGHT, str for STATE and PEN)

Design Decisions:
    - JSON columns instead of text: weights round-trip as numbers, no parsing
    - Explicit sequence over ordering by timestamp: two changes in one clock tick stay ordered
"""

import uuid
from typing import Any
from datetime import datetime, timezone

from sqlalchemy import (
    DateTime, ForeignKey, Integer, JSON, String, Text, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from swinetrack.db.base import Base


class PigChange(Base):
    """One change-log record."""
    __tablename__ = "pig_changes"
    __table_args__ = (
        UniqueConstraint("pig_id", "sequence", name="uq_pig_changes_pig_sequence"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    pig_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("pigs.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    field: Mapped[str] = mapped_column(String(16), nullable=False)
    old_value: Mapped[Any] = mapped_column(JSON, nullable=True)
    new_value: Mapped[Any] = mapped_column(JSON, nullable=False)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)

    pig: Mapped["Pig"] = relationship(
        "Pig", back_populates="changes", lazy="raise",
    )
