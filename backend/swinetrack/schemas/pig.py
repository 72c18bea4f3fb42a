"""Pig Schemas — command payloads, snapshots and change-log records for pigs.

Invariants:
    - PigAdmit.tag matches L-NNNNNN (e.g. T-000001)
    - Weights are positive at the boundary; the engine re-checks them and the 30% rule
    - Snapshots never expose ORM objects

Design Decisions:
    - One payload model per command (admit, weigh, state change, transfer):
      each command validates only what it needs
"""

from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from swinetrack.core.domain_types import ChangeField, LifeState


class PigAdmit(BaseModel):
    """Admission payload: a new pig into a pen of its lot."""
    tag: str = Field(pattern=r"^[A-Z]-\d{6}$")
    lot_id: UUID
    pen_id: UUID
    initial_weight: float = Field(gt=0)
    admission_date: datetime | None = None
    week_of_life: int | None = Field(None, ge=1, le=52)
    notes: str | None = Field(None, max_length=1000)

    @field_validator("admission_date")
    @classmethod
    def not_in_future(cls, v: datetime | None) -> datetime | None:
        if v is None:
            return v
        if v.tzinfo is None:
            v = v.replace(tzinfo=timezone.utc)
        if v > datetime.now(timezone.utc):
            raise ValueError("admission_date cannot be in the future")
        return v


class PigWeighing(BaseModel):
    weight: float = Field(gt=0)
    weighed_at: datetime | None = None


class PigStateChange(BaseModel):
    state: LifeState
    note: str | None = Field(None, max_length=1000)


class PigTransfer(BaseModel):
    target_pen_id: UUID
    note: str | None = Field(None, max_length=1000)


class PigNotesUpdate(BaseModel):
    notes: str | None = Field(None, max_length=1000)


class PigRead(BaseModel):
    """Pig snapshot."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    tag: str
    lot_id: UUID
    pen_id: UUID
    initial_weight: float
    current_weight: float
    admission_date: datetime
    week_of_life: int | None
    state: LifeState
    last_weighed_at: datetime | None
    notes: str | None


class ChangeRecordRead(BaseModel):
    """One change-log entry, oldest first in any list."""
    model_config = ConfigDict(from_attributes=True)

    sequence: int
    recorded_at: datetime
    field: ChangeField
    old_value: Any
    new_value: Any
    note: str | None = None
