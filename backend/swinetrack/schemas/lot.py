"""Lot Schemas — creation/update payloads and read snapshots for lots.

Invariants:
    - LotCreate.code matches LOTE-YYYY-NNN
    - admission_date is never in the future
    - Counters (current_live_count, status) are never accepted from callers

Design Decisions:
    - Separate payload and snapshot models, composed rather than inherited:
      a snapshot is not "a payload plus an id"
    - Weight ordering (min <= avg <= max) is re-checked by the engine, not only here
"""

from datetime import datetime, timezone
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from swinetrack.core.domain_types import LotStatus, Site
from swinetrack.schemas.pen import PenRead
from swinetrack.schemas.pig import PigRead


def _not_in_future(v: datetime) -> datetime:
    if v.tzinfo is None:
        v = v.replace(tzinfo=timezone.utc)
    if v > datetime.now(timezone.utc):
        raise ValueError("admission_date cannot be in the future")
    return v


class LotCreate(BaseModel):
    """Lot creation payload."""
    code: str = Field(pattern=r"^LOTE-\d{4}-\d{3}$")
    admission_date: datetime
    admission_week: int | None = Field(None, ge=1, le=53)
    initial_count: int = Field(ge=1)
    initial_average_weight: float = Field(gt=0)
    initial_min_weight: float = Field(gt=0)
    initial_max_weight: float = Field(gt=0)
    site: Site
    notes: str | None = Field(None, max_length=2000)

    @field_validator("admission_date")
    @classmethod
    def check_date(cls, v: datetime) -> datetime:
        return _not_in_future(v)


class LotUpdate(BaseModel):
    """Descriptive fields only. Counters and status change through commands."""
    code: str | None = Field(None, pattern=r"^LOTE-\d{4}-\d{3}$")
    admission_date: datetime | None = None
    admission_week: int | None = Field(None, ge=1, le=53)
    site: Site | None = None
    notes: str | None = Field(None, max_length=2000)

    @field_validator("admission_date")
    @classmethod
    def check_date(cls, v: datetime | None) -> datetime | None:
        return _not_in_future(v) if v is not None else v


class LotFinalize(BaseModel):
    note: str | None = Field(None, max_length=1000)


class LotRead(BaseModel):
    """Lot snapshot."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    code: str
    admission_date: datetime
    admission_week: int | None
    initial_count: int
    current_live_count: int
    initial_average_weight: float
    initial_min_weight: float
    initial_max_weight: float
    site: Site
    status: LotStatus
    notes: str | None
    finalized_at: datetime | None


class LotDetail(BaseModel):
    """Lot snapshot with its pens and registered pigs."""
    lot: LotRead
    pens: list[PenRead]
    pigs: list[PigRead]


class LotStats(BaseModel):
    """Computed lot statistics."""
    id: UUID
    code: str
    status: LotStatus
    days_in_system: int
    initial_count: int
    current_live_count: int
    losses: int
    mortality_pct: float
    registered_pigs: int
    active_pigs: int
    sick_pigs: int
    sold_pigs: int
    dead_pigs: int
