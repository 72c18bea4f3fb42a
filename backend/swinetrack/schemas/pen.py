"""Pen Schemas — creation/update payloads and read snapshots for pens.

Invariants:
    - number matches L-NN (e.g. A-01)
    - capacity between 1 and 50 at the boundary; the engine re-checks capacity > 0
      and capacity >= occupancy
    - occupancy and average_weight are read-only
"""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from swinetrack.core.domain_types import LifeState, PenType


class PenCreate(BaseModel):
    """Pen creation payload."""
    number: str = Field(pattern=r"^[A-Z]-\d{2}$")
    lot_id: UUID
    capacity: int = Field(ge=1, le=50)
    pen_type: PenType


class PenUpdate(BaseModel):
    number: str | None = Field(None, pattern=r"^[A-Z]-\d{2}$")
    lot_id: UUID | None = None
    capacity: int | None = Field(None, ge=1, le=50)
    pen_type: PenType | None = None


class PenRead(BaseModel):
    """Pen snapshot."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    number: str
    lot_id: UUID
    capacity: int
    occupancy: int
    average_weight: float
    pen_type: PenType


class PenPigSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    tag: str
    current_weight: float
    state: LifeState


class PenDetail(BaseModel):
    """Pen snapshot with the pigs currently located in it."""
    pen: PenRead
    lot_code: str
    pigs: list[PenPigSummary]


class PenStats(BaseModel):
    id: UUID
    number: str
    capacity: int
    occupancy: int
    free_slots: int
    occupancy_pct: float
    average_weight: float
    active_pigs: int
    sick_pigs: int
