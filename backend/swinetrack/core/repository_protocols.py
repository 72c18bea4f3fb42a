"""Boundary Protocols — structural contracts between core rules and ORM rows.

Invariants:
    - Core NEVER imports from models/ or services/ — dependency arrows point inward only
    - Rule functions read entities through these Protocols, never through ORM classes

Design Decisions:
    - Protocol over ABC: structural subtyping, ORM rows and test doubles both satisfy it
    - Attributes only, no methods: rules are pure reads of current entity state
"""

from datetime import datetime
from typing import Protocol
from uuid import UUID


class LotLike(Protocol):
    """Structural contract for Lot rows passed to core rules."""
    id: UUID
    code: str
    initial_count: int
    current_live_count: int
    site: str
    status: str
    admission_date: datetime


class PenLike(Protocol):
    """Structural contract for Pen rows passed to core rules."""
    id: UUID
    number: str
    lot_id: UUID
    capacity: int
    occupancy: int
    pen_type: str


class PigLike(Protocol):
    """Structural contract for Pig rows passed to core rules."""
    id: UUID
    tag: str
    lot_id: UUID
    pen_id: UUID
    current_weight: float
    state: str
