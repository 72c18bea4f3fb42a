"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - LotId, PenId, PigId wrap UUIDs — never use bare UUID in domain logic
    - Weights are kilograms, always > 0 for a live animal
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: stored as-is in String columns and serialized to JSON without custom encoders
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

LotId = NewType("LotId", UUID)
PenId = NewType("PenId", UUID)
PigId = NewType("PigId", UUID)


# ─── Value Types ─────────────────────────────────────────────────

Kilograms = NewType("Kilograms", float)      # > 0
Percentage = NewType("Percentage", float)    # 0.0–100.0


# ─── Enums ───────────────────────────────────────────────────────

class LifeState(str, Enum):
    """Pig life-state. SOLD and DEAD are terminal."""
    ACTIVE = "ACTIVE"
    SICK = "SICK"
    SOLD = "SOLD"
    DEAD = "DEAD"

    @property
    def is_terminal(self) -> bool:
        return self in (LifeState.SOLD, LifeState.DEAD)

    @property
    def is_live(self) -> bool:
        return not self.is_terminal


class LotStatus(str, Enum):
    """Lot lifecycle — FINALIZED is one-way."""
    ACTIVE = "ACTIVE"
    FINALIZED = "FINALIZED"


class Site(str, Enum):
    """Production stage of a lot."""
    NURSERY = "NURSERY"
    FINISHING = "FINISHING"


class PenType(str, Enum):
    """Pen purpose. INFIRMARY pens accept any lot."""
    NURSERY = "NURSERY"
    FINISHING = "FINISHING"
    INFIRMARY = "INFIRMARY"


class ChangeField(str, Enum):
    """Which attribute of a pig a change-log record describes."""
    WEIGHT = "WEIGHT"
    STATE = "STATE"
    PEN = "PEN"
