"""Herd Stats — pure computation of lot and pen summary statistics.

Invariants:
    - All inputs are entity snapshots and counts (no IO, no DB)
    - Returns flat dicts (serializable as JSON)
    - Never divides by zero — empty pens and zero-count lots yield 0.0

Design Decisions:
    - Pure functions, not methods on the ORM rows: rows are persistence, stats are presentation
    - mortality_pct follows (initial_count − current_live_count) / initial_count × 100,
      so sold animals are included in the loss figure
"""

from collections import Counter
from datetime import datetime, timezone
from typing import Iterable

from swinetrack.core.domain_types import LifeState
from swinetrack.core.repository_protocols import LotLike, PenLike


def mortality_percentage(initial_count: int, current_live_count: int) -> float:
    if initial_count <= 0:
        return 0.0
    return round((initial_count - current_live_count) / initial_count * 100, 2)


def occupancy_percentage(occupancy: int, capacity: int) -> float:
    if capacity <= 0:
        return 0.0
    return round(occupancy / capacity * 100, 2)


def days_between(start: datetime, end: datetime) -> int:
    if start.tzinfo is None:
        start = start.replace(tzinfo=timezone.utc)
    if end.tzinfo is None:
        end = end.replace(tzinfo=timezone.utc)
    return max((end - start).days, 0)


def compute_lot_stats(
    lot: LotLike, pig_states: Iterable[str], now: datetime | None = None,
) -> dict:
    """Summary for one lot from its row and the states of its registered pigs."""
    now = now or datetime.now(timezone.utc)
    counts = Counter(LifeState(s) for s in pig_states)
    return {
        "id": str(lot.id),
        "code": lot.code,
        "status": lot.status,
        "days_in_system": days_between(lot.admission_date, now),
        "initial_count": lot.initial_count,
        "current_live_count": lot.current_live_count,
        "losses": lot.initial_count - lot.current_live_count,
        "mortality_pct": mortality_percentage(lot.initial_count, lot.current_live_count),
        "registered_pigs": sum(counts.values()),
        "active_pigs": counts[LifeState.ACTIVE],
        "sick_pigs": counts[LifeState.SICK],
        "sold_pigs": counts[LifeState.SOLD],
        "dead_pigs": counts[LifeState.DEAD],
    }


def compute_pen_stats(
    pen: PenLike, average_weight: float, pig_states: Iterable[str],
) -> dict:
    """Summary for one pen. pig_states covers pigs currently located in the pen."""
    counts = Counter(LifeState(s) for s in pig_states)
    return {
        "id": str(pen.id),
        "number": pen.number,
        "capacity": pen.capacity,
        "occupancy": pen.occupancy,
        "free_slots": pen.capacity - pen.occupancy,
        "occupancy_pct": occupancy_percentage(pen.occupancy, pen.capacity),
        "average_weight": round(average_weight, 2),
        "active_pigs": counts[LifeState.ACTIVE],
        "sick_pigs": counts[LifeState.SICK],
    }
