"""Change Log — typed, append-only per-pig history and its replay.

Invariants:
    - Records are immutable; sequence numbers are 1-based and strictly increasing per pig
    - WEIGHT values are floats (kg), STATE values are LifeState names, PEN values are pen id strings
    - replay_changes walks records oldest first and requires each record's old_value
      to equal the value produced by the records before it
    - Admission always writes WEIGHT 0 -> initial_weight as the first record

Design Decisions:
    - Typed records instead of free text appended to a notes column: no lossy parsing
    - format_change renders the one-line text form for display only; it is never parsed back
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable
from uuid import UUID

from swinetrack.core.domain_types import ChangeField, LifeState


@dataclass(frozen=True)
class ChangeRecord:
    """One entry of a pig's history."""
    sequence: int
    recorded_at: datetime
    field: ChangeField
    old_value: Any
    new_value: Any
    note: str | None = None


@dataclass(frozen=True)
class ReplayedPig:
    """Pig attributes reconstructed from its change log."""
    weight: float
    state: LifeState
    pen_id: UUID | None
    last_weighed_at: datetime | None
    changes_applied: int


def coerce_value(field: ChangeField, value: Any) -> Any:
    """Normalize a logged value to its field type. JSON drops the .0 of whole floats."""
    if value is None:
        return None
    if field == ChangeField.WEIGHT:
        return float(value)
    return str(value)


def order_records(records: Iterable[ChangeRecord]) -> list[ChangeRecord]:
    """Oldest first. Duplicate sequence numbers mean a corrupted log."""
    ordered = sorted(records, key=lambda r: r.sequence)
    for prev, curr in zip(ordered, ordered[1:]):
        if curr.sequence == prev.sequence:
            raise ValueError(f"Duplicate change-log sequence {curr.sequence}")
    return ordered


def next_sequence(last_sequence: int | None) -> int:
    """Sequence number for the next appended record."""
    return (last_sequence or 0) + 1


def replay_changes(
    records: Iterable[ChangeRecord], admission_pen_id: UUID | None = None,
) -> ReplayedPig:
    """Rebuild weight, state and pen of a pig from its full history."""
    ordered = order_records(records)

    weight = 0.0
    state = LifeState.ACTIVE
    pen_id = admission_pen_id
    last_weighed_at: datetime | None = None

    if pen_id is None:
        first_move = next((r for r in ordered if r.field == ChangeField.PEN), None)
        if first_move is not None:
            pen_id = UUID(str(first_move.old_value))

    for record in ordered:
        if record.field == ChangeField.WEIGHT:
            _require_continuity(record, float(record.old_value), weight)
            weight = float(record.new_value)
            last_weighed_at = record.recorded_at
        elif record.field == ChangeField.STATE:
            _require_continuity(record, LifeState(record.old_value), state)
            state = LifeState(record.new_value)
        elif record.field == ChangeField.PEN:
            if pen_id is not None:
                _require_continuity(record, UUID(str(record.old_value)), pen_id)
            pen_id = UUID(str(record.new_value))

    return ReplayedPig(
        weight=weight, state=state, pen_id=pen_id,
        last_weighed_at=last_weighed_at, changes_applied=len(ordered),
    )


def _require_continuity(record: ChangeRecord, logged: Any, replayed: Any) -> None:
    if logged != replayed:
        raise ValueError(
            f"Change-log gap at sequence {record.sequence}: "
            f"{record.field.value} logged old value {logged!r}, replay has {replayed!r}"
        )


def format_change(record: ChangeRecord) -> str:
    """Render '2024-01-05T10:00:00+00:00 - WEIGHT: 20.0 -> 24.0 (note)'."""
    line = (
        f"{record.recorded_at.isoformat()} - {record.field.value}: "
        f"{record.old_value} -> {record.new_value}"
    )
    if record.note:
        line = f"{line} ({record.note})"
    return line
