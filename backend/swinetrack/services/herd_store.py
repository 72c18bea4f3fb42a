"""Herd Store — row loading, locking and relative counter updates used by every command.

Invariants:
    - Locked reads use SELECT ... FOR UPDATE with populate_existing, so the row seen
      by a rule check is the row the transaction holds
    - Locks are taken in one global order: lot, pens (ascending id), pig
    - Counters change only through relative UPDATEs (col = col + delta), never blind writes
    - Pen average weight is recomputed from ACTIVE pigs in the pen, 0.0 when none
    - Change-log sequence numbers are assigned while the pig row is locked

Design Decisions:
    - Plain async functions taking the session explicitly: no repository objects,
      no module-level session, the caller's unit of work owns the transaction
"""

import logging
from datetime import datetime
from typing import Any, Iterable
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from swinetrack.core.change_log import ChangeRecord, coerce_value, next_sequence
from swinetrack.core.domain_types import ChangeField, LifeState
from swinetrack.core.errors import ResourceNotFoundError, TransactionConflictError
from swinetrack.models.lot import Lot
from swinetrack.models.pen import Pen
from swinetrack.models.pig import Pig
from swinetrack.models.pig_change import PigChange

logger = logging.getLogger(__name__)


# ─── Loading ─────────────────────────────────────────────────────

async def _load(db: AsyncSession, model, entity_id: UUID, lock: bool, label: str):
    query = select(model).where(model.id == entity_id)
    if lock:
        query = query.with_for_update().execution_options(populate_existing=True)
    row = (await db.execute(query)).scalar_one_or_none()
    if row is None:
        raise ResourceNotFoundError(label, str(entity_id))
    return row


async def load_lot(db: AsyncSession, lot_id: UUID, lock: bool = False) -> Lot:
    return await _load(db, Lot, lot_id, lock, "Lot")


async def load_pen(db: AsyncSession, pen_id: UUID, lock: bool = False) -> Pen:
    return await _load(db, Pen, pen_id, lock, "Pen")


async def load_pig(db: AsyncSession, pig_id: UUID, lock: bool = False) -> Pig:
    return await _load(db, Pig, pig_id, lock, "Pig")


async def lock_pens(db: AsyncSession, pen_ids: Iterable[UUID]) -> dict[UUID, Pen]:
    """Lock several pens in ascending id order."""
    locked = {}
    for pen_id in sorted(set(pen_ids), key=str):
        locked[pen_id] = await load_pen(db, pen_id, lock=True)
    return locked


async def lock_pig_location(
    db: AsyncSession, pig_id: UUID, extra_pen_ids: Iterable[UUID] = (),
    with_lot: bool = True,
) -> tuple[Pig, Lot | None, dict[UUID, Pen]]:
    """Lock lot, pens and pig of a pig command in the global lock order.

    The pig is read once without a lock to learn its lot and pen, then re-read
    under lock last. If another transaction moved it in between, the command is
    reported as a conflict rather than applied to a stale location.
    """
    probe = await load_pig(db, pig_id)
    lot_id, pen_id = probe.lot_id, probe.pen_id

    lot = await load_lot(db, lot_id, lock=True) if with_lot else None
    pens = await lock_pens(db, [pen_id, *extra_pen_ids])
    pig = await load_pig(db, pig_id, lock=True)

    if pig.pen_id != pen_id:
        raise TransactionConflictError(
            f"Pig '{pig.tag}' was moved by a concurrent command, retry",
        )
    return pig, lot, pens


# ─── Uniqueness ──────────────────────────────────────────────────

async def exists(db: AsyncSession, column, value: Any, exclude_id: UUID | None = None) -> bool:
    """True if another row already uses value in a unique column."""
    model = column.class_
    query = select(model.id).where(column == value)
    if exclude_id is not None:
        query = query.where(model.id != exclude_id)
    return (await db.execute(query.limit(1))).first() is not None


# ─── Counts ──────────────────────────────────────────────────────

async def count_pigs(
    db: AsyncSession, *, lot_id: UUID | None = None, pen_id: UUID | None = None,
    states: Iterable[LifeState] | None = None,
) -> int:
    query = select(func.count(Pig.id))
    if lot_id is not None:
        query = query.where(Pig.lot_id == lot_id)
    if pen_id is not None:
        query = query.where(Pig.pen_id == pen_id)
    if states is not None:
        query = query.where(Pig.state.in_([s.value for s in states]))
    return (await db.execute(query)).scalar_one()


async def pig_states(
    db: AsyncSession, *, lot_id: UUID | None = None, pen_id: UUID | None = None,
) -> list[str]:
    query = select(Pig.state)
    if lot_id is not None:
        query = query.where(Pig.lot_id == lot_id)
    if pen_id is not None:
        query = query.where(Pig.pen_id == pen_id)
    return list((await db.execute(query)).scalars().all())


# ─── Relative counter updates ────────────────────────────────────

async def shift_pen_occupancy(db: AsyncSession, pen_id: UUID, delta: int) -> None:
    await db.execute(
        update(Pen)
        .where(Pen.id == pen_id)
        .values(occupancy=Pen.occupancy + delta)
        .execution_options(synchronize_session="fetch")
    )


async def shift_lot_live_count(db: AsyncSession, lot_id: UUID, delta: int) -> None:
    await db.execute(
        update(Lot)
        .where(Lot.id == lot_id)
        .values(current_live_count=Lot.current_live_count + delta)
        .execution_options(synchronize_session="fetch")
    )


async def recompute_pen_average(db: AsyncSession, pen_id: UUID) -> float:
    """Average current weight of ACTIVE pigs in the pen, written back to the pen row."""
    avg = (await db.execute(
        select(func.avg(Pig.current_weight))
        .where(Pig.pen_id == pen_id)
        .where(Pig.state == LifeState.ACTIVE.value)
    )).scalar_one()
    average = float(avg) if avg is not None else 0.0
    await db.execute(
        update(Pen)
        .where(Pen.id == pen_id)
        .values(average_weight=average)
        .execution_options(synchronize_session="fetch")
    )
    return average


# ─── Change log ──────────────────────────────────────────────────

async def append_change(
    db: AsyncSession, pig: Pig, field: ChangeField, old_value: Any, new_value: Any,
    at: datetime, note: str | None = None,
) -> PigChange:
    """Append one record to the pig's change log."""
    last = (await db.execute(
        select(func.max(PigChange.sequence)).where(PigChange.pig_id == pig.id)
    )).scalar_one()
    change = PigChange(
        pig_id=pig.id,
        sequence=next_sequence(last),
        recorded_at=at,
        field=field.value,
        old_value=coerce_value(field, old_value),
        new_value=coerce_value(field, new_value),
        note=note,
    )
    db.add(change)
    return change


def to_change_record(row: PigChange) -> ChangeRecord:
    field = ChangeField(row.field)
    return ChangeRecord(
        sequence=row.sequence,
        recorded_at=row.recorded_at,
        field=field,
        old_value=coerce_value(field, row.old_value),
        new_value=coerce_value(field, row.new_value),
        note=row.note,
    )
