"""Pig Handlers — admission, weighing, life-state changes, transfers and notes.

Invariants:
    - Each command is one transaction: every precondition is checked before the
      first write, and the first violation rolls everything back
    - Occupancy and live-count change by exactly one per admission, exit or transfer,
      through relative UPDATEs on locked rows
    - A pig that reached SOLD or DEAD is never mutated again (rejected, not recounted)
    - Every committed weight, state or pen change appends exactly one change record

Design Decisions:
    - One function per command with the session passed in (no command objects)
    - The suspicious-variation threshold comes from settings, with no override path
    - Admission does not touch the lot live-count: the lot headcount is fixed at
      creation and already includes the animal, so admission is bounded by it instead
"""

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from swinetrack.config import get_settings
from swinetrack.core.domain_types import ChangeField, LifeState
from swinetrack.core.enforce_lifecycle import (
    check_lot_open,
    check_pig_mutable,
    check_transition,
    transition_effect,
)
from swinetrack.core.enforce_placement import check_admission, check_transfer_target
from swinetrack.core.enforce_weighing import (
    as_utc,
    check_positive_weight,
    check_weighing,
    check_weighing_time,
)
from swinetrack.core.errors import DuplicateIdentifierError
from swinetrack.infrastructure.database import unit_of_work
from swinetrack.models.pig import Pig
from swinetrack.schemas.pig import (
    PigAdmit,
    PigNotesUpdate,
    PigRead,
    PigStateChange,
    PigTransfer,
    PigWeighing,
)
from swinetrack.services.herd_store import (
    append_change,
    count_pigs,
    exists,
    load_lot,
    load_pen,
    load_pig,
    lock_pig_location,
    recompute_pen_average,
    shift_lot_live_count,
    shift_pen_occupancy,
)

logger = logging.getLogger(__name__)

LIVE_STATES = (LifeState.ACTIVE, LifeState.SICK)


def _pig_extra(pig: Pig) -> dict:
    return {"pig_id": str(pig.id), "pen_id": str(pig.pen_id), "lot_id": str(pig.lot_id)}


async def admit_pig(db: AsyncSession, payload: PigAdmit) -> PigRead:
    """Register a new pig into a pen of its lot."""
    async with unit_of_work(db, "admit_pig"):
        lot = await load_lot(db, payload.lot_id, lock=True)
        error = check_lot_open(lot, "admit_pig")
        if error:
            raise error

        pen = await load_pen(db, payload.pen_id, lock=True)
        registered = await count_pigs(db, lot_id=lot.id, states=LIVE_STATES)
        error = (
            check_admission(lot, pen, registered)
            or check_positive_weight(payload.initial_weight, "Initial weight")
        )
        if error:
            raise error
        if await exists(db, Pig.tag, payload.tag):
            raise DuplicateIdentifierError("Pig tag", payload.tag)

        now = datetime.now(timezone.utc)
        admitted_at = payload.admission_date or now
        pig = Pig(
            tag=payload.tag,
            lot_id=lot.id,
            pen_id=pen.id,
            initial_weight=payload.initial_weight,
            current_weight=payload.initial_weight,
            admission_date=admitted_at,
            week_of_life=payload.week_of_life,
            state=LifeState.ACTIVE.value,
            last_weighed_at=admitted_at,
            notes=payload.notes,
        )
        db.add(pig)
        await db.flush()

        await shift_pen_occupancy(db, pen.id, 1)
        await recompute_pen_average(db, pen.id)
        await append_change(
            db, pig, ChangeField.WEIGHT, 0.0, payload.initial_weight,
            at=now, note="initial weight at admission",
        )
        await db.flush()

    logger.info(
        f"Pig {pig.tag} admitted to pen {pen.number} at {pig.current_weight} kg",
        extra=_pig_extra(pig),
    )
    return PigRead.model_validate(pig)


async def record_weighing(
    db: AsyncSession, pig_id: UUID, payload: PigWeighing,
    max_variation: float | None = None,
) -> PigRead:
    """Record a new weight, rejecting variations above the configured limit."""
    if max_variation is None:
        max_variation = get_settings().max_weight_variation

    weighed_at = as_utc(payload.weighed_at or datetime.now(timezone.utc))

    async with unit_of_work(db, "record_weighing"):
        pig, _, _ = await lock_pig_location(db, pig_id, with_lot=False)
        error = (
            check_pig_mutable(pig, "record_weighing")
            or check_weighing(pig.current_weight, payload.weight, max_variation)
            or check_weighing_time(pig.last_weighed_at, weighed_at)
        )
        if error:
            raise error

        previous = pig.current_weight
        pig.current_weight = payload.weight
        pig.last_weighed_at = weighed_at
        await db.flush()

        await recompute_pen_average(db, pig.pen_id)
        await append_change(db, pig, ChangeField.WEIGHT, previous, payload.weight, at=weighed_at)
        await db.flush()

    logger.info(
        f"Pig {pig.tag} weighed: {previous} -> {pig.current_weight} kg",
        extra=_pig_extra(pig),
    )
    return PigRead.model_validate(pig)


async def change_life_state(
    db: AsyncSession, pig_id: UUID, payload: PigStateChange,
) -> PigRead:
    """Move a pig through its lifecycle, releasing its slot when it leaves the herd."""
    async with unit_of_work(db, "change_life_state"):
        pig, lot, _ = await lock_pig_location(db, pig_id)
        error = (
            check_lot_open(lot, "change_life_state")
            or check_transition(pig.state, payload.state.value)
        )
        if error:
            raise error

        effect = transition_effect(pig.state, payload.state.value)
        pig.state = effect.target.value
        await db.flush()

        if effect.leaves_herd:
            await shift_pen_occupancy(db, pig.pen_id, effect.occupancy_delta)
            await shift_lot_live_count(db, lot.id, effect.live_count_delta)
        await recompute_pen_average(db, pig.pen_id)
        await append_change(
            db, pig, ChangeField.STATE, effect.previous.value, effect.target.value,
            at=datetime.now(timezone.utc), note=payload.note,
        )
        await db.flush()

    logger.info(
        f"Pig {pig.tag} state {effect.previous.value} -> {effect.target.value}",
        extra=_pig_extra(pig),
    )
    return PigRead.model_validate(pig)


async def transfer_pig(db: AsyncSession, pig_id: UUID, payload: PigTransfer) -> PigRead:
    """Relocate a live pig to another pen of the same lot."""
    async with unit_of_work(db, "transfer_pig"):
        await load_pen(db, payload.target_pen_id)
        pig, lot, pens = await lock_pig_location(
            db, pig_id, extra_pen_ids=[payload.target_pen_id],
        )
        target = pens[payload.target_pen_id]
        origin_id = pig.pen_id
        error = (
            check_pig_mutable(pig, "transfer_pig")
            or check_transfer_target(lot, origin_id, target)
        )
        if error:
            raise error

        pig.pen_id = target.id
        await db.flush()

        await shift_pen_occupancy(db, origin_id, -1)
        await shift_pen_occupancy(db, target.id, 1)
        await recompute_pen_average(db, origin_id)
        await recompute_pen_average(db, target.id)
        await append_change(
            db, pig, ChangeField.PEN, str(origin_id), str(target.id),
            at=datetime.now(timezone.utc), note=payload.note,
        )
        await db.flush()

    logger.info(
        f"Pig {pig.tag} transferred to pen {target.number}",
        extra=_pig_extra(pig),
    )
    return PigRead.model_validate(pig)


async def update_pig_notes(
    db: AsyncSession, pig_id: UUID, payload: PigNotesUpdate,
) -> PigRead:
    """Replace the free-text notes of a pig. Notes carry no history."""
    async with unit_of_work(db, "update_pig_notes"):
        pig = await load_pig(db, pig_id, lock=True)
        pig.notes = payload.notes
        await db.flush()

    logger.info(f"Pig {pig.tag} notes updated", extra=_pig_extra(pig))
    return PigRead.model_validate(pig)
