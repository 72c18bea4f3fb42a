"""Lot and pen administration — creation, updates, finalization, reassignment."""

from types import SimpleNamespace

import pytest

from swinetrack.core.domain_types import LotStatus
from swinetrack.core.errors import (
    CapacityExceededError,
    DuplicateIdentifierError,
    InconsistentReferenceError,
    InvalidTransitionError,
    InvalidWeightError,
    TransactionConflictError,
)
from swinetrack.schemas.lot import LotFinalize, LotUpdate
from swinetrack.schemas.pen import PenUpdate
from swinetrack.services.handle_lots import finalize_lot, update_lot
from swinetrack.services import handle_pens, query_herd
from swinetrack.services.handle_pens import update_pen


async def test_new_lot_starts_active_and_full(make_lot):
    lot = await make_lot(initial_count=25)
    assert lot.status == LotStatus.ACTIVE
    assert lot.current_live_count == 25
    assert lot.finalized_at is None


async def test_duplicate_lot_code(make_lot):
    await make_lot(code="LOTE-2024-100")
    with pytest.raises(DuplicateIdentifierError):
        await make_lot(code="LOTE-2024-100")


async def test_lot_weights_must_be_ordered(make_lot):
    with pytest.raises(InvalidWeightError):
        await make_lot(initial_min_weight=21.0, initial_average_weight=20.0)


async def test_update_lot_descriptive_fields(test_db, make_lot):
    lot = await make_lot()
    updated = await update_lot(test_db, lot.id, LotUpdate(admission_week=3, notes="from farm B"))
    assert updated.admission_week == 3
    assert updated.notes == "from farm B"
    assert updated.current_live_count == lot.current_live_count


async def test_rename_lot_to_existing_code(test_db, make_lot):
    first = await make_lot()
    second = await make_lot()
    with pytest.raises(DuplicateIdentifierError):
        await update_lot(test_db, second.id, LotUpdate(code=first.code))


async def test_site_change_cannot_strand_nursery_pens(test_db, make_lot, make_pen):
    lot = await make_lot(site="NURSERY")
    await make_pen(lot.id, pen_type="NURSERY")
    with pytest.raises(InconsistentReferenceError):
        await update_lot(test_db, lot.id, LotUpdate(site="FINISHING"))


async def test_finalize_appends_note_once(test_db, make_lot):
    lot = await make_lot(notes="arrived healthy")
    closed = await finalize_lot(test_db, lot.id, LotFinalize(note="all sold"))

    assert closed.status == LotStatus.FINALIZED
    assert closed.finalized_at is not None
    assert closed.notes.startswith("arrived healthy\n[")
    assert closed.notes.endswith("Finalized: all sold")

    with pytest.raises(InvalidTransitionError):
        await finalize_lot(test_db, lot.id)


async def test_nursery_pen_needs_nursery_lot(make_lot, make_pen):
    lot = await make_lot(site="FINISHING")
    with pytest.raises(InconsistentReferenceError):
        await make_pen(lot.id, pen_type="NURSERY")


async def test_duplicate_pen_number(make_lot, make_pen):
    lot = await make_lot()
    await make_pen(lot.id, number="B-01")
    with pytest.raises(DuplicateIdentifierError):
        await make_pen(lot.id, number="B-01")


async def test_capacity_cannot_drop_below_occupancy(test_db, herd, admit):
    await admit(herd["lot"].id, herd["pen_a"].id)
    with pytest.raises(CapacityExceededError):
        await update_pen(test_db, herd["pen_a"].id, PenUpdate(capacity=1))

    resized = await update_pen(test_db, herd["pen_a"].id, PenUpdate(capacity=2))
    assert resized.capacity == 2
    assert resized.occupancy == 2


async def test_occupied_pen_stays_in_its_lot(test_db, herd, make_lot):
    other = await make_lot()
    with pytest.raises(InconsistentReferenceError):
        await update_pen(test_db, herd["pen_a"].id, PenUpdate(lot_id=other.id))


async def test_empty_pen_can_change_lot(test_db, herd, make_lot):
    other = await make_lot()
    moved = await update_pen(test_db, herd["pen_b"].id, PenUpdate(lot_id=other.id))
    assert moved.lot_id == other.id


async def test_pen_retype_must_suit_site(test_db, herd):
    with pytest.raises(InconsistentReferenceError):
        await update_pen(test_db, herd["pen_b"].id, PenUpdate(pen_type="NURSERY"))
    retyped = await update_pen(test_db, herd["pen_b"].id, PenUpdate(pen_type="INFIRMARY"))
    assert retyped.pen_type == "INFIRMARY"


async def test_finalized_lot_takes_no_new_pens(test_db, make_lot, make_pen):
    lot = await make_lot()
    await finalize_lot(test_db, lot.id)
    with pytest.raises(InvalidTransitionError):
        await make_pen(lot.id)


async def test_empty_pen_cannot_join_finalized_lot(test_db, herd, make_lot):
    closed = await make_lot()
    await finalize_lot(test_db, closed.id)

    with pytest.raises(InvalidTransitionError):
        await update_pen(test_db, herd["pen_b"].id, PenUpdate(lot_id=closed.id))

    pen = (await query_herd.get_pen(test_db, herd["pen_b"].id)).pen
    assert pen.lot_id == herd["lot"].id


async def test_pen_reassigned_before_lock_is_a_conflict(test_db, herd, make_lot, monkeypatch):
    nursery = await make_lot(site="NURSERY")
    real_load_pen = handle_pens.load_pen

    async def load_seen_in_other_lot(db, pen_id, lock=False):
        pen = await real_load_pen(db, pen_id, lock=lock)
        if lock:
            return pen
        return SimpleNamespace(lot_id=nursery.id)

    monkeypatch.setattr(handle_pens, "load_pen", load_seen_in_other_lot)

    with pytest.raises(TransactionConflictError):
        await update_pen(test_db, herd["pen_b"].id, PenUpdate(pen_type="NURSERY"))

    pen = (await query_herd.get_pen(test_db, herd["pen_b"].id)).pen
    assert pen.pen_type == "FINISHING"
