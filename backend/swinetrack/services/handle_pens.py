"""Pen Handlers — create and update pens.

Invariants:
    - Pen numbers are unique
    - capacity > 0 and never below current occupancy
    - A pen changes lot only while empty and only into an ACTIVE lot, and its type
      always suits its lot's site
    - occupancy and average_weight are never written here
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from swinetrack.core.enforce_lifecycle import check_lot_open
from swinetrack.core.enforce_placement import (
    check_capacity_value,
    check_pen_reassignment,
    check_pen_type_compatible,
)
from swinetrack.core.errors import DuplicateIdentifierError, TransactionConflictError
from swinetrack.infrastructure.database import unit_of_work
from swinetrack.models.pen import Pen
from swinetrack.schemas.pen import PenCreate, PenRead, PenUpdate
from swinetrack.services.herd_store import count_pigs, exists, load_lot, load_pen

logger = logging.getLogger(__name__)


async def create_pen(db: AsyncSession, payload: PenCreate) -> PenRead:
    """Create an empty pen inside a lot."""
    async with unit_of_work(db, "create_pen"):
        lot = await load_lot(db, payload.lot_id, lock=True)

        error = (
            check_lot_open(lot, "create_pen")
            or check_capacity_value(payload.capacity)
            or check_pen_type_compatible(payload.pen_type.value, lot.site)
        )
        if error:
            raise error
        if await exists(db, Pen.number, payload.number):
            raise DuplicateIdentifierError("Pen number", payload.number)

        pen = Pen(
            number=payload.number,
            lot_id=lot.id,
            capacity=payload.capacity,
            occupancy=0,
            average_weight=0.0,
            pen_type=payload.pen_type.value,
        )
        db.add(pen)
        await db.flush()

    logger.info(
        f"Pen {pen.number} created in lot {lot.code}",
        extra={"lot_id": str(lot.id), "pen_id": str(pen.id)},
    )
    return PenRead.model_validate(pen)


async def update_pen(db: AsyncSession, pen_id: UUID, payload: PenUpdate) -> PenRead:
    """Renumber, resize, retype or reassign a pen."""
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)

    async with unit_of_work(db, "update_pen"):
        target_lot_id = changes.get("lot_id")
        # lot before pen, matching the lock order of pig commands
        current = await load_pen(db, pen_id)
        seen_lot_id = current.lot_id
        lot = await load_lot(db, target_lot_id or seen_lot_id, lock=True)
        pen = await load_pen(db, pen_id, lock=True)
        if pen.lot_id != seen_lot_id:
            raise TransactionConflictError(
                f"Pen '{pen.number}' was reassigned by a concurrent command, retry",
            )

        number = changes.get("number")
        if number and number != pen.number and await exists(db, Pen.number, number, exclude_id=pen.id):
            raise DuplicateIdentifierError("Pen number", number)

        if "capacity" in changes:
            error = check_capacity_value(changes["capacity"], pen.occupancy)
            if error:
                raise error

        if target_lot_id is not None and target_lot_id != pen.lot_id:
            pigs_in_pen = await count_pigs(db, pen_id=pen.id)
            error = (
                check_lot_open(lot, "update_pen")
                or check_pen_reassignment(pen, lot, pigs_in_pen)
            )
            if error:
                raise error

        pen_type = changes.get("pen_type")
        if pen_type is not None:
            error = check_pen_type_compatible(pen_type.value, lot.site)
            if error:
                raise error
            changes["pen_type"] = pen_type.value

        for key, value in changes.items():
            setattr(pen, key, value)
        await db.flush()

    logger.info(f"Pen {pen.number} updated", extra={"pen_id": str(pen.id)})
    return PenRead.model_validate(pen)
