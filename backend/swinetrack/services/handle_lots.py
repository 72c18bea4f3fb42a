"""Lot Handlers — create, update and finalize lots.

Invariants:
    - A new lot starts ACTIVE with current_live_count == initial_count
    - Lot codes are unique (checked before insert, backed by a unique index)
    - Site changes never leave a pen incompatible with the lot
    - ACTIVE → FINALIZED is one-way

Design Decisions:
    - Counters and status are never set from payloads: only commands move them
"""

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from swinetrack.core.domain_types import LotStatus
from swinetrack.core.enforce_lifecycle import check_lot_finalizable
from swinetrack.core.enforce_placement import check_pen_type_compatible
from swinetrack.core.enforce_weighing import check_lot_weights
from swinetrack.core.errors import DuplicateIdentifierError
from swinetrack.infrastructure.database import unit_of_work
from swinetrack.models.lot import Lot
from swinetrack.models.pen import Pen
from swinetrack.schemas.lot import LotCreate, LotFinalize, LotRead, LotUpdate
from swinetrack.services.herd_store import exists, load_lot

logger = logging.getLogger(__name__)


async def create_lot(db: AsyncSession, payload: LotCreate) -> LotRead:
    """Register a lot of animals arriving together."""
    async with unit_of_work(db, "create_lot"):
        error = check_lot_weights(
            payload.initial_average_weight,
            payload.initial_min_weight,
            payload.initial_max_weight,
        )
        if error:
            raise error
        if await exists(db, Lot.code, payload.code):
            raise DuplicateIdentifierError("Lot code", payload.code)

        lot = Lot(
            code=payload.code,
            admission_date=payload.admission_date,
            admission_week=payload.admission_week,
            initial_count=payload.initial_count,
            current_live_count=payload.initial_count,
            initial_average_weight=payload.initial_average_weight,
            initial_min_weight=payload.initial_min_weight,
            initial_max_weight=payload.initial_max_weight,
            site=payload.site.value,
            status=LotStatus.ACTIVE.value,
            notes=payload.notes,
        )
        db.add(lot)
        await db.flush()

    logger.info(f"Lot {lot.code} created", extra={"lot_id": str(lot.id)})
    return LotRead.model_validate(lot)


async def update_lot(db: AsyncSession, lot_id: UUID, payload: LotUpdate) -> LotRead:
    """Change descriptive lot fields."""
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)

    async with unit_of_work(db, "update_lot"):
        lot = await load_lot(db, lot_id, lock=True)

        code = changes.get("code")
        if code and code != lot.code and await exists(db, Lot.code, code, exclude_id=lot.id):
            raise DuplicateIdentifierError("Lot code", code)

        site = changes.get("site")
        if site is not None and site.value != lot.site:
            pen_types = (await db.execute(
                select(Pen.pen_type).where(Pen.lot_id == lot.id)
            )).scalars().all()
            for pen_type in pen_types:
                error = check_pen_type_compatible(pen_type, site.value)
                if error:
                    raise error
            changes["site"] = site.value

        for key, value in changes.items():
            setattr(lot, key, value)
        await db.flush()

    logger.info(f"Lot {lot.code} updated", extra={"lot_id": str(lot.id)})
    return LotRead.model_validate(lot)


async def finalize_lot(
    db: AsyncSession, lot_id: UUID, payload: LotFinalize | None = None,
) -> LotRead:
    """Close a lot. Admissions and life-state changes stop afterwards."""
    async with unit_of_work(db, "finalize_lot"):
        lot = await load_lot(db, lot_id, lock=True)
        error = check_lot_finalizable(lot)
        if error:
            raise error

        now = datetime.now(timezone.utc)
        lot.status = LotStatus.FINALIZED.value
        lot.finalized_at = now
        if payload and payload.note:
            entry = f"[{now.date().isoformat()}] Finalized: {payload.note}"
            lot.notes = f"{lot.notes}\n{entry}" if lot.notes else entry
        await db.flush()

    logger.info(
        f"Lot {lot.code} finalized with {lot.current_live_count} live animals",
        extra={"lot_id": str(lot.id)},
    )
    return LotRead.model_validate(lot)
