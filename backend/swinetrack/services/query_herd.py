"""Herd Queries — read-only lookups, filtered listings, statistics and pig history.

Invariants:
    - Never writes and never commits
    - Children are loaded with explicit selectinload (relationships are lazy="raise")
    - Lists have a stable order: lots by admission date (newest first), pens by
      number, pigs by tag, history by sequence
"""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from swinetrack.core.change_log import ChangeRecord, ReplayedPig, order_records, replay_changes
from swinetrack.core.domain_types import LifeState, LotStatus, PenType, Site
from swinetrack.core.errors import ResourceNotFoundError
from swinetrack.core.herd_stats import compute_lot_stats, compute_pen_stats
from swinetrack.models.lot import Lot
from swinetrack.models.pen import Pen
from swinetrack.models.pig import Pig
from swinetrack.models.pig_change import PigChange
from swinetrack.schemas.lot import LotDetail, LotRead, LotStats
from swinetrack.schemas.pen import PenDetail, PenPigSummary, PenRead, PenStats
from swinetrack.schemas.pig import PigRead
from swinetrack.services.herd_store import load_lot, load_pen, load_pig, pig_states, to_change_record

logger = logging.getLogger(__name__)


async def get_lot(db: AsyncSession, lot_id: UUID) -> LotDetail:
    result = await db.execute(
        select(Lot).where(Lot.id == lot_id)
        .options(selectinload(Lot.pens), selectinload(Lot.pigs))
        .execution_options(populate_existing=True)
    )
    lot = result.scalar_one_or_none()
    if lot is None:
        raise ResourceNotFoundError("Lot", str(lot_id))
    return LotDetail(
        lot=LotRead.model_validate(lot),
        pens=[PenRead.model_validate(p) for p in lot.pens],
        pigs=[PigRead.model_validate(p) for p in lot.pigs],
    )


async def get_pen(db: AsyncSession, pen_id: UUID) -> PenDetail:
    result = await db.execute(
        select(Pen).where(Pen.id == pen_id)
        .options(selectinload(Pen.lot), selectinload(Pen.pigs))
        .execution_options(populate_existing=True)
    )
    pen = result.scalar_one_or_none()
    if pen is None:
        raise ResourceNotFoundError("Pen", str(pen_id))
    return PenDetail(
        pen=PenRead.model_validate(pen),
        lot_code=pen.lot.code,
        pigs=[PenPigSummary.model_validate(p) for p in pen.pigs],
    )


async def get_pig(db: AsyncSession, pig_id: UUID) -> PigRead:
    return PigRead.model_validate(await load_pig(db, pig_id))


async def list_lots(
    db: AsyncSession, status: LotStatus | None = None, site: Site | None = None,
    limit: int = 100, offset: int = 0,
) -> list[LotRead]:
    query = select(Lot)
    if status is not None:
        query = query.where(Lot.status == status.value)
    if site is not None:
        query = query.where(Lot.site == site.value)
    query = query.order_by(Lot.admission_date.desc(), Lot.code).limit(limit).offset(offset)
    rows = (await db.execute(query)).scalars().all()
    return [LotRead.model_validate(r) for r in rows]


async def list_pens(
    db: AsyncSession, lot_id: UUID | None = None, pen_type: PenType | None = None,
    limit: int = 100, offset: int = 0,
) -> list[PenRead]:
    query = select(Pen)
    if lot_id is not None:
        query = query.where(Pen.lot_id == lot_id)
    if pen_type is not None:
        query = query.where(Pen.pen_type == pen_type.value)
    query = query.order_by(Pen.number).limit(limit).offset(offset)
    rows = (await db.execute(query)).scalars().all()
    return [PenRead.model_validate(r) for r in rows]


async def list_pigs(
    db: AsyncSession, lot_id: UUID | None = None, pen_id: UUID | None = None,
    state: LifeState | None = None, limit: int = 100, offset: int = 0,
) -> list[PigRead]:
    query = select(Pig)
    if lot_id is not None:
        query = query.where(Pig.lot_id == lot_id)
    if pen_id is not None:
        query = query.where(Pig.pen_id == pen_id)
    if state is not None:
        query = query.where(Pig.state == state.value)
    query = query.order_by(Pig.tag).limit(limit).offset(offset)
    rows = (await db.execute(query)).scalars().all()
    return [PigRead.model_validate(r) for r in rows]


async def lot_stats(db: AsyncSession, lot_id: UUID, now: datetime | None = None) -> LotStats:
    lot = await load_lot(db, lot_id)
    states = await pig_states(db, lot_id=lot.id)
    return LotStats(**compute_lot_stats(lot, states, now))


async def pen_stats(db: AsyncSession, pen_id: UUID) -> PenStats:
    pen = await load_pen(db, pen_id)
    states = await pig_states(db, pen_id=pen.id)
    return PenStats(**compute_pen_stats(pen, pen.average_weight, states))


async def get_pig_history(db: AsyncSession, pig_id: UUID) -> list[ChangeRecord]:
    """Change log of a pig, oldest first."""
    await load_pig(db, pig_id)
    rows = (await db.execute(
        select(PigChange)
        .where(PigChange.pig_id == pig_id)
        .order_by(PigChange.sequence)
    )).scalars().all()
    return order_records(to_change_record(r) for r in rows)


async def replay_pig(db: AsyncSession, pig_id: UUID) -> ReplayedPig:
    """Rebuild a pig's weight, state and pen from its change log alone.

    pen_id is None when the pig never left its admission pen.
    """
    return replay_changes(await get_pig_history(db, pig_id))
