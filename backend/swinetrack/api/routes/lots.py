"""Lot Routes — create, update, finalize, read, list and stats for lots.

Invariants:
    - Engine errors propagate to the global SwineTrackError handler (no try/except here)
    - User input is validated by Pydantic before reaching the route handler
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from swinetrack.core.domain_types import LotStatus, Site
from swinetrack.infrastructure.database import get_db
from swinetrack.schemas.lot import (
    LotCreate, LotDetail, LotFinalize, LotRead, LotStats, LotUpdate,
)
from swinetrack.services import handle_lots, query_herd

router = APIRouter(prefix="/api/v1/lots", tags=["lots"])


@router.post("", response_model=LotRead, status_code=status.HTTP_201_CREATED)
async def create_lot(body: LotCreate, db: AsyncSession = Depends(get_db)):
    return await handle_lots.create_lot(db, body)


@router.get("")
async def list_lots(
    lot_status: LotStatus | None = Query(None, alias="status"),
    site: Site | None = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """List lots, newest admission first."""
    lots = await query_herd.list_lots(db, lot_status, site, limit, offset)
    return {
        "lots": [lot.model_dump(mode="json") for lot in lots],
        "pagination": {"limit": limit, "offset": offset},
    }


@router.get("/{lot_id}", response_model=LotDetail)
async def get_lot(lot_id: UUID, db: AsyncSession = Depends(get_db)):
    return await query_herd.get_lot(db, lot_id)


@router.patch("/{lot_id}", response_model=LotRead)
async def update_lot(
    lot_id: UUID, body: LotUpdate, db: AsyncSession = Depends(get_db),
):
    return await handle_lots.update_lot(db, lot_id, body)


@router.post("/{lot_id}/finalize", response_model=LotRead)
async def finalize_lot(
    lot_id: UUID, body: LotFinalize | None = None, db: AsyncSession = Depends(get_db),
):
    """Close the lot. Further admissions and life-state changes are rejected."""
    return await handle_lots.finalize_lot(db, lot_id, body)


@router.get("/{lot_id}/stats", response_model=LotStats)
async def get_lot_stats(lot_id: UUID, db: AsyncSession = Depends(get_db)):
    return await query_herd.lot_stats(db, lot_id)
