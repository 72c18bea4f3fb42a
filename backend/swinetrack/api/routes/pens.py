"""Pen Routes — create, update, read, list and stats for pens."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from swinetrack.core.domain_types import PenType
from swinetrack.infrastructure.database import get_db
from swinetrack.schemas.pen import PenCreate, PenDetail, PenRead, PenStats, PenUpdate
from swinetrack.services import handle_pens, query_herd

router = APIRouter(prefix="/api/v1/pens", tags=["pens"])


@router.post("", response_model=PenRead, status_code=status.HTTP_201_CREATED)
async def create_pen(body: PenCreate, db: AsyncSession = Depends(get_db)):
    return await handle_pens.create_pen(db, body)


@router.get("")
async def list_pens(
    lot_id: UUID | None = Query(None),
    pen_type: PenType | None = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    pens = await query_herd.list_pens(db, lot_id, pen_type, limit, offset)
    return {
        "pens": [pen.model_dump(mode="json") for pen in pens],
        "pagination": {"limit": limit, "offset": offset},
    }


@router.get("/{pen_id}", response_model=PenDetail)
async def get_pen(pen_id: UUID, db: AsyncSession = Depends(get_db)):
    """Pen with the pigs currently located in it."""
    return await query_herd.get_pen(db, pen_id)


@router.patch("/{pen_id}", response_model=PenRead)
async def update_pen(
    pen_id: UUID, body: PenUpdate, db: AsyncSession = Depends(get_db),
):
    return await handle_pens.update_pen(db, pen_id, body)


@router.get("/{pen_id}/stats", response_model=PenStats)
async def get_pen_stats(pen_id: UUID, db: AsyncSession = Depends(get_db)):
    return await query_herd.pen_stats(db, pen_id)
