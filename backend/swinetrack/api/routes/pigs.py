"""Pig Routes — admission, weighing, life-state, transfer, notes, reads and history.

Invariants:
    - Every mutating route maps to exactly one engine command (one transaction)
    - History is returned oldest first
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from swinetrack.core.change_log import format_change
from swinetrack.core.domain_types import LifeState
from swinetrack.infrastructure.database import get_db
from swinetrack.schemas.pig import (
    ChangeRecordRead, PigAdmit, PigNotesUpdate, PigRead,
    PigStateChange, PigTransfer, PigWeighing,
)
from swinetrack.services import handle_pigs, query_herd

router = APIRouter(prefix="/api/v1/pigs", tags=["pigs"])


@router.post("", response_model=PigRead, status_code=status.HTTP_201_CREATED)
async def admit_pig(body: PigAdmit, db: AsyncSession = Depends(get_db)):
    return await handle_pigs.admit_pig(db, body)


@router.get("")
async def list_pigs(
    lot_id: UUID | None = Query(None),
    pen_id: UUID | None = Query(None),
    state: LifeState | None = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    pigs = await query_herd.list_pigs(db, lot_id, pen_id, state, limit, offset)
    return {
        "pigs": [pig.model_dump(mode="json") for pig in pigs],
        "pagination": {"limit": limit, "offset": offset},
    }


@router.get("/{pig_id}", response_model=PigRead)
async def get_pig(pig_id: UUID, db: AsyncSession = Depends(get_db)):
    return await query_herd.get_pig(db, pig_id)


@router.post("/{pig_id}/weighings", response_model=PigRead)
async def record_weighing(
    pig_id: UUID, body: PigWeighing, db: AsyncSession = Depends(get_db),
):
    return await handle_pigs.record_weighing(db, pig_id, body)


@router.post("/{pig_id}/state", response_model=PigRead)
async def change_life_state(
    pig_id: UUID, body: PigStateChange, db: AsyncSession = Depends(get_db),
):
    return await handle_pigs.change_life_state(db, pig_id, body)


@router.post("/{pig_id}/transfer", response_model=PigRead)
async def transfer_pig(
    pig_id: UUID, body: PigTransfer, db: AsyncSession = Depends(get_db),
):
    return await handle_pigs.transfer_pig(db, pig_id, body)


@router.put("/{pig_id}/notes", response_model=PigRead)
async def update_pig_notes(
    pig_id: UUID, body: PigNotesUpdate, db: AsyncSession = Depends(get_db),
):
    return await handle_pigs.update_pig_notes(db, pig_id, body)


@router.get("/{pig_id}/history")
async def get_pig_history(pig_id: UUID, db: AsyncSession = Depends(get_db)):
    """Ordered change log, plus a one-line rendering of each entry."""
    records = await query_herd.get_pig_history(db, pig_id)
    return {
        "pig_id": str(pig_id),
        "changes": [
            {
                **ChangeRecordRead.model_validate(r).model_dump(mode="json"),
                "summary": format_change(r),
            }
            for r in records
        ],
    }
