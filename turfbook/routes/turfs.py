"""Turf routes: listing and the slot availability grid."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from turfbook.core.database import get_db
from turfbook.core.dependencies import get_recurrence_policy, get_slot_window, get_turf
from turfbook.models.turf import Turf
from turfbook.schemas import SlotGridOut, SlotOut, TurfOut
from turfbook.services.booking_store import fetch_reservations
from turfbook.services.slot_engine import (
    EmptyRecurrencePolicy,
    InvalidArgument,
    SlotWindow,
    compute_available_slots,
    parse_query_date,
)

router = APIRouter(prefix="/turfs", tags=["turfs"])


@router.get("", response_model=list[TurfOut])
async def list_turfs(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Turf).where(Turf.status.is_(True)).order_by(Turf.turf_name))
    return result.scalars().all()


@router.get("/{turf_id}", response_model=TurfOut)
async def get_turf_detail(turf: Turf = Depends(get_turf)):
    return turf


@router.get("/{turf_id}/available-slots", response_model=SlotGridOut)
async def get_available_slots(
    turf: Turf = Depends(get_turf),
    raw_date: str | None = Query(None, alias="date", description="Date in YYYY-MM-DD format"),
    window: SlotWindow = Depends(get_slot_window),
    policy: EmptyRecurrencePolicy = Depends(get_recurrence_policy),
    db: AsyncSession = Depends(get_db),
):
    """Return every slot of the operating window for a turf on a date.

    Booked slots are included with available=False so the slot picker can
    render a complete day grid.
    """
    try:
        query_date = parse_query_date(raw_date)
    except InvalidArgument as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))

    reservations = await fetch_reservations(db, turf.id, query_date)
    grid = compute_available_slots(turf.id, query_date, reservations, window=window, policy=policy)

    return SlotGridOut(
        date=grid.date,
        slots=[SlotOut.model_validate(s) for s in grid.slots],
        booked_count=grid.booked_count,
    )
