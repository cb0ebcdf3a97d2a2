"""Booking routes: create, list, stats, update status, delete, with rules enforcement."""

import logging
from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from turfbook.core.config import settings
from turfbook.core.database import get_db
from turfbook.core.dependencies import get_recurrence_policy, get_slot_window
from turfbook.models.booking import Booking, BookingPlan, BookingStatus, BookingType
from turfbook.schemas import BookingCreate, BookingOut, BookingStatsOut, BookingStatusUpdate
from turfbook.services.booking_plans import calculate_plan_end_date
from turfbook.services.booking_rules import check_plan_duration, validate_booking
from turfbook.services.booking_store import booking_stats, get_active_turf
from turfbook.services.slot_engine import EmptyRecurrencePolicy, SlotWindow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["bookings"])


async def _get_booking(db: AsyncSession, booking_id: int) -> Booking:
    result = await db.execute(select(Booking).where(Booking.id == booking_id))
    booking = result.scalar_one_or_none()
    if booking is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")
    return booking


@router.post("", response_model=BookingOut, status_code=status.HTTP_201_CREATED)
async def create_booking(
    body: BookingCreate,
    window: SlotWindow = Depends(get_slot_window),
    policy: EmptyRecurrencePolicy = Depends(get_recurrence_policy),
    db: AsyncSession = Depends(get_db),
):
    turf = await get_active_turf(db, body.turf_id)
    if turf is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Turf not found or not bookable")

    plan = BookingPlan(body.booking_plan or BookingPlan.SINGLE)
    plan_start = body.booking_date
    duration = body.plan_duration or 1

    # The plan window has to be computable before the other rules can run
    v = check_plan_duration(plan, plan_start, duration)
    if v:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=[{"rule": v.rule, "message": v.message}],
        )
    plan_end = calculate_plan_end_date(plan, plan_start, duration)
    advance = body.advance_amount or Decimal(0)

    # Run all booking rules
    violations = await validate_booking(
        db=db,
        turf_id=turf.id,
        booking_plan=plan,
        plan_start=plan_start,
        plan_end=plan_end,
        start_time=body.start_time,
        end_time=body.end_time,
        recurring_days=body.recurring_days,
        amount=body.amount,
        advance_amount=advance,
        window=window,
        policy=policy,
    )

    if violations:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=[{"rule": v.rule, "message": v.message} for v in violations],
        )

    booking = Booking(
        turf_id=turf.id,
        booking_type=BookingType(body.booking_type),
        booking_plan=plan,
        booking_date=body.booking_date,
        plan_start_date=plan_start,
        plan_end_date=plan_end,
        # Recurring days only mean something for weekly plans
        recurring_days=sorted(set(body.recurring_days)) if plan == BookingPlan.WEEKLY and body.recurring_days else None,
        start_time=body.start_time,
        end_time=body.end_time,
        customer_name=body.customer_name,
        customer_phone=body.customer_phone,
        customer_email=body.customer_email,
        amount=body.amount,
        advance_amount=advance,
        remaining_amount=body.amount - advance,
        notes=body.notes,
        status=BookingStatus.CONFIRMED,
    )
    db.add(booking)
    await db.flush()
    await db.refresh(booking)

    logger.info(
        "Booking %s created: turf=%s plan=%s %s..%s %s-%s",
        booking.id,
        turf.id,
        plan.value,
        plan_start,
        plan_end,
        body.start_time.strftime("%H:%M"),
        body.end_time.strftime("%H:%M"),
    )
    return booking


@router.get("", response_model=list[BookingOut])
async def list_bookings(
    status_filter: str | None = Query(None, alias="status"),
    booking_date: date | None = Query(None, alias="date"),
    turf_id: int | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    stmt = select(Booking)
    if status_filter and status_filter != "all":
        try:
            stmt = stmt.where(Booking.status == BookingStatus(status_filter))
        except ValueError:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="Unknown booking status")
    if booking_date is not None:
        stmt = stmt.where(Booking.booking_date == booking_date)
    if turf_id is not None:
        stmt = stmt.where(Booking.turf_id == turf_id)

    result = await db.execute(stmt.order_by(Booking.created_at.desc()).limit(settings.max_list_results))
    return result.scalars().all()


@router.get("/stats", response_model=BookingStatsOut)
async def get_booking_stats(
    turf_id: int | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    return await booking_stats(db, turf_id=turf_id)


@router.get("/{booking_id}", response_model=BookingOut)
async def get_booking(booking_id: int, db: AsyncSession = Depends(get_db)):
    return await _get_booking(db, booking_id)


@router.patch("/{booking_id}", response_model=BookingOut)
async def update_booking_status(
    booking_id: int,
    body: BookingStatusUpdate,
    db: AsyncSession = Depends(get_db),
):
    booking = await _get_booking(db, booking_id)
    previous = booking.status
    booking.status = BookingStatus(body.status)
    await db.flush()
    logger.info("Booking %s status %s -> %s", booking.id, previous, booking.status)
    return booking


@router.delete("/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_booking(booking_id: int, db: AsyncSession = Depends(get_db)):
    booking = await _get_booking(db, booking_id)
    await db.delete(booking)
    logger.info("Booking %s deleted", booking_id)
