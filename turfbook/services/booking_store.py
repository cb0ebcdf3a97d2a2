"""Booking store: the queries that feed the slot engine and the dashboards.

Reservation queries already apply the scoping the engine relies on: one turf,
not cancelled, and either booked on the date itself or on a recurring plan
whose window covers it.
"""

from datetime import date

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from turfbook.models.booking import Booking, BookingPlan, BookingStatus
from turfbook.models.turf import Turf
from turfbook.services.slot_engine import Reservation


def to_reservation(booking: Booking) -> Reservation:
    """Engine view of a booking row. Single bookings cover only their own date."""
    plan = BookingPlan(booking.booking_plan)
    if plan == BookingPlan.SINGLE:
        plan_start = plan_end = booking.booking_date
    else:
        plan_start = booking.plan_start_date or booking.booking_date
        plan_end = booking.plan_end_date or plan_start

    return Reservation(
        start_time=booking.start_time,
        end_time=booking.end_time,
        booking_plan=plan.value,
        recurring_days=booking.recurring_days,
        plan_start_date=plan_start,
        plan_end_date=plan_end,
        booking_id=booking.id,
    )


async def get_active_turf(db: AsyncSession, turf_id: int) -> Turf | None:
    result = await db.execute(select(Turf).where(Turf.id == turf_id, Turf.status.is_(True)))
    return result.scalar_one_or_none()


def _reservations_between(turf_id: int, start: date, end: date):
    return (
        select(Booking)
        .where(
            Booking.turf_id == turf_id,
            Booking.status != BookingStatus.CANCELLED,
            or_(
                Booking.booking_date.between(start, end),
                and_(
                    Booking.booking_plan != BookingPlan.SINGLE,
                    Booking.plan_start_date <= end,
                    Booking.plan_end_date >= start,
                ),
            ),
        )
        .order_by(Booking.start_time, Booking.id)
    )


async def fetch_reservations(db: AsyncSession, turf_id: int, query_date: date) -> list[Reservation]:
    """Non-cancelled reservations of a turf whose plan covers query_date."""
    return await fetch_reservations_between(db, turf_id, query_date, query_date)


async def fetch_reservations_between(db: AsyncSession, turf_id: int, start: date, end: date) -> list[Reservation]:
    """Non-cancelled reservations of a turf covering any date in [start, end]."""
    result = await db.execute(_reservations_between(turf_id, start, end))
    return [to_reservation(b) for b in result.scalars().all()]


async def booking_stats(db: AsyncSession, turf_id: int | None = None, today: date | None = None) -> dict:
    """Dashboard counters. Revenue sums only count confirmed bookings."""
    today = today or date.today()
    confirmed = Booking.status == BookingStatus.CONFIRMED

    stmt = select(
        func.count(Booking.id),
        func.count(Booking.id).filter(Booking.booking_date == today),
        func.count(Booking.id).filter(confirmed),
        func.count(Booking.id).filter(Booking.status == BookingStatus.PENDING),
        func.count(Booking.id).filter(Booking.status == BookingStatus.CANCELLED),
        func.coalesce(func.sum(Booking.amount).filter(confirmed), 0),
        func.coalesce(func.sum(Booking.remaining_amount).filter(confirmed), 0),
    )
    if turf_id is not None:
        stmt = stmt.where(Booking.turf_id == turf_id)

    row = (await db.execute(stmt)).one()
    return {
        "total_bookings": row[0],
        "today_bookings": row[1],
        "confirmed_bookings": row[2],
        "pending_bookings": row[3],
        "cancelled_bookings": row[4],
        "total_revenue": row[5],
        "pending_amount": row[6],
    }
