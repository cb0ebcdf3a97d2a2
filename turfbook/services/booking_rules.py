"""Booking rules enforcement.

All booking validation logic lives here, separate from the route handlers.
Each rule returns a BookingViolation or None if the rule passes.
The main validate_booking() function runs all rules and collects violations.
"""

import logging
from datetime import date, time
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from turfbook.services.booking_plans import MAX_PLAN_DURATION, active_dates, calculate_plan_end_date, covers
from turfbook.services.booking_store import fetch_reservations_between
from turfbook.services.slot_engine import (
    PLAN_DAILY,
    PLAN_MONTHLY,
    PLAN_WEEKLY,
    EmptyRecurrencePolicy,
    Reservation,
    SlotWindow,
    blocking_intervals,
    format_minutes,
    normalise_recurring_days,
    overlaps,
)

logger = logging.getLogger(__name__)

PLAN_UNITS = {PLAN_DAILY: "days", PLAN_WEEKLY: "weeks", PLAN_MONTHLY: "months"}


class BookingViolation(Exception):
    """Raised when a booking rule is violated."""

    def __init__(self, rule: str, message: str):
        self.rule = rule
        self.message = message
        super().__init__(message)


def _minutes(t: time) -> int:
    return t.hour * 60 + t.minute


async def validate_booking(
    db: AsyncSession,
    turf_id: int,
    booking_plan: str,
    plan_start: date,
    plan_end: date,
    start_time: time,
    end_time: time,
    recurring_days: list[int] | None,
    amount: Decimal,
    advance_amount: Decimal,
    window: SlotWindow,
    policy: EmptyRecurrencePolicy,
) -> list[BookingViolation]:
    """Run all booking rules and return a list of violations (empty = valid)."""
    violations: list[BookingViolation] = []

    # 1. Start before end
    v = check_time_range(start_time, end_time)
    if v:
        violations.append(v)

    # 2. Inside operating hours
    v = check_operating_hours(start_time, end_time, window)
    if v:
        violations.append(v)

    # 3. Recurring days
    v = check_recurring_days(booking_plan, recurring_days, policy)
    if v:
        violations.append(v)

    # 4. Advance does not exceed amount
    v = check_advance_amount(amount, advance_amount)
    if v:
        violations.append(v)

    # 5. Turf conflict (double booking), only checked for a well-formed request
    if not violations:
        v = await check_slot_conflict(
            db, turf_id, booking_plan, plan_start, plan_end, start_time, end_time, recurring_days, policy
        )
        if v:
            violations.append(v)

    return violations


def check_time_range(start_time: time, end_time: time) -> BookingViolation | None:
    if start_time >= end_time:
        return BookingViolation(
            "time_range",
            f"Start time {start_time.strftime('%H:%M')} must be before end time {end_time.strftime('%H:%M')}.",
        )
    return None


def check_operating_hours(start_time: time, end_time: time, window: SlotWindow) -> BookingViolation | None:
    """Bookings must sit inside the daily slot window."""
    if _minutes(start_time) < window.open_minute or _minutes(end_time) > window.close_minute:
        return BookingViolation(
            "operating_hours",
            f"Turfs can be booked between {format_minutes(window.open_minute)} "
            f"and {format_minutes(window.close_minute)}.",
        )
    return None


def check_recurring_days(
    booking_plan: str, recurring_days: list[int] | None, policy: EmptyRecurrencePolicy
) -> BookingViolation | None:
    """Weekdays are 0=Sunday..6=Saturday. Under the INVALID policy a weekly plan needs at least one."""
    try:
        days = normalise_recurring_days(recurring_days)
    except ValueError as exc:
        return BookingViolation("recurring_days", f"Invalid recurring days: {exc}.")

    if booking_plan == PLAN_WEEKLY and not days and policy == EmptyRecurrencePolicy.INVALID:
        return BookingViolation("recurring_days", "A weekly plan needs at least one recurring day.")
    return None


def check_plan_duration(booking_plan: str, plan_start: date, duration: int) -> BookingViolation | None:
    """Recurring plans are capped per unit and must end on a representable date."""
    limit = MAX_PLAN_DURATION.get(booking_plan)
    if limit is not None and duration > limit:
        return BookingViolation(
            "plan_duration",
            f"A {booking_plan} plan can run for at most {limit} {PLAN_UNITS[booking_plan]}, got {duration}.",
        )
    try:
        calculate_plan_end_date(booking_plan, plan_start, duration)
    except (OverflowError, ValueError):
        return BookingViolation(
            "plan_duration",
            f"A {booking_plan} plan starting {plan_start.isoformat()} cannot run for {duration} "
            f"{PLAN_UNITS.get(booking_plan, 'days')}.",
        )
    return None


def check_advance_amount(amount: Decimal, advance_amount: Decimal) -> BookingViolation | None:
    if advance_amount > amount:
        return BookingViolation(
            "advance_amount",
            f"Advance amount {advance_amount} cannot exceed the booking amount {amount}.",
        )
    return None


async def check_slot_conflict(
    db: AsyncSession,
    turf_id: int,
    booking_plan: str,
    plan_start: date,
    plan_end: date,
    start_time: time,
    end_time: time,
    recurring_days: list[int] | None,
    policy: EmptyRecurrencePolicy,
) -> BookingViolation | None:
    """No date the new plan occupies may overlap a reservation that applies on that date."""
    existing = await fetch_reservations_between(db, turf_id, plan_start, plan_end)
    return find_conflict(
        existing, booking_plan, plan_start, plan_end, start_time, end_time, recurring_days, policy
    )


def find_conflict(
    existing: list[Reservation],
    booking_plan: str,
    plan_start: date,
    plan_end: date,
    start_time: time,
    end_time: time,
    recurring_days: list[int] | None,
    policy: EmptyRecurrencePolicy,
) -> BookingViolation | None:
    """Pure part of check_slot_conflict: first conflicting date, if any."""
    if not existing:
        return None

    start, end = _minutes(start_time), _minutes(end_time)
    days = normalise_recurring_days(recurring_days)

    for day in active_dates(booking_plan, plan_start, plan_end, days):
        on_day = [r for r in existing if covers(r, day)]
        intervals, _ = blocking_intervals(day, on_day, policy)
        for b_start, b_end in intervals:
            if overlaps(start, end, b_start, b_end):
                logger.info(
                    "Booking request conflicts on %s with %s-%s", day, format_minutes(b_start), format_minutes(b_end)
                )
                return BookingViolation(
                    "slot_conflict",
                    f"Turf already booked on {day.isoformat()} from "
                    f"{format_minutes(b_start)} to {format_minutes(b_end)}.",
                )
    return None
