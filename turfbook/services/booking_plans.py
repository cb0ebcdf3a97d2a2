"""Booking plan date arithmetic.

A plan starts on the booking date and runs for `duration` units of the plan:
days for daily, weeks for weekly, calendar months for monthly.
"""

import calendar
from collections.abc import Iterable, Iterator
from datetime import date, timedelta

from turfbook.services.slot_engine import (
    PLAN_DAILY,
    PLAN_MONTHLY,
    PLAN_SINGLE,
    PLAN_WEEKLY,
    Reservation,
    day_of_week,
)


# Longest accepted recurring plan: a year of days, weeks or months. Single bookings ignore duration.
MAX_PLAN_DURATION = {
    PLAN_DAILY: 366,
    PLAN_WEEKLY: 52,
    PLAN_MONTHLY: 12,
}


def _add_months(start: date, months: int) -> date:
    """Add calendar months, clamping to the last day of the target month (Jan 31 + 1 -> Feb 28/29).

    Clamping is deliberate: rolling over into the next month (Jan 31 + 1 -> Mar 2)
    would let a one-month plan run into a third calendar month.
    """
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def calculate_plan_end_date(plan: str, start: date, duration: int = 1) -> date:
    """Last day (inclusive) of a plan starting on `start`."""
    if duration < 1:
        raise ValueError(f"Plan duration must be at least 1, got {duration}")

    if plan == PLAN_DAILY:
        return start + timedelta(days=duration - 1)
    if plan == PLAN_WEEKLY:
        return start + timedelta(days=7 * duration - 1)
    if plan == PLAN_MONTHLY:
        return _add_months(start, duration) - timedelta(days=1)
    return start


def covers(reservation: Reservation, day: date) -> bool:
    """Whether the reservation's plan window contains `day`.

    This is the rule the booking store applies in SQL; single bookings only
    cover their own date.
    """
    if reservation.plan_start_date is None:
        return False
    if reservation.booking_plan == PLAN_SINGLE or reservation.plan_end_date is None:
        return reservation.plan_start_date == day
    return reservation.plan_start_date <= day <= reservation.plan_end_date


def active_dates(
    plan: str,
    start: date,
    end: date,
    recurring_days: Iterable[int] | None = None,
) -> Iterator[date]:
    """Dates a plan occupies. Weekly plans only occupy their recurring weekdays."""
    if plan == PLAN_SINGLE:
        yield start
        return

    weekdays = set(recurring_days or ())
    current = start
    while current <= end:
        if plan != PLAN_WEEKLY or day_of_week(current) in weekdays:
            yield current
        current += timedelta(days=1)
