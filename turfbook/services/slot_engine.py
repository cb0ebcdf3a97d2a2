"""Slot availability for a turf on a given date.

Pure calculation module: no database, no async, no FastAPI dependencies.
The caller fetches the candidate reservations (already scoped to the turf,
non-cancelled, plan window covering the date); this module applies weekly
recurrence, generates the fixed slot grid and marks overlapping slots.
"""

import enum
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, time

logger = logging.getLogger(__name__)

PLAN_SINGLE = "single"
PLAN_DAILY = "daily"
PLAN_WEEKLY = "weekly"
PLAN_MONTHLY = "monthly"
BOOKING_PLANS = (PLAN_SINGLE, PLAN_DAILY, PLAN_WEEKLY, PLAN_MONTHLY)


class SlotEngineError(Exception):
    """Base class for slot engine errors."""


class InvalidArgument(SlotEngineError):
    """Raised when the query date is missing or cannot be parsed."""


class MalformedReservation(SlotEngineError):
    """A single reservation that cannot be interpreted. Never escapes compute_available_slots."""

    def __init__(self, reservation: "Reservation", reason: str):
        self.reservation = reservation
        self.reason = reason
        super().__init__(f"booking {reservation.booking_id}: {reason}")


class EmptyRecurrencePolicy(enum.StrEnum):
    """How a weekly plan with no recurring days is treated."""

    BLOCKS_NOTHING = "blocks_nothing"  # matches no weekday
    INVALID = "invalid"  # skipped as malformed, rejected at creation


@dataclass(frozen=True)
class SlotWindow:
    """Daily operating window and slot length."""

    open_hour: int = 6
    close_hour: int = 23
    slot_duration_minutes: int = 60

    def __post_init__(self):
        if not 0 <= self.open_hour < self.close_hour <= 24:
            raise ValueError(f"Invalid operating window {self.open_hour}-{self.close_hour}")
        if self.slot_duration_minutes <= 0:
            raise ValueError(f"Slot duration must be positive, got {self.slot_duration_minutes}")
        if self.slot_duration_minutes > (self.close_hour - self.open_hour) * 60:
            raise ValueError("Slot duration is longer than the operating window")

    @property
    def open_minute(self) -> int:
        return self.open_hour * 60

    @property
    def close_minute(self) -> int:
        return self.close_hour * 60


@dataclass(frozen=True)
class Reservation:
    """An existing booking as seen by the engine.

    Times are kept raw (time objects or "HH:MM[:SS]" strings) so that one bad
    row can be skipped instead of failing the whole grid.
    """

    start_time: time | str | None
    end_time: time | str | None
    booking_plan: str = PLAN_SINGLE
    recurring_days: tuple | list | None = None
    plan_start_date: date | None = None
    plan_end_date: date | None = None
    booking_id: int | None = None


@dataclass(frozen=True)
class Slot:
    start_time: str  # "HH:MM"
    end_time: str  # "HH:MM"
    display: str  # "6:00 AM - 7:00 AM"
    available: bool


@dataclass(frozen=True)
class SlotGrid:
    date: date
    slots: list[Slot]
    booked_count: int
    skipped: list[MalformedReservation] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------


def parse_query_date(value: date | str | None) -> date:
    """Return the query date, or raise InvalidArgument.

    Accepts a date, a datetime (its date part), "YYYY-MM-DD" or an ISO datetime string.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if value is None or not str(value).strip():
        raise InvalidArgument("The date field is required.")

    text = str(value).strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        raise InvalidArgument(f"The date field must be a valid date, got {text!r}.") from None


def _to_minutes(value: time | str | None) -> int:
    """Minutes since midnight. Raises ValueError on anything unparseable."""
    if isinstance(value, time):
        return value.hour * 60 + value.minute
    if not isinstance(value, str):
        raise ValueError(f"not a time of day: {value!r}")
    return _to_minutes(time.fromisoformat(value.strip()))


def format_minutes(minutes: int) -> str:
    """540 -> "09:00". The end of day renders as "24:00"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def format_12h(minutes: int) -> str:
    """540 -> "9:00 AM", 780 -> "1:00 PM", 0 and 1440 -> "12:00 AM"."""
    hour = (minutes // 60) % 24
    suffix = "AM" if hour < 12 else "PM"
    return f"{hour % 12 or 12}:{minutes % 60:02d} {suffix}"


def day_of_week(query_date: date) -> int:
    """Weekday with 0=Sunday..6=Saturday, the encoding stored in recurring_days."""
    return query_date.isoweekday() % 7


def normalise_recurring_days(days: Iterable | None) -> frozenset[int]:
    """Coerce recurring days to a set of ints in 0..6. Raises ValueError on bad entries."""
    if not days:
        return frozenset()
    if isinstance(days, (str, bytes)):
        raise ValueError(f"recurring_days must be a list, got {days!r}")

    result = set()
    for day in days:
        if isinstance(day, bool):
            raise ValueError(f"invalid weekday {day!r}")
        try:
            value = int(day)
        except (TypeError, ValueError):
            raise ValueError(f"invalid weekday {day!r}") from None
        if not 0 <= value <= 6:
            raise ValueError(f"weekday {value} out of range 0..6")
        result.add(value)
    return frozenset(result)


# ---------------------------------------------------------------------------
# Core
# ---------------------------------------------------------------------------


def overlaps(start1: int, end1: int, start2: int, end2: int) -> bool:
    """Half-open interval overlap. Touching endpoints do not overlap."""
    return start1 < end2 and end1 > start2


def reservation_interval(reservation: Reservation) -> tuple[int, int]:
    """Return (start, end) in minutes of day, or raise MalformedReservation."""
    try:
        start = _to_minutes(reservation.start_time)
        end = _to_minutes(reservation.end_time)
    except ValueError as exc:
        raise MalformedReservation(reservation, f"unreadable time ({exc})") from None
    if start >= end:
        raise MalformedReservation(
            reservation, f"start {format_minutes(start)} is not before end {format_minutes(end)}"
        )
    return start, end


def applies_on(
    reservation: Reservation,
    query_date: date,
    policy: EmptyRecurrencePolicy = EmptyRecurrencePolicy.BLOCKS_NOTHING,
) -> bool:
    """Recurrence filter: weekly plans only apply on their recurring days.

    Other plans always pass; the store has already scoped them to the date.
    Raises MalformedReservation for unreadable recurring days, and for empty
    ones under the INVALID policy.
    """
    if reservation.booking_plan != PLAN_WEEKLY:
        return True

    try:
        days = normalise_recurring_days(reservation.recurring_days)
    except ValueError as exc:
        raise MalformedReservation(reservation, str(exc)) from None

    if not days:
        if policy == EmptyRecurrencePolicy.INVALID:
            raise MalformedReservation(reservation, "weekly plan has no recurring days")
        return False

    return day_of_week(query_date) in days


def generate_slots(window: SlotWindow = SlotWindow()) -> list[tuple[int, int]]:
    """All (start, end) slot intervals of the window, ascending."""
    slots = []
    current = window.open_minute
    while current + window.slot_duration_minutes <= window.close_minute:
        slots.append((current, current + window.slot_duration_minutes))
        current += window.slot_duration_minutes
    return slots


def blocking_intervals(
    query_date: date,
    reservations: Iterable[Reservation],
    policy: EmptyRecurrencePolicy = EmptyRecurrencePolicy.BLOCKS_NOTHING,
) -> tuple[list[tuple[int, int]], list[MalformedReservation]]:
    """Intervals of the reservations that apply on query_date, plus the ones skipped as malformed."""
    intervals: list[tuple[int, int]] = []
    skipped: list[MalformedReservation] = []

    for reservation in reservations:
        try:
            if not applies_on(reservation, query_date, policy):
                continue
            intervals.append(reservation_interval(reservation))
        except MalformedReservation as exc:
            logger.warning("Skipping malformed reservation on %s: %s", query_date, exc)
            skipped.append(exc)

    return intervals, skipped


def compute_available_slots(
    turf_id: int | str | None,
    query_date: date | str | None,
    reservations: Iterable[Reservation],
    window: SlotWindow = SlotWindow(),
    policy: EmptyRecurrencePolicy = EmptyRecurrencePolicy.BLOCKS_NOTHING,
) -> SlotGrid:
    """Build the slot grid for a turf on a date.

    turf_id is informational only; reservations must already be scoped to it.
    booked_count is the number of reservations that apply on the date, each
    counted once however many slots it spans.
    """
    day = parse_query_date(query_date)
    intervals, skipped = blocking_intervals(day, reservations, policy)

    slots = [
        Slot(
            start_time=format_minutes(start),
            end_time=format_minutes(end),
            display=f"{format_12h(start)} - {format_12h(end)}",
            available=not any(overlaps(start, end, b_start, b_end) for b_start, b_end in intervals),
        )
        for start, end in generate_slots(window)
    ]

    logger.debug(
        "Turf %s on %s: %d reservations apply, %d skipped, %d/%d slots free",
        turf_id,
        day,
        len(intervals),
        len(skipped),
        sum(s.available for s in slots),
        len(slots),
    )

    return SlotGrid(date=day, slots=slots, booked_count=len(intervals), skipped=skipped)
