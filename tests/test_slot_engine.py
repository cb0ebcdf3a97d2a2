"""Unit tests for the slot engine and booking plan arithmetic (pure functions, no DB)."""

from datetime import date, datetime, time

import pytest

from turfbook.services.booking_plans import active_dates, calculate_plan_end_date, covers
from turfbook.services.slot_engine import (
    EmptyRecurrencePolicy,
    InvalidArgument,
    MalformedReservation,
    Reservation,
    SlotWindow,
    applies_on,
    compute_available_slots,
    day_of_week,
    format_12h,
    generate_slots,
    overlaps,
    parse_query_date,
    reservation_interval,
)

MONDAY = date(2024, 3, 4)
TUESDAY = date(2024, 3, 5)
WEDNESDAY = date(2024, 3, 6)


def _single(start: str, end: str, day: date = WEDNESDAY, **kw) -> Reservation:
    return Reservation(start_time=start, end_time=end, booking_plan="single", plan_start_date=day, plan_end_date=day, **kw)


def _weekly(start: str, end: str, days, **kw) -> Reservation:
    return Reservation(
        start_time=start,
        end_time=end,
        booking_plan="weekly",
        recurring_days=days,
        plan_start_date=date(2024, 3, 1),
        plan_end_date=date(2024, 3, 31),
        **kw,
    )


def _availability(grid) -> dict[str, bool]:
    return {s.start_time: s.available for s in grid.slots}


# ---------------------------------------------------------------------------
# Window and slot generation
# ---------------------------------------------------------------------------


class TestGenerateSlots:
    def test_default_window_has_17_slots(self):
        slots = generate_slots()
        assert len(slots) == 17
        assert slots[0] == (6 * 60, 7 * 60)
        assert slots[-1] == (22 * 60, 23 * 60)

    def test_slots_are_contiguous(self):
        slots = generate_slots()
        for (_, prev_end), (next_start, _) in zip(slots, slots[1:]):
            assert prev_end == next_start

    def test_trailing_partial_slot_dropped(self):
        # 08:00-12:00 in 90 min slots: 08:00-09:30, 09:30-11:00; 11:00-12:30 does not fit
        slots = generate_slots(SlotWindow(open_hour=8, close_hour=12, slot_duration_minutes=90))
        assert slots == [(480, 570), (570, 660)]

    def test_window_until_midnight(self):
        grid = compute_available_slots(1, MONDAY, [], window=SlotWindow(open_hour=22, close_hour=24))
        assert [(s.start_time, s.end_time) for s in grid.slots] == [("22:00", "23:00"), ("23:00", "24:00")]
        assert grid.slots[-1].display == "11:00 PM - 12:00 AM"

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"open_hour": 10, "close_hour": 10},
            {"open_hour": 23, "close_hour": 6},
            {"open_hour": 6, "close_hour": 25},
            {"slot_duration_minutes": 0},
            {"open_hour": 6, "close_hour": 7, "slot_duration_minutes": 90},
        ],
    )
    def test_invalid_window_rejected(self, kwargs):
        with pytest.raises(ValueError):
            SlotWindow(**kwargs)


class TestFormatting:
    def test_12h_display(self):
        assert format_12h(6 * 60) == "6:00 AM"
        assert format_12h(12 * 60) == "12:00 PM"
        assert format_12h(13 * 60 + 30) == "1:30 PM"
        assert format_12h(0) == "12:00 AM"

    def test_slot_display_matches_slot_picker(self):
        grid = compute_available_slots(1, MONDAY, [])
        assert grid.slots[0].display == "6:00 AM - 7:00 AM"
        assert grid.slots[6].display == "12:00 PM - 1:00 PM"
        assert grid.slots[-1].display == "10:00 PM - 11:00 PM"


# ---------------------------------------------------------------------------
# Overlap and recurrence
# ---------------------------------------------------------------------------


class TestOverlap:
    def test_touching_endpoints_do_not_overlap(self):
        assert not overlaps(540, 600, 600, 660)
        assert not overlaps(600, 660, 540, 600)

    def test_partial_and_containing_overlap(self):
        assert overlaps(540, 600, 570, 630)
        assert overlaps(540, 720, 600, 660)
        assert overlaps(600, 660, 540, 720)


class TestRecurrence:
    def test_day_of_week_is_sunday_based(self):
        assert day_of_week(date(2024, 3, 3)) == 0  # Sunday
        assert day_of_week(MONDAY) == 1
        assert day_of_week(date(2024, 3, 9)) == 6  # Saturday

    def test_weekly_applies_only_on_recurring_days(self):
        reservation = _weekly("14:00", "15:00", [1, 3])
        assert applies_on(reservation, MONDAY)
        assert applies_on(reservation, WEDNESDAY)
        assert not applies_on(reservation, TUESDAY)

    def test_non_weekly_plans_always_apply(self):
        for plan in ("single", "daily", "monthly"):
            reservation = Reservation(start_time="09:00", end_time="10:00", booking_plan=plan, recurring_days=[5])
            assert applies_on(reservation, MONDAY)

    def test_numeric_string_days_accepted(self):
        assert applies_on(_weekly("14:00", "15:00", ["1"]), MONDAY)

    def test_empty_days_block_nothing_by_default(self):
        assert not applies_on(_weekly("14:00", "15:00", []), MONDAY)
        assert not applies_on(_weekly("14:00", "15:00", None), MONDAY)

    def test_empty_days_invalid_policy(self):
        with pytest.raises(MalformedReservation, match="no recurring days"):
            applies_on(_weekly("14:00", "15:00", []), MONDAY, EmptyRecurrencePolicy.INVALID)

    def test_out_of_range_day_is_malformed(self):
        with pytest.raises(MalformedReservation, match="out of range"):
            applies_on(_weekly("14:00", "15:00", [7]), MONDAY)


class TestReservationInterval:
    def test_accepts_time_objects_and_strings(self):
        assert reservation_interval(Reservation(start_time=time(9, 0), end_time=time(10, 30))) == (540, 630)
        assert reservation_interval(Reservation(start_time="09:00:00", end_time="10:30:00")) == (540, 630)

    def test_unparseable_time(self):
        with pytest.raises(MalformedReservation, match="unreadable time"):
            reservation_interval(Reservation(start_time="nine", end_time="10:00"))

    def test_start_not_before_end(self):
        with pytest.raises(MalformedReservation, match="not before end"):
            reservation_interval(Reservation(start_time="10:00", end_time="10:00"))


class TestParseQueryDate:
    def test_accepts_date_string_and_datetime(self):
        assert parse_query_date("2024-03-06") == WEDNESDAY
        assert parse_query_date(WEDNESDAY) == WEDNESDAY
        assert parse_query_date(datetime(2024, 3, 6, 18, 30)) == WEDNESDAY
        assert parse_query_date("2024-03-06T18:30:00") == WEDNESDAY

    @pytest.mark.parametrize("value", [None, "", "   ", "not-a-date", "2024-02-30"])
    def test_invalid(self, value):
        with pytest.raises(InvalidArgument):
            parse_query_date(value)


# ---------------------------------------------------------------------------
# compute_available_slots
# ---------------------------------------------------------------------------


class TestComputeAvailableSlots:
    def test_all_available_when_no_reservations(self):
        grid = compute_available_slots(1, WEDNESDAY, [])
        assert grid.date == WEDNESDAY
        assert len(grid.slots) == 17
        assert all(s.available for s in grid.slots)
        assert grid.booked_count == 0

    def test_boundary_slots_stay_available(self):
        grid = compute_available_slots(1, WEDNESDAY, [_single("10:00", "11:00")])
        slot_map = _availability(grid)
        assert slot_map["10:00"] is False
        assert slot_map["09:00"] is True
        assert slot_map["11:00"] is True

    def test_weekly_blocks_monday_not_tuesday(self):
        reservation = _weekly("14:00", "15:00", [1, 3])

        monday = compute_available_slots(1, MONDAY, [reservation])
        assert _availability(monday)["14:00"] is False
        assert monday.booked_count == 1

        tuesday = compute_available_slots(1, TUESDAY, [reservation])
        assert _availability(tuesday)["14:00"] is True
        assert tuesday.booked_count == 0

    def test_single_booking_other_day_not_passed_in(self):
        # The store only returns reservations covering the query date, so 2024-03-02 gets none
        grid = compute_available_slots(1, "2024-03-02", [])
        assert _availability(grid)["08:00"] is True

    def test_multi_slot_reservation_counted_once(self):
        grid = compute_available_slots(1, WEDNESDAY, [_single("09:00", "12:00")])
        assert [s.start_time for s in grid.slots if not s.available] == ["09:00", "10:00", "11:00"]
        assert grid.booked_count == 1

    def test_partial_hour_blocks_both_slots(self):
        grid = compute_available_slots(1, WEDNESDAY, [_single("09:30", "10:30")])
        slot_map = _availability(grid)
        assert slot_map["09:00"] is False
        assert slot_map["10:00"] is False

    def test_wednesday_scenario(self):
        reservations = [_single("09:00", "10:00"), _weekly("18:00", "19:00", [3])]
        grid = compute_available_slots("turf-x", "2024-03-06", reservations)

        unavailable = [(s.start_time, s.end_time) for s in grid.slots if not s.available]
        assert unavailable == [("09:00", "10:00"), ("18:00", "19:00")]
        assert sum(s.available for s in grid.slots) == 15
        assert grid.booked_count == 2

    def test_deterministic(self):
        reservations = [_single("09:00", "10:00"), _weekly("18:00", "19:00", [3])]
        first = compute_available_slots(1, WEDNESDAY, reservations)
        second = compute_available_slots(1, WEDNESDAY, reservations)
        assert first == second

    def test_reservations_not_mutated(self):
        days = [3, 1]
        reservations = [_weekly("18:00", "19:00", days)]
        compute_available_slots(1, WEDNESDAY, reservations)
        assert days == [3, 1]
        assert len(reservations) == 1

    def test_invalid_date_raises(self):
        with pytest.raises(InvalidArgument):
            compute_available_slots(1, "not-a-date", [_single("09:00", "10:00")])

    def test_malformed_reservation_skipped_not_fatal(self, caplog):
        reservations = [
            _single("09:00", "10:00", booking_id=1),
            _single("garbage", "11:00", booking_id=2),
            _single("15:00", "14:00", booking_id=3),
        ]
        with caplog.at_level("WARNING", logger="turfbook.services.slot_engine"):
            grid = compute_available_slots(1, WEDNESDAY, reservations)

        assert len(grid.slots) == 17
        assert [s.start_time for s in grid.slots if not s.available] == ["09:00"]
        assert grid.booked_count == 1
        assert [m.reservation.booking_id for m in grid.skipped] == [2, 3]
        assert "booking 2" in caplog.text

    def test_empty_weekly_under_invalid_policy_is_skipped(self):
        grid = compute_available_slots(
            1, MONDAY, [_weekly("14:00", "15:00", [])], policy=EmptyRecurrencePolicy.INVALID
        )
        assert all(s.available for s in grid.slots)
        assert grid.booked_count == 0
        assert len(grid.skipped) == 1

    def test_custom_window(self):
        window = SlotWindow(open_hour=8, close_hour=12, slot_duration_minutes=30)
        grid = compute_available_slots(1, WEDNESDAY, [_single("09:00", "10:00")], window=window)
        assert len(grid.slots) == 8
        assert [s.start_time for s in grid.slots if not s.available] == ["09:00", "09:30"]


# ---------------------------------------------------------------------------
# Booking plans
# ---------------------------------------------------------------------------


class TestPlanEndDate:
    def test_single(self):
        assert calculate_plan_end_date("single", date(2024, 3, 1), 5) == date(2024, 3, 1)

    def test_daily(self):
        assert calculate_plan_end_date("daily", date(2024, 3, 1), 3) == date(2024, 3, 3)
        assert calculate_plan_end_date("daily", date(2024, 3, 1), 1) == date(2024, 3, 1)

    def test_weekly(self):
        assert calculate_plan_end_date("weekly", date(2024, 3, 1), 2) == date(2024, 3, 14)

    def test_monthly(self):
        assert calculate_plan_end_date("monthly", date(2024, 3, 15), 1) == date(2024, 4, 14)
        assert calculate_plan_end_date("monthly", date(2024, 11, 10), 3) == date(2025, 2, 9)

    def test_monthly_clamps_short_month(self):
        # Jan 31 + 1 month clamps to Feb 29 (2024 is a leap year), minus a day
        assert calculate_plan_end_date("monthly", date(2024, 1, 31), 1) == date(2024, 2, 28)

    def test_duration_must_be_positive(self):
        with pytest.raises(ValueError):
            calculate_plan_end_date("daily", date(2024, 3, 1), 0)


class TestPlanCoverage:
    def test_single_covers_only_its_date(self):
        reservation = _single("09:00", "10:00", day=date(2024, 3, 1))
        assert covers(reservation, date(2024, 3, 1))
        assert not covers(reservation, date(2024, 3, 2))

    def test_recurring_covers_inclusive_window(self):
        reservation = _weekly("09:00", "10:00", [1])
        assert covers(reservation, date(2024, 3, 1))
        assert covers(reservation, date(2024, 3, 31))
        assert not covers(reservation, date(2024, 4, 1))

    def test_active_dates_weekly(self):
        dates = list(active_dates("weekly", date(2024, 3, 1), date(2024, 3, 14), [1, 3]))
        assert dates == [date(2024, 3, 4), date(2024, 3, 6), date(2024, 3, 11), date(2024, 3, 13)]

    def test_active_dates_daily_and_single(self):
        assert len(list(active_dates("daily", date(2024, 3, 1), date(2024, 3, 5)))) == 5
        assert list(active_dates("single", date(2024, 3, 1), date(2024, 3, 1))) == [date(2024, 3, 1)]
