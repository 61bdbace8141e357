from datetime import date, datetime, timedelta

import pytest

from clinic.domain.status import Actor
from clinic.domain.timeslots import Slot, day_of_week, generate_slots
from clinic.exceptions import InvalidDate, NotFoundError, SlotUnavailable

from conftest import TODAY

WEDNESDAY = "2025-10-01"


def times(slots):
    return [s.time for s in slots]


def test_day_of_week_starts_on_sunday():
    assert day_of_week(date(2025, 10, 5)) == 0
    assert day_of_week(date(2025, 10, 1)) == 3
    assert day_of_week(date(2025, 10, 4)) == 6


def test_generate_slots_drops_partial_and_break():
    assert generate_slots("09:00", "10:45", 30) == ["09:00", "09:30", "10:00"]
    assert generate_slots("09:00", "11:00", 30, "09:30", "10:30") == ["09:00", "10:30"]


def test_default_window_without_schedule(clinic):
    slots = clinic.availability.compute_available_slots(1, WEDNESDAY)
    assert len(slots) == 16
    assert slots[0] == Slot(date(2025, 10, 1), "09:00")
    assert slots[-1].time == "16:30"


def test_same_inputs_same_slots(clinic):
    first = clinic.availability.compute_available_slots(1, WEDNESDAY)
    second = clinic.availability.compute_available_slots(1, WEDNESDAY)
    assert first == second


def test_break_is_excluded(clinic):
    clinic.schedule_service.upsert(1, 3, "09:00", "17:00", break_start="12:00", break_end="13:00")
    got = times(clinic.availability.compute_available_slots(1, WEDNESDAY))
    assert "12:00" not in got
    assert "12:30" not in got
    assert "11:30" in got
    assert "13:00" in got
    assert len(got) == 14


def test_booked_slot_excluded_until_cancelled(clinic):
    appt = clinic.booking.create(1, 1, WEDNESDAY, "14:00")
    assert "14:00" not in times(clinic.availability.compute_available_slots(1, WEDNESDAY))

    clinic.booking.cancel(appt.id, Actor.STAFF, "Patient called in sick")
    assert "14:00" in times(clinic.availability.compute_available_slots(1, WEDNESDAY))


def test_other_doctor_bookings_do_not_block(clinic):
    clinic.booking.create(1, 2, WEDNESDAY, "14:00")
    assert "14:00" in times(clinic.availability.compute_available_slots(1, WEDNESDAY))


def test_unavailable_weekday_has_no_slots(clinic):
    clinic.schedule_service.upsert(1, 3, "09:00", "17:00", is_available=False)
    assert clinic.availability.compute_available_slots(1, WEDNESDAY) == []


def test_unscheduled_weekday_has_no_slots(clinic):
    clinic.schedule_service.upsert(1, 1, "09:00", "17:00")
    assert clinic.availability.compute_available_slots(1, WEDNESDAY) == []


def test_partial_trailing_slot_is_dropped(clinic):
    clinic.schedule_service.upsert(1, 3, "09:00", "10:45")
    assert times(clinic.availability.compute_available_slots(1, WEDNESDAY)) == ["09:00", "09:30", "10:00"]


def test_past_date_is_rejected(clinic):
    with pytest.raises(InvalidDate):
        clinic.availability.compute_available_slots(1, "2025-09-28")


def test_today_is_allowed(clinic):
    assert clinic.availability.compute_available_slots(1, TODAY.isoformat())


def test_lookahead_limit(clinic):
    limit = TODAY + timedelta(days=clinic.settings.BOOKING_LOOKAHEAD_DAYS)
    assert clinic.availability.compute_available_slots(1, limit)
    with pytest.raises(InvalidDate):
        clinic.availability.compute_available_slots(1, limit + timedelta(days=1))


def test_malformed_date(clinic):
    with pytest.raises(InvalidDate):
        clinic.availability.compute_available_slots(1, "01/10/2025")


def test_unknown_doctor(clinic):
    with pytest.raises(NotFoundError):
        clinic.availability.compute_available_slots(99, WEDNESDAY)


def test_daily_cap_closes_the_day(clinic):
    clinic.schedule_service.upsert(1, 3, "09:00", "17:00", max_patients_per_day=2)
    clinic.booking.create(1, 1, WEDNESDAY, "09:00")
    clinic.booking.create(2, 1, WEDNESDAY, "09:30")

    assert clinic.availability.compute_available_slots(1, WEDNESDAY) == []
    with pytest.raises(SlotUnavailable):
        clinic.booking.create(1, 1, WEDNESDAY, "10:00")


def test_next_available_slot_skips_closed_days(clinic):
    clinic.schedule_service.upsert(1, 4, "10:00", "12:00")
    assert clinic.availability.next_available_slot(1) == Slot(date(2025, 10, 2), "10:00")


def test_next_available_slot_none_when_closed_all_week(clinic):
    clinic.schedule_service.upsert(1, 4, "10:00", "12:00", is_available=False)
    assert clinic.availability.next_available_slot(1) is None


def test_pending_reschedule_counts_against_both_days(clinic):
    clinic.schedule_service.upsert(1, 3, "09:00", "17:00", max_patients_per_day=1)
    clinic.schedule_service.upsert(1, 4, "09:00", "17:00", max_patients_per_day=1)
    appt = clinic.booking.create(1, 1, WEDNESDAY, "10:00")
    clinic.booking.confirm(appt.id)
    clinic.reschedule.request_reschedule(appt.id, "2025-10-02", "11:00", "Work conflict")

    assert clinic.availability.compute_available_slots(1, WEDNESDAY) == []
    assert clinic.availability.compute_available_slots(1, "2025-10-02") == []

    clinic.reschedule.confirm_reschedule(appt.id)
    assert clinic.availability.compute_available_slots(1, WEDNESDAY)


def test_started_slots_today_are_dropped(make_clinic):
    clinic = make_clinic(now=datetime(2025, 9, 29, 11, 10))
    got = times(clinic.availability.compute_available_slots(1, TODAY))
    assert got[0] == "11:30"
    assert "11:00" not in got
    assert clinic.availability.next_available_slot(1) == Slot(TODAY, "11:30")
    with pytest.raises(SlotUnavailable):
        clinic.booking.create(1, 1, TODAY.isoformat(), "10:00")


def test_next_available_after_closing_time_is_tomorrow(make_clinic):
    clinic = make_clinic(now=datetime(2025, 9, 29, 16, 45))
    assert clinic.availability.compute_available_slots(1, TODAY) == []
    assert clinic.availability.next_available_slot(1) == Slot(date(2025, 9, 30), "09:00")
