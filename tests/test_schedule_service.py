import pytest

from clinic.exceptions import NotFoundError, ValidationError


def test_upsert_normalizes_times(clinic):
    row = clinic.schedule_service.upsert(1, 1, "9:00", "17:00:00", break_start="12:00", break_end="13:00")
    assert row.start_time == "09:00"
    assert row.end_time == "17:00"
    assert row.has_break


def test_upsert_replaces_existing_day(clinic):
    clinic.schedule_service.upsert(1, 2, "09:00", "17:00")
    clinic.schedule_service.upsert(1, 2, "10:00", "14:00", max_patients_per_day=5)
    rows = clinic.schedule_service.list_for_doctor(1)
    assert len(rows) == 1
    assert rows[0].start_time == "10:00"
    assert rows[0].max_patients_per_day == 5


def test_list_is_ordered_by_day(clinic):
    for day in (5, 1, 3):
        clinic.schedule_service.upsert(1, day, "09:00", "12:00")
    assert [r.day_of_week for r in clinic.schedule_service.list_for_doctor(1)] == [1, 3, 5]


@pytest.mark.parametrize("kwargs", [
    dict(day_of_week=7, start_time="09:00", end_time="17:00"),
    dict(day_of_week=1, start_time="17:00", end_time="09:00"),
    dict(day_of_week=1, start_time="09:00", end_time="17:00", break_start="12:00"),
    dict(day_of_week=1, start_time="09:00", end_time="17:00", break_start="13:00", break_end="12:00"),
    dict(day_of_week=1, start_time="09:00", end_time="17:00", break_start="08:00", break_end="09:30"),
    dict(day_of_week=1, start_time="09:00", end_time="17:00", max_patients_per_day=0),
    dict(day_of_week=1, start_time="nine", end_time="17:00"),
    dict(day_of_week=1, start_time="09:15", end_time="11:15"),
    dict(day_of_week=1, start_time="09:00", end_time="17:00", break_start="12:15", break_end="13:00"),
    dict(day_of_week=1, start_time="09:00", end_time="17:00", break_start="12:00", break_end="12:45"),
])
def test_upsert_validation(clinic, kwargs):
    with pytest.raises(ValidationError):
        clinic.schedule_service.upsert(1, **kwargs)


def test_unknown_doctor(clinic):
    with pytest.raises(NotFoundError):
        clinic.schedule_service.upsert(99, 1, "09:00", "17:00")


def test_toggle_availability(clinic):
    clinic.schedule_service.upsert(1, 3, "09:00", "17:00")
    row = clinic.schedule_service.set_availability(1, 3, False)
    assert row.is_available is False
    assert clinic.availability.compute_available_slots(1, "2025-10-01") == []


def test_toggle_missing_day(clinic):
    with pytest.raises(NotFoundError):
        clinic.schedule_service.set_availability(1, 3, False)


def test_delete(clinic):
    clinic.schedule_service.upsert(1, 3, "09:00", "17:00")
    clinic.schedule_service.delete(1, 3)
    assert clinic.schedule_service.list_for_doctor(1) == []
    with pytest.raises(NotFoundError):
        clinic.schedule_service.delete(1, 3)


def test_off_grid_end_time_is_allowed(clinic):
    row = clinic.schedule_service.upsert(1, 3, "09:00", "10:45")
    assert row.end_time == "10:45"


def test_every_advertised_slot_is_bookable(clinic):
    clinic.schedule_service.upsert(1, 3, "08:30", "12:10", break_start="10:00", break_end="10:30")
    slots = clinic.availability.compute_available_slots(1, "2025-10-01")
    for patient_id, slot in zip((1, 2) * len(slots), slots):
        clinic.booking.create(patient_id, 1, "2025-10-01", slot.time)
    assert clinic.availability.compute_available_slots(1, "2025-10-01") == []
