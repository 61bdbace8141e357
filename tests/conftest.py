import threading
from dataclasses import replace
from datetime import date, datetime, time
from types import SimpleNamespace
from typing import Dict, List, Optional, Tuple

import pytest

from clinic.application.ports.appointments_repo import AppointmentDto, NewAppointment
from clinic.application.ports.directory import PersonDto
from clinic.application.ports.schedule_repo import WeeklyScheduleDto
from clinic.application.services.availability_service import AvailabilityService
from clinic.application.services.booking_service import BookingService
from clinic.application.services.notification_dispatcher import NotificationDispatcher
from clinic.application.services.reschedule_service import RescheduleService
from clinic.application.services.schedule_service import ScheduleService
from clinic.core.config import Settings
from clinic.domain.status import AppointmentStatus
from clinic.exceptions import ConflictError, NotFoundError, SlotUnavailable

# Monday. 2025-10-01 is the following Wednesday.
TODAY = date(2025, 9, 29)


class FakeApptRepo:
    def __init__(self):
        self._id = 1
        self.appts: Dict[int, AppointmentDto] = {}
        self.reservations: Dict[Tuple[int, date, str], int] = {}
        self._lock = threading.Lock()

    def _release(self, appointment_id: int, slot: Optional[Tuple[date, str]] = None):
        for key, owner in list(self.reservations.items()):
            if owner == appointment_id and (slot is None or key[1:] == slot):
                del self.reservations[key]

    def get(self, appointment_id: int):
        a = self.appts.get(appointment_id)
        return replace(a) if a else None

    def list_for_doctor(self, doctor_id: int, appointment_date: Optional[date] = None):
        return [replace(a) for a in self.appts.values()
                if a.doctor_id == doctor_id and (appointment_date is None or a.appointment_date == appointment_date)]

    def list_for_patient(self, patient_id: int):
        return [replace(a) for a in self.appts.values() if a.patient_id == patient_id]

    def booked_times(self, doctor_id: int, appointment_date: date):
        return {t for (doc, d, t) in self.reservations if doc == doctor_id and d == appointment_date}

    def count_active(self, doctor_id: int, appointment_date: date, exclude_id: Optional[int] = None) -> int:
        def on_day(a):
            return a.appointment_date == appointment_date or (
                a.status == AppointmentStatus.PENDING_RESCHEDULE_CONFIRMATION and a.original_date == appointment_date)

        return sum(1 for a in self.appts.values()
                   if a.doctor_id == doctor_id and on_day(a) and a.status.is_active and a.id != exclude_id)

    def create(self, data: NewAppointment):
        with self._lock:
            key = (data.doctor_id, data.appointment_date, data.appointment_time)
            if key in self.reservations:
                raise SlotUnavailable("This time slot is already booked")
            now = datetime.utcnow()
            a = AppointmentDto(
                id=self._id, patient_id=data.patient_id, doctor_id=data.doctor_id,
                appointment_date=data.appointment_date, appointment_time=data.appointment_time,
                status=AppointmentStatus.PENDING, consultation_type=data.consultation_type,
                reason=data.reason, notes=data.notes, duration_minutes=data.duration_minutes, fee=data.fee,
                cancellation_reason=None, reschedule_requested_by=None, reschedule_reason=None,
                original_date=None, original_time=None, created_at=now, updated_at=now,
            )
            self.appts[a.id] = a
            self.reservations[key] = a.id
            self._id += 1
            return replace(a)

    def _checked(self, appointment_id: int, expected: AppointmentStatus) -> AppointmentDto:
        a = self.appts.get(appointment_id)
        if not a:
            raise NotFoundError("Appointment not found")
        if a.status != expected:
            raise ConflictError("Appointment was changed by another request")
        return a

    def update_status(self, appointment_id, expected, status, fields=None, release_slots=False):
        with self._lock:
            a = self._checked(appointment_id, expected)
            a = replace(a, status=status, updated_at=datetime.utcnow(), **(fields or {}))
            self.appts[appointment_id] = a
            if release_slots:
                self._release(appointment_id)
            return replace(a)

    def request_reschedule(self, appointment_id, new_date, new_time, reason, requested_by):
        with self._lock:
            a = self._checked(appointment_id, AppointmentStatus.CONFIRMED)
            key = (a.doctor_id, new_date, new_time)
            if key in self.reservations:
                raise SlotUnavailable("This time slot is already booked")
            self.reservations[key] = appointment_id
            a = replace(a, status=AppointmentStatus.PENDING_RESCHEDULE_CONFIRMATION,
                        original_date=a.appointment_date, original_time=a.appointment_time,
                        appointment_date=new_date, appointment_time=new_time,
                        reschedule_reason=reason, reschedule_requested_by=requested_by)
            self.appts[appointment_id] = a
            return replace(a)

    def resolve_reschedule(self, appointment_id, approved, note=None):
        with self._lock:
            a = self._checked(appointment_id, AppointmentStatus.PENDING_RESCHEDULE_CONFIRMATION)
            if approved:
                self._release(appointment_id, (a.original_date, a.original_time))
                a = replace(a, status=AppointmentStatus.CONFIRMED)
            else:
                self._release(appointment_id, (a.appointment_date, a.appointment_time))
                a = replace(a, status=AppointmentStatus.CONFIRMED,
                            appointment_date=a.original_date, appointment_time=a.original_time)
            a = replace(a, original_date=None, original_time=None,
                        reschedule_reason=None, reschedule_requested_by=None,
                        notes=note or a.notes)
            self.appts[appointment_id] = a
            return replace(a)


class FakeScheduleRepo:
    def __init__(self):
        self.rows: Dict[Tuple[int, int], WeeklyScheduleDto] = {}

    def list_for_doctor(self, doctor_id: int):
        return [replace(r) for (doc, _), r in sorted(self.rows.items()) if doc == doctor_id]

    def get_for_day(self, doctor_id: int, day_of_week: int):
        r = self.rows.get((doctor_id, day_of_week))
        return replace(r) if r else None

    def upsert(self, schedule: WeeklyScheduleDto):
        self.rows[(schedule.doctor_id, schedule.day_of_week)] = replace(schedule)
        return replace(schedule)

    def delete(self, doctor_id: int, day_of_week: int) -> bool:
        return self.rows.pop((doctor_id, day_of_week), None) is not None


class FakeDirectory:
    def __init__(self):
        self.doctors = {1: PersonDto(1, "user-doc-1", "Reyes"), 2: PersonDto(2, "user-doc-2", "Cruz")}
        self.patients = {1: PersonDto(1, "user-pat-1", "Maria Santos"), 2: PersonDto(2, "user-pat-2", "Jose Lim")}
        self.staff = [PersonDto(1, "user-staff-1", "Front Desk")]

    def get_doctor(self, doctor_id: int):
        return self.doctors.get(doctor_id)

    def get_patient(self, patient_id: int):
        return self.patients.get(patient_id)

    def list_staff(self, limit: int):
        return self.staff[:limit]


class RecordingNotifier:
    def __init__(self):
        self.sent: List[dict] = []

    def notify(self, user_id, title, message, type, priority, related_appointment_id=None):
        self.sent.append({
            "user_id": user_id, "title": title, "message": message,
            "type": type, "priority": priority, "appointment_id": related_appointment_id,
        })

    def recipients(self) -> List[str]:
        return [n["user_id"] for n in self.sent]


class FailingNotifier:
    def notify(self, *args, **kwargs):
        raise RuntimeError("notification service down")


class RecordingAudit:
    def __init__(self):
        self.entries: List[dict] = []

    def log(self, action, appointment_id, actor, actor_id=None, from_status=None, to_status=None, details=None):
        self.entries.append({"action": action, "appointment_id": appointment_id, "actor": actor,
                             "actor_id": actor_id, "from": from_status, "to": to_status})


def build_clinic(notifier=None, today=TODAY, now=None) -> SimpleNamespace:
    # Before opening hours unless a test sets the clock.
    now = now or datetime.combine(today, time(8, 0))
    settings = Settings()
    appts = FakeApptRepo()
    schedules = FakeScheduleRepo()
    directory = FakeDirectory()
    notifier = notifier if notifier is not None else RecordingNotifier()
    audit = RecordingAudit()
    availability = AvailabilityService(schedules=schedules, appointments=appts, directory=directory,
                                       settings=settings, today=lambda: today, now=lambda: now)
    dispatcher = NotificationDispatcher(notifier=notifier, directory=directory, staff_limit=3)
    return SimpleNamespace(
        settings=settings,
        appts=appts,
        schedules=schedules,
        directory=directory,
        notifier=notifier,
        audit=audit,
        availability=availability,
        schedule_service=ScheduleService(repo=schedules, directory=directory, settings=settings),
        booking=BookingService(repo=appts, availability=availability, directory=directory,
                               dispatcher=dispatcher, audit=audit, settings=settings),
        reschedule=RescheduleService(repo=appts, availability=availability, dispatcher=dispatcher,
                                     audit=audit, settings=settings),
    )


@pytest.fixture
def clinic():
    return build_clinic()


@pytest.fixture
def make_clinic():
    return build_clinic
