from dataclasses import dataclass, field
from typing import Callable, List, Optional
from datetime import date, datetime, timedelta
import logging

from ..ports.appointments_repo import AppointmentsRepository
from ..ports.schedule_repo import ScheduleRepository
from ..ports.directory import Directory
from ...core.config import Settings, get_settings
from ...domain.timeslots import Slot, day_of_week, generate_slots, parse_date, to_minutes
from ...exceptions import InvalidDate, NotFoundError

logger = logging.getLogger(__name__)


@dataclass
class AvailabilityService:
    """Computes free slots for a doctor on a date.

    Results are advisory. The slot reservation made at write time is what
    actually prevents double booking.
    """
    schedules: ScheduleRepository
    appointments: AppointmentsRepository
    directory: Directory
    settings: Settings = field(default_factory=get_settings)
    today: Callable[[], date] = date.today
    now: Callable[[], datetime] = datetime.now

    def check_date(self, value) -> date:
        d = parse_date(value)
        today = self.today()
        if d < today:
            raise InvalidDate("Appointment date cannot be in the past")
        if d > today + timedelta(days=self.settings.BOOKING_LOOKAHEAD_DAYS):
            raise InvalidDate(
                f"Appointments can only be booked up to {self.settings.BOOKING_LOOKAHEAD_DAYS} days ahead"
            )
        return d

    def compute_available_slots(self, doctor_id: int, appointment_date, ignore_appointment_id: Optional[int] = None) -> List[Slot]:
        if not self.directory.get_doctor(doctor_id):
            raise NotFoundError(f"Doctor {doctor_id} not found")
        d = self.check_date(appointment_date)

        rows = self.schedules.list_for_doctor(doctor_id)
        if not rows:
            start, end = self.settings.DEFAULT_DAY_START, self.settings.DEFAULT_DAY_END
            break_start = break_end = None
            max_per_day = self.settings.DEFAULT_MAX_PATIENTS_PER_DAY
        else:
            row = next((r for r in rows if r.day_of_week == day_of_week(d)), None)
            if row is None or not row.is_available:
                return []
            start, end = row.start_time, row.end_time
            break_start, break_end = row.break_start, row.break_end
            max_per_day = row.max_patients_per_day

        if self.appointments.count_active(doctor_id, d, exclude_id=ignore_appointment_id) >= max_per_day:
            logger.info(f"Doctor {doctor_id} is fully booked on {d} ({max_per_day} patients)")
            return []

        candidates = generate_slots(start, end, self.settings.SLOT_MINUTES, break_start, break_end)
        booked = self.appointments.booked_times(doctor_id, d)
        if d == self.today():
            # Slots that have already started today are not bookable.
            current = self.now()
            cutoff = current.hour * 60 + current.minute
            candidates = [t for t in candidates if to_minutes(t) > cutoff]
        return [Slot(d, t) for t in candidates if t not in booked]

    def is_slot_free(self, doctor_id: int, appointment_date, appointment_time: str,
                     ignore_appointment_id: Optional[int] = None) -> bool:
        slots = self.compute_available_slots(doctor_id, appointment_date, ignore_appointment_id)
        return any(s.time == appointment_time for s in slots)

    def next_available_slot(self, doctor_id: int, from_date=None, days: int = 7) -> Optional[Slot]:
        start = self.check_date(from_date) if from_date is not None else self.today()
        last = self.today() + timedelta(days=self.settings.BOOKING_LOOKAHEAD_DAYS)
        for offset in range(days):
            d = start + timedelta(days=offset)
            if d > last:
                break
            slots = self.compute_available_slots(doctor_id, d)
            if slots:
                return slots[0]
        return None
