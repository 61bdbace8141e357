from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Set
from datetime import datetime, date

from ...domain.status import AppointmentStatus


@dataclass
class AppointmentDto:
    id: int
    patient_id: int
    doctor_id: int
    appointment_date: date
    appointment_time: str
    status: AppointmentStatus
    consultation_type: str
    reason: Optional[str]
    notes: Optional[str]
    duration_minutes: int
    fee: float
    cancellation_reason: Optional[str]
    reschedule_requested_by: Optional[str]
    reschedule_reason: Optional[str]
    original_date: Optional[date]
    original_time: Optional[str]
    created_at: datetime
    updated_at: datetime


@dataclass
class NewAppointment:
    patient_id: int
    doctor_id: int
    appointment_date: date
    appointment_time: str
    consultation_type: str
    reason: Optional[str]
    notes: Optional[str]
    duration_minutes: int
    fee: float


class AppointmentsRepository(Protocol):
    def get(self, appointment_id: int) -> Optional[AppointmentDto]:
        ...

    def list_for_doctor(self, doctor_id: int, appointment_date: Optional[date] = None) -> List[AppointmentDto]:
        ...

    def list_for_patient(self, patient_id: int) -> List[AppointmentDto]:
        ...

    def booked_times(self, doctor_id: int, appointment_date: date) -> Set[str]:
        """Times on ``appointment_date`` held by an active appointment."""
        ...

    def count_active(self, doctor_id: int, appointment_date: date, exclude_id: Optional[int] = None) -> int:
        """Active appointments on the date, plus pending reschedules whose original slot is on it."""
        ...

    def create(self, data: NewAppointment) -> AppointmentDto:
        """Insert a pending appointment and reserve its slot atomically.

        Raises SlotUnavailable if another active appointment holds the slot.
        """
        ...

    def update_status(self, appointment_id: int, expected: AppointmentStatus, status: AppointmentStatus,
                      fields: Optional[Dict[str, Any]] = None, release_slots: bool = False) -> AppointmentDto:
        """Compare-and-set the status; raises ConflictError if it is no longer ``expected``."""
        ...

    def request_reschedule(self, appointment_id: int, new_date: date, new_time: str,
                           reason: str, requested_by: str) -> AppointmentDto:
        """Reserve the new slot and move the appointment onto it, keeping the original.

        Raises SlotUnavailable if the new slot is taken; nothing is changed in that case.
        """
        ...

    def resolve_reschedule(self, appointment_id: int, approved: bool, note: Optional[str] = None) -> AppointmentDto:
        ...
