from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple
import logging

from ..ports.appointments_repo import AppointmentsRepository, AppointmentDto, NewAppointment
from ..ports.audit_logger import AuditLogger
from ..ports.directory import Directory
from .availability_service import AvailabilityService
from .notification_dispatcher import NotificationDispatcher
from ...core.config import Settings, get_settings
from ...domain.status import Actor, AppointmentEvent, ConsultationType, next_status
from ...domain.timeslots import check_on_grid, parse_date
from ...exceptions import NotFoundError, SlotUnavailable, ValidationError

logger = logging.getLogger(__name__)


@dataclass
class BookingService:
    repo: AppointmentsRepository
    availability: AvailabilityService
    directory: Directory
    dispatcher: NotificationDispatcher
    audit: AuditLogger
    settings: Settings = field(default_factory=get_settings)

    def create(self, patient_id: int, doctor_id: int, appointment_date: str, appointment_time: str,
               consultation_type: str = ConsultationType.IN_PERSON.value, reason: Optional[str] = None,
               fee: float = 0.0, duration_minutes: Optional[int] = None, notes: Optional[str] = None,
               actor: Actor = Actor.PATIENT, actor_id: Optional[str] = None) -> AppointmentDto:
        d = self.availability.check_date(appointment_date)
        time_str = check_on_grid(appointment_time, self.settings.SLOT_MINUTES)

        try:
            consultation = ConsultationType(consultation_type)
        except ValueError:
            allowed = ", ".join(c.value for c in ConsultationType)
            raise ValidationError(f"Invalid consultation type. Must be one of: {allowed}")
        if fee is None or fee < 0:
            raise ValidationError("Fee cannot be negative")
        duration = duration_minutes if duration_minutes is not None else self.settings.DEFAULT_DURATION_MINUTES
        if duration <= 0:
            raise ValidationError("Duration must be a positive number of minutes")

        if not self.directory.get_patient(patient_id):
            raise NotFoundError(f"Patient {patient_id} not found")

        # Availability is re-read at commit time; the reservation insert below is authoritative.
        if not self.availability.is_slot_free(doctor_id, d, time_str):
            raise SlotUnavailable(f"The {time_str} slot on {d.isoformat()} is no longer available")

        appt = self.repo.create(NewAppointment(
            patient_id=patient_id,
            doctor_id=doctor_id,
            appointment_date=d,
            appointment_time=time_str,
            consultation_type=consultation.value,
            reason=reason,
            notes=notes,
            duration_minutes=duration,
            fee=fee,
        ))
        logger.info(f"Booked appointment {appt.id}: doctor {doctor_id} on {d} at {time_str}")
        self.audit.log("appointment.create", appt.id, actor.value,
                       actor_id or (str(patient_id) if actor is Actor.PATIENT else None),
                       None, appt.status.value, {"patient_id": patient_id})
        self.dispatcher.appointment_created(appt)
        return appt

    def get(self, appointment_id: int) -> AppointmentDto:
        appt = self.repo.get(appointment_id)
        if not appt:
            raise NotFoundError(f"Appointment {appointment_id} not found")
        return appt

    def list_for_doctor(self, doctor_id: int, appointment_date: Optional[str] = None) -> List[AppointmentDto]:
        d = parse_date(appointment_date) if appointment_date else None
        return self.repo.list_for_doctor(doctor_id, d)

    def list_for_patient(self, patient_id: int) -> List[AppointmentDto]:
        return self.repo.list_for_patient(patient_id)

    def _transition(self, appointment_id: int, event: AppointmentEvent, actor: Actor, actor_id: Optional[str],
                    fields: Optional[Dict[str, Any]] = None,
                    guard: Optional[Callable[[AppointmentDto], None]] = None) -> Tuple[AppointmentDto, AppointmentDto]:
        before = self.get(appointment_id)
        target = next_status(before.status, event, actor)
        if guard:
            guard(before)
        after = self.repo.update_status(appointment_id, before.status, target, fields,
                                        release_slots=target.is_terminal)
        logger.info(f"Appointment {appointment_id}: {before.status.value} -> {target.value} ({event.value} by {actor.value})")
        self.audit.log(f"appointment.{event.value}", appointment_id, actor.value, actor_id,
                       before.status.value, target.value, fields)
        return before, after

    def confirm(self, appointment_id: int, actor: Actor = Actor.DOCTOR, actor_id: Optional[str] = None) -> AppointmentDto:
        _, appt = self._transition(appointment_id, AppointmentEvent.CONFIRM, actor, actor_id)
        self.dispatcher.appointment_confirmed(appt)
        return appt

    def cancel(self, appointment_id: int, actor: Actor, reason: Optional[str], actor_id: Optional[str] = None) -> AppointmentDto:
        def require_reason(_: AppointmentDto) -> None:
            if not reason or not reason.strip():
                raise ValidationError("A cancellation reason is required")

        _, appt = self._transition(appointment_id, AppointmentEvent.CANCEL, actor, actor_id,
                                   fields={"cancellation_reason": (reason or "").strip()},
                                   guard=require_reason)
        self.dispatcher.appointment_cancelled(appt, actor)
        return appt

    def start(self, appointment_id: int, actor: Actor = Actor.DOCTOR, actor_id: Optional[str] = None) -> AppointmentDto:
        _, appt = self._transition(appointment_id, AppointmentEvent.START, actor, actor_id)
        self.dispatcher.status_changed(appt)
        return appt

    def complete(self, appointment_id: int, actor: Actor = Actor.DOCTOR, actor_id: Optional[str] = None) -> AppointmentDto:
        _, appt = self._transition(appointment_id, AppointmentEvent.COMPLETE, actor, actor_id)
        self.dispatcher.status_changed(appt)
        return appt

    def mark_no_show(self, appointment_id: int, actor: Actor = Actor.STAFF, actor_id: Optional[str] = None) -> AppointmentDto:
        _, appt = self._transition(appointment_id, AppointmentEvent.MARK_NO_SHOW, actor, actor_id)
        self.dispatcher.status_changed(appt)
        return appt
