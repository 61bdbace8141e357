from dataclasses import dataclass, field
from typing import Optional
import logging

from ..ports.appointments_repo import AppointmentsRepository, AppointmentDto
from ..ports.audit_logger import AuditLogger
from .availability_service import AvailabilityService
from .notification_dispatcher import NotificationDispatcher
from ...core.config import Settings, get_settings
from ...domain.status import Actor, AppointmentEvent, next_status
from ...domain.timeslots import check_on_grid
from ...exceptions import NotFoundError, SlotUnavailable, ValidationError

logger = logging.getLogger(__name__)


@dataclass
class RescheduleService:
    """Moves a confirmed appointment to a new slot, pending the doctor's decision.

    While a request is pending the appointment holds both its original and its
    requested slot. Approval releases the original slot; rejection releases the
    requested one and restores the original date and time.
    """
    repo: AppointmentsRepository
    availability: AvailabilityService
    dispatcher: NotificationDispatcher
    audit: AuditLogger
    settings: Settings = field(default_factory=get_settings)

    def _get(self, appointment_id: int) -> AppointmentDto:
        appt = self.repo.get(appointment_id)
        if not appt:
            raise NotFoundError(f"Appointment {appointment_id} not found")
        return appt

    def request_reschedule(self, appointment_id: int, new_date: str, new_time: str, reason: Optional[str],
                           requested_by: Actor = Actor.PATIENT, actor_id: Optional[str] = None) -> AppointmentDto:
        appt = self._get(appointment_id)
        target = next_status(appt.status, AppointmentEvent.REQUEST_RESCHEDULE, requested_by)

        if not reason or not reason.strip():
            raise ValidationError("A reason is required to reschedule")
        d = self.availability.check_date(new_date)
        time_str = check_on_grid(new_time, self.settings.SLOT_MINUTES)
        if d == appt.appointment_date and time_str == appt.appointment_time:
            raise ValidationError("The new slot is the same as the current one")

        # Checked now rather than when the patient looked at the calendar.
        if not self.availability.is_slot_free(appt.doctor_id, d, time_str, ignore_appointment_id=appt.id):
            raise SlotUnavailable(f"The {time_str} slot on {d.isoformat()} is no longer available")

        updated = self.repo.request_reschedule(appointment_id, d, time_str, reason.strip(), requested_by.value)
        logger.info(
            f"Appointment {appointment_id}: reschedule requested by {requested_by.value} "
            f"from {appt.appointment_date} {appt.appointment_time} to {d} {time_str}"
        )
        self.audit.log("appointment.request_reschedule", appointment_id, requested_by.value, actor_id,
                       appt.status.value, target.value,
                       {"new_date": d.isoformat(), "new_time": time_str, "reason": reason.strip()})
        self.dispatcher.reschedule_requested(updated)
        return updated

    def _resolve(self, appointment_id: int, approved: bool, actor: Actor, actor_id: Optional[str],
                 note: Optional[str]) -> AppointmentDto:
        appt = self._get(appointment_id)
        event = AppointmentEvent.CONFIRM_RESCHEDULE if approved else AppointmentEvent.REJECT_RESCHEDULE
        target = next_status(appt.status, event, actor)

        updated = self.repo.resolve_reschedule(appointment_id, approved, note)
        logger.info(f"Appointment {appointment_id}: reschedule {'approved' if approved else 'rejected'} by {actor.value}")
        self.audit.log(f"appointment.{event.value}", appointment_id, actor.value, actor_id,
                       appt.status.value, target.value,
                       {"appointment_date": updated.appointment_date.isoformat(),
                        "appointment_time": updated.appointment_time})
        self.dispatcher.reschedule_resolved(updated, approved)
        return updated

    def confirm_reschedule(self, appointment_id: int, actor: Actor = Actor.DOCTOR, actor_id: Optional[str] = None,
                           note: Optional[str] = None) -> AppointmentDto:
        return self._resolve(appointment_id, True, actor, actor_id, note)

    def reject_reschedule(self, appointment_id: int, actor: Actor = Actor.DOCTOR, actor_id: Optional[str] = None,
                          note: Optional[str] = None) -> AppointmentDto:
        return self._resolve(appointment_id, False, actor, actor_id, note)
