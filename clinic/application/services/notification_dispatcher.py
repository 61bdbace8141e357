from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple
import logging

from ..ports.appointments_repo import AppointmentDto
from ..ports.directory import Directory, PersonDto
from ..ports.notifier import Notifier
from ...domain.status import Actor

logger = logging.getLogger(__name__)

# (user_id, title, message, type, priority)
Message = Tuple[str, str, str, str, str]


def _fmt_time(time_str: Optional[str]) -> str:
    if not time_str:
        return ""
    t = datetime.strptime(time_str, "%H:%M")
    return t.strftime("%I:%M %p").lstrip("0")


@dataclass
class NotificationDispatcher:
    """Post-commit fan-out of appointment notifications.

    Every public method is best-effort: errors from the directory or the
    notifier are logged and never reach the caller, so a committed
    transition is never undone by a notification failure.
    """
    notifier: Notifier
    directory: Directory
    staff_limit: int = 3

    def _deliver(self, appt: AppointmentDto, build) -> None:
        try:
            messages: List[Message] = build()
        except Exception:
            logger.exception(f"Could not prepare notifications for appointment {appt.id}")
            return
        for user_id, title, message, type_, priority in messages:
            try:
                self.notifier.notify(user_id, title, message, type_, priority, appt.id)
            except Exception:
                logger.exception(f"Failed to notify user {user_id} about appointment {appt.id}")

    def _people(self, appt: AppointmentDto) -> Tuple[Optional[PersonDto], Optional[PersonDto]]:
        return self.directory.get_patient(appt.patient_id), self.directory.get_doctor(appt.doctor_id)

    @staticmethod
    def _when(appt: AppointmentDto) -> str:
        return f"{appt.appointment_date.isoformat()} at {_fmt_time(appt.appointment_time)}"

    def appointment_created(self, appt: AppointmentDto) -> None:
        def build() -> List[Message]:
            patient, doctor = self._people(appt)
            patient_name = patient.name if patient else "A patient"
            doctor_name = doctor.name if doctor else "your doctor"
            out: List[Message] = []
            if patient:
                out.append((patient.user_id, "Appointment Requested",
                            f"Your appointment with Dr. {doctor_name} on {self._when(appt)} is awaiting confirmation.",
                            "appointment", "medium"))
            if doctor:
                out.append((doctor.user_id, "New Appointment Request",
                            f"{patient_name} requested an appointment on {self._when(appt)}.",
                            "appointment", "medium"))
            for staff in self.directory.list_staff(self.staff_limit):
                out.append((staff.user_id, "New Booking",
                            f"{patient_name} booked Dr. {doctor_name} on {self._when(appt)}.",
                            "system", "low"))
            return out
        self._deliver(appt, build)

    def appointment_confirmed(self, appt: AppointmentDto) -> None:
        def build() -> List[Message]:
            patient, doctor = self._people(appt)
            if not patient:
                return []
            doctor_name = doctor.name if doctor else "your doctor"
            return [(patient.user_id, "Appointment Confirmed",
                     f"Your appointment with Dr. {doctor_name} on {self._when(appt)} has been confirmed. "
                     "Please arrive 15 minutes early.",
                     "appointment", "high")]
        self._deliver(appt, build)

    def appointment_cancelled(self, appt: AppointmentDto, cancelled_by: Actor) -> None:
        def build() -> List[Message]:
            patient, doctor = self._people(appt)
            reason = appt.cancellation_reason or ""
            out: List[Message] = []
            if patient and cancelled_by is not Actor.PATIENT:
                out.append((patient.user_id, "Appointment Cancelled",
                            f"Your appointment on {self._when(appt)} was cancelled. Reason: {reason}",
                            "appointment", "high"))
            if doctor and cancelled_by is not Actor.DOCTOR:
                patient_name = patient.name if patient else "A patient"
                out.append((doctor.user_id, "Appointment Cancelled",
                            f"The appointment with {patient_name} on {self._when(appt)} was cancelled. Reason: {reason}",
                            "appointment", "medium"))
            return out
        self._deliver(appt, build)

    def reschedule_requested(self, appt: AppointmentDto) -> None:
        def build() -> List[Message]:
            patient, doctor = self._people(appt)
            if not doctor:
                return []
            patient_name = patient.name if patient else "A patient"
            return [(doctor.user_id, "Appointment Reschedule Request",
                     f"{patient_name} asked to move the appointment on {appt.original_date} at "
                     f"{_fmt_time(appt.original_time)} to {self._when(appt)}. Reason: {appt.reschedule_reason}",
                     "appointment", "medium")]
        self._deliver(appt, build)

    def reschedule_resolved(self, appt: AppointmentDto, approved: bool) -> None:
        def build() -> List[Message]:
            patient, _ = self._people(appt)
            if not patient:
                return []
            if approved:
                return [(patient.user_id, "Reschedule Approved",
                         f"Your appointment has been moved to {self._when(appt)}.",
                         "appointment", "high")]
            return [(patient.user_id, "Reschedule Declined",
                     f"Your reschedule request was declined. Your appointment stays on {self._when(appt)}.",
                     "appointment", "high")]
        self._deliver(appt, build)

    def status_changed(self, appt: AppointmentDto) -> None:
        def build() -> List[Message]:
            patient, _ = self._people(appt)
            if not patient:
                return []
            label = appt.status.value.replace("-", " ")
            return [(patient.user_id, "Appointment Update",
                     f"Your appointment on {self._when(appt)} is now {label}.",
                     "appointment", "low")]
        self._deliver(appt, build)
