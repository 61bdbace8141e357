from typing import Any, Dict, List, Optional, Set
from datetime import date, datetime
import logging

from sqlalchemy import and_, delete, func, or_, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from .....db.models import Appointment, SlotReservation
from .....application.ports.appointments_repo import (
    AppointmentsRepository,
    AppointmentDto,
    NewAppointment,
)
from .....domain.status import ACTIVE_STATUSES, AppointmentStatus
from .....exceptions import ConflictError, NotFoundError, SlotUnavailable

logger = logging.getLogger(__name__)

ACTIVE_VALUES = sorted(s.value for s in ACTIVE_STATUSES)


class SqlAppointmentsRepository(AppointmentsRepository):
    def __init__(self, session: Session):
        self.session = session

    def _appt_to_dto(self, a: Appointment) -> AppointmentDto:
        return AppointmentDto(
            id=a.id,
            patient_id=a.patient_id,
            doctor_id=a.doctor_id,
            appointment_date=a.appointment_date,
            appointment_time=a.appointment_time,
            status=AppointmentStatus(a.status),
            consultation_type=a.consultation_type,
            reason=a.reason,
            notes=a.notes,
            duration_minutes=a.duration_minutes,
            fee=a.fee,
            cancellation_reason=a.cancellation_reason,
            reschedule_requested_by=a.reschedule_requested_by,
            reschedule_reason=a.reschedule_reason,
            original_date=a.original_date,
            original_time=a.original_time,
            created_at=a.created_at,
            updated_at=a.updated_at,
        )

    def _load(self, appointment_id: int) -> Appointment:
        a = self.session.get(Appointment, appointment_id)
        if not a:
            raise NotFoundError(f"Appointment {appointment_id} not found")
        return a

    def _compare_and_set(self, appointment_id: int, expected: AppointmentStatus, values: Dict[str, Any]) -> None:
        values["updated_at"] = datetime.utcnow()
        result = self.session.execute(
            update(Appointment)
            .where(Appointment.id == appointment_id)
            .where(Appointment.status == expected.value)
            .values(**values)
        )
        if result.rowcount == 0:
            self.session.rollback()
            self._load(appointment_id)
            raise ConflictError("Appointment was changed by another request. Reload and try again")

    def get(self, appointment_id: int) -> Optional[AppointmentDto]:
        a = self.session.get(Appointment, appointment_id)
        return self._appt_to_dto(a) if a else None

    def list_for_doctor(self, doctor_id: int, appointment_date: Optional[date] = None) -> List[AppointmentDto]:
        query = select(Appointment).where(Appointment.doctor_id == doctor_id)
        if appointment_date is not None:
            query = query.where(Appointment.appointment_date == appointment_date)
        rows = self.session.exec(
            query.order_by(Appointment.appointment_date, Appointment.appointment_time)
        ).all()
        return [self._appt_to_dto(r) for r in rows]

    def list_for_patient(self, patient_id: int) -> List[AppointmentDto]:
        rows = self.session.exec(
            select(Appointment)
            .where(Appointment.patient_id == patient_id)
            .order_by(Appointment.appointment_date.desc(), Appointment.appointment_time.desc())
        ).all()
        return [self._appt_to_dto(r) for r in rows]

    def booked_times(self, doctor_id: int, appointment_date: date) -> Set[str]:
        reserved = self.session.exec(
            select(SlotReservation.slot_time)
            .where(SlotReservation.doctor_id == doctor_id)
            .where(SlotReservation.slot_date == appointment_date)
        ).all()
        active = self.session.exec(
            select(Appointment.appointment_time)
            .where(Appointment.doctor_id == doctor_id)
            .where(Appointment.appointment_date == appointment_date)
            .where(Appointment.status.in_(ACTIVE_VALUES))
        ).all()
        return set(reserved) | set(active)

    def count_active(self, doctor_id: int, appointment_date: date, exclude_id: Optional[int] = None) -> int:
        # A pending reschedule still holds its original slot, so it counts on both days.
        on_day = or_(
            Appointment.appointment_date == appointment_date,
            and_(
                Appointment.status == AppointmentStatus.PENDING_RESCHEDULE_CONFIRMATION.value,
                Appointment.original_date == appointment_date,
            ),
        )
        query = (
            select(func.count())
            .select_from(Appointment)
            .where(Appointment.doctor_id == doctor_id)
            .where(on_day)
            .where(Appointment.status.in_(ACTIVE_VALUES))
        )
        if exclude_id is not None:
            query = query.where(Appointment.id != exclude_id)
        return int(self.session.exec(query).one())

    def create(self, data: NewAppointment) -> AppointmentDto:
        appt = Appointment(
            patient_id=data.patient_id,
            doctor_id=data.doctor_id,
            appointment_date=data.appointment_date,
            appointment_time=data.appointment_time,
            status=AppointmentStatus.PENDING.value,
            consultation_type=data.consultation_type,
            reason=data.reason,
            notes=data.notes,
            duration_minutes=data.duration_minutes,
            fee=data.fee,
        )
        try:
            self.session.add(appt)
            self.session.flush()
            self.session.add(SlotReservation(
                doctor_id=data.doctor_id,
                slot_date=data.appointment_date,
                slot_time=data.appointment_time,
                appointment_id=appt.id,
            ))
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            logger.warning(
                f"Slot conflict for doctor {data.doctor_id} on {data.appointment_date} at {data.appointment_time}"
            )
            raise SlotUnavailable("This time slot is already booked")
        self.session.refresh(appt)
        return self._appt_to_dto(appt)

    def update_status(self, appointment_id: int, expected: AppointmentStatus, status: AppointmentStatus,
                      fields: Optional[Dict[str, Any]] = None, release_slots: bool = False) -> AppointmentDto:
        values = dict(fields or {})
        values["status"] = status.value
        self._compare_and_set(appointment_id, expected, values)
        if release_slots:
            self.session.execute(
                delete(SlotReservation).where(SlotReservation.appointment_id == appointment_id)
            )
        self.session.commit()
        return self.get(appointment_id)

    def request_reschedule(self, appointment_id: int, new_date: date, new_time: str,
                           reason: str, requested_by: str) -> AppointmentDto:
        a = self._load(appointment_id)
        if a.status != AppointmentStatus.CONFIRMED.value:
            raise ConflictError("Only confirmed appointments can be rescheduled")
        doctor_id, original_date, original_time = a.doctor_id, a.appointment_date, a.appointment_time

        try:
            self.session.add(SlotReservation(
                doctor_id=doctor_id,
                slot_date=new_date,
                slot_time=new_time,
                appointment_id=appointment_id,
            ))
            self.session.flush()
        except IntegrityError:
            self.session.rollback()
            logger.warning(f"Reschedule of appointment {appointment_id} lost the {new_date} {new_time} slot")
            raise SlotUnavailable("This time slot is already booked")

        self._compare_and_set(appointment_id, AppointmentStatus.CONFIRMED, {
            "status": AppointmentStatus.PENDING_RESCHEDULE_CONFIRMATION.value,
            "appointment_date": new_date,
            "appointment_time": new_time,
            "original_date": original_date,
            "original_time": original_time,
            "reschedule_reason": reason,
            "reschedule_requested_by": requested_by,
        })
        self.session.commit()
        return self.get(appointment_id)

    def resolve_reschedule(self, appointment_id: int, approved: bool, note: Optional[str] = None) -> AppointmentDto:
        a = self._load(appointment_id)
        if a.status != AppointmentStatus.PENDING_RESCHEDULE_CONFIRMATION.value:
            raise ConflictError("Appointment has no pending reschedule request")

        values: Dict[str, Any] = {
            "status": AppointmentStatus.CONFIRMED.value,
            "original_date": None,
            "original_time": None,
            "reschedule_requested_by": None,
            "reschedule_reason": None,
        }
        if approved:
            released = (a.original_date, a.original_time)
        else:
            released = (a.appointment_date, a.appointment_time)
            values["appointment_date"] = a.original_date
            values["appointment_time"] = a.original_time
        if note:
            values["notes"] = note

        self._compare_and_set(appointment_id, AppointmentStatus.PENDING_RESCHEDULE_CONFIRMATION, values)
        self.session.execute(
            delete(SlotReservation)
            .where(SlotReservation.appointment_id == appointment_id)
            .where(SlotReservation.slot_date == released[0])
            .where(SlotReservation.slot_time == released[1])
        )
        self.session.commit()
        return self.get(appointment_id)
