from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query
import logging

from ..application.services.booking_service import BookingService
from ..application.services.reschedule_service import RescheduleService
from ..exceptions import SchedulingError
from ..schemas.appointments.appointment import (
    ActorRequest,
    AppointmentCreate,
    AppointmentResponse,
    CancelRequest,
    RescheduleDecision,
    RescheduleRequest,
)
from ..schemas.common.common import ErrorResponse
from .dependencies import get_booking_service, get_reschedule_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/appointments",
    tags=["Appointments"],
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)


@router.post("/", response_model=AppointmentResponse, status_code=201)
def book_appointment(
    appointment_data: AppointmentCreate,
    booking: BookingService = Depends(get_booking_service),
):
    try:
        appt = booking.create(
            patient_id=appointment_data.patient_id,
            doctor_id=appointment_data.doctor_id,
            appointment_date=appointment_data.appointment_date,
            appointment_time=appointment_data.appointment_time,
            consultation_type=appointment_data.consultation_type.value,
            reason=appointment_data.reason,
            fee=appointment_data.fee,
            duration_minutes=appointment_data.duration_minutes,
            notes=appointment_data.notes,
            actor=appointment_data.actor,
            actor_id=appointment_data.actor_id,
        )
        return AppointmentResponse.model_validate(appt)
    except SchedulingError:
        raise
    except Exception as e:
        logger.error(f"Error booking appointment: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to book appointment")


@router.get("/", response_model=List[AppointmentResponse])
def list_appointments(
    doctor_id: Optional[int] = Query(None),
    patient_id: Optional[int] = Query(None),
    date: Optional[str] = Query(None, description="YYYY-MM-DD, only with doctor_id"),
    booking: BookingService = Depends(get_booking_service),
):
    if doctor_id is not None:
        appts = booking.list_for_doctor(doctor_id, date)
    elif patient_id is not None:
        appts = booking.list_for_patient(patient_id)
    else:
        raise HTTPException(status_code=400, detail="doctor_id or patient_id is required")
    return [AppointmentResponse.model_validate(a) for a in appts]


@router.get("/{appointment_id}", response_model=AppointmentResponse)
def get_appointment(appointment_id: int, booking: BookingService = Depends(get_booking_service)):
    return AppointmentResponse.model_validate(booking.get(appointment_id))


@router.post("/{appointment_id}/confirm", response_model=AppointmentResponse)
def confirm_appointment(appointment_id: int, body: ActorRequest,
                        booking: BookingService = Depends(get_booking_service)):
    return AppointmentResponse.model_validate(booking.confirm(appointment_id, body.actor, body.actor_id))


@router.post("/{appointment_id}/cancel", response_model=AppointmentResponse)
def cancel_appointment(appointment_id: int, body: CancelRequest,
                       booking: BookingService = Depends(get_booking_service)):
    return AppointmentResponse.model_validate(
        booking.cancel(appointment_id, body.actor, body.reason, body.actor_id)
    )


@router.post("/{appointment_id}/start", response_model=AppointmentResponse)
def start_appointment(appointment_id: int, body: ActorRequest,
                      booking: BookingService = Depends(get_booking_service)):
    return AppointmentResponse.model_validate(booking.start(appointment_id, body.actor, body.actor_id))


@router.post("/{appointment_id}/complete", response_model=AppointmentResponse)
def complete_appointment(appointment_id: int, body: ActorRequest,
                         booking: BookingService = Depends(get_booking_service)):
    return AppointmentResponse.model_validate(booking.complete(appointment_id, body.actor, body.actor_id))


@router.post("/{appointment_id}/no-show", response_model=AppointmentResponse)
def mark_no_show(appointment_id: int, body: ActorRequest,
                 booking: BookingService = Depends(get_booking_service)):
    return AppointmentResponse.model_validate(booking.mark_no_show(appointment_id, body.actor, body.actor_id))


@router.post("/{appointment_id}/reschedule", response_model=AppointmentResponse)
def request_reschedule(appointment_id: int, body: RescheduleRequest,
                       reschedule: RescheduleService = Depends(get_reschedule_service)):
    appt = reschedule.request_reschedule(
        appointment_id, body.new_date, body.new_time, body.reason, body.actor, body.actor_id
    )
    return AppointmentResponse.model_validate(appt)


@router.post("/{appointment_id}/reschedule/confirm", response_model=AppointmentResponse)
def confirm_reschedule(appointment_id: int, body: RescheduleDecision,
                       reschedule: RescheduleService = Depends(get_reschedule_service)):
    return AppointmentResponse.model_validate(
        reschedule.confirm_reschedule(appointment_id, body.actor, body.actor_id, body.note)
    )


@router.post("/{appointment_id}/reschedule/reject", response_model=AppointmentResponse)
def reject_reschedule(appointment_id: int, body: RescheduleDecision,
                      reschedule: RescheduleService = Depends(get_reschedule_service)):
    return AppointmentResponse.model_validate(
        reschedule.reject_reschedule(appointment_id, body.actor, body.actor_id, body.note)
    )
