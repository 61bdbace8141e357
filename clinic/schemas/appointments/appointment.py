# clinic/schemas/appointments/appointment.py
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from datetime import date, datetime

from ...domain.status import Actor, AppointmentStatus, ConsultationType


def _caller_actor(value: Actor) -> Actor:
    # SYSTEM skips the actor guards and is reserved for in-process jobs
    if value is Actor.SYSTEM:
        raise ValueError("actor must be one of: patient, doctor, staff")
    return value


class AppointmentBase(BaseModel):
    patient_id: int
    doctor_id: int
    appointment_date: str  # YYYY-MM-DD
    appointment_time: str  # HH:MM
    consultation_type: ConsultationType = ConsultationType.IN_PERSON
    reason: Optional[str] = None
    notes: Optional[str] = None
    fee: float = Field(default=0.0, ge=0)
    duration_minutes: Optional[int] = Field(default=None, gt=0)

class AppointmentCreate(AppointmentBase):
    actor: Actor = Actor.PATIENT
    actor_id: Optional[str] = None

    @field_validator("actor")
    @classmethod
    def check_actor(cls, value: Actor) -> Actor:
        return _caller_actor(value)

class AppointmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    patient_id: int
    doctor_id: int
    appointment_date: date
    appointment_time: str
    status: AppointmentStatus
    consultation_type: str
    reason: Optional[str] = None
    notes: Optional[str] = None
    duration_minutes: int
    fee: float
    cancellation_reason: Optional[str] = None
    reschedule_requested_by: Optional[str] = None
    reschedule_reason: Optional[str] = None
    original_date: Optional[date] = None
    original_time: Optional[str] = None
    created_at: datetime
    updated_at: datetime

class ActorRequest(BaseModel):
    actor: Actor
    actor_id: Optional[str] = None

    @field_validator("actor")
    @classmethod
    def check_actor(cls, value: Actor) -> Actor:
        return _caller_actor(value)

class CancelRequest(ActorRequest):
    reason: str = ""

class RescheduleRequest(ActorRequest):
    actor: Actor = Actor.PATIENT
    new_date: str  # YYYY-MM-DD
    new_time: str  # HH:MM
    reason: str = ""

class RescheduleDecision(ActorRequest):
    actor: Actor = Actor.DOCTOR
    note: Optional[str] = None
