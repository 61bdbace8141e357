# clinic/db/models/health/appointment.py
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import date, datetime


class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    id: Optional[int] = Field(default=None, primary_key=True)
    patient_id: int = Field(foreign_key="patients.id", index=True)
    doctor_id: int = Field(foreign_key="doctors.id", index=True)
    appointment_date: date = Field(index=True)
    appointment_time: str = Field(max_length=5)  # HH:MM, clinic-local
    status: str = Field(default="pending", index=True)
    consultation_type: str = Field(default="in-person")
    reason: Optional[str] = None
    notes: Optional[str] = None
    duration_minutes: int = Field(default=30)
    fee: float = Field(default=0.0)
    cancellation_reason: Optional[str] = None
    reschedule_requested_by: Optional[str] = None
    reschedule_reason: Optional[str] = None
    original_date: Optional[date] = None
    original_time: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
