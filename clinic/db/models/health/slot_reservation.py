# clinic/db/models/health/slot_reservation.py
from sqlmodel import SQLModel, Field
from datetime import date, datetime


class SlotReservation(SQLModel, table=True):
    """One row per doctor-slot held by an active appointment.

    The composite primary key is what rejects a second active booking of the
    same (doctor, date, time).
    """
    __tablename__ = "slot_reservations"
    doctor_id: int = Field(foreign_key="doctors.id", primary_key=True)
    slot_date: date = Field(primary_key=True)
    slot_time: str = Field(max_length=5, primary_key=True)
    appointment_id: int = Field(foreign_key="appointments.id", index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
