# clinic/db/models/health/schedule.py
from typing import Optional
from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field
from datetime import datetime


class DoctorSchedule(SQLModel, table=True):
    __tablename__ = "doctor_schedules"
    __table_args__ = (UniqueConstraint("doctor_id", "day_of_week", name="uq_doctor_schedules_doctor_day"),)
    id: Optional[int] = Field(default=None, primary_key=True)
    doctor_id: int = Field(foreign_key="doctors.id", index=True)
    day_of_week: int  # 0 = Sunday
    start_time: str = Field(max_length=5)
    end_time: str = Field(max_length=5)
    is_available: bool = Field(default=True)
    break_start: Optional[str] = Field(default=None, max_length=5)
    break_end: Optional[str] = Field(default=None, max_length=5)
    max_patients_per_day: int = Field(default=20)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
