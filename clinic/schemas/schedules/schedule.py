# clinic/schemas/schedules/schedule.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional

class ScheduleBase(BaseModel):
    start_time: str  # HH:MM
    end_time: str  # HH:MM
    is_available: bool = True
    break_start: Optional[str] = None
    break_end: Optional[str] = None
    max_patients_per_day: int = Field(default=20, ge=1)

class ScheduleUpsert(ScheduleBase):
    pass

class ScheduleResponse(ScheduleBase):
    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None
    doctor_id: int
    day_of_week: int = Field(ge=0, le=6)

class AvailabilityToggle(BaseModel):
    is_available: bool
