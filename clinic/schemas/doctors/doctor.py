# clinic/schemas/doctors/doctor.py
from pydantic import BaseModel
from typing import List, Optional

class SlotResponse(BaseModel):
    date: str
    time: str

class AvailabilityResponse(BaseModel):
    doctor_id: int
    date: str
    day: str
    total_available: int
    available_slots: List[str]

class NextAvailableResponse(BaseModel):
    doctor_id: int
    slot: Optional[SlotResponse] = None
