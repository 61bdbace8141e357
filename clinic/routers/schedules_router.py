from typing import List
from fastapi import APIRouter, Depends, Path
import logging

from ..application.services.schedule_service import ScheduleService
from ..schemas.common.common import MessageResponse
from ..schemas.schedules.schedule import AvailabilityToggle, ScheduleResponse, ScheduleUpsert
from .dependencies import get_schedule_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/doctors/{doctor_id}/schedule", tags=["Schedules"])


@router.get("/", response_model=List[ScheduleResponse])
def list_schedule(doctor_id: int, schedules: ScheduleService = Depends(get_schedule_service)):
    return [ScheduleResponse.model_validate(s) for s in schedules.list_for_doctor(doctor_id)]


@router.put("/{day_of_week}", response_model=ScheduleResponse)
def upsert_schedule(
    doctor_id: int,
    body: ScheduleUpsert,
    day_of_week: int = Path(..., ge=0, le=6),
    schedules: ScheduleService = Depends(get_schedule_service),
):
    saved = schedules.upsert(doctor_id, day_of_week, **body.model_dump())
    return ScheduleResponse.model_validate(saved)


@router.patch("/{day_of_week}/availability", response_model=ScheduleResponse)
def toggle_availability(
    doctor_id: int,
    body: AvailabilityToggle,
    day_of_week: int = Path(..., ge=0, le=6),
    schedules: ScheduleService = Depends(get_schedule_service),
):
    return ScheduleResponse.model_validate(schedules.set_availability(doctor_id, day_of_week, body.is_available))


@router.delete("/{day_of_week}", response_model=MessageResponse)
def delete_schedule(
    doctor_id: int,
    day_of_week: int = Path(..., ge=0, le=6),
    schedules: ScheduleService = Depends(get_schedule_service),
):
    schedules.delete(doctor_id, day_of_week)
    return MessageResponse(message="Schedule removed")
