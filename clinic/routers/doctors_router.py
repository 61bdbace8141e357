from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional
import logging

from ..application.services.availability_service import AvailabilityService
from ..application.services.schedule_service import DAY_NAMES
from ..domain.timeslots import day_of_week
from ..exceptions import SchedulingError
from ..schemas.common.common import ErrorResponse
from ..schemas.doctors.doctor import AvailabilityResponse, NextAvailableResponse, SlotResponse
from .dependencies import get_availability_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/doctors",
    tags=["Doctors"],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)


@router.get("/{doctor_id}/availability", response_model=AvailabilityResponse)
def get_availability(
    doctor_id: int,
    date: str = Query(..., description="YYYY-MM-DD"),
    availability: AvailabilityService = Depends(get_availability_service),
):
    try:
        slots = availability.compute_available_slots(doctor_id, date)
        d = availability.check_date(date)
        return AvailabilityResponse(
            doctor_id=doctor_id,
            date=d.isoformat(),
            day=DAY_NAMES[day_of_week(d)],
            total_available=len(slots),
            available_slots=[s.time for s in slots],
        )
    except SchedulingError:
        raise
    except Exception as e:
        logger.error(f"Error computing availability for doctor {doctor_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to compute availability")


@router.get("/{doctor_id}/next-available", response_model=NextAvailableResponse)
def get_next_available(
    doctor_id: int,
    from_date: Optional[str] = Query(None, description="YYYY-MM-DD, defaults to today"),
    days: int = Query(7, ge=1, le=90),
    availability: AvailabilityService = Depends(get_availability_service),
):
    try:
        slot = availability.next_available_slot(doctor_id, from_date, days)
        return NextAvailableResponse(
            doctor_id=doctor_id,
            slot=SlotResponse(date=slot.date.isoformat(), time=slot.time) if slot else None,
        )
    except SchedulingError:
        raise
    except Exception as e:
        logger.error(f"Error finding next slot for doctor {doctor_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to find next available slot")
