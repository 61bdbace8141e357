from dataclasses import dataclass, field
from typing import List, Optional
import logging

from ..ports.schedule_repo import ScheduleRepository, WeeklyScheduleDto
from ..ports.directory import Directory
from ...core.config import Settings, get_settings
from ...domain.timeslots import normalize_time, to_minutes
from ...exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


@dataclass
class ScheduleService:
    repo: ScheduleRepository
    directory: Directory
    settings: Settings = field(default_factory=get_settings)

    def _require_doctor(self, doctor_id: int) -> None:
        if not self.directory.get_doctor(doctor_id):
            raise NotFoundError(f"Doctor {doctor_id} not found")

    @staticmethod
    def _check_day(day_of_week: int) -> None:
        if day_of_week not in range(7):
            raise ValidationError("day_of_week must be between 0 (Sunday) and 6 (Saturday)")

    def _on_grid(self, value: str, name: str) -> str:
        time_str = normalize_time(value)
        if to_minutes(time_str) % self.settings.SLOT_MINUTES != 0:
            raise ValidationError(f"{name} must fall on a {self.settings.SLOT_MINUTES}-minute boundary, got {value}")
        return time_str

    def upsert(self, doctor_id: int, day_of_week: int, start_time: str, end_time: str,
               is_available: bool = True, break_start: Optional[str] = None,
               break_end: Optional[str] = None, max_patients_per_day: int = 20) -> WeeklyScheduleDto:
        self._check_day(day_of_week)
        self._require_doctor(doctor_id)

        # end_time may be off-grid; the trailing partial slot is dropped.
        start = self._on_grid(start_time, "start_time")
        end = normalize_time(end_time)
        if to_minutes(start) >= to_minutes(end):
            raise ValidationError("start_time must be before end_time")

        if bool(break_start) != bool(break_end):
            raise ValidationError("Both break_start and break_end are required for a break")
        if break_start and break_end:
            break_start = self._on_grid(break_start, "break_start")
            break_end = self._on_grid(break_end, "break_end")
            if to_minutes(break_start) >= to_minutes(break_end):
                raise ValidationError("break_start must be before break_end")
            if to_minutes(break_start) < to_minutes(start) or to_minutes(break_end) > to_minutes(end):
                raise ValidationError("Break must fall within working hours")
        else:
            break_start = break_end = None

        if max_patients_per_day < 1:
            raise ValidationError("max_patients_per_day must be at least 1")

        saved = self.repo.upsert(WeeklyScheduleDto(
            doctor_id=doctor_id,
            day_of_week=day_of_week,
            start_time=start,
            end_time=end,
            is_available=is_available,
            break_start=break_start,
            break_end=break_end,
            max_patients_per_day=max_patients_per_day,
        ))
        logger.info(f"Saved {DAY_NAMES[day_of_week]} schedule for doctor {doctor_id}: {start}-{end}")
        return saved

    def list_for_doctor(self, doctor_id: int) -> List[WeeklyScheduleDto]:
        self._require_doctor(doctor_id)
        return sorted(self.repo.list_for_doctor(doctor_id), key=lambda s: s.day_of_week)

    def set_availability(self, doctor_id: int, day_of_week: int, is_available: bool) -> WeeklyScheduleDto:
        self._check_day(day_of_week)
        row = self.repo.get_for_day(doctor_id, day_of_week)
        if not row:
            raise NotFoundError(f"No {DAY_NAMES[day_of_week]} schedule for doctor {doctor_id}")
        row.is_available = is_available
        return self.repo.upsert(row)

    def delete(self, doctor_id: int, day_of_week: int) -> None:
        self._check_day(day_of_week)
        if not self.repo.delete(doctor_id, day_of_week):
            raise NotFoundError(f"No {DAY_NAMES[day_of_week]} schedule for doctor {doctor_id}")
        logger.info(f"Removed {DAY_NAMES[day_of_week]} schedule for doctor {doctor_id}")
