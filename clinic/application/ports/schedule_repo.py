from dataclasses import dataclass
from typing import List, Optional, Protocol


@dataclass
class WeeklyScheduleDto:
    doctor_id: int
    day_of_week: int
    start_time: str
    end_time: str
    is_available: bool = True
    break_start: Optional[str] = None
    break_end: Optional[str] = None
    max_patients_per_day: int = 20
    id: Optional[int] = None

    @property
    def has_break(self) -> bool:
        return bool(self.break_start and self.break_end)


class ScheduleRepository(Protocol):
    def list_for_doctor(self, doctor_id: int) -> List[WeeklyScheduleDto]:
        ...

    def get_for_day(self, doctor_id: int, day_of_week: int) -> Optional[WeeklyScheduleDto]:
        ...

    def upsert(self, schedule: WeeklyScheduleDto) -> WeeklyScheduleDto:
        ...

    def delete(self, doctor_id: int, day_of_week: int) -> bool:
        ...
