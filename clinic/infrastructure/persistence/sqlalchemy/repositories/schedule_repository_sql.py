from typing import List, Optional
from datetime import datetime
import logging

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from .....db.models import DoctorSchedule
from .....application.ports.schedule_repo import ScheduleRepository, WeeklyScheduleDto

logger = logging.getLogger(__name__)


class SqlScheduleRepository(ScheduleRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, s: DoctorSchedule) -> WeeklyScheduleDto:
        return WeeklyScheduleDto(
            id=s.id,
            doctor_id=s.doctor_id,
            day_of_week=s.day_of_week,
            start_time=s.start_time,
            end_time=s.end_time,
            is_available=bool(s.is_available),
            break_start=s.break_start,
            break_end=s.break_end,
            max_patients_per_day=s.max_patients_per_day,
        )

    def _find(self, doctor_id: int, day_of_week: int) -> Optional[DoctorSchedule]:
        return self.session.exec(
            select(DoctorSchedule)
            .where(DoctorSchedule.doctor_id == doctor_id)
            .where(DoctorSchedule.day_of_week == day_of_week)
        ).first()

    def list_for_doctor(self, doctor_id: int) -> List[WeeklyScheduleDto]:
        rows = self.session.exec(
            select(DoctorSchedule)
            .where(DoctorSchedule.doctor_id == doctor_id)
            .order_by(DoctorSchedule.day_of_week)
        ).all()
        return [self._to_dto(r) for r in rows]

    def get_for_day(self, doctor_id: int, day_of_week: int) -> Optional[WeeklyScheduleDto]:
        s = self._find(doctor_id, day_of_week)
        return self._to_dto(s) if s else None

    def _apply(self, row: DoctorSchedule, schedule: WeeklyScheduleDto) -> None:
        row.start_time = schedule.start_time
        row.end_time = schedule.end_time
        row.is_available = schedule.is_available
        row.break_start = schedule.break_start
        row.break_end = schedule.break_end
        row.max_patients_per_day = schedule.max_patients_per_day
        row.updated_at = datetime.utcnow()

    def upsert(self, schedule: WeeklyScheduleDto) -> WeeklyScheduleDto:
        row = self._find(schedule.doctor_id, schedule.day_of_week)
        if row is None:
            row = DoctorSchedule(doctor_id=schedule.doctor_id, day_of_week=schedule.day_of_week,
                                 start_time=schedule.start_time, end_time=schedule.end_time)
        self._apply(row, schedule)
        try:
            self.session.add(row)
            self.session.commit()
        except IntegrityError:
            # Another writer inserted the same (doctor, day) first; update theirs.
            self.session.rollback()
            row = self._find(schedule.doctor_id, schedule.day_of_week)
            self._apply(row, schedule)
            self.session.add(row)
            self.session.commit()
        self.session.refresh(row)
        return self._to_dto(row)

    def delete(self, doctor_id: int, day_of_week: int) -> bool:
        row = self._find(doctor_id, day_of_week)
        if not row:
            return False
        self.session.delete(row)
        self.session.commit()
        return True
