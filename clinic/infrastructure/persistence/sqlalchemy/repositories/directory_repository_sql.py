from typing import List, Optional
from sqlmodel import Session, select

from .....db.models import Doctor, Patient, StaffMember
from .....application.ports.directory import Directory, PersonDto


class SqlDirectory(Directory):
    def __init__(self, session: Session):
        self.session = session

    @staticmethod
    def _to_dto(row) -> PersonDto:
        return PersonDto(
            id=row.id,
            user_id=row.user_id,
            name=row.name,
            email=getattr(row, "email", None),
            phone=getattr(row, "phone", None),
        )

    def get_doctor(self, doctor_id: int) -> Optional[PersonDto]:
        d = self.session.exec(
            select(Doctor).where(Doctor.id == doctor_id).where(Doctor.is_active == True)  # noqa: E712
        ).first()
        return self._to_dto(d) if d else None

    def get_patient(self, patient_id: int) -> Optional[PersonDto]:
        p = self.session.get(Patient, patient_id)
        return self._to_dto(p) if p else None

    def list_staff(self, limit: int) -> List[PersonDto]:
        rows = self.session.exec(
            select(StaffMember)
            .where(StaffMember.is_active == True)  # noqa: E712
            .order_by(StaffMember.id)
            .limit(limit)
        ).all()
        return [self._to_dto(r) for r in rows]
