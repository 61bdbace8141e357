from dataclasses import dataclass
from typing import List, Optional, Protocol


@dataclass
class PersonDto:
    id: int
    user_id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None


class Directory(Protocol):
    """Resolves doctor/patient/staff ids to the people behind them."""

    def get_doctor(self, doctor_id: int) -> Optional[PersonDto]:
        ...

    def get_patient(self, patient_id: int) -> Optional[PersonDto]:
        ...

    def list_staff(self, limit: int) -> List[PersonDto]:
        ...
