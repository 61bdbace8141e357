# clinic/db/models/users/patient.py
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime

class Patient(SQLModel, table=True):
    __tablename__ = "patients"
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(max_length=36, index=True)
    name: str = Field(max_length=100)
    email: Optional[str] = Field(max_length=100, default=None)
    phone: Optional[str] = Field(max_length=20, default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow)
