# clinic/db/models/health/doctor.py
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime

class Doctor(SQLModel, table=True):
    __tablename__ = "doctors"
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(max_length=36, index=True)
    name: str
    specialization: Optional[str] = None
    email: Optional[str] = Field(max_length=100, default=None)
    phone: Optional[str] = Field(max_length=20, default=None)
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
