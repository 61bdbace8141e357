# clinic/db/models/users/staff.py
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime

class StaffMember(SQLModel, table=True):
    __tablename__ = "staff"
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(max_length=36, index=True)
    name: str = Field(max_length=100)
    role: str = Field(default="reception")
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
