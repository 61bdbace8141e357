# clinic/db/models/health/notification.py
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime

class Notification(SQLModel, table=True):
    __tablename__ = "notifications"
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    type: str
    priority: str = Field(default="medium")
    title: str
    message: str
    related_appointment_id: Optional[int] = Field(default=None, index=True)
    read: bool = Field(default=False)
    created_at: datetime = Field(default_factory=datetime.utcnow)
