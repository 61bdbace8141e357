# clinic/schemas/common/common.py
from pydantic import BaseModel
from typing import Optional

class ErrorResponse(BaseModel):
    success: bool = False
    data: Optional[dict] = None
    error: str

class MessageResponse(BaseModel):
    message: str
