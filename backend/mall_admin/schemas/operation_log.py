from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class OperationLogCreate(BaseModel):
    user_id: Optional[int] = Field(None, description="Defaults to the current user")
    operation: str = Field(..., min_length=1, max_length=50)
    target: Optional[str] = Field(None, max_length=50)
    detail: Optional[str] = None
    ip: Optional[str] = Field(None, max_length=64)


class OperationLogResponse(BaseModel):
    id: int
    user_id: Optional[int] = None
    username: Optional[str] = None
    operation: str
    target: Optional[str] = None
    detail: Optional[str] = None
    ip: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
