# backend/voll/schemas.py
from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import List, Optional, Literal

from .models import ScheduleStatus, TransactionType, TransactionStatus

# --------------------------------------------
# Student Schema
# --------------------------------------------
class StudentCreate(BaseModel):
    name: str = Field(min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    status: Optional[str] = "ativo"
    plan: Optional[str] = None


class StudentOut(BaseModel):
    id: int
    name: str
    email: Optional[str]
    phone: Optional[str]
    status: Optional[str]
    plan: Optional[str]
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class StudentRef(BaseModel):
    name: str

    class Config:
        from_attributes = True

# --------------------------------------------
# Schedule Schema
# --------------------------------------------
class ScheduleCreate(BaseModel):
    student_id: int
    scheduled_at: datetime
    duration_minutes: int = Field(default=60, gt=0)
    lesson_type: Optional[str] = None
    notes: Optional[str] = None


class ScheduleStatusUpdate(BaseModel):
    status: ScheduleStatus


class ScheduleOut(BaseModel):
    id: int
    student_id: Optional[int]
    scheduled_at: datetime
    duration_minutes: int
    lesson_type: Optional[str]
    notes: Optional[str]
    status: str
    ai_description: Optional[str] = None
    ai_description_updated_at: Optional[datetime] = None
    # joined row, kept under the name the dashboard reads
    students: Optional[StudentRef] = Field(default=None, validation_alias="student")

    class Config:
        from_attributes = True


class AiDescriptionOut(BaseModel):
    ai_description: str

# --------------------------------------------
# Transaction Schema
# --------------------------------------------
class TransactionCreate(BaseModel):
    type: TransactionType
    description: Optional[str] = None
    amount: float = Field(gt=0)
    due_date: Optional[date] = None
    student_id: Optional[int] = None


class TransactionStatusUpdate(BaseModel):
    status: TransactionStatus


class TransactionOut(BaseModel):
    id: int
    student_id: Optional[int]
    type: str
    description: Optional[str]
    amount: float
    due_date: Optional[date]
    status: str
    created_at: Optional[datetime]
    students: Optional[StudentRef] = Field(default=None, validation_alias="student")

    class Config:
        from_attributes = True

# --------------------------------------------
# Chat Schema
# --------------------------------------------
class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    message: str = Field(min_length=1)
    history: List[ChatMessage] = []


class ChatResponse(BaseModel):
    response: str
