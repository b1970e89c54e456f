# backend/voll/models.py
import enum
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, Numeric, Date, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from .db import Base


def _utcnow():
    return datetime.now(timezone.utc)


class StudentStatus(str, enum.Enum):
    ACTIVE = "ativo"
    TRIAL = "experimental"
    INACTIVE = "inativo"


class ScheduleStatus(str, enum.Enum):
    SCHEDULED = "Agendado"
    COMPLETED = "Concluido"
    CANCELED = "Cancelado"


class TransactionType(str, enum.Enum):
    RECEIVABLE = "receber"
    PAYABLE = "pagar"


class TransactionStatus(str, enum.Enum):
    PENDING = "pendente"
    PAID = "pago"
    CANCELED = "cancelado"


class Student(Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    # free text in the store; dashboard offers StudentStatus values
    status = Column(String, nullable=True, default=StudentStatus.ACTIVE.value)
    plan = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    schedules = relationship("Schedule", back_populates="student", passive_deletes=True)
    transactions = relationship("Transaction", back_populates="student", passive_deletes=True)


class Schedule(Base):
    __tablename__ = "schedules"

    id = Column(Integer, primary_key=True, index=True)
    # lesson history outlives the student
    student_id = Column(Integer, ForeignKey("students.id", ondelete="SET NULL"), nullable=True)

    scheduled_at = Column(DateTime(timezone=True), nullable=False, index=True)
    duration_minutes = Column(Integer, nullable=False, default=60)
    lesson_type = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    status = Column(String, nullable=False, default=ScheduleStatus.SCHEDULED.value)

    ai_description = Column(Text, nullable=True)
    ai_description_updated_at = Column(DateTime(timezone=True), nullable=True)

    student = relationship("Student", back_populates="schedules")


class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="SET NULL"), nullable=True)

    type = Column(String, nullable=False)            # receber | pagar
    description = Column(String, nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)  # always positive, sign comes from type
    due_date = Column(Date, nullable=True)
    status = Column(String, nullable=False, default=TransactionStatus.PENDING.value)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    student = relationship("Student", back_populates="transactions")
