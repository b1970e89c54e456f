# backend/voll/crud.py
from datetime import datetime
from decimal import Decimal
from typing import Optional, List

from sqlalchemy.orm import Session, joinedload

from . import models, schemas
from .date_utils import to_utc
from .models import ScheduleStatus, TransactionStatus


class InvalidStatusTransition(Exception):
    def __init__(self, current: str, requested: str):
        super().__init__(f"Status cannot change from {current!r} to {requested!r}")
        self.current = current
        self.requested = requested


SCHEDULE_TRANSITIONS = {
    ScheduleStatus.SCHEDULED.value: {ScheduleStatus.COMPLETED.value, ScheduleStatus.CANCELED.value},
}
TRANSACTION_TRANSITIONS = {
    TransactionStatus.PENDING.value: {TransactionStatus.PAID.value, TransactionStatus.CANCELED.value},
}


def _check_transition(table: dict, current: str, requested: str) -> None:
    if current == requested:
        return
    if requested not in table.get(current, set()):
        raise InvalidStatusTransition(current, requested)


def _commit(db: Session, obj=None):
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    if obj is not None:
        db.refresh(obj)
    return obj

# ---------- STUDENT CRUD ----------
def get_all_students(db: Session) -> List[models.Student]:
    return db.query(models.Student).order_by(models.Student.name).all()


def get_student(db: Session, student_id: int) -> Optional[models.Student]:
    return db.query(models.Student).filter(models.Student.id == student_id).first()


def create_student(db: Session, payload: schemas.StudentCreate) -> models.Student:
    student = models.Student(**payload.model_dump())
    db.add(student)
    return _commit(db, student)


def delete_student(db: Session, student_id: int) -> int:
    """Idempotent: returns the number of rows removed (0 or 1)."""
    removed = (
        db.query(models.Student)
        .filter(models.Student.id == student_id)
        .delete(synchronize_session=False)
    )
    _commit(db)
    return removed


def search_students_by_name(db: Session, fragment: str) -> List[models.Student]:
    return (
        db.query(models.Student)
        .filter(models.Student.name.ilike(f"%{fragment}%"))
        .order_by(models.Student.name)
        .all()
    )


def count_students_by_status(db: Session) -> dict:
    by_status = {}
    for (status,) in db.query(models.Student.status).all():
        by_status[status] = by_status.get(status, 0) + 1
    return {"total": sum(by_status.values()), "byStatus": by_status}

# ---------- SCHEDULE CRUD ----------
def list_schedules(
    db: Session,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> List[models.Schedule]:
    q = db.query(models.Schedule).options(joinedload(models.Schedule.student))
    if start is not None:
        q = q.filter(models.Schedule.scheduled_at >= to_utc(start))
    if end is not None:
        q = q.filter(models.Schedule.scheduled_at <= to_utc(end))
    return q.order_by(models.Schedule.scheduled_at).all()


def get_schedule(db: Session, schedule_id: int) -> Optional[models.Schedule]:
    return (
        db.query(models.Schedule)
        .options(joinedload(models.Schedule.student))
        .filter(models.Schedule.id == schedule_id)
        .first()
    )


def create_schedule(db: Session, payload: schemas.ScheduleCreate) -> models.Schedule:
    schedule = models.Schedule(
        student_id=payload.student_id,
        scheduled_at=to_utc(payload.scheduled_at),
        duration_minutes=payload.duration_minutes,
        lesson_type=payload.lesson_type,
        notes=payload.notes,
        status=ScheduleStatus.SCHEDULED.value,
    )
    db.add(schedule)
    _commit(db, schedule)
    # re-fetch so the student name comes back joined
    return get_schedule(db, schedule.id)


def update_schedule_status(db: Session, schedule: models.Schedule, status: ScheduleStatus) -> models.Schedule:
    _check_transition(SCHEDULE_TRANSITIONS, schedule.status, status.value)
    schedule.status = status.value
    _commit(db)
    return get_schedule(db, schedule.id)


def save_ai_description(db: Session, schedule_id: int, text: str, when: datetime) -> int:
    updated = (
        db.query(models.Schedule)
        .filter(models.Schedule.id == schedule_id)
        .update(
            {"ai_description": text, "ai_description_updated_at": to_utc(when)},
            synchronize_session=False,
        )
    )
    _commit(db)
    return updated


def list_upcoming_schedules(db: Session, now: datetime, limit: int = 10) -> List[models.Schedule]:
    return (
        db.query(models.Schedule)
        .options(joinedload(models.Schedule.student))
        .filter(
            models.Schedule.scheduled_at >= to_utc(now),
            models.Schedule.status == ScheduleStatus.SCHEDULED.value,
        )
        .order_by(models.Schedule.scheduled_at)
        .limit(limit)
        .all()
    )

# ---------- TRANSACTION CRUD ----------
def list_transactions(db: Session) -> List[models.Transaction]:
    return (
        db.query(models.Transaction)
        .options(joinedload(models.Transaction.student))
        .order_by(models.Transaction.due_date)
        .all()
    )


def get_transaction(db: Session, transaction_id: int) -> Optional[models.Transaction]:
    return (
        db.query(models.Transaction)
        .options(joinedload(models.Transaction.student))
        .filter(models.Transaction.id == transaction_id)
        .first()
    )


def create_transaction(db: Session, payload: schemas.TransactionCreate) -> models.Transaction:
    tx = models.Transaction(
        type=payload.type.value,
        description=payload.description,
        amount=payload.amount,
        due_date=payload.due_date,
        student_id=payload.student_id,
        status=TransactionStatus.PENDING.value,
    )
    db.add(tx)
    _commit(db, tx)
    return get_transaction(db, tx.id)


def update_transaction_status(
    db: Session, tx: models.Transaction, status: TransactionStatus
) -> models.Transaction:
    _check_transition(TRANSACTION_TRANSITIONS, tx.status, status.value)
    tx.status = status.value
    _commit(db)
    return get_transaction(db, tx.id)


def delete_transaction(db: Session, transaction_id: int) -> int:
    removed = (
        db.query(models.Transaction)
        .filter(models.Transaction.id == transaction_id)
        .delete(synchronize_session=False)
    )
    _commit(db)
    return removed


def financial_summary(db: Session) -> dict:
    """Pending receivables, pending payables and the realized balance of paid entries."""
    to_receive = Decimal("0")
    to_pay = Decimal("0")
    realized = Decimal("0")
    rows = db.query(
        models.Transaction.type, models.Transaction.amount, models.Transaction.status
    ).all()
    for tx_type, amount, status in rows:
        amount = Decimal(str(amount or 0))
        if status == TransactionStatus.PENDING.value:
            if tx_type == models.TransactionType.RECEIVABLE.value:
                to_receive += amount
            elif tx_type == models.TransactionType.PAYABLE.value:
                to_pay += amount
        elif status == TransactionStatus.PAID.value:
            realized += amount if tx_type == models.TransactionType.RECEIVABLE.value else -amount
    cents = Decimal("0.01")
    return {
        "toReceive": float(to_receive.quantize(cents)),
        "toPay": float(to_pay.quantize(cents)),
        "realized": float(realized.quantize(cents)),
    }
