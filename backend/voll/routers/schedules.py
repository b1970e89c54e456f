# backend/voll/routers/schedules.py
import logging
import re
from datetime import datetime, timezone
from typing import List, Literal, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from .. import crud, schemas
from ..clients import get_ai_client, get_ai_model
from ..date_utils import day_bounds, parse_iso_datetime, week_bounds
from ..db import get_db, get_session_factory
from ..services.lesson_description import (
    EmptyCompletion,
    generate_lesson_description,
    persist_lesson_description,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/schedules", tags=["Schedules"])

_DIGITS = re.compile(r"[0-9]+")


def _parse_id(raw: str) -> int:
    # plain digits only; int() alone would take "1_0", " 7" and "+5"
    value = int(raw) if _DIGITS.fullmatch(raw) else 0
    if value <= 0:
        raise HTTPException(status_code=400, detail="ID inválido.")
    return value


def _parse_bound(raw: Optional[str], name: str) -> Optional[datetime]:
    try:
        return parse_iso_datetime(raw)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Data inválida em '{name}': {raw!r}")


@router.get("", response_model=List[schemas.ScheduleOut])
def list_schedules(
    from_: Optional[str] = Query(None, alias="from"),
    to: Optional[str] = Query(None),
    period: Literal["hoje", "semana", "todos"] = Query("todos"),
    db: Session = Depends(get_db),
):
    start = end = None
    if period == "hoje":
        start, end = day_bounds(datetime.now(timezone.utc))
    elif period == "semana":
        start, end = week_bounds(datetime.now(timezone.utc))

    # explicit bounds win over the shortcut
    start = _parse_bound(from_, "from") or start
    end = _parse_bound(to, "to") or end
    return crud.list_schedules(db, start, end)


@router.post("", response_model=schemas.ScheduleOut, status_code=201)
def create_schedule(payload: schemas.ScheduleCreate, db: Session = Depends(get_db)):
    return crud.create_schedule(db, payload)


@router.patch("/{schedule_id}", response_model=schemas.ScheduleOut)
def update_schedule_status(
    schedule_id: int,
    payload: schemas.ScheduleStatusUpdate,
    db: Session = Depends(get_db),
):
    schedule = crud.get_schedule(db, schedule_id)
    if not schedule:
        raise HTTPException(status_code=404, detail="Aula não encontrada.")
    try:
        return crud.update_schedule_status(db, schedule, payload.status)
    except crud.InvalidStatusTransition as e:
        raise HTTPException(status_code=409, detail=str(e))

# =========================================================
# AI DESCRIPTION
# =========================================================
@router.post("/{schedule_id}/ai-description", response_model=schemas.AiDescriptionOut)
def generate_ai_description(
    schedule_id: str,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    session_factory=Depends(get_session_factory),
    client=Depends(get_ai_client),
    model: str = Depends(get_ai_model),
):
    sid = _parse_id(schedule_id)

    schedule = crud.get_schedule(db, sid)
    if not schedule:
        raise HTTPException(status_code=404, detail="Aula não encontrada.")

    try:
        description = generate_lesson_description(client, model, schedule)
    except EmptyCompletion:
        raise HTTPException(status_code=502, detail="Resposta vazia do modelo.")
    except Exception:
        logger.exception("[ai-description] generation failed for schedule %s", sid)
        raise HTTPException(status_code=500, detail="Erro ao gerar descrição com IA.")

    # runs after the response is sent; its failures are only logged
    background_tasks.add_task(persist_lesson_description, session_factory, sid, description)
    return {"ai_description": description}
