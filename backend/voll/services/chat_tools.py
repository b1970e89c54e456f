# backend/voll/services/chat_tools.py
"""Read-only data queries the chat assistant may call.

Each tool is a JSON-schema function declaration (sent to the model) plus an
executor taking a session and the decoded arguments. Executors only read.
"""
from datetime import datetime, timezone
from typing import Any, Callable, Dict

from sqlalchemy.orm import Session

from .. import crud, models

DEFAULT_UPCOMING_LIMIT = 10
UNKNOWN_TOOL = {"error": "Ferramenta não encontrada"}


def _student_dict(s: models.Student) -> dict:
    return {
        "id": s.id,
        "name": s.name,
        "email": s.email,
        "phone": s.phone,
        "status": s.status,
        "plan": s.plan,
        "created_at": s.created_at.isoformat() if s.created_at else None,
    }


def _schedule_dict(s: models.Schedule) -> dict:
    return {
        "id": s.id,
        "scheduled_at": s.scheduled_at.isoformat() if s.scheduled_at else None,
        "duration_minutes": s.duration_minutes,
        "lesson_type": s.lesson_type,
        "status": s.status,
        "students": {"name": s.student.name} if s.student else None,
    }


def get_students_count(db: Session, args: dict) -> dict:
    return crud.count_students_by_status(db)


def get_student_by_name(db: Session, args: dict) -> list:
    name = str(args.get("name") or "")
    return [_student_dict(s) for s in crud.search_students_by_name(db, name)]


def get_student_by_id(db: Session, args: dict):
    try:
        student_id = int(args.get("id"))
    except (TypeError, ValueError):
        return None
    student = crud.get_student(db, student_id)
    return _student_dict(student) if student else None


def list_upcoming_classes(db: Session, args: dict) -> list:
    limit = args.get("limit")
    # the model sends JSON numbers; bools are ints in Python, keep them out
    if isinstance(limit, bool) or not isinstance(limit, (int, float)) or limit <= 0:
        limit = DEFAULT_UPCOMING_LIMIT
    rows = crud.list_upcoming_schedules(db, datetime.now(timezone.utc), int(limit))
    return [_schedule_dict(s) for s in rows]


def get_financial_summary(db: Session, args: dict) -> dict:
    return crud.financial_summary(db)


TOOL_EXECUTORS: Dict[str, Callable[[Session, dict], Any]] = {
    "get_students_count": get_students_count,
    "get_student_by_name": get_student_by_name,
    "get_student_by_id": get_student_by_id,
    "list_upcoming_classes": list_upcoming_classes,
    "get_financial_summary": get_financial_summary,
}


def _function(name: str, description: str, properties: dict = None, required: list = None) -> dict:
    parameters = {"type": "object", "properties": properties or {}}
    if required:
        parameters["required"] = required
    return {
        "type": "function",
        "function": {"name": name, "description": description, "parameters": parameters},
    }


TOOL_DECLARATIONS = [
    _function(
        "get_students_count",
        "Retorna o total de alunos cadastrados no sistema, agrupados por status",
    ),
    _function(
        "get_student_by_name",
        "Busca dados de um ou mais alunos pelo nome (busca parcial, sem distinção de maiúsculas)",
        {"name": {"type": "string", "description": "Nome ou parte do nome do aluno"}},
        ["name"],
    ),
    _function(
        "get_student_by_id",
        "Busca dados de um aluno pelo ID numérico",
        {"id": {"type": "number", "description": "ID numérico do aluno"}},
        ["id"],
    ),
    _function(
        "list_upcoming_classes",
        'Lista as próximas aulas com status "Agendado" a partir do momento atual',
        {"limit": {"type": "number", "description": "Número máximo de aulas a retornar (padrão: 10)"}},
    ),
    _function(
        "get_financial_summary",
        "Retorna resumo financeiro: total pendente a receber, a pagar e saldo realizado",
    ),
]


def execute_tool(db: Session, name: str, args: dict):
    executor = TOOL_EXECUTORS.get(name)
    if executor is None:
        return UNKNOWN_TOOL
    if not isinstance(args, dict):
        args = {}
    return executor(db, args)
