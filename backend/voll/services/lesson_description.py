# backend/voll/services/lesson_description.py
import logging
from datetime import datetime, timezone

from .. import crud, models
from ..clients import completion_text
from ..date_utils import format_long_date_pt, format_time_pt

logger = logging.getLogger(__name__)

DEFAULT_STUDENT_NAME = "Aluno"
DEFAULT_LESSON_TYPE = "Individual"


class EmptyCompletion(Exception):
    """The model answered with no usable text."""


def build_lesson_prompt(schedule: models.Schedule) -> str:
    """Render the fixed lesson-description prompt for one schedule row."""
    student_name = schedule.student.name if schedule.student else DEFAULT_STUDENT_NAME
    date_label = format_long_date_pt(schedule.scheduled_at)
    time_label = format_time_pt(schedule.scheduled_at)
    lesson_type = schedule.lesson_type or DEFAULT_LESSON_TYPE
    notes_line = f"- Observações do instrutor: {schedule.notes}" if schedule.notes else ""

    return f"""
Você é um instrutor de pilates experiente e comunicativo.
Escreva uma mensagem personalizada para enviar ao aluno sobre a aula agendada.
Tom: acolhedor, motivador e profissional. Idioma: português brasileiro.
Não faça diagnóstico médico, não prometa cura nem resultados específicos.

Informações da aula:
- Aluno: {student_name}
- Data: {date_label} às {time_label}
- Modalidade: {lesson_type}
- Duração: {schedule.duration_minutes} minutos
{notes_line}

Estrutura esperada (3 parágrafos em texto corrido, sem bullet points, sem markdown):
1. Saudação pelo nome e confirmação amigável da aula
2. O que será trabalhado na sessão e o objetivo principal do encontro
3. Uma dica prática de preparação (hidratação, roupa confortável, chegar alguns minutos antes etc.) e uma frase de incentivo final
""".strip()


def generate_lesson_description(client, model: str, schedule: models.Schedule) -> str:
    """One completion request; raises EmptyCompletion on a blank answer."""
    response = client.chat.completions.create(
        model=model,
        messages=[{"role": "user", "content": build_lesson_prompt(schedule)}],
    )
    text = completion_text(response)
    if not text:
        raise EmptyCompletion(f"empty completion for schedule {schedule.id}")
    return text


def persist_lesson_description(session_factory, schedule_id: int, text: str) -> None:
    """Background write of the generated text; failures are only logged."""
    db = session_factory()
    try:
        crud.save_ai_description(db, schedule_id, text, datetime.now(timezone.utc))
        logger.info("Saved AI description for schedule %s", schedule_id)
    except Exception as e:
        logger.warning("Failed to save AI description for schedule %s: %s", schedule_id, e)
    finally:
        db.close()
