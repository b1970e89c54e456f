"""
Tests for the schedules router, including AI lesson descriptions.
"""

import logging
from datetime import datetime, timedelta, timezone

import pytest

from voll import models
from voll.db import get_session_factory
from voll.main import app
from voll.services.lesson_description import build_lesson_prompt


class TestSchedulesCrud:
    """Listing, creation and status changes."""

    def test_create_schedule_defaults_to_scheduled(self, make_student, make_schedule):
        student = make_student("Ana Souza")

        schedule = make_schedule(student_id=student["id"], notes="Foco em mobilidade")

        assert schedule["status"] == "Agendado"
        assert schedule["students"] == {"name": "Ana Souza"}
        assert schedule["notes"] == "Foco em mobilidade"
        assert schedule["ai_description"] is None

    def test_list_ordered_by_time(self, client, make_student, make_schedule):
        sid = make_student()["id"]
        make_schedule(sid, "2030-03-06T12:00:00Z")
        make_schedule(sid, "2030-03-04T12:00:00Z")
        make_schedule(sid, "2030-03-05T12:00:00Z")

        rows = client.get("/api/schedules").json()

        assert [r["scheduled_at"][:10] for r in rows] == ["2030-03-04", "2030-03-05", "2030-03-06"]

    def test_list_filtered_by_range(self, client, make_student, make_schedule):
        sid = make_student()["id"]
        make_schedule(sid, "2030-03-01T12:00:00Z")
        inside = make_schedule(sid, "2030-03-10T12:00:00Z")
        make_schedule(sid, "2030-03-20T12:00:00Z")

        resp = client.get("/api/schedules", params={"from": "2030-03-05T00:00:00Z", "to": "2030-03-15T00:00:00Z"})

        assert resp.status_code == 200
        assert [r["id"] for r in resp.json()] == [inside["id"]]

    @pytest.mark.parametrize("period", ["hoje", "semana"])
    def test_list_period_shortcut(self, client, make_student, make_schedule, period):
        sid = make_student()["id"]
        now = datetime.now(timezone.utc)
        current = make_schedule(sid, now.isoformat())
        make_schedule(sid, (now + timedelta(days=8)).isoformat())
        make_schedule(sid, (now - timedelta(days=8)).isoformat())

        resp = client.get("/api/schedules", params={"period": period})

        assert resp.status_code == 200
        assert [r["id"] for r in resp.json()] == [current["id"]]

    def test_list_rejects_bad_bound(self, client):
        resp = client.get("/api/schedules", params={"from": "yesterday"})

        assert resp.status_code == 400

    @pytest.mark.parametrize("target", ["Concluido", "Cancelado"])
    def test_scheduled_can_finish(self, client, make_schedule, target):
        schedule = make_schedule()

        resp = client.patch(f"/api/schedules/{schedule['id']}", json={"status": target})

        assert resp.status_code == 200
        assert resp.json()["status"] == target

    @pytest.mark.parametrize("first, second", [
        ("Concluido", "Agendado"),
        ("Cancelado", "Agendado"),
        ("Concluido", "Cancelado"),
    ])
    def test_finished_schedule_cannot_move(self, client, make_schedule, first, second):
        schedule = make_schedule()
        client.patch(f"/api/schedules/{schedule['id']}", json={"status": first})

        resp = client.patch(f"/api/schedules/{schedule['id']}", json={"status": second})

        assert resp.status_code == 409
        assert client.get("/api/schedules").json()[0]["status"] == first

    def test_patch_unknown_status(self, client, make_schedule):
        schedule = make_schedule()

        resp = client.patch(f"/api/schedules/{schedule['id']}", json={"status": "Adiado"})

        assert resp.status_code == 422

    def test_patch_missing_schedule(self, client):
        resp = client.patch("/api/schedules/404", json={"status": "Concluido"})

        assert resp.status_code == 404


class TestAiDescription:
    """POST /api/schedules/{id}/ai-description"""

    @pytest.mark.parametrize("raw_id", ["abc", "0", "-3", "1.5", "1_0", "+1", " 1", "1e1"])
    def test_invalid_id(self, client, ai, make_schedule, raw_id):
        # a real schedule behind every id int() would have accepted
        for _ in range(10):
            make_schedule()

        resp = client.post(f"/api/schedules/{raw_id}/ai-description")

        assert resp.status_code == 400
        assert ai.calls == []

    def test_missing_schedule(self, client, ai):
        resp = client.post("/api/schedules/77/ai-description")

        assert resp.status_code == 404
        assert ai.calls == []

    def test_generates_and_persists(self, client, ai, make_schedule):
        schedule = make_schedule(notes="Trabalhar respiração")
        ai.reply_text("  Olá Ana!\n\nTexto da aula.  ")

        resp = client.post(f"/api/schedules/{schedule['id']}/ai-description")

        assert resp.status_code == 200
        assert resp.json() == {"ai_description": "Olá Ana!\n\nTexto da aula."}
        assert len(ai.calls) == 1
        prompt = ai.calls[0]["messages"][0]["content"]
        assert "- Aluno: Ana Souza" in prompt
        assert "- Observações do instrutor: Trabalhar respiração" in prompt

        # background write has run by the time TestClient returns
        row = client.get("/api/schedules").json()[0]
        assert row["ai_description"] == "Olá Ana!\n\nTexto da aula."
        assert row["ai_description_updated_at"] is not None

    def test_empty_completion_is_bad_gateway(self, client, ai, make_schedule):
        schedule = make_schedule()
        ai.reply_text("   ")

        resp = client.post(f"/api/schedules/{schedule['id']}/ai-description")

        assert resp.status_code == 502
        assert client.get("/api/schedules").json()[0]["ai_description"] is None

    def test_upstream_error(self, client, ai, make_schedule):
        schedule = make_schedule()
        ai.fail_with(RuntimeError("quota exceeded"))

        resp = client.post(f"/api/schedules/{schedule['id']}/ai-description")

        assert resp.status_code == 500
        assert resp.json()["detail"] == "Erro ao gerar descrição com IA."

    def test_completed_schedule_still_allowed(self, client, ai, make_schedule):
        schedule = make_schedule()
        client.patch(f"/api/schedules/{schedule['id']}", json={"status": "Concluido"})
        ai.reply_text("Descrição")

        resp = client.post(f"/api/schedules/{schedule['id']}/ai-description")

        assert resp.status_code == 200

    def test_persistence_failure_is_only_logged(self, client, ai, make_schedule, caplog):
        schedule = make_schedule()
        ai.reply_text("Descrição")

        class BrokenSession:
            def query(self, *args, **kwargs):
                raise RuntimeError("connection reset")

            def close(self):
                pass

        app.dependency_overrides[get_session_factory] = lambda: BrokenSession

        with caplog.at_level(logging.WARNING, logger="voll.services.lesson_description"):
            resp = client.post(f"/api/schedules/{schedule['id']}/ai-description")

        assert resp.status_code == 200
        assert resp.json() == {"ai_description": "Descrição"}
        assert "connection reset" in caplog.text


class TestLessonPrompt:
    """Prompt rendering."""

    def _schedule(self, **fields):
        values = dict(
            id=1,
            scheduled_at=datetime(2026, 3, 2, 17, 30, tzinfo=timezone.utc),
            duration_minutes=55,
            lesson_type="Dupla",
            notes=None,
            student=models.Student(name="Ana Souza"),
        )
        values.update(fields)
        return models.Schedule(**values)

    def test_prompt_fields(self):
        prompt = build_lesson_prompt(self._schedule(notes="Pós-operatório de joelho"))

        assert prompt.startswith("Você é um instrutor de pilates experiente e comunicativo.")
        assert "- Aluno: Ana Souza" in prompt
        # 17:30 UTC is 14:30 in São Paulo
        assert "- Data: segunda-feira, 2 de março às 14:30" in prompt
        assert "- Modalidade: Dupla" in prompt
        assert "- Duração: 55 minutos" in prompt
        assert "- Observações do instrutor: Pós-operatório de joelho" in prompt
        assert "Não faça diagnóstico médico" in prompt
        assert "3 parágrafos" in prompt
        assert prompt.endswith("uma frase de incentivo final")

    def test_prompt_defaults(self):
        prompt = build_lesson_prompt(self._schedule(student=None, lesson_type=None))

        assert "- Aluno: Aluno" in prompt
        assert "- Modalidade: Individual" in prompt
        assert "Observações" not in prompt

    def test_naive_timestamp_taken_as_utc(self):
        prompt = build_lesson_prompt(self._schedule(scheduled_at=datetime(2026, 3, 2, 17, 30)))

        assert "às 14:30" in prompt
