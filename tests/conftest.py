"""
Shared fixtures: a throwaway SQLite database and a scripted AI client.
"""

import json
import os
import tempfile
from types import SimpleNamespace

# must be set before voll.config is imported
_TMP_DIR = tempfile.mkdtemp(prefix="voll-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'voll.db')}"
os.environ["AI_API_KEY"] = "test-key"

import pytest
from fastapi.testclient import TestClient

from voll.clients import get_ai_client
from voll.db import Base, SessionLocal, engine
from voll.main import app


class FakeCompletions:
    """Stands in for `client.chat.completions`; replays queued responses."""

    def __init__(self):
        self.queue = []
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if not self.queue:
            raise AssertionError("unexpected completion request")
        item = self.queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class FakeAIClient:
    def __init__(self):
        self.completions = FakeCompletions()
        self.chat = SimpleNamespace(completions=self.completions)

    @property
    def calls(self):
        return self.completions.calls

    def reply_text(self, text):
        message = SimpleNamespace(content=text, tool_calls=None)
        self.completions.queue.append(SimpleNamespace(choices=[SimpleNamespace(message=message)]))

    def reply_tools(self, *calls):
        """Queue a model turn requesting tools, each call given as (name, args)."""
        tool_calls = [
            SimpleNamespace(
                id=f"call_{len(self.completions.queue)}_{i}",
                type="function",
                function=SimpleNamespace(name=name, arguments=json.dumps(args)),
            )
            for i, (name, args) in enumerate(calls)
        ]
        message = SimpleNamespace(content=None, tool_calls=tool_calls)
        self.completions.queue.append(SimpleNamespace(choices=[SimpleNamespace(message=message)]))

    def reply_blocked(self):
        """Queue a turn the provider filtered out: no choices at all."""
        self.completions.queue.append(SimpleNamespace(choices=[]))

    def fail_with(self, exc):
        self.completions.queue.append(exc)


@pytest.fixture(autouse=True)
def fresh_db():
    """Recreate every table for each test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def ai():
    fake = FakeAIClient()
    app.dependency_overrides[get_ai_client] = lambda: fake
    return fake


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def make_student(client):
    def _make(name="Ana Souza", **fields):
        body = {"name": name, "email": f"{name.split()[0].lower()}@example.com", "phone": "11 99999-0000",
                "status": "ativo", "plan": "Mensal"}
        body.update(fields)
        resp = client.post("/api/students", json=body)
        assert resp.status_code == 201, resp.text
        return resp.json()
    return _make


@pytest.fixture
def make_schedule(client, make_student):
    def _make(student_id=None, scheduled_at="2030-03-04T17:30:00Z", **fields):
        if student_id is None:
            student_id = make_student()["id"]
        body = {"student_id": student_id, "scheduled_at": scheduled_at,
                "duration_minutes": 50, "lesson_type": "Individual", "notes": None}
        body.update(fields)
        resp = client.post("/api/schedules", json=body)
        assert resp.status_code == 201, resp.text
        return resp.json()
    return _make
