# backend/voll/clients.py
"""Process-wide generative-AI client.

The client is built once at startup (see ``main.lifespan``) and stored on
``app.state``; handlers receive it through the ``get_ai_client`` dependency so
tests can swap in a scripted fake with ``app.dependency_overrides``.
"""
import logging

from fastapi import HTTPException, Request
from openai import OpenAI

from .config import Settings, settings

logger = logging.getLogger(__name__)


def build_ai_client(config: Settings) -> OpenAI:
    if not config.AI_API_KEY:
        logger.warning("AI_API_KEY is not set; AI endpoints will fail until it is configured")
    return OpenAI(
        api_key=config.AI_API_KEY or "missing",
        base_url=config.AI_BASE_URL,
    )


def get_ai_client(request: Request) -> OpenAI:
    client = getattr(request.app.state, "ai_client", None)
    if client is None:
        raise HTTPException(status_code=503, detail="Cliente de IA não configurado.")
    return client


def get_ai_model() -> str:
    return settings.AI_MODEL


def completion_text(response) -> str:
    """First choice text of a chat completion, trimmed ('' when absent)."""
    choices = getattr(response, "choices", None) or []
    if not choices:
        return ""
    content = getattr(choices[0].message, "content", None)
    return (content or "").strip()
