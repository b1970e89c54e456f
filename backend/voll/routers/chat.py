# backend/voll/routers/chat.py
import logging

from fastapi import APIRouter, Depends, HTTPException

from .. import schemas
from ..clients import get_ai_client, get_ai_model
from ..config import settings
from ..db import get_session_factory
from ..services.chat import ChatOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["AI"])


@router.post("/chat", response_model=schemas.ChatResponse)
def chat(
    payload: schemas.ChatRequest,
    session_factory=Depends(get_session_factory),
    client=Depends(get_ai_client),
    model: str = Depends(get_ai_model),
):
    orchestrator = ChatOrchestrator(
        client,
        model,
        session_factory,
        max_tool_rounds=settings.CHAT_MAX_TOOL_ROUNDS,
    )
    try:
        answer = orchestrator.run(payload.message, payload.history)
    except Exception:
        logger.exception("[ai/chat] failed")
        raise HTTPException(status_code=500, detail="Erro ao processar sua mensagem.")
    return {"response": answer}
