# backend/voll/services/chat.py
"""Chat assistant: a bounded model <-> tool loop over the studio data."""
import json
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from ..clients import completion_text
from .chat_tools import TOOL_DECLARATIONS, execute_tool

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = """
Você é um assistente inteligente do sistema VOLL, plataforma de gerenciamento de studio de pilates.
Você tem acesso a ferramentas para consultar dados reais: alunos, agendamentos e transações financeiras.
Responda sempre em português brasileiro, de forma clara, objetiva e amigável.
Formate valores monetários como "R$ X,XX" e datas no formato brasileiro (dd/mm/aaaa).
Quando o usuário pedir dados do sistema, use as ferramentas disponíveis antes de responder.
""".strip()

EMPTY_ANSWER = "Não consegui gerar uma resposta."
GAVE_UP_ANSWER = "Não consegui concluir a consulta aos dados. Tente reformular a pergunta."

MAX_PARALLEL_TOOLS = 5


def history_to_messages(history, message: str) -> List[dict]:
    """Prior turns followed by the new user message, in chat-completions roles."""
    messages = []
    for turn in history or []:
        role = "assistant" if turn.role == "assistant" else "user"
        messages.append({"role": role, "content": turn.content})
    messages.append({"role": "user", "content": message})
    return messages


class ChatOrchestrator:
    def __init__(self, client, model: str, session_factory, max_tool_rounds: int = 5):
        self.client = client
        self.model = model
        self.session_factory = session_factory
        self.max_tool_rounds = max_tool_rounds

    def _complete(self, messages: List[dict]):
        return self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "system", "content": SYSTEM_INSTRUCTION}] + messages,
            tools=TOOL_DECLARATIONS,
        )

    def _run_tool(self, call) -> dict:
        name = call.function.name or ""
        args = json.loads(call.function.arguments or "{}")
        if not isinstance(args, dict):
            args = {}
        db = self.session_factory()
        try:
            result = execute_tool(db, name, args)
        finally:
            db.close()
        logger.debug("tool %s(%s) done", name, args)
        return {
            "role": "tool",
            "tool_call_id": call.id,
            "name": name,
            "content": json.dumps({"result": result}, ensure_ascii=False, default=str),
        }

    def run(self, message: str, history: Optional[list] = None) -> str:
        messages = history_to_messages(history, message)
        response = self._complete(messages)

        rounds = 0
        while True:
            # a blocked reply comes back with no choices at all
            choices = getattr(response, "choices", None) or []
            assistant = choices[0].message if choices else None
            calls = getattr(assistant, "tool_calls", None) or []
            if not calls:
                return completion_text(response) or EMPTY_ANSWER

            if rounds >= self.max_tool_rounds:
                logger.warning("chat stopped after %d tool rounds", rounds)
                return GAVE_UP_ANSWER
            rounds += 1

            messages.append({
                "role": "assistant",
                "content": assistant.content,
                "tool_calls": [
                    {
                        "id": call.id,
                        "type": "function",
                        "function": {"name": call.function.name, "arguments": call.function.arguments},
                    }
                    for call in calls
                ],
            })

            # results keep the order of the calls
            with ThreadPoolExecutor(max_workers=min(len(calls), MAX_PARALLEL_TOOLS)) as pool:
                messages.extend(pool.map(self._run_tool, calls))

            response = self._complete(messages)
