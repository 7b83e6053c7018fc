# clinic_api/modules/chatbot/chatbot_service.py
"""Service layer for the patient chatbot and its history."""

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_api.auth.scope import Scope
from clinic_api.common.llm.llm_service import FALLBACK_RESPONSE, generate_response
from clinic_api.models.models import ChatHistory
from .schemas import ChatResponse, ChatMessage, ChatHistoryResponse, ChatRole, ClearHistoryResponse

logger = logging.getLogger(__name__)


def _message(role: ChatRole, content: str, timestamp: datetime) -> dict:
    return {"role": role.value, "content": content, "timestamp": timestamp.isoformat()}


async def _get_history(session: AsyncSession, patient_id: UUID):
    result = await session.execute(select(ChatHistory).where(ChatHistory.patient_id == patient_id))
    return result.scalar_one_or_none()


async def ask(session: AsyncSession, scope: Scope, question: str) -> ChatResponse:
    """Answer a question and append both sides of the exchange to the patient's history."""
    patient_id = scope.require_patient_id()
    asked_at = datetime.now(timezone.utc)

    try:
        bot_response = await generate_response(question)
    except Exception:
        logger.exception("Chat responder failed for patient %s", patient_id)
        bot_response = FALLBACK_RESPONSE

    answered_at = datetime.now(timezone.utc)

    history = await _get_history(session, patient_id)
    if history is None:
        history = ChatHistory(patient_id=patient_id, messages=[])
        session.add(history)

    # Reassign so the JSON column is flagged as changed
    history.messages = list(history.messages or []) + [
        _message(ChatRole.PATIENT, question, asked_at),
        _message(ChatRole.BOT, bot_response, answered_at),
    ]
    await session.commit()

    return ChatResponse(bot_response=bot_response, timestamp=answered_at)


async def get_history(session: AsyncSession, scope: Scope) -> ChatHistoryResponse:
    patient_id = scope.require_patient_id()
    history = await _get_history(session, patient_id)
    if history is None:
        return ChatHistoryResponse(messages=[])
    return ChatHistoryResponse(messages=[ChatMessage(**m) for m in history.messages or []])


async def clear_history(session: AsyncSession, scope: Scope) -> ClearHistoryResponse:
    """Delete every stored message for the patient."""
    patient_id = scope.require_patient_id()
    await session.execute(delete(ChatHistory).where(ChatHistory.patient_id == patient_id))
    await session.commit()
    logger.info("Cleared chat history for patient %s", patient_id)
    return ClearHistoryResponse()
