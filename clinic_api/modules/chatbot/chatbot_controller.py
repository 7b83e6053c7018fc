# clinic_api/modules/chatbot/chatbot_controller.py
"""Chatbot controller with API routes."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_api.common.database.database import get_db_session
from clinic_api.auth.dependencies import require_roles
from clinic_api.auth.scope import Scope, get_scope
from clinic_api.models.models import UserRole

from . import chatbot_service as service
from .schemas import ChatRequest, ChatResponse, ChatHistoryResponse, ClearHistoryResponse

router = APIRouter(
    prefix="/chatbot",
    tags=["Chatbot"],
    dependencies=[Depends(require_roles(UserRole.PATIENT))]
)


@router.get("/history", response_model=ChatHistoryResponse)
async def get_chat_history(
    db: AsyncSession = Depends(get_db_session),
    scope: Scope = Depends(get_scope)
):
    """Get your chat history with the assistant."""
    return await service.get_history(db, scope)


@router.post("", response_model=ChatResponse)
async def send_message(
    request: ChatRequest,
    db: AsyncSession = Depends(get_db_session),
    scope: Scope = Depends(get_scope)
):
    """Ask the assistant a question."""
    return await service.ask(db, scope, request.question)


@router.delete("/history", response_model=ClearHistoryResponse)
async def clear_chat_history(
    db: AsyncSession = Depends(get_db_session),
    scope: Scope = Depends(get_scope)
):
    """Delete your chat history."""
    return await service.clear_history(db, scope)
