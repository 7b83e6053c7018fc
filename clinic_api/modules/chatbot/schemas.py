# clinic_api/modules/chatbot/schemas.py
"""Chatbot module Pydantic schemas."""

from typing import List
from datetime import datetime
from pydantic import BaseModel, Field
from enum import Enum

from clinic_api.common.config import settings


class ChatRole(str, Enum):
    PATIENT = "patient"
    BOT = "bot"


class ChatRequest(BaseModel):
    question: str = Field(..., min_length=1, max_length=settings.CHAT_QUESTION_MAX_LENGTH)

    class Config:
        str_strip_whitespace = True


class ChatResponse(BaseModel):
    bot_response: str
    timestamp: datetime


class ChatMessage(BaseModel):
    role: ChatRole
    content: str
    timestamp: datetime


class ChatHistoryResponse(BaseModel):
    messages: List[ChatMessage]


class ClearHistoryResponse(BaseModel):
    message: str = "Chat history cleared successfully"
