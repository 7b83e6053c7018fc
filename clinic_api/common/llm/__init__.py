# clinic_api/common/llm/__init__.py
"""Canned-response assistant behind the patient chatbot."""

from .llm_service import LLMService, generate_response

__all__ = ["LLMService", "generate_response"]
