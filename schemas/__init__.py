"""
Pydantic schemas for request/response validation.
"""

from schemas.email import (
    ChatMessage,
    ChatRequest,
    ChatResponse,
    EmailDraftResponse,
    ErrorResponse,
    StepRecordResponse,
)

__all__ = [
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    "EmailDraftResponse",
    "ErrorResponse",
    "StepRecordResponse",
]
