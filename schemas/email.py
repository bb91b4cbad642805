"""
Pydantic schemas for the email agent API endpoints.

Request bodies for POST /api/agents/email are validated by the driver
itself (so failures come back as a 400 rejection envelope rather than
FastAPI's 422), so only response and chat schemas live here.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from pipeline.models.email import EmailDraft


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ===================================================================
# REQUEST SCHEMAS
# ===================================================================

class ChatMessage(BaseModel):
    """One message of the chat transcript sent by the client."""

    role: str = Field(..., description="user or assistant")
    content: str = Field(default="", description="Message text")


class ChatRequest(_CamelModel):
    """
    Request body for POST /api/chat
    """

    messages: List[ChatMessage] = Field(default_factory=list)
    thread_id: Optional[str] = Field(default=None, description="Conversation thread id")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "messages": [{"role": "user", "content": "Draft a follow-up to Alex about the rollout."}],
                "threadId": "thread-123",
            }
        },
    )


# ===================================================================
# RESPONSE SCHEMAS
# ===================================================================

class EmailDraftResponse(_CamelModel):
    """
    Response from POST /api/agents/email
    """

    draft: EmailDraft
    metadata: Dict[str, Any]
    cache_key: str = Field(..., description="Fingerprint of {runId, metadata}")
    run_id: str
    identical_to_existing: bool = Field(..., description="True when an earlier attempt of this run was reused")
    provider_configured: bool
    fallback_used: Optional[bool] = Field(
        default=None,
        description="Present and true when the template fallback produced the draft"
    )


class ErrorResponse(_CamelModel):
    """Rejection or failure envelope."""

    error: str
    provider_configured: Optional[bool] = None


class ChatResponse(_CamelModel):
    """
    Response from POST /api/chat
    """

    id: str
    role: str = "assistant"
    content: str
    thread_id: str
    parts: Optional[List[Dict[str, Any]]] = None


class StepRecordResponse(BaseModel):
    """Tracked driver step."""

    id: str
    status: str
    message: str
    progress: int
    timestamp: str
