"""Core data models for the email agent pipeline."""

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .email import EmailDraftAgentInput, EmailDraftDeliverable


DEFAULT_WORKFLOW_ID = "email-draft"
DEFAULT_INTENT = "compose-email"


def utc_timestamp() -> str:
    """Current time as an ISO-8601 UTC string."""
    return datetime.now(timezone.utc).isoformat()


class GenerationPath(str, Enum):
    """Which generator produced a deliverable. Resolved once per request."""
    ORCHESTRATED = "orchestrated"
    FALLBACK = "fallback"


class StepStatus(str, Enum):
    """Status of a tracked driver step."""
    QUEUED = "queued"
    RUNNING = "running"
    DONE = "done"
    ERROR = "error"


@dataclass(frozen=True)
class RuntimeContext:
    """
    Identity of one logical generation attempt.

    Passed to the agents as their dependencies. Never mutated: use
    ``with_payload`` or ``create_runtime_context`` to derive a new one.
    """

    run_id: str
    """Unique per attempt; reused only when a caller retries a run"""

    thread_id: Optional[str] = None
    """Groups attempts into a conversation"""

    workflow_id: str = DEFAULT_WORKFLOW_ID

    intent: str = DEFAULT_INTENT
    """Free-form classification of the request"""

    created_at: str = field(default_factory=utc_timestamp)

    payload: Optional[EmailDraftAgentInput] = None
    """Structured input driving generation (None until supplied)"""

    def with_payload(self, payload: EmailDraftAgentInput) -> "RuntimeContext":
        """Return a copy of this context carrying ``payload``."""
        return replace(self, payload=payload)

    def trace_metadata(self) -> dict:
        """Identifiers attached to spans for this run."""
        return {
            "workflow_id": self.workflow_id,
            "run_id": self.run_id,
            "intent": self.intent,
        }


def create_runtime_context(
    payload: Optional[EmailDraftAgentInput] = None,
    run_id: Optional[str] = None,
    thread_id: Optional[str] = None,
    workflow_id: Optional[str] = None,
    intent: Optional[str] = None,
    created_at: Optional[str] = None,
) -> RuntimeContext:
    """Build a fresh context, generating a run id when none is given."""
    return RuntimeContext(
        run_id=run_id or str(uuid.uuid4()),
        thread_id=thread_id,
        workflow_id=workflow_id or DEFAULT_WORKFLOW_ID,
        intent=intent or DEFAULT_INTENT,
        created_at=created_at or utc_timestamp(),
        payload=payload,
    )


def resolve_context(value: Any) -> Optional[RuntimeContext]:
    """
    Coerce an agent dependency value into a RuntimeContext.

    Accepts a RuntimeContext or a mapping with a run id (``run_id`` or
    ``runId``). Returns None for anything without a run id.
    """
    if isinstance(value, RuntimeContext):
        return value
    if not isinstance(value, Mapping):
        return None

    run_id = value.get("run_id") or value.get("runId")
    if not run_id:
        return None

    payload = value.get("payload")
    if payload is not None and not isinstance(payload, EmailDraftAgentInput):
        payload = EmailDraftAgentInput.model_validate(payload)

    return create_runtime_context(
        payload=payload,
        run_id=run_id,
        thread_id=value.get("thread_id") or value.get("threadId"),
        workflow_id=value.get("workflow_id") or value.get("workflowId"),
        intent=value.get("intent"),
        created_at=value.get("created_at") or value.get("createdAt"),
    )


@dataclass
class RunOutcome:
    """What the most recent record call for a run id resolved to."""

    cache_key: str
    identical_to_existing: bool


@dataclass
class StepRecord:
    """A tracked driver step."""

    id: str
    status: StepStatus
    message: str
    progress: int
    timestamp: str = field(default_factory=utc_timestamp)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "status": self.status.value,
            "message": self.message,
            "progress": self.progress,
            "timestamp": self.timestamp,
        }


# ===================================================================
# DRIVER RESULTS
# ===================================================================

class _ResultModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Delivered(_ResultModel):
    """A deliverable was produced (possibly by the fallback)."""

    ok: Literal[True] = True
    deliverable: EmailDraftDeliverable
    identical_to_existing: bool
    cache_key: str
    run_id: str
    provider_configured: bool
    fallback_used: bool = False

    def to_envelope(self) -> dict:
        """Response envelope returned by the HTTP surface."""
        envelope = {
            "draft": self.deliverable.draft.model_dump(mode="json", by_alias=True),
            "metadata": self.deliverable.metadata.model_dump(mode="json", by_alias=True),
            "cacheKey": self.cache_key,
            "runId": self.run_id,
            "identicalToExisting": self.identical_to_existing,
            "providerConfigured": self.provider_configured,
        }
        if self.fallback_used:
            envelope["fallbackUsed"] = True
        return envelope


class Rejected(_ResultModel):
    """The input was invalid or disallowed. Nothing was generated."""

    ok: Literal[False] = False
    reason: str
    provider_configured: bool = False

    def to_envelope(self) -> dict:
        return {"error": self.reason, "providerConfigured": self.provider_configured}


DriverResult = Union[Delivered, Rejected]


class ChatDeliverable(_ResultModel):
    """A draft surfaced in a chat turn, parsed from a draft_email tool return."""

    subject: str
    body: str
    variants: list = Field(default_factory=list)
    metadata: dict = Field(default_factory=dict)
    cache_key: str
    run_id: str
    identical_to_existing: bool


@dataclass
class ChatReply:
    """Assistant message for one chat turn."""

    id: str
    content: str
    thread_id: str
    role: str = "assistant"
    deliverables: list[ChatDeliverable] = field(default_factory=list)

    def to_dict(self) -> dict:
        reply = {
            "id": self.id,
            "role": self.role,
            "content": self.content,
            "threadId": self.thread_id,
        }
        if self.deliverables:
            reply["parts"] = [
                {"type": "email-draft", "deliverable": d.model_dump(mode="json", by_alias=True)}
                for d in self.deliverables
            ]
        return reply
