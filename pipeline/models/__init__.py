"""
Models package for the email agent pipeline

NOTE: in-memory models only, nothing here is persisted
"""

from .core import (
    # Enums
    GenerationPath,
    StepStatus,

    # Run identity
    RuntimeContext,
    create_runtime_context,
    resolve_context,
    RunOutcome,
    StepRecord,

    # Driver results
    Delivered,
    Rejected,
    DriverResult,
    ChatDeliverable,
    ChatReply,
)
from .email import (
    EmailDraftAgentInput,
    EmailDraftVariant,
    EmailDraft,
    DeliverableMetadata,
    EmailDraftDeliverable,
)

__all__ = [
    # Enums
    "GenerationPath",
    "StepStatus",

    # Run identity
    "RuntimeContext",
    "create_runtime_context",
    "resolve_context",
    "RunOutcome",
    "StepRecord",

    # Driver results
    "Delivered",
    "Rejected",
    "DriverResult",
    "ChatDeliverable",
    "ChatReply",

    # Email models
    "EmailDraftAgentInput",
    "EmailDraftVariant",
    "EmailDraft",
    "DeliverableMetadata",
    "EmailDraftDeliverable",
]
