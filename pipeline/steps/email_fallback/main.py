"""
Email Fallback Step

Deterministic, template-based email drafts. Used when no model provider is
configured or when the orchestrated agent run fails.

No I/O and no randomness: the same input and run id always produce the
same deliverable, and the same cache key.
"""

import re
from dataclasses import dataclass
from typing import List, Optional

import logfire

from config.settings import settings
from pipeline.models.core import RuntimeContext, create_runtime_context
from pipeline.models.email import (
    EmailDraft,
    EmailDraftAgentInput,
    EmailDraftDeliverable,
    EmailDraftVariant,
)
from pipeline.store.deliverables import DeliverableCache, report_email_draft

from .utils import bullet_list, choose_tone, normalize_sentence


DEFAULT_PURPOSE = "I wanted to summarize the plan so we can keep momentum on the request"
DEFAULT_SUBJECT = "Next steps"

_LEADING_NON_ALNUM = re.compile(r"^[^a-zA-Z0-9]+")
_TRAILING_PUNCTUATION = re.compile(r"[.!?]+$")


@dataclass
class FallbackResult:
    """Recorded fallback deliverable plus the context it was recorded under."""

    deliverable: EmailDraftDeliverable
    identical_to_existing: bool
    cache_key: str
    context: RuntimeContext


def build_subject(agent_input: EmailDraftAgentInput) -> str:
    """Subject from the first key point, prefixed with the recipient."""
    focus = agent_input.key_points[0] if agent_input.key_points else "next steps"
    cleaned = _TRAILING_PUNCTUATION.sub("", _LEADING_NON_ALNUM.sub("", focus)).strip()
    prefix = f"For {agent_input.recipient}: " if agent_input.recipient else ""
    return f"{prefix}{cleaned or DEFAULT_SUBJECT}"


def build_primary_body(agent_input: EmailDraftAgentInput, signature: str) -> str:
    preset = choose_tone(agent_input.tone)
    greeting_line = f"{preset.greeting} {agent_input.recipient or 'there'},"
    intro = "I hope you are well." if preset.voice == "formal" else "I hope your day is going well."
    purpose = normalize_sentence(
        agent_input.additional_context
        if agent_input.additional_context is not None
        else DEFAULT_PURPOSE
    )
    if preset.voice == "direct":
        closing_prompt = "Let me know if anything needs adjustment so I can update immediately."
    else:
        closing_prompt = "Please let me know if anything needs refining or if you'd like to discuss details."

    lines = [
        greeting_line,
        "",
        f"{intro} {purpose}".strip(),
        "",
        "Here are the talking points we'll highlight:",
        bullet_list(agent_input.key_points),
        "",
        closing_prompt,
        "",
        f"{preset.sign_off},",
        signature,
    ]
    # Blank separators are dropped from the primary body
    return "\n".join(line for line in lines if line)


def build_variant_bodies(agent_input: EmailDraftAgentInput, signature: str) -> List[EmailDraftVariant]:
    """Concise recap, Action-focused and Relationship-first, cut to the requested count."""
    requested = choose_tone(agent_input.tone)
    direct = choose_tone("direct")
    friendly = choose_tone("friendly")
    recipient = agent_input.recipient

    variants = [
        (
            "Concise recap",
            [
                f"{requested.greeting} {recipient or 'there'},",
                "",
                "Quick recap of what we'll cover: "
                + " ".join(normalize_sentence(point) for point in agent_input.key_points),
                "",
                "Appreciate your feedback on any lingering items.",
                "",
                f"{requested.sign_off},",
                signature,
            ],
        ),
        (
            "Action-focused",
            [
                f"{direct.greeting} {recipient or 'team'},",
                "",
                "Here's the plan of action:",
                bullet_list(agent_input.key_points),
                "",
                "I'll send a finalized version after your review.",
                "",
                f"{direct.sign_off},",
                signature,
            ],
        ),
        (
            "Relationship-first",
            [
                f"{friendly.greeting} {recipient or 'there'},",
                "",
                "Appreciate the opportunity to collaborate. Key notes I'll weave in:",
                bullet_list(agent_input.key_points),
                "",
                "Happy to adjust tone or detail based on your perspective.",
                "",
                f"{friendly.sign_off},",
                signature,
            ],
        ),
    ]

    return [
        EmailDraftVariant(label=label, body="\n".join(lines))
        for label, lines in variants[: agent_input.variants]
    ]


def build_deliverable(
    agent_input: EmailDraftAgentInput,
    signature: Optional[str] = None,
) -> EmailDraftDeliverable:
    """
    Assemble the fallback deliverable.

    The draft is re-validated against its schema. A failure here means the
    templates above are broken, so the pydantic error is left to propagate.
    """
    signature = signature or settings.draft_signature
    draft = EmailDraft.model_validate(
        {
            "subject": build_subject(agent_input),
            "body": build_primary_body(agent_input, signature),
            "variants": [v.model_dump() for v in build_variant_bodies(agent_input, signature)],
        }
    )
    return EmailDraftDeliverable.from_input(draft, agent_input)


def run_email_draft_fallback(
    agent_input: EmailDraftAgentInput,
    cache: Optional[DeliverableCache] = None,
    **context_overrides,
) -> FallbackResult:
    """
    Build a fallback deliverable and record it in the deliverable cache.

    Args:
        agent_input: Validated drafting request
        cache: Cache to record into (defaults to the process-wide cache)
        **context_overrides: run_id, thread_id, workflow_id, intent, created_at

    Returns:
        FallbackResult with the recorded (or previously cached) deliverable
    """
    context = create_runtime_context(payload=agent_input, **context_overrides)

    with logfire.span("email_fallback.generate", run_id=context.run_id, thread_id=context.thread_id):
        deliverable = build_deliverable(agent_input)
        outcome = report_email_draft(deliverable, run_id=context.run_id, cache=cache)

        logfire.info(
            "Fallback draft ready",
            run_id=context.run_id,
            cache_key=outcome.cache_key,
            identical_to_existing=outcome.identical_to_existing,
            variants=len(outcome.deliverable.draft.variants),
        )

    return FallbackResult(
        deliverable=outcome.deliverable,
        identical_to_existing=outcome.identical_to_existing,
        cache_key=outcome.cache_key,
        context=context,
    )
