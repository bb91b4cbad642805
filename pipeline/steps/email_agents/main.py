"""
Email Agents

Two pydantic-ai agents share a RuntimeContext as their dependencies:

- orchestrator_agent: converses with the operator and calls `draft_email`
  once it has the structured fields.
- email_draft_agent: writes the draft and records it through
  `report_result`, which is the only place the agents touch the
  deliverable cache.

Both record under the run id of the context they were started with, so the
driver can find the deliverable after the run.
"""

from dataclasses import dataclass
from typing import List, Optional

import logfire
from pydantic import ValidationError as PydanticValidationError
from pydantic_ai import ModelRetry, RunContext
from pydantic_ai.usage import RunUsage

from config.settings import settings
from pipeline.core.exceptions import OrchestrationFailure
from pipeline.models.core import RuntimeContext, create_runtime_context, resolve_context
from pipeline.models.email import DeliverableMetadata, EmailDraft, EmailDraftAgentInput, EmailDraftDeliverable
from pipeline.store.deliverables import deliverable_cache, report_email_draft
from utils.llm_agent import create_agent

from .prompts import (
    MISSING_CONTEXT_INSTRUCTIONS,
    MISSING_PAYLOAD_INSTRUCTIONS,
    ORCHESTRATOR_MISSING_CONTEXT,
    SPECIALIST_USER_PROMPT,
    build_email_draft_instructions,
    build_orchestrator_instructions,
)


@dataclass
class SpecialistResult:
    """Deliverable recorded by the email draft agent for one run."""

    deliverable: EmailDraftDeliverable
    identical_to_existing: bool
    cache_key: str
    run_id: str


# ===================================================================
# EMAIL DRAFT BUILDER
# ===================================================================

email_draft_agent = create_agent(
    model=settings.email_agent_model,
    name="Email Draft Builder",
    deps_type=RuntimeContext,
    retries=1,
)


@email_draft_agent.instructions
def email_draft_instructions(ctx: RunContext[RuntimeContext]) -> str:
    resolved = resolve_context(ctx.deps)
    if resolved is None:
        return MISSING_CONTEXT_INSTRUCTIONS
    if resolved.payload is None:
        return MISSING_PAYLOAD_INSTRUCTIONS
    return build_email_draft_instructions(resolved.payload)


@email_draft_agent.tool
async def report_result(
    ctx: RunContext[RuntimeContext],
    draft: EmailDraft,
    metadata: Optional[DeliverableMetadata] = None,
) -> str:
    """Finalise the email draft deliverable. Call this exactly once per run."""
    resolved = resolve_context(ctx.deps)
    if resolved is None or not resolved.run_id:
        raise ValueError("runId missing from runtime context")

    # Metadata echoes the validated request; the model's copy only fills in without one
    if resolved.payload is not None:
        deliverable = EmailDraftDeliverable.from_input(draft, resolved.payload)
    elif metadata is not None:
        deliverable = EmailDraftDeliverable(draft=draft, metadata=metadata)
    else:
        raise ModelRetry("metadata is required when no request payload is available")

    outcome = report_email_draft(deliverable, run_id=resolved.run_id)
    if outcome.identical_to_existing:
        return f"Deliverable reused from cache ({outcome.cache_key})."
    return f"Deliverable recorded ({outcome.cache_key})."


async def run_email_draft_specialist(
    agent_input: EmailDraftAgentInput,
    thread_id: Optional[str] = None,
    context: Optional[RuntimeContext] = None,
    usage: Optional[RunUsage] = None,
) -> SpecialistResult:
    """
    Run the email draft agent for ``agent_input`` and read back its deliverable.

    Raises:
        OrchestrationFailure: If the agent finished without recording a deliverable
    """
    context = context or create_runtime_context(payload=agent_input, thread_id=thread_id)
    previous = deliverable_cache.get_outcome(context.run_id)

    with logfire.span("email_agents.specialist", **context.trace_metadata()):
        await email_draft_agent.run(SPECIALIST_USER_PROMPT, deps=context, usage=usage)

    outcome = deliverable_cache.get_outcome(context.run_id)
    if outcome is None or outcome is previous:
        raise OrchestrationFailure("Email specialist did not record a deliverable", run_id=context.run_id)

    deliverable = deliverable_cache.get(outcome.cache_key)
    if deliverable is None:
        raise OrchestrationFailure("Deliverable was not stored", run_id=context.run_id)

    return SpecialistResult(
        deliverable=deliverable,
        identical_to_existing=outcome.identical_to_existing,
        cache_key=outcome.cache_key,
        run_id=context.run_id,
    )


# ===================================================================
# ORCHESTRATOR
# ===================================================================

orchestrator_agent = create_agent(
    model=settings.orchestrator_model,
    name="SideKick Orchestrator",
    deps_type=RuntimeContext,
    retries=2,
)


@orchestrator_agent.instructions
def orchestrator_instructions(ctx: RunContext[RuntimeContext]) -> str:
    resolved = resolve_context(ctx.deps)
    if resolved is None:
        return ORCHESTRATOR_MISSING_CONTEXT
    return build_orchestrator_instructions(resolved.payload)


@orchestrator_agent.tool
async def draft_email(
    ctx: RunContext[RuntimeContext],
    recipient: str,
    key_points: List[str],
    tone: str = "neutral",
    additional_context: Optional[str] = None,
    variants: int = 2,
) -> dict:
    """Collect the recipient, tone, key points, and optional context, then generate an email draft."""
    resolved = resolve_context(ctx.deps)
    if resolved is None:
        raise ValueError("runId missing from runtime context")

    if resolved.payload is not None:
        # Structured requests already carry the operator's validated input
        payload = resolved.payload
    else:
        try:
            payload = EmailDraftAgentInput(
                recipient=recipient,
                tone=tone,
                key_points=key_points,
                additional_context=additional_context,
                variants=variants,
            )
        except PydanticValidationError as e:
            raise ModelRetry(f"Invalid draft_email arguments: {e}") from e

    # Same run id, so the driver finds the deliverable under its own context
    result = await run_email_draft_specialist(
        payload,
        context=resolved.with_payload(payload),
        usage=ctx.usage,
    )

    draft = result.deliverable.draft
    return {
        "subject": draft.subject,
        "body": draft.body,
        "variants": [variant.model_dump() for variant in draft.variants],
        "metadata": result.deliverable.metadata.model_dump(mode="json", by_alias=True),
        "cacheKey": result.cache_key,
        "runId": result.run_id,
        "identicalToExisting": result.identical_to_existing,
    }
