"""
Email agent drivers.

EmailAgentDriver turns a raw drafting payload into a Delivered or Rejected
result. Stages run strictly in order:

    Validate -> Guard -> Dispatch -> (Orchestrated | Fallback)

The orchestrated path is only taken when a model provider is configured.
If it raises, or finishes without recording a deliverable, the failure is
logged and the request is served by the template fallback instead. The
caller sees this only as ``fallback_used=True``.

ChatDriver runs one conversational turn against the orchestrator, keeping
per-thread history in the session store.
"""

import uuid
from typing import Any, List, Mapping, Optional, Sequence

import logfire
from pydantic import ValidationError as PydanticValidationError
from pydantic_ai.messages import ModelMessage, ModelRequest, ModelResponse, TextPart, ToolReturnPart

from config.settings import settings
from pipeline.core.exceptions import GuardrailViolation, OrchestrationFailure, ValidationError
from pipeline.core.runtime import AgentRuntime, PydanticAIRuntime, StepLog, step_log
from pipeline.models.core import (
    ChatDeliverable,
    ChatReply,
    Delivered,
    DriverResult,
    GenerationPath,
    Rejected,
    StepStatus,
    create_runtime_context,
)
from pipeline.models.email import EmailDraftAgentInput
from pipeline.steps.email_agents import build_orchestrator_prompt, orchestrator_agent
from pipeline.steps.email_fallback import run_email_draft_fallback
from pipeline.steps.guardrails import check_guardrails
from pipeline.store.deliverables import DeliverableCache, deliverable_cache
from pipeline.store.sessions import SessionStore, session_store


PROVIDER_UNAVAILABLE_MESSAGE = "The orchestrator is unavailable because OPENAI_API_KEY is not configured."


def _format_error(error: Mapping[str, Any]) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()))
    return f"{location}: {error['msg']}" if location else error["msg"]


def validate_payload(payload: Any) -> EmailDraftAgentInput:
    """
    Parse a raw request payload.

    Raises:
        ValidationError: With one message per failing field
    """
    try:
        return EmailDraftAgentInput.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError([_format_error(error) for error in e.errors()]) from e


class EmailAgentDriver:
    """
    Single entry point for structured email drafting requests.

    Responsibilities:
    - Validate the payload and run guardrails before any generation
    - Choose the orchestrated or fallback path once per request
    - Mask orchestration failures behind the fallback
    - Return a uniform result envelope for both paths
    """

    def __init__(
        self,
        runtime: Optional[AgentRuntime] = None,
        cache: Optional[DeliverableCache] = None,
        sessions: Optional[SessionStore] = None,
        steps: Optional[StepLog] = None,
        agent: Any = None,
    ):
        """
        Initialize the driver.

        Args:
            runtime: Agent runtime (defaults to pydantic-ai)
            cache: Deliverable cache (defaults to the process-wide cache,
                   which is also where the agent tools record)
            sessions: Session store for thread history
            steps: Step log for driver progress
            agent: Agent invoked on the orchestrated path
        """
        self.runtime = runtime or PydanticAIRuntime()
        self.cache = cache if cache is not None else deliverable_cache
        self.sessions = sessions if sessions is not None else session_store
        self.steps = steps if steps is not None else step_log
        self.agent = agent if agent is not None else orchestrator_agent

    async def run(
        self,
        payload: Any,
        thread_id: Optional[str] = None,
        run_id: Optional[str] = None,
    ) -> DriverResult:
        """
        Produce a draft for ``payload``.

        Args:
            payload: Raw request body (without threadId/runId)
            thread_id: Conversation thread for history, if any
            run_id: Retry key; a repeated run id with the same metadata
                    resolves to the deliverable recorded the first time

        Returns:
            Delivered or Rejected
        """
        provider_configured = settings.provider_configured

        with logfire.span(
            "email_agent.run",
            thread_id=thread_id,
            run_id=run_id,
            provider_configured=provider_configured,
        ):
            try:
                agent_input = validate_payload(payload)
            except ValidationError as e:
                logfire.warning("Email request failed validation", errors=e.messages)
                return Rejected(reason=str(e), provider_configured=provider_configured)

            try:
                check_guardrails(agent_input)
            except GuardrailViolation as e:
                return Rejected(reason=e.reason, provider_configured=provider_configured)

            path = GenerationPath.ORCHESTRATED if provider_configured else GenerationPath.FALLBACK
            logfire.info("Email request dispatched", path=path.value)

            if path is GenerationPath.ORCHESTRATED:
                try:
                    return await self._run_orchestrated(agent_input, thread_id, run_id)
                except Exception as e:
                    logfire.error(
                        "Email agent orchestration failed",
                        error=str(e),
                        error_type=type(e).__name__,
                        exc_info=True,
                    )

            return self._run_fallback(agent_input, thread_id, run_id, provider_configured)

    async def _run_orchestrated(
        self,
        agent_input: EmailDraftAgentInput,
        thread_id: Optional[str],
        run_id: Optional[str],
    ) -> Delivered:
        context = create_runtime_context(payload=agent_input, thread_id=thread_id, run_id=run_id)
        step_id = f"{context.run_id}:orchestrator"
        self.steps.start(step_id, "Routing request to the orchestrator")

        history: List[ModelMessage] = []
        if thread_id:
            _, session = self.sessions.get_or_create(thread_id)
            history = session.history

        previous = self.cache.get_outcome(context.run_id)

        try:
            with logfire.span("email_agent.orchestrated", **context.trace_metadata()):
                messages = await self.runtime.run(
                    self.agent,
                    build_orchestrator_prompt(agent_input),
                    history,
                    context,
                )
                if thread_id:
                    self.sessions.update_history(thread_id, messages)

                outcome = self.cache.get_outcome(context.run_id)
                if outcome is None or outcome is previous:
                    raise OrchestrationFailure("Email agent did not record a deliverable", run_id=context.run_id)

                deliverable = self.cache.get(outcome.cache_key)
                if deliverable is None:
                    raise OrchestrationFailure("Deliverable missing from cache", run_id=context.run_id)
        except Exception as e:
            self.steps.complete(step_id, StepStatus.ERROR, str(e))
            raise

        self.steps.complete(step_id, StepStatus.DONE, "Orchestrator recorded a deliverable")
        logfire.info(
            "Orchestrated draft ready",
            run_id=context.run_id,
            cache_key=outcome.cache_key,
            identical_to_existing=outcome.identical_to_existing,
        )

        return Delivered(
            deliverable=deliverable,
            identical_to_existing=outcome.identical_to_existing,
            cache_key=outcome.cache_key,
            run_id=context.run_id,
            provider_configured=True,
        )

    def _run_fallback(
        self,
        agent_input: EmailDraftAgentInput,
        thread_id: Optional[str],
        run_id: Optional[str],
        provider_configured: bool,
    ) -> Delivered:
        run_id = run_id or str(uuid.uuid4())
        step_id = f"{run_id}:fallback"
        self.steps.start(step_id, "Generating template draft")

        result = run_email_draft_fallback(agent_input, cache=self.cache, thread_id=thread_id, run_id=run_id)

        self.steps.complete(step_id, StepStatus.DONE, "Template draft recorded")

        return Delivered(
            deliverable=result.deliverable,
            identical_to_existing=result.identical_to_existing,
            cache_key=result.cache_key,
            run_id=result.context.run_id,
            provider_configured=provider_configured,
            fallback_used=True,
        )


# ===================================================================
# CHAT
# ===================================================================

def extract_assistant_text(items: Sequence[ModelMessage]) -> str:
    """Join the text of every model response in ``items``."""
    texts = []
    for item in items:
        if not isinstance(item, ModelResponse):
            continue
        text = "".join(part.content for part in item.parts if isinstance(part, TextPart)).strip()
        if text:
            texts.append(text)
    return "\n\n".join(texts)


def extract_deliverables(items: Sequence[ModelMessage]) -> List[ChatDeliverable]:
    """Drafts returned by the draft_email tool in ``items``."""
    deliverables: List[ChatDeliverable] = []
    for item in items:
        if not isinstance(item, ModelRequest):
            continue
        for part in item.parts:
            if not isinstance(part, ToolReturnPart) or part.tool_name != "draft_email":
                continue
            try:
                deliverables.append(ChatDeliverable.model_validate(part.content))
            except PydanticValidationError as e:
                logfire.warning("Ignoring malformed draft_email output", error=str(e))
    return deliverables


class ChatDriver:
    """Conversational turns against the orchestrator with per-thread history."""

    def __init__(
        self,
        runtime: Optional[AgentRuntime] = None,
        sessions: Optional[SessionStore] = None,
        agent: Any = None,
    ):
        self.runtime = runtime or PydanticAIRuntime()
        self.sessions = sessions if sessions is not None else session_store
        self.agent = agent if agent is not None else orchestrator_agent

    async def run_turn(
        self,
        messages: Sequence[Mapping[str, Any]],
        thread_id: Optional[str] = None,
    ) -> ChatReply:
        """
        Answer the latest user message in ``messages``.

        Raises:
            ValidationError: If there is no user message with content
        """
        last_user = next((m for m in reversed(messages) if m.get("role") == "user"), None)
        if not last_user or not last_user.get("content"):
            raise ValidationError(["No user message provided."])

        session_id, session = self.sessions.get_or_create(thread_id or settings.default_chat_thread)
        reply_id = f"msg-{uuid.uuid4().hex[:12]}"

        if not settings.provider_configured:
            return ChatReply(id=reply_id, content=PROVIDER_UNAVAILABLE_MESSAGE, thread_id=session_id)

        previous_length = len(session.history)

        with logfire.span("chat.turn", thread_id=session_id, **session.context.trace_metadata()):
            history = await self.runtime.run(
                self.agent,
                last_user["content"],
                session.history,
                session.context,
            )
            self.sessions.update_history(session_id, history)

            new_items = history[previous_length:]
            reply = ChatReply(
                id=reply_id,
                content=extract_assistant_text(new_items),
                thread_id=session_id,
                deliverables=extract_deliverables(new_items),
            )
            logfire.info(
                "Chat turn completed",
                thread_id=session_id,
                new_items=len(new_items),
                deliverables=len(reply.deliverables),
            )

        return reply


# Default drivers bound to the process-wide stores
email_agent_driver = EmailAgentDriver()
chat_driver = ChatDriver()


async def run_email_agent_from_payload(
    payload: Any,
    thread_id: Optional[str] = None,
    run_id: Optional[str] = None,
) -> DriverResult:
    """Run the default email agent driver."""
    return await email_agent_driver.run(payload, thread_id=thread_id, run_id=run_id)
