"""
Test suite for the email agents.

Models are replaced with pydantic-ai FunctionModels that script the tool
calls, so the tools and the delegation between agents run for real
without a provider.

Run with:
    pytest pipeline/steps/email_agents/tests/test_email_agents.py -v
"""

from types import SimpleNamespace

import pytest
from pydantic_ai.messages import ModelResponse, RetryPromptPart, TextPart, ToolCallPart, ToolReturnPart
from pydantic_ai.models.function import AgentInfo, FunctionModel

from pipeline.core.exceptions import OrchestrationFailure
from pipeline.core.runner import EmailAgentDriver
from pipeline.core.runtime import PydanticAIRuntime
from pipeline.models.core import create_runtime_context
from pipeline.models.email import EmailDraftAgentInput
from pipeline.steps.email_agents import (
    build_orchestrator_prompt,
    email_draft_agent,
    orchestrator_agent,
    run_email_draft_specialist,
)
from pipeline.steps.email_agents.main import email_draft_instructions, orchestrator_instructions
from pipeline.steps.email_agents.prompts import (
    MISSING_CONTEXT_INSTRUCTIONS,
    MISSING_PAYLOAD_INSTRUCTIONS,
    build_email_draft_instructions,
    summarize_payload,
)
from pipeline.store.deliverables import deliverable_cache


SPECIALIST_SUBJECT = "Deployment timeline check-in"


@pytest.fixture
def agent_input(base_input):
    return EmailDraftAgentInput.model_validate(base_input)


def last_parts(messages):
    return messages[-1].parts


REPORTED_METADATA = {
    "recipient": "Alex Rivera",
    "tone": "friendly",
    "keyPoints": ["Confirm deployment timeline", "Highlight compliance summary"],
    "additionalContext": "Reference the updated pricing schedule from 11/10.",
}


def specialist_model(reports=True, metadata=None):
    """FunctionModel that calls report_result once, then ends the run."""

    def respond(messages, info: AgentInfo) -> ModelResponse:
        if any(isinstance(part, ToolReturnPart) for part in last_parts(messages)) or not reports:
            return ModelResponse(parts=[TextPart(content="Done.")])
        return ModelResponse(parts=[
            ToolCallPart(
                tool_name="report_result",
                args={
                    "draft": {
                        "subject": SPECIALIST_SUBJECT,
                        "body": "Hi Alex, sharing where the deployment timeline stands.",
                        "variants": [{"label": "Brief", "body": "Timeline is confirmed for Friday."}],
                    },
                    "metadata": metadata or REPORTED_METADATA,
                },
            ),
        ])

    return FunctionModel(respond)


def orchestrator_model(tool_args):
    """FunctionModel that delegates to draft_email, then summarises."""

    def respond(messages, info: AgentInfo) -> ModelResponse:
        parts = last_parts(messages)
        if any(isinstance(part, (ToolReturnPart, RetryPromptPart)) for part in parts):
            return ModelResponse(parts=[TextPart(content="Your draft is ready.")])
        return ModelResponse(parts=[ToolCallPart(tool_name="draft_email", args=tool_args)])

    return FunctionModel(respond)


DRAFT_EMAIL_ARGS = {
    "recipient": "Alex Rivera",
    "tone": "friendly",
    "key_points": ["Confirm deployment timeline", "Highlight compliance summary"],
    "additional_context": "Reference the updated pricing schedule from 11/10.",
    "variants": 1,
}


# ===================================================================
# prompts
# ===================================================================

@pytest.mark.unit
def test_orchestrator_prompt_lists_fields(agent_input):
    prompt = build_orchestrator_prompt(agent_input)

    assert "Recipient: Alex Rivera" in prompt
    assert "Tone: friendly" in prompt
    assert "Variants requested: 2" in prompt
    assert "1. Confirm deployment timeline\n2. Highlight compliance summary" in prompt
    assert "Additional context:\nReference the updated pricing schedule from 11/10." in prompt


@pytest.mark.unit
def test_draft_instructions_without_context(agent_input):
    instructions = build_email_draft_instructions(agent_input.model_copy(update={"additional_context": None}))
    assert "No additional context provided." in instructions
    assert "`report_result`" in instructions


@pytest.mark.unit
def test_summarize_payload(agent_input):
    assert summarize_payload(None) == "No structured context captured yet."
    assert "Key points: Confirm deployment timeline | Highlight compliance summary" in summarize_payload(agent_input)


@pytest.mark.unit
def test_instructions_follow_runtime_context(agent_input):
    assert email_draft_instructions(SimpleNamespace(deps=None)) == MISSING_CONTEXT_INSTRUCTIONS

    bare = create_runtime_context(run_id="run-1")
    assert email_draft_instructions(SimpleNamespace(deps=bare)) == MISSING_PAYLOAD_INSTRUCTIONS

    with_payload = bare.with_payload(agent_input)
    assert "Recipient: Alex Rivera" in email_draft_instructions(SimpleNamespace(deps=with_payload))
    assert "Recipient: Alex Rivera" in orchestrator_instructions(SimpleNamespace(deps=with_payload))


# ===================================================================
# specialist
# ===================================================================

@pytest.mark.asyncio
@pytest.mark.unit
async def test_specialist_records_deliverable(agent_input):
    context = create_runtime_context(payload=agent_input, run_id="specialist-run")

    with email_draft_agent.override(model=specialist_model()):
        result = await run_email_draft_specialist(agent_input, context=context)

    assert result.run_id == "specialist-run"
    assert result.identical_to_existing is False
    assert result.deliverable.draft.subject == SPECIALIST_SUBJECT
    assert deliverable_cache.get(result.cache_key) == result.deliverable


@pytest.mark.asyncio
@pytest.mark.unit
async def test_specialist_rerun_reuses_deliverable(agent_input):
    with email_draft_agent.override(model=specialist_model()):
        first = await run_email_draft_specialist(agent_input, context=create_runtime_context(
            payload=agent_input, run_id="same-run",
        ))
        second = await run_email_draft_specialist(agent_input, context=create_runtime_context(
            payload=agent_input, run_id="same-run",
        ))

    assert second.identical_to_existing is True
    assert second.cache_key == first.cache_key
    assert len(deliverable_cache) == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_specialist_without_report_raises(agent_input):
    with email_draft_agent.override(model=specialist_model(reports=False)):
        with pytest.raises(OrchestrationFailure) as excinfo:
            await run_email_draft_specialist(agent_input, thread_id="thread-1")

    assert excinfo.value.run_id
    assert len(deliverable_cache) == 0


# ===================================================================
# orchestrator through the driver
# ===================================================================

@pytest.mark.asyncio
@pytest.mark.integration
async def test_driver_delegates_to_specialist(provider_configured, base_input):
    driver = EmailAgentDriver(runtime=PydanticAIRuntime())

    with orchestrator_agent.override(model=orchestrator_model(DRAFT_EMAIL_ARGS)), \
            email_draft_agent.override(model=specialist_model()):
        result = await driver.run(base_input, run_id="delegated-run")

    assert result.ok is True
    assert result.fallback_used is False
    assert result.run_id == "delegated-run"
    assert result.deliverable.draft.subject == SPECIALIST_SUBJECT


@pytest.mark.asyncio
@pytest.mark.integration
async def test_reported_metadata_echoes_request(monkeypatch, provider_configured, base_input):
    paraphrased_args = {**DRAFT_EMAIL_ARGS, "tone": "Friendly", "additional_context": None}
    paraphrased_metadata = {
        "recipient": "Alex Rivera",
        "tone": "Friendly",
        "keyPoints": ["Confirm deployment timeline", "Highlight compliance summary"],
    }
    driver = EmailAgentDriver(runtime=PydanticAIRuntime())

    with orchestrator_agent.override(model=orchestrator_model(paraphrased_args)), \
            email_draft_agent.override(model=specialist_model(metadata=paraphrased_metadata)):
        first = await driver.run(base_input, run_id="echo-run")

    monkeypatch.setattr(provider_configured, "openai_api_key", "")
    second = await driver.run(base_input, run_id="echo-run")

    assert first.fallback_used is False
    assert first.deliverable.metadata.tone == "friendly"
    assert first.deliverable.metadata.additional_context == base_input["additionalContext"]
    assert first.deliverable.metadata.key_points == base_input["keyPoints"]

    assert second.fallback_used is True
    assert second.identical_to_existing is True
    assert second.cache_key == first.cache_key
    assert second.deliverable.draft.subject == SPECIALIST_SUBJECT
    assert len(deliverable_cache) == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_invalid_chat_tool_arguments_are_retried(provider_configured):
    # Chat contexts carry no payload, so draft_email validates the model's arguments
    context = create_runtime_context(run_id="chat-bad-args")
    bad_args = {**DRAFT_EMAIL_ARGS, "key_points": []}

    with orchestrator_agent.override(model=orchestrator_model(bad_args)), \
            email_draft_agent.override(model=specialist_model()):
        messages = await PydanticAIRuntime().run(orchestrator_agent, "Draft it", [], context)

    retries = [
        part
        for message in messages
        for part in getattr(message, "parts", [])
        if isinstance(part, RetryPromptPart)
    ]
    assert len(retries) == 1
    assert deliverable_cache.get_outcome("chat-bad-args") is None
    assert len(deliverable_cache) == 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_draft_email_returns_camel_case_summary(provider_configured):
    context = create_runtime_context(run_id="chat-run")

    with orchestrator_agent.override(model=orchestrator_model(DRAFT_EMAIL_ARGS)), \
            email_draft_agent.override(model=specialist_model()):
        messages = await PydanticAIRuntime().run(orchestrator_agent, "Draft it", [], context)

    returns = [
        part
        for message in messages
        for part in getattr(message, "parts", [])
        if isinstance(part, ToolReturnPart) and part.tool_name == "draft_email"
    ]
    assert len(returns) == 1
    content = returns[0].content
    assert content["runId"] == "chat-run"
    assert content["subject"] == SPECIALIST_SUBJECT
    assert content["metadata"]["keyPoints"] == DRAFT_EMAIL_ARGS["key_points"]
    assert content["identicalToExisting"] is False
    assert set(content) == {"subject", "body", "variants", "metadata", "cacheKey", "runId", "identicalToExisting"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_draft_email_metadata_matches_http_envelope(provider_configured):
    context = create_runtime_context(run_id="chat-null-context")
    args = {**DRAFT_EMAIL_ARGS, "additional_context": None}

    with orchestrator_agent.override(model=orchestrator_model(args)), \
            email_draft_agent.override(model=specialist_model()):
        messages = await PydanticAIRuntime().run(orchestrator_agent, "Draft it", [], context)

    content = next(
        part.content
        for message in messages
        for part in getattr(message, "parts", [])
        if isinstance(part, ToolReturnPart) and part.tool_name == "draft_email"
    )
    assert content["metadata"] == {
        "recipient": "Alex Rivera",
        "tone": "friendly",
        "keyPoints": ["Confirm deployment timeline", "Highlight compliance summary"],
        "additionalContext": None,
    }
