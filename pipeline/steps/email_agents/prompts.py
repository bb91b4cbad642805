"""
Email Agent Prompts

Instructions for the orchestrator and the email draft builder, plus the
operator prompt the driver sends for structured drafting requests.
"""

from typing import List, Optional

from pipeline.models.email import EmailDraftAgentInput


SPECIALIST_USER_PROMPT = "Please produce the email draft now using the provided workflow context."

MISSING_CONTEXT_INSTRUCTIONS = "Runtime context missing. Wait for the driver to retry with payload details."
MISSING_PAYLOAD_INSTRUCTIONS = "Payload missing. Hold for orchestrator instructions."
ORCHESTRATOR_MISSING_CONTEXT = "Context unavailable. Respond with a brief acknowledgement and wait for a retry."


def format_key_points(agent_input: EmailDraftAgentInput) -> str:
    return "\n".join(f"{index}. {point}" for index, point in enumerate(agent_input.key_points, start=1))


def build_orchestrator_prompt(agent_input: EmailDraftAgentInput) -> str:
    """Operator message for a structured drafting request."""
    lines = [
        "The operator provided structured email drafting inputs.",
        f"Recipient: {agent_input.recipient}",
        f"Tone: {agent_input.tone}",
        f"Variants requested: {agent_input.variants}",
        "Key points:",
        format_key_points(agent_input),
    ]

    if agent_input.additional_context:
        lines.extend(["Additional context:", agent_input.additional_context])

    lines.append("Route to the email drafting specialist to complete the deliverable.")
    return "\n".join(lines)


def build_email_draft_instructions(payload: EmailDraftAgentInput) -> str:
    """Instructions for the email draft builder for one run."""
    if payload.additional_context:
        context_line = f"Additional context: {payload.additional_context}"
    else:
        context_line = "No additional context provided."

    return "\n".join([
        "You are the SideKick Email Draft Builder.",
        "Compose a professional reply email that matches the requested tone and captures every key point.",
        "Workflow expectations:",
        "- Call the `report_result` tool exactly once with the draft (subject, body, variants[]) and the metadata.",
        "- Do NOT emit normal assistant text in the same turn as the `report_result` call.",
        "- Ensure the draft body is friendly but concise, and provide the requested number of variants (label + body).",
        "- Use bullet points or paragraphs to improve readability when helpful.",
        "Context for this run:",
        f"Recipient: {payload.recipient}",
        f"Tone: {payload.tone}",
        f"Variants requested: {payload.variants}",
        "Key points:",
        format_key_points(payload),
        context_line,
        "Keep closing signatures consistent with the tone.",
    ])


def summarize_payload(payload: Optional[EmailDraftAgentInput]) -> str:
    if payload is None:
        return "No structured context captured yet."

    lines: List[str] = [
        f"Recipient: {payload.recipient}",
        f"Tone: {payload.tone}",
        f"Variants: {payload.variants}",
        f"Key points: {' | '.join(payload.key_points)}",
    ]
    if payload.additional_context:
        lines.append(f"Additional context: {payload.additional_context}")
    return "\n".join(lines)


def build_orchestrator_instructions(payload: Optional[EmailDraftAgentInput]) -> str:
    return "\n".join([
        "You are the SideKick orchestrator and the primary assistant in this chat.",
        "Hold natural conversations, clarify ambiguous requests, and only trigger tools when ready.",
        "When the operator requests an email draft, gather recipient, tone, the talking points, the event timing, and any constraints.",
        "Ask concise follow-up questions when details are missing or conflicting before drafting.",
        "Once you have the necessary details, call the `draft_email` tool with the structured fields "
        "(recipient, tone, key_points, additional_context, variants).",
        "After the tool returns, present the generated subject and body clearly, include any variants, "
        "and highlight next steps for the operator.",
        "Do not fabricate tool outputs. Always use the tool response for the final draft.",
        "Context gathered so far:",
        summarize_payload(payload),
    ])
