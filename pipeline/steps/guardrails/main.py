"""
Guardrail check.

Synchronous pre-flight scan over a validated drafting request. Runs before
any cache or session work, for both the orchestrated and fallback paths.
"""

import re
from dataclasses import dataclass
from typing import Optional

import logfire

from pipeline.core.exceptions import GuardrailViolation
from pipeline.models.email import EmailDraftAgentInput


SENSITIVE_PATTERNS = [
    re.compile(r"ssn", re.IGNORECASE),
    re.compile(r"password", re.IGNORECASE),
    re.compile(r"credit\s*card", re.IGNORECASE),
]

SENSITIVE_INFORMATION_REASON = (
    "Request appears to contain sensitive information. Please remove it before continuing."
)


@dataclass
class GuardrailResult:
    """Outcome of a guardrail scan."""

    ok: bool
    reason: Optional[str] = None
    pattern: Optional[str] = None


def _joined_text(agent_input: EmailDraftAgentInput) -> str:
    parts = [
        agent_input.recipient,
        agent_input.tone,
        agent_input.additional_context,
        *agent_input.key_points,
    ]
    return " \n".join(part for part in parts if part)


def scan_guardrails(agent_input: EmailDraftAgentInput) -> GuardrailResult:
    """Scan ``agent_input`` without raising."""
    text = _joined_text(agent_input)
    for pattern in SENSITIVE_PATTERNS:
        if pattern.search(text):
            return GuardrailResult(ok=False, reason=SENSITIVE_INFORMATION_REASON, pattern=pattern.pattern)
    return GuardrailResult(ok=True)


def check_guardrails(agent_input: EmailDraftAgentInput) -> None:
    """
    Reject requests containing disallowed content.

    Raises:
        GuardrailViolation: If any sensitive pattern matches
    """
    result = scan_guardrails(agent_input)
    if not result.ok:
        logfire.warning("Guardrail blocked request", pattern=result.pattern)
        raise GuardrailViolation(result.reason, pattern=result.pattern)
