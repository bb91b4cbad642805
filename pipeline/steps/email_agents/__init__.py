"""
Email Agents Step

pydantic-ai orchestrator and email draft builder agents.
"""

from .main import (
    SpecialistResult,
    email_draft_agent,
    orchestrator_agent,
    run_email_draft_specialist,
)
from .prompts import build_orchestrator_prompt

__all__ = [
    "SpecialistResult",
    "email_draft_agent",
    "orchestrator_agent",
    "run_email_draft_specialist",
    "build_orchestrator_prompt",
]
