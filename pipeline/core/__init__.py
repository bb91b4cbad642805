"""
Core pipeline infrastructure.

This package contains:
- runtime: AgentRuntime interface, pydantic-ai adapter and the step log
- runner: EmailAgentDriver and ChatDriver (import from pipeline.core.runner)
- exceptions: ValidationError, GuardrailViolation, OrchestrationFailure

The drivers are not re-exported here because they import the agent steps,
which themselves import pipeline.core.exceptions.
"""

from pipeline.core.exceptions import (
    PipelineExecutionError,
    ValidationError,
    GuardrailViolation,
    OrchestrationFailure,
)
from pipeline.core.runtime import AgentRuntime, PydanticAIRuntime, StepLog, step_log

__all__ = [
    "PipelineExecutionError",
    "ValidationError",
    "GuardrailViolation",
    "OrchestrationFailure",
    "AgentRuntime",
    "PydanticAIRuntime",
    "StepLog",
    "step_log",
]
