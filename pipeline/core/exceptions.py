"""
Custom exceptions for the email agent pipeline.

Validation and guardrail errors are surfaced to the caller as rejections.
Orchestration failures never reach the caller: the driver logs them and
falls back to the template generator.
"""

from typing import List


class PipelineExecutionError(Exception):
    """
    Base exception for email agent pipeline failures.

    All pipeline-specific exceptions inherit from this.
    """
    pass


class ValidationError(PipelineExecutionError):
    """
    Raised when a request payload fails schema validation.

    Attributes:
        messages: Field-level messages, in the order pydantic reported them
    """

    def __init__(self, messages: List[str]):
        self.messages = list(messages)
        super().__init__("; ".join(self.messages))


class GuardrailViolation(PipelineExecutionError):
    """
    Raised when well-formed input contains disallowed content.

    Attributes:
        reason: Human-readable explanation returned to the caller
        pattern: The pattern that matched (for logs only)
    """

    def __init__(self, reason: str, pattern: str | None = None):
        self.reason = reason
        self.pattern = pattern
        super().__init__(reason)


class OrchestrationFailure(PipelineExecutionError):
    """
    Raised when the agent runtime fails or finishes without recording
    a deliverable for the run.
    """

    def __init__(self, message: str, run_id: str | None = None):
        self.run_id = run_id
        super().__init__(message)
