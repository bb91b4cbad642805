"""
Agent runtime adapter and driver step log.

AgentRuntime is the narrow interface the drivers use to call an agent:
run(agent, prompt, history, context) -> full message history. Tests swap
in a fake with the same coroutine.
"""

from typing import Any, Dict, List, Optional, Protocol, Sequence

import logfire
from pydantic_ai.messages import ModelMessage

from pipeline.models.core import RuntimeContext, StepRecord, StepStatus, utc_timestamp


class AgentRuntime(Protocol):
    async def run(
        self,
        agent: Any,
        prompt: str,
        history: Sequence[ModelMessage],
        context: RuntimeContext,
    ) -> List[ModelMessage]:
        ...


class PydanticAIRuntime:
    """Runs pydantic-ai agents with the RuntimeContext as dependencies."""

    async def run(
        self,
        agent: Any,
        prompt: str,
        history: Sequence[ModelMessage],
        context: RuntimeContext,
    ) -> List[ModelMessage]:
        result = await agent.run(
            prompt,
            deps=context,
            message_history=list(history) or None,
        )
        return result.all_messages()


class StepLog:
    """Latest status of each tracked driver step, keyed by step id."""

    def __init__(self):
        self._steps: Dict[str, StepRecord] = {}

    def start(self, step_id: str, message: str) -> StepRecord:
        record = StepRecord(id=step_id, status=StepStatus.RUNNING, message=message, progress=1)
        self._steps[step_id] = record
        logfire.debug("Step started", step_id=step_id, message=message)
        return record

    def complete(self, step_id: str, status: StepStatus, message: Optional[str] = None) -> StepRecord:
        """Mark a step finished. Keeps the start message when none is given."""
        if status == StepStatus.RUNNING:
            raise ValueError("complete() needs a terminal status, not RUNNING")

        current = self._steps.get(step_id)
        record = StepRecord(
            id=step_id,
            status=status,
            message=message if message is not None else (current.message if current else ""),
            progress=100,
            timestamp=utc_timestamp(),
        )
        self._steps[step_id] = record
        logfire.debug("Step completed", step_id=step_id, status=status.value)
        return record

    def records(self) -> List[StepRecord]:
        return list(self._steps.values())

    def reset(self) -> None:
        self._steps.clear()


# Process-wide step log
step_log = StepLog()
