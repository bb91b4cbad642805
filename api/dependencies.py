"""Driver dependencies for the API routes.

Tests override these through ``app.dependency_overrides`` to inject drivers
with fake agent runtimes.
"""

from typing import Annotated

from fastapi import Depends

from pipeline.core.runner import ChatDriver, EmailAgentDriver, chat_driver, email_agent_driver
from pipeline.core.runtime import StepLog, step_log


def get_email_driver() -> EmailAgentDriver:
    return email_agent_driver


def get_chat_driver() -> ChatDriver:
    return chat_driver


def get_step_log() -> StepLog:
    return step_log


# Type aliases for dependency injection
EmailDriverDep = Annotated[EmailAgentDriver, Depends(get_email_driver)]
ChatDriverDep = Annotated[ChatDriver, Depends(get_chat_driver)]
StepLogDep = Annotated[StepLog, Depends(get_step_log)]
