"""Utilities for creating instrumented pydantic-ai agents."""

import logging
from typing import Any, Optional, Type

from pydantic_ai import Agent

logger = logging.getLogger(__name__)


def create_agent(
    model: str,
    name: Optional[str] = None,
    deps_type: Type[Any] = type(None),
    retries: int = 2,
) -> Agent:
    """
    Create a text-output pydantic-ai Agent.

    The model is resolved on first run, so agents can be built at import
    time without provider credentials. Instructions and tools are attached
    by the caller with the agent decorators.
    """
    agent = Agent(
        model=model,
        name=name,
        deps_type=deps_type,
        retries=retries,
        defer_model_check=True,
    )

    logger.debug(
        "Created agent: name=%s, model=%s, retries=%s",
        name,
        model,
        retries,
    )

    return agent
