"""
Conversation session store.

Maps a thread id to the agent message history and the runtime context of
that conversation. Sessions are created on first reference and live for the
lifetime of the process.
"""

import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import logfire
from pydantic_ai.messages import ModelMessage

from pipeline.models.core import RuntimeContext, create_runtime_context


@dataclass
class Session:
    """History and context for one conversation thread."""

    context: RuntimeContext
    history: List[ModelMessage] = field(default_factory=list)


class SessionStore:
    """In-memory thread id -> Session map."""

    def __init__(self):
        self._sessions: Dict[str, Session] = {}

    def get_or_create(self, thread_id: Optional[str] = None) -> Tuple[str, Session]:
        """
        Return the session for ``thread_id``, creating it if needed.

        A new unique id is generated when ``thread_id`` is omitted.
        """
        session_id = thread_id or str(uuid.uuid4())
        existing = self._sessions.get(session_id)
        if existing is not None:
            return session_id, existing

        session = Session(context=create_runtime_context(thread_id=session_id))
        self._sessions[session_id] = session
        logfire.debug("Session created", thread_id=session_id)
        return session_id, session

    def get(self, thread_id: str) -> Optional[Session]:
        return self._sessions.get(thread_id)

    def update_history(self, thread_id: str, items: Sequence[ModelMessage]) -> None:
        """Replace the history of a known session. Unknown ids are ignored."""
        entry = self._sessions.get(thread_id)
        if entry is None:
            return
        entry.history = list(items)

    def reset(self) -> None:
        self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)


# Process-wide store shared by the email and chat drivers
session_store = SessionStore()


def get_or_create_session(thread_id: Optional[str] = None) -> Tuple[str, Session]:
    return session_store.get_or_create(thread_id)


def update_session_history(thread_id: str, items: Sequence[ModelMessage]) -> None:
    session_store.update_history(thread_id, items)


def reset_sessions() -> None:
    session_store.reset()
