"""Tests for the conversation session store."""

import pytest
from pydantic_ai.messages import ModelRequest, ModelResponse, TextPart, UserPromptPart

from pipeline.store.sessions import SessionStore


@pytest.fixture
def store():
    return SessionStore()


def conversation(text="Draft an email to Alex"):
    return [
        ModelRequest(parts=[UserPromptPart(content=text)]),
        ModelResponse(parts=[TextPart(content="Who should sign it?")]),
    ]


@pytest.mark.unit
def test_get_or_create_generates_unique_ids(store):
    first_id, first = store.get_or_create()
    second_id, second = store.get_or_create()

    assert first_id != second_id
    assert first is not second
    assert first.context.thread_id == first_id
    assert first.history == []


@pytest.mark.unit
def test_get_or_create_returns_existing_session(store):
    thread_id, session = store.get_or_create("thread-1")
    same_id, same = store.get_or_create("thread-1")

    assert thread_id == same_id == "thread-1"
    assert same is session
    assert len(store) == 1


@pytest.mark.unit
def test_unknown_thread_id_creates_session_under_that_id(store):
    thread_id, session = store.get_or_create("imported-thread")

    assert thread_id == "imported-thread"
    assert store.get("imported-thread") is session
    assert session.context.run_id


@pytest.mark.unit
def test_update_history_replaces_wholesale(store):
    store.get_or_create("thread-1")
    store.update_history("thread-1", conversation("first"))
    replacement = conversation("second")
    store.update_history("thread-1", replacement)

    history = store.get("thread-1").history
    assert len(history) == 2
    assert history[0].parts[0].content == "second"
    # The store keeps its own list
    replacement.append(ModelResponse(parts=[TextPart(content="extra")]))
    assert len(store.get("thread-1").history) == 2


@pytest.mark.unit
def test_update_history_ignores_unknown_thread(store):
    store.update_history("never-created", conversation())
    assert store.get("never-created") is None
    assert len(store) == 0


@pytest.mark.unit
def test_reset_drops_sessions(store):
    store.get_or_create("thread-1")
    store.reset()
    assert store.get("thread-1") is None
