"""Root conftest.py for pytest configuration.

This file configures pytest for the entire project, ensuring:
- Proper Python path setup for imports
- Logfire observability configuration (local only)
- Isolation of the process-wide cache, session store and step log
- Shared fixtures across all tests
"""

import sys
from pathlib import Path

import logfire
import pytest


# ============================================================================
# Python Path Configuration
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom settings and ensure project root is in sys.path."""

    project_root = Path(__file__).parent.resolve()
    if str(project_root) not in sys.path:
        sys.path.insert(0, str(project_root))

    # Register custom markers
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests exercising the HTTP surface"
    )
    config.addinivalue_line(
        "markers",
        "unit: marks tests as unit tests (fast, no external dependencies)"
    )

    logfire.configure(
        service_name="sidekick_email_agent_tests",
        environment="test",
        send_to_logfire=False,
        console=False,
    )


# ============================================================================
# Shared Fixtures
# ============================================================================

@pytest.fixture(autouse=True)
def reset_process_state():
    """Clear the shared in-memory stores around every test."""
    from pipeline.core.runtime import step_log
    from pipeline.store.deliverables import reset_deliverables
    from pipeline.store.sessions import reset_sessions

    reset_deliverables()
    reset_sessions()
    step_log.reset()
    yield
    reset_deliverables()
    reset_sessions()
    step_log.reset()


@pytest.fixture
def provider_configured(monkeypatch):
    """Pretend a model-provider credential is present."""
    from config.settings import settings

    monkeypatch.setattr(settings, "openai_api_key", "sk-test")
    return settings


@pytest.fixture
def provider_missing(monkeypatch):
    """Force the no-provider path regardless of the local environment."""
    from config.settings import settings

    monkeypatch.setattr(settings, "openai_api_key", "")
    return settings


@pytest.fixture
def base_input():
    """Drafting request used across the suite."""
    return {
        "recipient": "Alex Rivera",
        "tone": "friendly",
        "keyPoints": ["Confirm deployment timeline", "Highlight compliance summary"],
        "additionalContext": "Reference the updated pricing schedule from 11/10.",
        "variants": 2,
    }
