"""Pipeline steps package.

This package contains the individual stages of the email drafting flow:
- guardrails: Rejects requests that mention sensitive data
- email_agents: Orchestrator and email draft builder agents (pydantic-ai)
- email_fallback: Template-based drafts used without a model provider
"""
