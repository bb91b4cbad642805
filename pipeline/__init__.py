"""
Email agent pipeline.

- core: drivers, agent runtime adapter, exceptions
- models: run identity, driver results and email draft models
- steps: guardrails, pydantic-ai agents, template fallback
- store: deliverable cache and session store (process-wide, in memory)

Entry point: pipeline.core.runner.run_email_agent_from_payload
"""
