"""
Guardrail Step

Rejects drafting requests that mention sensitive data (SSNs, passwords,
credit cards) before any generation work starts.
"""

from .main import GuardrailResult, check_guardrails, scan_guardrails

__all__ = ["GuardrailResult", "check_guardrails", "scan_guardrails"]
