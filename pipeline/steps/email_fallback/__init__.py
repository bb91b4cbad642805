"""
Email Fallback Step

Template-based email drafts that need no model provider.
"""

from .main import FallbackResult, build_deliverable, run_email_draft_fallback

__all__ = ["FallbackResult", "build_deliverable", "run_email_draft_fallback"]
