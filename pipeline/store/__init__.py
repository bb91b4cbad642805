"""
Process-wide in-memory stores.

- deliverables: content-addressed deliverable cache with run outcomes
- sessions: per-thread conversation history
"""

from pipeline.store.deliverables import (
    DeliverableCache,
    RecordResult,
    deliverable_cache,
    compute_key,
    report_email_draft,
    reset_deliverables,
)
from pipeline.store.sessions import Session, SessionStore, session_store, reset_sessions

__all__ = [
    "DeliverableCache",
    "RecordResult",
    "deliverable_cache",
    "compute_key",
    "report_email_draft",
    "reset_deliverables",
    "Session",
    "SessionStore",
    "session_store",
    "reset_sessions",
]
