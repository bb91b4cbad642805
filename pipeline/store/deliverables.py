"""
Deliverable cache.

Content-addressed store for email draft deliverables. The cache key is a
SHA-256 fingerprint of ``{runId, metadata}``, so repeated attempts for the
same logical run converge on the first deliverable recorded for it. Draft
text is not part of the key.

The first deliverable stored under a key is never replaced.
"""

import hashlib
import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

import logfire
from pydantic_core import to_jsonable_python

from pipeline.models.core import RunOutcome
from pipeline.models.email import EmailDraftDeliverable


def canonical_json(payload: Any) -> str:
    """Serialize ``payload`` with sorted keys and no insignificant whitespace."""
    plain = to_jsonable_python(payload if payload is not None else {}, by_alias=True, exclude_none=True)
    return json.dumps(plain, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def compute_key(payload: Any) -> str:
    """Fingerprint of ``payload``. Key order does not affect the result."""
    return hashlib.sha256(canonical_json(payload).encode("utf-8")).hexdigest()


@dataclass
class RecordResult:
    """Result of recording a deliverable."""

    deliverable: EmailDraftDeliverable
    identical_to_existing: bool
    cache_key: str


class DeliverableCache:
    """
    In-memory deliverable cache with per-run outcomes.

    No locking: each operation is a single dict read or write, which is
    atomic under the event loop. Racing writers for the same run and
    metadata compute the same key, so the loser gets the winner's value.
    """

    def __init__(self):
        self._deliverables: Dict[str, EmailDraftDeliverable] = {}
        self._outcomes: Dict[str, RunOutcome] = {}

    def compute_key(self, payload: Any) -> str:
        return compute_key(payload)

    def record(self, run_id: str, deliverable: EmailDraftDeliverable) -> RecordResult:
        """
        Store ``deliverable`` for ``run_id`` unless its fingerprint is known.

        On a hit the previously stored deliverable is returned, not the one
        passed in. The run outcome is updated either way.
        """
        cache_key = compute_key({"runId": run_id, "metadata": deliverable.metadata})

        previous = self._outcomes.get(run_id)
        if previous is not None and previous.cache_key != cache_key:
            # Same run id, different metadata: the latest record wins.
            logfire.warning(
                "Run recorded with different metadata; replacing run outcome",
                run_id=run_id,
                previous_cache_key=previous.cache_key,
                cache_key=cache_key,
            )

        existing = self._deliverables.get(cache_key)
        if existing is not None:
            self._outcomes[run_id] = RunOutcome(cache_key=cache_key, identical_to_existing=True)
            logfire.info("Deliverable reused from cache", run_id=run_id, cache_key=cache_key)
            return RecordResult(deliverable=existing, identical_to_existing=True, cache_key=cache_key)

        self._deliverables[cache_key] = deliverable
        self._outcomes[run_id] = RunOutcome(cache_key=cache_key, identical_to_existing=False)
        logfire.info("Deliverable recorded", run_id=run_id, cache_key=cache_key)
        return RecordResult(deliverable=deliverable, identical_to_existing=False, cache_key=cache_key)

    def get(self, cache_key: str) -> Optional[EmailDraftDeliverable]:
        return self._deliverables.get(cache_key)

    def get_outcome(self, run_id: str) -> Optional[RunOutcome]:
        return self._outcomes.get(run_id)

    def reset(self) -> None:
        """Drop all entries and outcomes. Intended for tests."""
        self._deliverables.clear()
        self._outcomes.clear()

    def __len__(self) -> int:
        return len(self._deliverables)


# Process-wide cache shared by the agents, the fallback and the driver
deliverable_cache = DeliverableCache()


def get_email_deliverable(cache_key: str) -> Optional[EmailDraftDeliverable]:
    return deliverable_cache.get(cache_key)


def record_email_deliverable(run_id: str, deliverable: EmailDraftDeliverable) -> RecordResult:
    return deliverable_cache.record(run_id, deliverable)


def get_run_outcome(run_id: str) -> Optional[RunOutcome]:
    return deliverable_cache.get_outcome(run_id)


def reset_deliverables() -> None:
    deliverable_cache.reset()


def normalize_email_deliverable(payload: Any) -> EmailDraftDeliverable:
    """Validate any mapping or model into an EmailDraftDeliverable."""
    if isinstance(payload, EmailDraftDeliverable):
        payload = payload.model_dump(by_alias=True)
    return EmailDraftDeliverable.model_validate(payload)


def report_email_draft(
    payload: Any,
    run_id: str,
    cache: Optional[DeliverableCache] = None,
) -> RecordResult:
    """
    Validate a reported deliverable and record it under ``run_id``.

    Raises:
        ValueError: If run_id is empty
        pydantic.ValidationError: If the payload is not a valid deliverable
    """
    if not run_id:
        raise ValueError("Missing run identifier while recording deliverable")

    deliverable = normalize_email_deliverable(payload)
    target = cache if cache is not None else deliverable_cache
    return target.record(run_id, deliverable)
