"""
Email drafting API endpoints.

POST /api/agents/email runs the email agent driver synchronously and
returns either the draft envelope (200) or a rejection (400).
"""

import json
from typing import List

import logfire
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from api.dependencies import EmailDriverDep, StepLogDep
from config.settings import settings
from pipeline.models.core import Rejected
from schemas.email import EmailDraftResponse, ErrorResponse, StepRecordResponse


router = APIRouter(prefix="/api/agents/email", tags=["Email Drafting"])


@router.post(
    "",
    response_model=EmailDraftResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
)
async def draft_email(request: Request, driver: EmailDriverDep):
    """
    Generate an email draft.

    **Body**: recipient, tone, keyPoints, optional additionalContext and
    variants (1-3, default 2). Optional threadId groups requests into a
    conversation; optional runId is a retry key: repeating it with the same
    input returns the deliverable recorded the first time with
    identicalToExisting=true.

    Without a model provider, or when the agents fail, the draft comes from
    the template fallback and fallbackUsed is true.

    Returns:
        200: EmailDraftResponse
        400: Invalid body, validation errors or guardrail rejection
        500: Unexpected failure
    """
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        body = None

    if not isinstance(body, dict):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Invalid request body", "providerConfigured": settings.provider_configured},
        )

    thread_id = body.pop("threadId", None)
    run_id = body.pop("runId", None)

    for field, value in (("threadId", thread_id), ("runId", run_id)):
        if value is not None and not isinstance(value, str):
            logfire.warning("Email request carried a non-string identifier", field=field)
            rejected = Rejected(reason=f"{field}: must be a string", provider_configured=settings.provider_configured)
            return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=rejected.to_envelope())

    with logfire.span("api.draft_email", thread_id=thread_id, run_id=run_id):
        try:
            result = await driver.run(body, thread_id=thread_id, run_id=run_id)
        except Exception as e:
            logfire.error("Email draft request failed", error=str(e), error_type=type(e).__name__, exc_info=True)
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": str(e) or "Unexpected error"},
            )

        if not result.ok:
            return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=result.to_envelope())

        return JSONResponse(status_code=status.HTTP_200_OK, content=result.to_envelope())


@router.get("/steps", response_model=List[StepRecordResponse])
async def list_steps(steps: StepLogDep):
    """
    Latest status of the tracked driver steps (orchestrator and fallback
    runs), in the order they were first started.
    """
    return [record.to_dict() for record in steps.records()]
