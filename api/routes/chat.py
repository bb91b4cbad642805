"""
Chat API endpoint.

POST /api/chat answers the latest user message with the orchestrator,
keeping per-thread history between turns.
"""

import logfire
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from api.dependencies import ChatDriverDep
from pipeline.core.exceptions import ValidationError
from schemas.email import ChatRequest, ChatResponse, ErrorResponse


router = APIRouter(prefix="/api/chat", tags=["Chat"])


@router.post(
    "",
    response_model=ChatResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
)
async def chat(request: ChatRequest, driver: ChatDriverDep):
    """
    Run one chat turn.

    Drafts produced through the draft_email tool during the turn are
    returned under ``parts``.
    """
    with logfire.span("api.chat", thread_id=request.thread_id, messages=len(request.messages)):
        try:
            reply = await driver.run_turn(
                [message.model_dump() for message in request.messages],
                thread_id=request.thread_id,
            )
        except ValidationError as e:
            return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(e)})
        except Exception as e:
            logfire.error("Chat orchestrator failed", error=str(e), error_type=type(e).__name__, exc_info=True)
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": "Chat orchestrator failed."},
            )

        return JSONResponse(status_code=status.HTTP_200_OK, content=reply.to_dict())
