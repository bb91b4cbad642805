"""
Main FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import Dict, Union

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logfire

from config import settings
from observability.logfire_config import LogfireConfig
from api.routes import email_router, chat_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    # Initialize Logfire first so we can use structured logging
    LogfireConfig.initialize(token=settings.logfire_token)

    logfire.info(
        "Starting SideKick email agent server",
        environment=settings.environment,
        debug=settings.debug,
    )

    if settings.provider_configured:
        logfire.info(
            "Model provider configured",
            orchestrator_model=settings.orchestrator_model,
            email_agent_model=settings.email_agent_model,
        )
    else:
        logfire.warning(
            "Model provider not configured; all drafts will use the template fallback",
            hint="Set OPENAI_API_KEY in the .env file",
        )

    yield

    # Shutdown
    logfire.info("Shutting down SideKick email agent server")


# Initialize FastAPI app
app = FastAPI(
    title="SideKick Email Agent API",
    description="Email drafting agents with deterministic template fallback",
    version="1.0.0",
    lifespan=lifespan,
    debug=settings.debug,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Health Check Endpoints
# ============================================================================

@app.get("/health", tags=["Health"])
async def health_check() -> Dict[str, Union[str, bool]]:
    """
    Health check endpoint for load balancers and monitoring.

    The service is healthy without a provider; drafts then come from the
    template fallback.
    """
    return {
        "status": "healthy",
        "service": "sidekick-email-agent",
        "version": "1.0.0",
        "providerConfigured": settings.provider_configured,
        "environment": settings.environment,
    }


@app.get("/", tags=["Root"])
async def root() -> Dict[str, str]:
    """
    Root endpoint - API information.
    """
    return {
        "name": "SideKick Email Agent API",
        "version": "1.0.0",
        "description": "Email drafting with agent orchestration and template fallback",
        "docs": "/docs",
        "health": "/health",
    }


# ============================================================================
# API Routers
# ============================================================================

# Structured email drafting (validation, guardrails, orchestrated or fallback)
app.include_router(email_router)

# Conversational orchestrator with per-thread history
app.include_router(chat_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.log_level.lower(),
    )
