"""Application configuration using Pydantic Settings."""

import os
from typing import List
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# NOTE: logfire.configure() is not called here. Logfire is configured once at
# application startup (main.py via observability/logfire_config.py) or in the
# pytest hooks (conftest.py).


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Every field has a default so the service can start without a model
    provider; in that case all drafts come from the template fallback.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application Settings
    environment: str = Field(default="development", description="Environment: development, staging, production")
    debug: bool = Field(default=False, description="Debug mode")

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port")

    # CORS Settings
    allowed_origins: str = Field(
        default="http://localhost:3000",
        description="Comma-separated list of allowed CORS origins"
    )

    # Model provider
    openai_api_key: str = Field(default="", description="OpenAI API key (enables the orchestrated path)")
    orchestrator_model: str = Field(default="openai:gpt-5", description="Model used by the orchestrator agent")
    email_agent_model: str = Field(default="openai:gpt-5-mini", description="Model used by the email draft agent")

    # Drafting
    draft_signature: str = Field(default="SideKick OS Assistant", description="Signature line for fallback drafts")
    default_chat_thread: str = Field(default="default-thread", description="Thread used by chat when none is supplied")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    # Observability
    logfire_token: str = Field(default="", description="Logfire observability token")

    @field_validator("allowed_origins")
    @classmethod
    def parse_origins(cls, v: str) -> List[str]:
        """Parse comma-separated origins into a list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("openai_api_key")
    @classmethod
    def strip_api_key(cls, v: str) -> str:
        """Treat a whitespace-only key as missing."""
        return v.strip()

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment.lower() == "development"

    @property
    def provider_configured(self) -> bool:
        """Whether a model-provider credential is present."""
        return bool(self.openai_api_key)


# Create a singleton instance
settings = Settings()

# Ensure SDKs that read OPENAI_API_KEY at call time see the configured value.
if settings.openai_api_key:
    os.environ.setdefault("OPENAI_API_KEY", settings.openai_api_key)
