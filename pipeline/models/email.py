"""
Email draft models.

Pydantic models for the structured drafting request and the deliverable the
agents (or the template fallback) produce. Wire names are camelCase
(``keyPoints``, ``additionalContext``); Python code uses snake_case.
"""

from typing import Annotated, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


KeyPoint = Annotated[str, Field(min_length=3)]


class EmailDraftAgentInput(BaseModel):
    """Validated request for an email draft. Unknown fields are rejected."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        json_schema_extra={
            "example": {
                "recipient": "Alex Rivera",
                "tone": "friendly",
                "keyPoints": ["Confirm deployment timeline", "Highlight compliance summary"],
                "additionalContext": "Reference the updated pricing schedule from 11/10.",
                "variants": 2,
            }
        },
    )

    recipient: str = Field(
        min_length=2,
        description="Recipient name or role"
    )

    tone: str = Field(
        min_length=3,
        description="Style of the email (e.g. warm, formal)"
    )

    key_points: List[KeyPoint] = Field(
        min_length=1,
        description="Talking points, in the order they should appear"
    )

    additional_context: Optional[str] = Field(
        default=None,
        max_length=2000,
        description="Free-form purpose or background for the email"
    )

    variants: int = Field(
        default=2,
        ge=1,
        le=3,
        description="Number of alternative drafts to produce"
    )


class EmailDraftVariant(BaseModel):
    """An alternative version of the draft body."""

    label: str = Field(min_length=3)
    body: str = Field(min_length=10)


class EmailDraft(BaseModel):
    """Subject, primary body and optional variants."""

    subject: str = Field(min_length=3)
    body: str = Field(min_length=25)
    variants: List[EmailDraftVariant] = Field(default_factory=list, max_length=4)

    @field_validator("variants", mode="before")
    @classmethod
    def default_variants(cls, v):
        """A missing or null variant list becomes an empty list."""
        return [] if v is None else v


class DeliverableMetadata(BaseModel):
    """Echo of the input that produced a deliverable."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    recipient: str = Field(min_length=2)
    tone: Optional[str] = Field(default=None, min_length=3)
    key_points: List[KeyPoint] = Field(min_length=1)
    additional_context: Optional[str] = Field(default=None, max_length=2000)


class EmailDraftDeliverable(BaseModel):
    """The artifact recorded in the deliverable cache and returned to callers."""

    type: Literal["email-draft"] = "email-draft"
    draft: EmailDraft
    metadata: DeliverableMetadata

    @classmethod
    def from_input(cls, draft: EmailDraft, agent_input: EmailDraftAgentInput) -> "EmailDraftDeliverable":
        """Build a deliverable whose metadata echoes ``agent_input``."""
        return cls(
            draft=draft,
            metadata=DeliverableMetadata(
                recipient=agent_input.recipient,
                tone=agent_input.tone,
                key_points=list(agent_input.key_points),
                additional_context=agent_input.additional_context,
            ),
        )
