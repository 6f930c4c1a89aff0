"""Outcome and response models for the content engine."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from contentengine.models.errors import ErrorCode


class OutcomeStatus(str, Enum):
    """How a dispatch attempt resolved."""

    SUCCESS = "success"  # Model payload, possibly with patched sections
    DEGRADED = "degraded"  # Fallback payload
    ERROR = "error"  # No payload at all


class GenerationOutcome(BaseModel):
    """Result of one dispatch attempt, handed to the usage recorder."""

    status: OutcomeStatus = Field(..., description="How the attempt resolved")
    payload: Optional[dict[str, Any]] = Field(None, description="Schema-shaped tool output")
    processing_time_ms: int = Field(..., ge=0, description="Wall time of the attempt in milliseconds")
    error_kind: Optional[ErrorCode] = Field(None, description="Why the attempt degraded or failed")
    error_message: Optional[str] = Field(None, description="Human-readable failure detail")
    patched_sections: list[str] = Field(default_factory=list, description="Sections filled from fallback content")
    model_used: Optional[str] = Field(None, description="Model identifier when the upstream was called")

    @model_validator(mode="after")
    def validate_status_state(self):
        """Ensure status, payload and error_kind agree."""
        if self.status is OutcomeStatus.ERROR:
            if self.payload:
                raise ValueError("payload must be empty when status=error")
            if self.error_kind is None:
                raise ValueError("error_kind must be present when status=error")
        else:
            if not self.payload:
                raise ValueError(f"payload must be present when status={self.status.value}")
            if self.status is OutcomeStatus.SUCCESS and self.error_kind is not None:
                raise ValueError("error_kind must be None when status=success")
            if self.status is OutcomeStatus.DEGRADED and self.error_kind is None:
                raise ValueError("error_kind must be present when status=degraded")
        return self

    @property
    def ai_generated(self) -> bool:
        """True only when the payload came from the generation client."""
        return self.status is OutcomeStatus.SUCCESS

    @property
    def has_payload(self) -> bool:
        return bool(self.payload)


class CamelModel(BaseModel):
    """Base for wire models serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UsageSummary(CamelModel):
    total_generations: int = Field(0, ge=0)
    monthly_generations: int = Field(0, ge=0)


class ToolResponse(CamelModel):
    """Body returned for a successful or degraded tool invocation."""

    success: bool = Field(True, description="Always true for non-rejected calls")
    output: dict[str, Any] = Field(..., description="Tool payload")
    processing_time_ms: int = Field(..., ge=0)
    ai_generated: bool = Field(..., description="Whether the generative model produced the payload")
    usage: UsageSummary = Field(default_factory=UsageSummary)

    @model_validator(mode="after")
    def validate_output_present(self):
        """Ensure a response never goes out without a payload."""
        if not self.output:
            raise ValueError("output must be present in a tool response")
        return self


class RejectionBody(BaseModel):
    """Body of a hard rejection. Extra detail fields are kept."""

    model_config = ConfigDict(extra="allow")

    message: str
    error: ErrorCode


class ToolSummary(CamelModel):
    id: str
    name: str
    description: str
    category: str
    included_in_trial: bool
    has_access: bool


class SubscriptionSummary(CamelModel):
    plan: str
    status: str


class ToolListing(CamelModel):
    """Catalogue view for one user."""

    tools: list[ToolSummary]
    subscription: SubscriptionSummary
    trial_days_remaining: Optional[int] = None
