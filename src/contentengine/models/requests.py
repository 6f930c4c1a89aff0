"""Request models for the content engine."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class TextModel(str, Enum):
    """Chat models the generation client may target."""

    GPT_4O = "gpt-4o"
    GPT_4O_MINI = "gpt-4o-mini"
    GPT_4_TURBO = "gpt-4-turbo"
    GPT_4 = "gpt-4"


class ResponseFormat(str, Enum):
    """How the model is asked to shape its reply."""

    JSON_SCHEMA = "json_schema"  # Structured Outputs, strict schema
    JSON_OBJECT = "json_object"  # JSON mode, schema only in the instruction text
    TEXT = "text"  # Plain completion for models without JSON mode


class GenerationOptions(BaseModel):
    """Per-call tuning passed to the generation client."""

    model: str = Field(TextModel.GPT_4O.value, min_length=1, description="Model identifier")
    max_tokens: int = Field(3000, ge=1, le=16000, description="Upper bound on output tokens")
    temperature: float = Field(0.7, ge=0.0, le=2.0, description="Sampling temperature (0-2)")
    timeout_seconds: float = Field(45.0, gt=0, description="Hard timeout for the upstream call")
    response_format: ResponseFormat = Field(ResponseFormat.JSON_SCHEMA, description="Reply shaping mode")


class GenerationInstruction(BaseModel):
    """Model-ready instruction produced by a tool's request builder."""

    tool_id: str = Field(..., description="Tool that produced this instruction")
    system_prompt: str = Field(..., min_length=1, description="Role and output rules for the model")
    user_prompt: str = Field(..., min_length=1, description="Task text with the caller's values echoed back")
    schema_name: str = Field(..., min_length=1, max_length=64, description="Name for the structured output schema")
    output_schema: dict[str, Any] = Field(..., description="Strict JSON schema the reply must match")


class GenerationRequest(BaseModel):
    """One tool invocation as received at the API boundary."""

    tool_id: str = Field(..., min_length=1, description="Tool identifier, e.g. 'seo-audit'")
    user_id: Optional[str] = Field(None, description="Authenticated user id, if any")
    client_ip: Optional[str] = Field(None, description="Caller IP, used as limiter key when unauthenticated")
    input: dict[str, Any] = Field(default_factory=dict, description="Free-form tool input")
    requested_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the call was received (UTC)",
    )

    @property
    def identity_key(self) -> str:
        """Key for the identity limiter: user id, else caller IP."""
        return self.user_id or self.client_ip or "anonymous"
