"""Static tool catalogue models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class MissingSectionPolicy(str, Enum):
    """What the dispatcher does when a model payload lacks top-level sections."""

    PATCH = "patch"  # Fill only the missing sections from fallback content
    DISCARD = "discard"  # Drop the model payload and degrade entirely


class ToolDefinition(BaseModel):
    """Immutable description of one AI tool."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., pattern=r"^[a-z0-9-]+$", description="Tool identifier used in URLs")
    name: str = Field(..., description="Display name")
    description: str = Field("", description="One-line description for catalogue listings")
    category: str = Field(..., description="Catalogue category")
    included_in_trial: bool = Field(False, description="Whether free-trial users may use the tool")
