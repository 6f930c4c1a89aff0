"""Models package for the content engine."""

from contentengine.models.config import EngineConfig, LimiterConfig
from contentengine.models.errors import (
    EngineError,
    ErrorCode,
    RejectionError,
    UpstreamError,
    is_retryable,
)
from contentengine.models.notifications import Notification
from contentengine.models.requests import (
    GenerationInstruction,
    GenerationOptions,
    GenerationRequest,
    ResponseFormat,
    TextModel,
)
from contentengine.models.responses import GenerationOutcome, OutcomeStatus, ToolResponse, UsageSummary
from contentengine.models.tools import MissingSectionPolicy, ToolDefinition
from contentengine.models.usage import (
    PlanTier,
    Subscription,
    SubscriptionStatus,
    UsageRecord,
    UserRecord,
    UserRole,
    UserUsageCounters,
)

__all__ = [
    "EngineConfig",
    "LimiterConfig",
    "EngineError",
    "ErrorCode",
    "RejectionError",
    "UpstreamError",
    "is_retryable",
    "Notification",
    "GenerationInstruction",
    "GenerationOptions",
    "GenerationRequest",
    "ResponseFormat",
    "TextModel",
    "GenerationOutcome",
    "OutcomeStatus",
    "ToolResponse",
    "UsageSummary",
    "MissingSectionPolicy",
    "ToolDefinition",
    "PlanTier",
    "Subscription",
    "SubscriptionStatus",
    "UsageRecord",
    "UserRecord",
    "UserRole",
    "UserUsageCounters",
]
