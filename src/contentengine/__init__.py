"""Content engine - tool generation dispatch with graceful degradation."""

from contentengine.interfaces import GenerationClient, NotificationService, UsageStore, UserStore
from contentengine.models.config import EngineConfig, LimiterConfig
from contentengine.models.errors import (
    ErrorCode,
    RateLimitedError,
    RejectionError,
    ToolNotAvailableError,
    TrialExpiredError,
    UpstreamError,
    is_retryable,
)
from contentengine.models.requests import GenerationOptions, GenerationRequest
from contentengine.models.responses import GenerationOutcome, OutcomeStatus, ToolResponse
from contentengine.models.usage import PlanTier, SubscriptionStatus, UsageRecord, UserRecord
from contentengine.services.dispatch_service import ToolDispatcher
from contentengine.services.entitlement_service import EntitlementGate
from contentengine.services.generation_client import OpenAIGenerationClient
from contentengine.services.limiter_service import SlidingWindowLimiter
from contentengine.services.memory_store import InMemoryUsageStore, InMemoryUserStore
from contentengine.services.notification_service import InMemoryNotificationService, NotificationEmitter
from contentengine.services.output_validator import parse_model_output
from contentengine.services.usage_service import UsageRecorder
from contentengine.tools.base import FALLBACK_MARKER, is_fallback_payload
from contentengine.tools.registry import ToolRegistry, default_registry
from contentengine.utils.schema_utils import make_schema_strict

__version__ = "0.1.0"

__all__ = [
    # Interfaces
    "GenerationClient",
    "NotificationService",
    "UsageStore",
    "UserStore",
    # Configuration
    "EngineConfig",
    "LimiterConfig",
    # Errors
    "ErrorCode",
    "RateLimitedError",
    "RejectionError",
    "ToolNotAvailableError",
    "TrialExpiredError",
    "UpstreamError",
    "is_retryable",
    # Request/Response types
    "GenerationOptions",
    "GenerationRequest",
    "GenerationOutcome",
    "OutcomeStatus",
    "ToolResponse",
    "PlanTier",
    "SubscriptionStatus",
    "UsageRecord",
    "UserRecord",
    # Services
    "ToolDispatcher",
    "EntitlementGate",
    "OpenAIGenerationClient",
    "SlidingWindowLimiter",
    "InMemoryUsageStore",
    "InMemoryUserStore",
    "InMemoryNotificationService",
    "NotificationEmitter",
    "UsageRecorder",
    "parse_model_output",
    # Tools
    "ToolRegistry",
    "default_registry",
    "FALLBACK_MARKER",
    "is_fallback_payload",
    # Utilities
    "make_schema_strict",
]
