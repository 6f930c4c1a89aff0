"""Error codes and exception types for the content engine."""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Failure category codes for dispatch operations."""

    # Rejections (surfaced to the caller before any generation attempt)
    RATE_LIMITED = "RATE_LIMITED"
    NOT_ENTITLED = "NOT_ENTITLED"
    TRIAL_EXPIRED = "TRIAL_EXPIRED"
    UNKNOWN_TOOL = "UNKNOWN_TOOL"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    AUTHENTICATION_REQUIRED = "AUTHENTICATION_REQUIRED"
    INVALID_INPUT = "INVALID_INPUT"

    # Generation path (recovered locally via fallback content)
    UPSTREAM_UNAUTHORIZED = "UPSTREAM_UNAUTHORIZED"
    UPSTREAM_QUOTA_EXCEEDED = "UPSTREAM_QUOTA_EXCEEDED"
    UPSTREAM_TRANSIENT = "UPSTREAM_TRANSIENT"
    UPSTREAM_UNKNOWN = "UPSTREAM_UNKNOWN"
    MALFORMED_OUTPUT = "MALFORMED_OUTPUT"

    # Bookkeeping (logged, never visible to the caller)
    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"
    NOTIFICATION_UNAVAILABLE = "NOTIFICATION_UNAVAILABLE"

    CANCELLED = "CANCELLED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# Set of retryable error codes
RETRYABLE_ERRORS = {
    ErrorCode.RATE_LIMITED,
    ErrorCode.UPSTREAM_QUOTA_EXCEEDED,
    ErrorCode.UPSTREAM_TRANSIENT,
    ErrorCode.STORAGE_UNAVAILABLE,
}


def is_retryable(code: ErrorCode) -> bool:
    """Check if an error code indicates a retryable error."""
    return code in RETRYABLE_ERRORS


class EngineError(Exception):
    """Base exception for all content engine failures."""

    def __init__(self, error_code: ErrorCode, message: str, original_exception: Exception | None = None):
        super().__init__(message)
        self.error_code = error_code
        self.message = message
        self.original_exception = original_exception


class RetryableError(EngineError):
    """Failure that a retry helper may attempt again."""


class StorageUnavailableError(RetryableError):
    """Usage or user store could not be reached."""

    def __init__(self, message: str, original_exception: Exception | None = None):
        super().__init__(ErrorCode.STORAGE_UNAVAILABLE, message, original_exception=original_exception)


class NotificationUnavailableError(EngineError):
    """Notification collaborator failed to regenerate notifications."""

    def __init__(self, message: str, original_exception: Exception | None = None):
        super().__init__(ErrorCode.NOTIFICATION_UNAVAILABLE, message, original_exception=original_exception)


class UpstreamError(EngineError):
    """Classified failure from the generative model endpoint.

    ``error_code`` is one of ``UPSTREAM_UNAUTHORIZED``, ``UPSTREAM_QUOTA_EXCEEDED``,
    ``UPSTREAM_TRANSIENT`` or ``UPSTREAM_UNKNOWN``.
    """

    @property
    def retryable(self) -> bool:
        return is_retryable(self.error_code)


class RejectionError(EngineError):
    """Hard refusal surfaced to the caller as a non-2xx response."""

    http_status: int = 400

    def details(self) -> dict[str, Any]:
        """Extra fields merged into the rejection body."""
        return {}

    def to_body(self) -> dict[str, Any]:
        """Build the ``{message, error, ...}`` body for the HTTP boundary."""
        body: dict[str, Any] = {"message": self.message, "error": self.error_code.value}
        body.update(self.details())
        return body


class RateLimitedError(RejectionError):
    """Identity or global throughput limit exhausted."""

    http_status = 429

    def __init__(self, scope: str, retry_after_seconds: float):
        if scope == "global":
            message = "AI generation service is busy. Please try again in a minute."
        else:
            message = "Too many AI tool requests. Please wait a minute and try again."
        super().__init__(ErrorCode.RATE_LIMITED, message)
        self.scope = scope
        self.retry_after_seconds = retry_after_seconds

    def details(self) -> dict[str, Any]:
        return {"scope": self.scope, "retryAfterSeconds": self.retry_after_seconds}


class ToolNotAvailableError(RejectionError):
    """Requested tool is not part of the user's plan."""

    http_status = 403

    def __init__(self, tool_id: str, available_tools: list[str], required_plan: str | None):
        super().__init__(ErrorCode.NOT_ENTITLED, "Tool not available in your current plan")
        self.tool_id = tool_id
        self.available_tools = available_tools
        self.required_plan = required_plan

    def details(self) -> dict[str, Any]:
        return {"availableTools": self.available_tools, "requiredPlan": self.required_plan}


class TrialExpiredError(RejectionError):
    """Trial window elapsed with no paid plan active."""

    http_status = 403

    def __init__(self):
        super().__init__(
            ErrorCode.TRIAL_EXPIRED,
            "Free trial has expired. Please upgrade to continue using AI tools.",
        )

    def details(self) -> dict[str, Any]:
        return {"trialExpired": True}


class UnknownToolError(RejectionError):
    """No tool is registered under the requested identifier."""

    http_status = 404

    def __init__(self, tool_id: str):
        super().__init__(ErrorCode.UNKNOWN_TOOL, f"Tool not found: {tool_id}")
        self.tool_id = tool_id


class UserNotFoundError(RejectionError):
    """User id does not resolve to a stored user."""

    http_status = 404

    def __init__(self, user_id: str):
        super().__init__(ErrorCode.USER_NOT_FOUND, "User not found")
        self.user_id = user_id


class AuthenticationRequiredError(RejectionError):
    """Call carried no user identity."""

    http_status = 401

    def __init__(self):
        super().__init__(ErrorCode.AUTHENTICATION_REQUIRED, "Authentication required")


class InvalidInputError(RejectionError):
    """Required tool input is missing."""

    http_status = 400

    def __init__(self, tool_id: str, missing_fields: list[str]):
        super().__init__(
            ErrorCode.INVALID_INPUT,
            f"Missing required input for {tool_id}: {', '.join(missing_fields)}",
        )
        self.tool_id = tool_id
        self.missing_fields = missing_fields

    def details(self) -> dict[str, Any]:
        return {"missingFields": self.missing_fields}
