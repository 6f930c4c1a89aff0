"""Contract tests for outcome, response and rejection shapes."""

import pytest
from pydantic import ValidationError

from contentengine.models.errors import (
    AuthenticationRequiredError,
    ErrorCode,
    InvalidInputError,
    RateLimitedError,
    UnknownToolError,
    UserNotFoundError,
)
from contentengine.models.responses import GenerationOutcome, OutcomeStatus, RejectionBody, ToolResponse, UsageSummary


def test_success_outcome_shape():
    """A success outcome carries a payload and no error kind."""
    outcome = GenerationOutcome(status=OutcomeStatus.SUCCESS, payload={"title": "x"}, processing_time_ms=12)

    assert outcome.ai_generated is True
    assert outcome.has_payload is True
    assert outcome.patched_sections == []


def test_degraded_outcome_shape():
    """A degraded outcome carries a payload and the reason it degraded."""
    outcome = GenerationOutcome(
        status=OutcomeStatus.DEGRADED,
        payload={"title": "x", "_aiGenerated": False},
        processing_time_ms=5,
        error_kind=ErrorCode.UPSTREAM_TRANSIENT,
    )

    assert outcome.ai_generated is False
    assert outcome.has_payload is True


@pytest.mark.parametrize(
    "kwargs",
    [
        {"status": OutcomeStatus.SUCCESS, "payload": None},
        {"status": OutcomeStatus.SUCCESS, "payload": {}},
        {"status": OutcomeStatus.SUCCESS, "payload": {"a": 1}, "error_kind": ErrorCode.MALFORMED_OUTPUT},
        {"status": OutcomeStatus.DEGRADED, "payload": {"a": 1}},
        {"status": OutcomeStatus.DEGRADED, "payload": None, "error_kind": ErrorCode.MALFORMED_OUTPUT},
        {"status": OutcomeStatus.ERROR, "payload": {"a": 1}, "error_kind": ErrorCode.CANCELLED},
        {"status": OutcomeStatus.ERROR, "payload": None},
    ],
)
def test_outcome_validation_rejects_inconsistent_state(kwargs):
    """Status, payload and error kind must agree."""
    with pytest.raises(ValidationError):
        GenerationOutcome(processing_time_ms=1, **kwargs)


def test_tool_response_serializes_camel_case():
    """Tool responses go out with camelCase keys."""
    response = ToolResponse(
        output={"overallScore": 80},
        processing_time_ms=120,
        ai_generated=True,
        usage=UsageSummary(total_generations=4, monthly_generations=2),
    )

    assert response.model_dump(by_alias=True) == {
        "success": True,
        "output": {"overallScore": 80},
        "processingTimeMs": 120,
        "aiGenerated": True,
        "usage": {"totalGenerations": 4, "monthlyGenerations": 2},
    }


def test_tool_response_requires_output():
    """A response without a payload is rejected."""
    with pytest.raises(ValidationError):
        ToolResponse(output={}, processing_time_ms=1, ai_generated=False)


@pytest.mark.parametrize(
    "error,status,code",
    [
        (RateLimitedError("identity", 12.5), 429, ErrorCode.RATE_LIMITED),
        (UnknownToolError("nope"), 404, ErrorCode.UNKNOWN_TOOL),
        (UserNotFoundError("u-1"), 404, ErrorCode.USER_NOT_FOUND),
        (AuthenticationRequiredError(), 401, ErrorCode.AUTHENTICATION_REQUIRED),
        (InvalidInputError("landing-page", ["url"]), 400, ErrorCode.INVALID_INPUT),
    ],
)
def test_rejection_body_shape(error, status, code):
    """Every rejection renders {message, error, ...} with its HTTP status."""
    body = RejectionBody.model_validate(error.to_body())

    assert error.http_status == status
    assert body.error == code
    assert body.message == error.message


def test_rejection_details_are_merged():
    """Rejection-specific details appear next to message and error."""
    assert RateLimitedError("global", 3.0).to_body() == {
        "message": "AI generation service is busy. Please try again in a minute.",
        "error": "RATE_LIMITED",
        "scope": "global",
        "retryAfterSeconds": 3.0,
    }
    assert InvalidInputError("landing-page", ["url"]).to_body()["missingFields"] == ["url"]
