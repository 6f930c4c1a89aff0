"""Tests for the OpenAI generation client."""

import asyncio

import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from openai import (
    APIConnectionError,
    APITimeoutError,
    AuthenticationError,
    BadRequestError,
    InternalServerError,
    PermissionDeniedError,
    RateLimitError,
)

from contentengine.models.errors import ErrorCode, UpstreamError
from contentengine.models.requests import GenerationOptions, ResponseFormat
from contentengine.services.generation_client import (
    OpenAIGenerationClient,
    classify_exception,
    credential_problem,
)

VALID_KEY = "sk-test-0123456789abcdefghijklmnop"
OPENAI_URL = "https://api.openai.com/v1/chat/completions"


def _request() -> httpx.Request:
    return httpx.Request("POST", OPENAI_URL)


def _response(status_code: int) -> httpx.Response:
    return httpx.Response(status_code, request=_request())


@pytest.fixture
def instruction(registry):
    return registry.build_request("seo-audit", {"url": "https://example.com"})


@pytest.fixture
def mock_completion():
    """Create a mock chat completion response."""
    response = MagicMock()
    message = MagicMock()
    message.content = '{"overallScore": 80}'
    message.refusal = None  # Explicitly set to None for structured outputs check
    choice = MagicMock()
    choice.message = message
    response.choices = [choice]
    response.usage = MagicMock()
    response.usage.total_tokens = 321
    return response


@pytest.fixture
def sdk_client(mock_completion):
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=mock_completion)
    return client


@pytest.mark.asyncio
async def test_generate_returns_reply_text(sdk_client, instruction):
    """A completed call returns the message content verbatim."""
    client = OpenAIGenerationClient(api_key=VALID_KEY, client=sdk_client)

    text = await client.generate(instruction, instruction.output_schema, GenerationOptions())

    assert text == '{"overallScore": 80}'
    sdk_client.chat.completions.create.assert_awaited_once()


@pytest.mark.asyncio
async def test_generate_sends_strict_schema_and_options(sdk_client, instruction):
    """Prompts, tuning options and the strict schema reach the SDK call."""
    client = OpenAIGenerationClient(api_key=VALID_KEY, client=sdk_client)
    options = GenerationOptions(model="gpt-4o-mini", max_tokens=1200, temperature=0.2, timeout_seconds=30)

    await client.generate(instruction, instruction.output_schema, options)

    kwargs = sdk_client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "gpt-4o-mini"
    assert kwargs["max_tokens"] == 1200
    assert kwargs["temperature"] == 0.2
    assert kwargs["timeout"] == 30
    assert kwargs["messages"] == [
        {"role": "system", "content": instruction.system_prompt},
        {"role": "user", "content": instruction.user_prompt},
    ]
    json_schema = kwargs["response_format"]["json_schema"]
    assert kwargs["response_format"]["type"] == "json_schema"
    assert json_schema["name"] == "seo_audit_output"
    assert json_schema["strict"] is True
    assert json_schema["schema"] == instruction.output_schema


@pytest.mark.asyncio
async def test_generate_json_object_and_text_modes(sdk_client, instruction):
    """JSON mode sends json_object; text mode sends no response_format."""
    client = OpenAIGenerationClient(api_key=VALID_KEY, client=sdk_client)

    await client.generate(instruction, {}, GenerationOptions(response_format=ResponseFormat.JSON_OBJECT))
    assert sdk_client.chat.completions.create.call_args.kwargs["response_format"] == {"type": "json_object"}

    await client.generate(instruction, {}, GenerationOptions(response_format=ResponseFormat.TEXT))
    assert "response_format" not in sdk_client.chat.completions.create.call_args.kwargs


@pytest.mark.asyncio
async def test_refusal_and_empty_choices_return_empty_text(sdk_client, mock_completion, instruction):
    """Refusals and empty choice lists come back as empty text for the validator to degrade."""
    client = OpenAIGenerationClient(api_key=VALID_KEY, client=sdk_client)

    mock_completion.choices[0].message.refusal = "I can't help with that."
    assert await client.generate(instruction, {}, GenerationOptions()) == ""

    mock_completion.choices = []
    assert await client.generate(instruction, {}, GenerationOptions()) == ""


@pytest.mark.asyncio
@pytest.mark.parametrize("api_key", [None, "", "   ", "your-openai-api-key-here", "sk-short", "sk-has space 0123456789abc"])
async def test_bad_credential_fails_fast_without_network(sdk_client, instruction, api_key):
    """A missing, placeholder or malformed key raises UNAUTHORIZED without calling the SDK."""
    client = OpenAIGenerationClient(api_key=api_key, client=sdk_client)

    assert client.is_configured is False
    with pytest.raises(UpstreamError) as exc_info:
        await client.generate(instruction, {}, GenerationOptions())

    assert exc_info.value.error_code == ErrorCode.UPSTREAM_UNAUTHORIZED
    sdk_client.chat.completions.create.assert_not_called()


def test_credential_problem():
    """A long, well-formed key passes the credential heuristics."""
    assert credential_problem(VALID_KEY) is None
    assert credential_problem(None) == "OpenAI API key is missing"
    assert credential_problem("changeme") == "OpenAI API key is a placeholder value"
    assert credential_problem("sk-short") == "OpenAI API key is malformed"


@pytest.mark.parametrize(
    "exc,expected",
    [
        (AuthenticationError("bad key", response=_response(401), body=None), ErrorCode.UPSTREAM_UNAUTHORIZED),
        (PermissionDeniedError("forbidden", response=_response(403), body=None), ErrorCode.UPSTREAM_UNAUTHORIZED),
        (RateLimitError("slow down", response=_response(429), body=None), ErrorCode.UPSTREAM_QUOTA_EXCEEDED),
        (InternalServerError("boom", response=_response(500), body=None), ErrorCode.UPSTREAM_TRANSIENT),
        (APITimeoutError(request=_request()), ErrorCode.UPSTREAM_TRANSIENT),
        (APIConnectionError(request=_request()), ErrorCode.UPSTREAM_TRANSIENT),
        (asyncio.TimeoutError(), ErrorCode.UPSTREAM_TRANSIENT),
        (httpx.ConnectError("refused"), ErrorCode.UPSTREAM_TRANSIENT),
        (BadRequestError("bad request", response=_response(400), body=None), ErrorCode.UPSTREAM_UNKNOWN),
        (ValueError("weird"), ErrorCode.UPSTREAM_UNKNOWN),
    ],
)
def test_classify_exception(exc, expected):
    """SDK and transport failures map onto the upstream categories."""
    assert classify_exception(exc) == expected


@pytest.mark.asyncio
async def test_generate_wraps_sdk_errors(sdk_client, instruction):
    """SDK exceptions surface as classified UpstreamError with the cause attached."""
    error = RateLimitError("insufficient_quota: You exceeded your current quota", response=_response(429), body=None)
    sdk_client.chat.completions.create = AsyncMock(side_effect=error)
    client = OpenAIGenerationClient(api_key=VALID_KEY, client=sdk_client)

    with pytest.raises(UpstreamError) as exc_info:
        await client.generate(instruction, {}, GenerationOptions())

    assert exc_info.value.error_code == ErrorCode.UPSTREAM_QUOTA_EXCEEDED
    assert exc_info.value.retryable is True
    assert "quota exceeded" in exc_info.value.message
    assert exc_info.value.original_exception is error


@pytest.mark.asyncio
async def test_generate_times_out(sdk_client, instruction):
    """A call exceeding the timeout is abandoned as UPSTREAM_TRANSIENT."""

    async def slow_create(**kwargs):
        await asyncio.sleep(5)

    sdk_client.chat.completions.create = slow_create
    client = OpenAIGenerationClient(api_key=VALID_KEY, client=sdk_client)

    with pytest.raises(UpstreamError) as exc_info:
        await client.generate(instruction, {}, GenerationOptions(timeout_seconds=0.05))

    assert exc_info.value.error_code == ErrorCode.UPSTREAM_TRANSIENT
    assert "timed out" in exc_info.value.message


@pytest.mark.asyncio
async def test_sdk_client_built_lazily_without_retries(mock_completion, instruction):
    """The SDK client is created on first use with SDK-level retries disabled."""
    with patch("contentengine.services.generation_client.AsyncOpenAI") as mock_openai:
        sdk_client = MagicMock()
        sdk_client.chat.completions.create = AsyncMock(return_value=mock_completion)
        mock_openai.return_value = sdk_client
        client = OpenAIGenerationClient(api_key=VALID_KEY)
        mock_openai.assert_not_called()

        await client.generate(instruction, {}, GenerationOptions())
        await client.generate(instruction, {}, GenerationOptions())

    mock_openai.assert_called_once()
    assert mock_openai.call_args.kwargs["api_key"] == VALID_KEY
    assert mock_openai.call_args.kwargs["max_retries"] == 0
