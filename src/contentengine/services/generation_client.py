"""Generation client for the OpenAI chat completions endpoint.

Makes exactly one upstream call per invocation, under an explicit timeout,
and maps every failure onto a typed ``UpstreamError`` category. Retrying is
left to higher layers.
"""

import asyncio
import logging
import time
from typing import Any

import httpx
from openai import (
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    AsyncOpenAI,
    AuthenticationError,
    PermissionDeniedError,
    RateLimitError,
)

from contentengine.models.errors import ErrorCode, UpstreamError
from contentengine.models.requests import GenerationInstruction, GenerationOptions, ResponseFormat

logger = logging.getLogger(__name__)

PLACEHOLDER_KEYS = {"your-openai-api-key-here", "sk-your-key-here", "changeme"}
MIN_KEY_LENGTH = 20


def credential_problem(api_key: str | None) -> str | None:
    """
    Describe what is obviously wrong with a credential, if anything.

    Args:
        api_key: Candidate bearer credential

    Returns:
        Reason string, or None when the key looks usable
    """
    if api_key is None or not api_key.strip():
        return "OpenAI API key is missing"
    key = api_key.strip()
    if key.lower() in PLACEHOLDER_KEYS:
        return "OpenAI API key is a placeholder value"
    if len(key) < MIN_KEY_LENGTH or any(ch.isspace() for ch in key):
        return "OpenAI API key is malformed"
    return None


def classify_exception(exc: BaseException) -> ErrorCode:
    """Map an SDK/transport exception to an upstream failure category."""
    if isinstance(exc, (AuthenticationError, PermissionDeniedError)):
        return ErrorCode.UPSTREAM_UNAUTHORIZED
    if isinstance(exc, RateLimitError):
        return ErrorCode.UPSTREAM_QUOTA_EXCEEDED
    if isinstance(exc, (APITimeoutError, APIConnectionError, asyncio.TimeoutError, httpx.TimeoutException, httpx.TransportError)):
        return ErrorCode.UPSTREAM_TRANSIENT
    if isinstance(exc, APIStatusError):
        status_code = exc.status_code
        if status_code in (401, 403):
            return ErrorCode.UPSTREAM_UNAUTHORIZED
        if status_code == 429:
            return ErrorCode.UPSTREAM_QUOTA_EXCEEDED
        if status_code >= 500:
            return ErrorCode.UPSTREAM_TRANSIENT
    return ErrorCode.UPSTREAM_UNKNOWN


class OpenAIGenerationClient:
    """Single-attempt chat completion client with typed failures."""

    def __init__(self, api_key: str | None = None, client: Any | None = None):
        """
        Initialize generation client.

        Args:
            api_key: OpenAI API key. Unlike the SDK default, no environment
                lookup happens here; pass ``EngineConfig.openai_api_key``.
            client: Optional pre-built ``AsyncOpenAI`` (tests)
        """
        self._api_key = api_key.strip() if api_key else api_key
        self._credential_problem = credential_problem(api_key)
        self._client = client
        if self._credential_problem:
            logger.warning(f"⚠️ [GenerationClient] {self._credential_problem}; all calls will degrade")

    @property
    def is_configured(self) -> bool:
        return self._credential_problem is None

    def _get_client(self, options: GenerationOptions) -> Any:
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self._api_key,
                max_retries=0,
                timeout=httpx.Timeout(options.timeout_seconds, connect=10.0),
            )
        return self._client

    def _build_kwargs(
        self,
        instruction: GenerationInstruction,
        schema_hint: dict[str, Any],
        options: GenerationOptions,
    ) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "model": options.model,
            "messages": [
                {"role": "system", "content": instruction.system_prompt},
                {"role": "user", "content": instruction.user_prompt},
            ],
            "max_tokens": options.max_tokens,
            "temperature": options.temperature,
            "timeout": options.timeout_seconds,
        }
        if options.response_format is ResponseFormat.JSON_SCHEMA:
            kwargs["response_format"] = {
                "type": "json_schema",
                "json_schema": {
                    "name": instruction.schema_name,
                    "strict": True,
                    "schema": schema_hint,
                },
            }
            logger.info(f"📋 [GenerationClient] Using structured outputs with schema: {instruction.schema_name}")
        elif options.response_format is ResponseFormat.JSON_OBJECT:
            kwargs["response_format"] = {"type": "json_object"}
        return kwargs

    async def generate(
        self,
        instruction: GenerationInstruction,
        schema_hint: dict[str, Any],
        options: GenerationOptions,
    ) -> str:
        """
        Run one chat completion and return the reply text.

        Args:
            instruction: Prompts built by the tool's request builder
            schema_hint: Strict JSON schema for the reply
            options: Model, token budget, temperature and timeout

        Returns:
            Raw reply text, "" when the model returned no content

        Raises:
            UpstreamError: Classified failure (never raised for malformed content)
        """
        if self._credential_problem:
            raise UpstreamError(ErrorCode.UPSTREAM_UNAUTHORIZED, self._credential_problem)

        kwargs = self._build_kwargs(instruction, schema_hint, options)
        client = self._get_client(options)
        start_time = time.time()
        try:
            response = await asyncio.wait_for(
                client.chat.completions.create(**kwargs),
                timeout=options.timeout_seconds,
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            code = classify_exception(e)
            if code is ErrorCode.UPSTREAM_QUOTA_EXCEEDED and "insufficient_quota" in str(e):
                message = f"OpenAI API quota exceeded: {str(e)}"
            elif isinstance(e, asyncio.TimeoutError):
                message = f"OpenAI API request timed out after {options.timeout_seconds}s"
            else:
                message = f"OpenAI API error ({code.value}): {str(e)}"
            logger.warning(f"⚠️ [GenerationClient] {message}")
            raise UpstreamError(code, message, original_exception=e) from e

        duration_ms = int((time.time() - start_time) * 1000)
        choices = getattr(response, "choices", None) or []
        if not choices:
            logger.warning("⚠️ [GenerationClient] Response contained no choices")
            return ""
        message = choices[0].message
        refusal = getattr(message, "refusal", None)
        if refusal:
            logger.warning(f"🚫 [GenerationClient] Model refused generation: {refusal}")
            return ""
        content = message.content or ""
        usage = getattr(response, "usage", None)
        total_tokens = getattr(usage, "total_tokens", None) if usage else None
        logger.info(
            f"✅ [GenerationClient] {instruction.tool_id} completed in {duration_ms}ms "
            f"({len(content)} chars, tokens={total_tokens})"
        )
        return content
