"""Retry helper with exponential backoff for collaborator I/O.

The generation client does not use this: each dispatch makes exactly one
upstream attempt. Storage writes in the usage recorder do.
"""

import asyncio
from typing import Any, Awaitable, Callable, TypeVar

from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from contentengine.models.errors import ErrorCode, RetryableError, is_retryable

T = TypeVar("T")

# 3 attempts at 1s, 2s intervals
DEFAULT_RETRY_CONFIG = {
    "stop": stop_after_attempt(3),
    "wait": wait_exponential(multiplier=1, min=1, max=4),
    "reraise": True,
}

# Storage writes sit on the response path, so waits stay short
STORAGE_RETRY_CONFIG = {
    "stop": stop_after_attempt(3),
    "wait": wait_exponential(multiplier=0.05, min=0.05, max=0.2),
    "reraise": True,
}

# Per-attempt ceiling for storage calls
STORAGE_TIMEOUT_SECONDS = 2.0


async def retry_with_backoff(
    func: Callable[..., Awaitable[T]],
    *args: Any,
    retry_config: dict[str, Any] | None = None,
    timeout_seconds: float | None = None,
    **kwargs: Any,
) -> T:
    """
    Execute an async function with retry logic and exponential backoff.

    Args:
        func: Async function to execute
        *args: Positional arguments for func
        retry_config: Optional tenacity configuration. If None, uses default.
        timeout_seconds: Optional timeout per attempt
        **kwargs: Keyword arguments for func

    Returns:
        Result from func

    Raises:
        RetryableError: If all attempts fail or time out
        Exception: Non-retryable exceptions are re-raised immediately
    """
    config = dict(retry_config or DEFAULT_RETRY_CONFIG)
    config.setdefault("retry", retry_if_exception_type(RetryableError))

    async def _execute_with_timeout() -> T:
        if timeout_seconds is None:
            return await func(*args, **kwargs)
        try:
            return await asyncio.wait_for(func(*args, **kwargs), timeout=timeout_seconds)
        except asyncio.TimeoutError as e:
            raise RetryableError(
                ErrorCode.STORAGE_UNAVAILABLE,
                f"Operation timed out after {timeout_seconds}s",
                original_exception=e,
            )

    async for attempt in AsyncRetrying(**config):
        with attempt:
            return await _execute_with_timeout()


def should_retry(error_code: ErrorCode) -> bool:
    """Check if an error code indicates a retryable error."""
    return is_retryable(error_code)


__all__ = [
    "DEFAULT_RETRY_CONFIG",
    "STORAGE_RETRY_CONFIG",
    "STORAGE_TIMEOUT_SECONDS",
    "RetryableError",
    "retry_with_backoff",
    "should_retry",
]
