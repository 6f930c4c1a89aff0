"""Exception handlers mapping engine errors onto HTTP responses."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from contentengine.models.errors import ErrorCode, RateLimitedError, RejectionError

logger = logging.getLogger(__name__)


async def rejection_exception_handler(request: Request, exc: RejectionError) -> JSONResponse:
    """
    Turn a hard rejection into ``{message, error, ...}`` with its HTTP status.

    Args:
        request: The HTTP request that was rejected
        exc: The rejection raised by the dispatcher

    Returns:
        JSONResponse with the rejection body
    """
    logger.info(f"⛔ [API] {request.method} {request.url.path} rejected: {exc.error_code.value}")
    headers = None
    if isinstance(exc, RateLimitedError):
        headers = {"Retry-After": str(max(1, int(round(exc.retry_after_seconds))))}
    return JSONResponse(status_code=exc.http_status, content=exc.to_body(), headers=headers)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log an unhandled exception and return a generic 500."""
    error_id = id(exc)
    logger.error(
        f"❌ [API] Unhandled exception [{error_id}] in {request.method} {request.url.path}: {str(exc)}",
        exc_info=True,
    )
    return JSONResponse(
        status_code=500,
        content={
            "message": "Internal server error",
            "error": ErrorCode.INTERNAL_ERROR.value,
            "errorId": error_id,
        },
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers with the FastAPI application."""
    app.add_exception_handler(RejectionError, rejection_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
