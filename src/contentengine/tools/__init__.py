"""Per-tool input/output models, request builders and fallback synthesizers."""

from contentengine.tools.base import (
    FALLBACK_MARKER,
    FALLBACK_WARNING_KEY,
    ToolInput,
    ToolOutput,
    ToolSpec,
    is_fallback_payload,
    strip_fallback_marker,
)

__all__ = [
    "FALLBACK_MARKER",
    "FALLBACK_WARNING_KEY",
    "ToolInput",
    "ToolOutput",
    "ToolSpec",
    "is_fallback_payload",
    "strip_fallback_marker",
]
