"""Parse model replies into payload objects.

Strict parse first, then the first balanced top-level ``{...}`` in the text.
Anything else is a degrade signal. No field-level coercion happens here.
"""

import json
import logging
from typing import Any, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class ValidationResult(BaseModel):
    """Outcome of parsing one reply."""

    payload: Optional[dict[str, Any]] = Field(None, description="Parsed object, None on degrade")
    repaired: bool = Field(False, description="True when the object was extracted from surrounding text")
    reason: Optional[str] = Field(None, description="Why the reply could not be used")

    @property
    def degrade(self) -> bool:
        return self.payload is None


def extract_balanced_object(text: str) -> Optional[str]:
    """
    Find the first balanced top-level ``{...}`` substring.

    Braces inside JSON string literals (including escaped quotes) are ignored.

    Args:
        text: Raw reply text

    Returns:
        The substring, or None if no balanced object exists
    """
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(text)):
            char = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start : index + 1]
        # Unbalanced from this brace; try the next one
        start = text.find("{", start + 1)
    return None


def parse_model_output(raw_text: str | None) -> ValidationResult:
    """
    Turn a raw reply into a payload or a degrade signal.

    Args:
        raw_text: Text returned by the generation client

    Returns:
        ValidationResult with ``payload`` set on success
    """
    if not raw_text or not raw_text.strip():
        return ValidationResult(reason="empty response")

    try:
        parsed = json.loads(raw_text)
        repaired = False
    except json.JSONDecodeError:
        candidate = extract_balanced_object(raw_text)
        if candidate is None:
            logger.warning("⚠️ [OutputValidator] No JSON object found in model output")
            return ValidationResult(reason="no JSON object found")
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError as e:
            logger.warning(f"⚠️ [OutputValidator] Extracted object is not valid JSON: {e}")
            return ValidationResult(reason=f"invalid JSON: {e.msg}")
        repaired = True
        logger.info("🔧 [OutputValidator] Recovered JSON object from surrounding text")

    if not isinstance(parsed, dict):
        return ValidationResult(reason=f"expected a JSON object, got {type(parsed).__name__}")
    if not parsed:
        return ValidationResult(reason="empty JSON object")
    return ValidationResult(payload=parsed, repaired=repaired)


def missing_sections(payload: dict[str, Any], expected: list[str]) -> list[str]:
    """Expected top-level sections that are absent or null in ``payload``."""
    return [section for section in expected if payload.get(section) is None]
