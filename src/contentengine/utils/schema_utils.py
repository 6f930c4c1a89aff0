"""Schema helpers for tool output contracts.

Tool output models are pydantic models. The JSON schema pydantic emits needs a
few changes before the model endpoint accepts it in strict structured-output mode:
- every object needs ``additionalProperties: false``;
- every property must be listed in ``required``;
- ``$ref`` may not carry sibling keywords;
- ``default``, ``title`` and range or length constraint keywords are dropped.

The same rules apply inside ``$defs``.
"""

import copy
import logging
from typing import Any

from pydantic import BaseModel

logger = logging.getLogger(__name__)

_DROPPED_KEYWORDS = (
    "default",
    "title",
    "minimum",
    "maximum",
    "exclusiveMinimum",
    "exclusiveMaximum",
    "minLength",
    "maxLength",
    "minItems",
    "maxItems",
)


def make_schema_strict(schema: dict[str, Any]) -> dict[str, Any]:
    """
    Rewrite a pydantic JSON schema for strict structured outputs.

    Args:
        schema: Output of ``model_json_schema()``

    Returns:
        New schema; the input is left untouched
    """
    schema = copy.deepcopy(schema)

    definitions = schema.pop("$defs", None)
    strict = _clean_node(schema)
    if definitions:
        logger.debug(f"🧩 [SchemaUtils] Cleaning {len(definitions)} schema definitions")
        strict["$defs"] = {name: _clean_node(node) for name, node in definitions.items()}
    return strict


def _clean_node(node: Any) -> Any:
    """Recursive helper for ``make_schema_strict``."""
    if not isinstance(node, dict):
        return node

    # Optional[X]: keep a nullable $ref as a bare anyOf, flatten anything else to a type list
    if "anyOf" in node:
        variants = node["anyOf"]
        non_null = [v for v in variants if v.get("type") != "null"]
        if len(non_null) == 1 and len(non_null) < len(variants):
            if "$ref" in non_null[0]:
                return {"anyOf": [{"$ref": non_null[0]["$ref"]}, {"type": "null"}]}
            flattened = dict(non_null[0])
            if "type" in flattened:
                flattened["type"] = [flattened["type"], "null"]
            return _clean_node(flattened)

    if "$ref" in node:
        return {"$ref": node["$ref"]}

    cleaned: dict[str, Any] = {}
    for key, value in node.items():
        if key in _DROPPED_KEYWORDS:
            continue
        if key == "properties" and isinstance(value, dict):
            # Property names are data here, not keywords
            cleaned[key] = {prop: _clean_node(sub) for prop, sub in value.items()}
        elif isinstance(value, dict):
            cleaned[key] = _clean_node(value)
        elif isinstance(value, list):
            cleaned[key] = [_clean_node(item) for item in value]
        else:
            cleaned[key] = value

    if cleaned.get("type") == "object":
        cleaned["additionalProperties"] = False
        if "properties" in cleaned:
            cleaned["required"] = list(cleaned["properties"].keys())

    return cleaned


def output_schema_for(model: type[BaseModel]) -> dict[str, Any]:
    """Strict, alias-keyed JSON schema for a tool output model."""
    return make_schema_strict(model.model_json_schema(by_alias=True))


def top_level_sections(schema: dict[str, Any]) -> list[str]:
    """Names of the top-level properties a payload is expected to carry."""
    return list(schema.get("properties", {}).keys())
