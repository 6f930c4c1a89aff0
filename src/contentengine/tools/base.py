"""Shared building blocks for tool input/output models, builders and fallbacks."""

import json
import logging
import zlib
from enum import Enum
from typing import Annotated, Any, Callable, Sequence, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from contentengine.models.requests import GenerationInstruction
from contentengine.models.tools import MissingSectionPolicy, ToolDefinition
from contentengine.utils.schema_utils import output_schema_for, top_level_sections

logger = logging.getLogger(__name__)

# Reserved keys carried by every synthesized payload
FALLBACK_MARKER = "_aiGenerated"
FALLBACK_WARNING_KEY = "_warning"
FALLBACK_WARNING = (
    "⚠️ This is static fallback content. For dynamic AI-generated content, "
    "please ensure your OpenAI API key is configured correctly."
)

TInput = TypeVar("TInput", bound="ToolInput")
E = TypeVar("E", bound=Enum)


def _coerce_str_list(value: Any) -> Any:
    """Accept ``"a, b"`` or a scalar where a list of strings is expected."""
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, (list, tuple, set)):
        return [str(item).strip() for item in value if item is not None and str(item).strip()]
    return [str(value)]


StrList = Annotated[list[str], BeforeValidator(_coerce_str_list)]


class ToolInput(BaseModel):
    """
    Base for per-tool input models.

    Keys arrive camelCase from the browser; snake_case is accepted too.
    Unknown keys are ignored, and ``None`` or blank strings count as absent
    so the field default applies. Every field must carry a non-null default.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
        str_strip_whitespace=True,
    )

    @model_validator(mode="before")
    @classmethod
    def drop_blank_values(cls, data: Any) -> Any:
        """Treat null and whitespace-only values as missing."""
        if not isinstance(data, dict):
            return {}
        return {
            key: value
            for key, value in data.items()
            if value is not None and not (isinstance(value, str) and not value.strip())
        }

    @classmethod
    def _accepted_keys(cls) -> dict[str, set[str]]:
        """Map each field to every key that can populate it."""
        keys: dict[str, set[str]] = {}
        for name, field in cls.model_fields.items():
            accepted = {name}
            if field.alias:
                accepted.add(field.alias)
            validation_alias = field.validation_alias
            if isinstance(validation_alias, str):
                accepted.add(validation_alias)
            elif validation_alias is not None and hasattr(validation_alias, "choices"):
                accepted.update(c for c in validation_alias.choices if isinstance(c, str))
            keys[name] = accepted
        return keys

    @classmethod
    def parse_lenient(cls: type[TInput], raw: dict[str, Any] | None) -> TInput:
        """
        Validate ``raw``, dropping any key that fails validation.

        Never raises: worst case every field takes its default.

        Args:
            raw: Caller-supplied input mapping (untyped)

        Returns:
            Parsed input model
        """
        data = dict(raw) if isinstance(raw, dict) else {}
        accepted = cls._accepted_keys()
        while True:
            try:
                return cls.model_validate(data)
            except ValidationError as e:
                bad_keys: set[str] = set()
                for error in e.errors():
                    loc = error.get("loc") or ()
                    if not loc:
                        continue
                    head = str(loc[0])
                    for keys in accepted.values():
                        if head in keys:
                            bad_keys.update(keys)
                    bad_keys.add(head)
                dropped = bad_keys & set(data)
                if not dropped:
                    logger.warning(f"⚠️ [ToolInput] Unrecoverable input for {cls.__name__}, using defaults")
                    return cls.model_validate({})
                logger.debug(f"🧹 [ToolInput] Dropping invalid input keys for {cls.__name__}: {sorted(dropped)}")
                data = {k: v for k, v in data.items() if k not in dropped}


class ToolOutput(BaseModel):
    """Base for per-tool output models (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def classify(text: str, table: dict[E, Sequence[str]], default: E) -> E:
    """
    Map free text onto an enum via a keyword table.

    The first enum member (in table order) with a keyword contained in the
    lower-cased text wins.
    """
    lowered = (text or "").lower()
    for member, keywords in table.items():
        if any(keyword in lowered for keyword in keywords):
            return member
    return default


def stable_variation(seed: str, modulo: int) -> int:
    """Deterministic 0..modulo-1 value derived from input text."""
    if modulo <= 0:
        return 0
    return zlib.crc32(seed.encode("utf-8")) % modulo


def with_fallback_marker(payload: dict[str, Any]) -> dict[str, Any]:
    """Stamp a synthesized payload with the reserved fallback keys."""
    return {FALLBACK_WARNING_KEY: FALLBACK_WARNING, FALLBACK_MARKER: False, **payload}


def is_fallback_payload(payload: dict[str, Any] | None) -> bool:
    """True when ``payload`` carries the fallback marker."""
    return bool(payload) and payload.get(FALLBACK_MARKER) is False


def strip_fallback_marker(payload: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in payload.items() if k not in (FALLBACK_MARKER, FALLBACK_WARNING_KEY)}


def render_inputs(tool_input: ToolInput) -> str:
    """One ``- key: value`` line per input field, using caller values or defaults."""
    lines = []
    for key, value in tool_input.model_dump(by_alias=True).items():
        if isinstance(value, list):
            value = ", ".join(str(v) for v in value) if value else "none specified"
        elif isinstance(value, Enum):
            value = value.value
        elif value == "":
            value = "not specified"
        lines.append(f"- {key}: {value}")
    return "\n".join(lines)


def make_instruction(
    tool_id: str,
    role: str,
    task: str,
    tool_input: ToolInput,
    output_model: type[ToolOutput],
    guidance: Sequence[str] = (),
) -> GenerationInstruction:
    """
    Assemble a generation instruction with the output contract embedded.

    Args:
        tool_id: Tool identifier (also used to name the schema)
        role: Expert persona for the system prompt
        task: One-paragraph task statement with the caller's key values inlined
        tool_input: Parsed input, echoed back verbatim
        output_model: Output model whose schema the reply must follow
        guidance: Extra bullet points for the model

    Returns:
        GenerationInstruction ready for the generation client
    """
    schema = output_schema_for(output_model)
    system_prompt = (
        f"You are {role}. Respond with exactly one JSON object and nothing else. "
        f"The object must contain these top-level keys: {', '.join(top_level_sections(schema))}. "
        "Make every value specific to the inputs provided; do not use placeholders."
    )
    parts = [task, "", "Inputs:", render_inputs(tool_input)]
    if guidance:
        parts += ["", "Guidance:"] + [f"- {line}" for line in guidance]
    parts += ["", "Return JSON matching this schema:", json.dumps(schema, separators=(",", ":"))]
    return GenerationInstruction(
        tool_id=tool_id,
        system_prompt=system_prompt,
        user_prompt="\n".join(parts),
        schema_name=tool_id.replace("-", "_") + "_output",
        output_schema=schema,
    )


class ToolSpec(BaseModel):
    """Registry entry binding one tool's models, builder and fallback."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    definition: ToolDefinition
    input_model: type[ToolInput]
    output_model: type[ToolOutput]
    builder: Callable[[Any], GenerationInstruction]
    fallback: Callable[[Any], ToolOutput]
    missing_section_policy: MissingSectionPolicy = MissingSectionPolicy.PATCH
    required_fields: tuple[str, ...] = Field(default_factory=tuple)

    @property
    def tool_id(self) -> str:
        return self.definition.id

    def parse_input(self, raw: dict[str, Any] | None) -> ToolInput:
        return self.input_model.parse_lenient(raw)

    def build_request(self, raw: dict[str, Any] | None) -> GenerationInstruction:
        """Parse ``raw`` and build the tool's generation instruction."""
        return self.builder(self.parse_input(raw))

    def synthesize(self, raw: dict[str, Any] | None) -> dict[str, Any]:
        """Fallback payload for ``raw`` (alias-keyed, marker included)."""
        output = self.fallback(self.parse_input(raw))
        return with_fallback_marker(output.model_dump(by_alias=True, mode="json"))

    def expected_sections(self) -> list[str]:
        return top_level_sections(output_schema_for(self.output_model))

    def missing_required_fields(self, raw: dict[str, Any] | None) -> list[str]:
        """Required fields absent from ``raw`` (after blank-value cleanup)."""
        if not self.required_fields:
            return []
        parsed = self.parse_input(raw)
        present = parsed.model_fields_set
        return [name for name in self.required_fields if name not in present]
