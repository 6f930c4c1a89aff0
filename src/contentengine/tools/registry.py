"""Tool registry: ``tool_id -> ToolSpec``, resolved once at startup."""

import logging
from typing import Any, Iterable

from contentengine.models.errors import UnknownToolError
from contentengine.models.requests import GenerationInstruction
from contentengine.models.tools import ToolDefinition
from contentengine.tools import (
    ad_copy,
    blog_to_video,
    blog_writing,
    client_reporting,
    cold_outreach,
    competitor_analysis,
    email_marketing,
    landing_page,
    local_seo,
    product_launch,
    reels_scripts,
    seo_audit,
    social_media,
)
from contentengine.tools.base import ToolSpec

logger = logging.getLogger(__name__)

# Catalogue order is the order tools are listed to users
DEFAULT_TOOLS: tuple[ToolSpec, ...] = (
    seo_audit.TOOL,
    social_media.TOOL,
    blog_writing.TOOL,
    email_marketing.TOOL,
    client_reporting.TOOL,
    ad_copy.TOOL,
    landing_page.TOOL,
    competitor_analysis.TOOL,
    cold_outreach.TOOL,
    reels_scripts.TOOL,
    product_launch.TOOL,
    blog_to_video.TOOL,
    local_seo.TOOL,
)


class ToolRegistry:
    """Immutable-after-construction mapping of tool ids to their specs."""

    def __init__(self, tools: Iterable[ToolSpec] = DEFAULT_TOOLS):
        self._tools: dict[str, ToolSpec] = {}
        for tool in tools:
            if tool.tool_id in self._tools:
                raise ValueError(f"Duplicate tool id: {tool.tool_id}")
            self._tools[tool.tool_id] = tool
        logger.debug(f"🧰 [ToolRegistry] Registered {len(self._tools)} tools")

    def __contains__(self, tool_id: object) -> bool:
        return tool_id in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def get(self, tool_id: str) -> ToolSpec:
        """
        Look up a tool.

        Raises:
            UnknownToolError: No tool registered under ``tool_id``
        """
        try:
            return self._tools[tool_id]
        except KeyError:
            raise UnknownToolError(tool_id) from None

    def ids(self) -> list[str]:
        return list(self._tools)

    def definitions(self) -> list[ToolDefinition]:
        return [tool.definition for tool in self._tools.values()]

    def build_request(self, tool_id: str, raw_input: dict[str, Any] | None) -> GenerationInstruction:
        """Request builder entry point: ``(toolId, input) -> instruction``."""
        return self.get(tool_id).build_request(raw_input)

    def synthesize(self, tool_id: str, raw_input: dict[str, Any] | None) -> dict[str, Any]:
        """Fallback synthesizer entry point: ``(toolId, input) -> payload``."""
        return self.get(tool_id).synthesize(raw_input)


_default_registry: ToolRegistry | None = None


def default_registry() -> ToolRegistry:
    """Process-wide registry of the built-in tools."""
    global _default_registry
    if _default_registry is None:
        _default_registry = ToolRegistry()
    return _default_registry
