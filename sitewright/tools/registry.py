"""Tool registry: named, schema-described content tools."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from sitewright.content.models import ContentModel
from sitewright.tools.schema import ParameterSchema

# A handler receives a private copy of the draft plus validated parameters and
# returns the new draft together with a one-line summary.
ToolHandler = Callable[[ContentModel, dict[str, Any]], tuple[ContentModel, str]]


@dataclass(frozen=True)
class ToolDefinition:
    """Standard tool definition for LLM function calling."""

    name: str
    description: str
    schema: ParameterSchema
    handler: ToolHandler


class ToolRegistry:
    """Registry for content tools."""

    def __init__(self) -> None:
        self._tools: dict[str, ToolDefinition] = {}

    def register(self, tool: ToolDefinition) -> None:
        if tool.name in self._tools:
            raise ValueError(f"Tool already registered: {tool.name!r}")
        self._tools[tool.name] = tool

    def get(self, name: str) -> ToolDefinition | None:
        return self._tools.get(name)

    def list_tools(self) -> list[ToolDefinition]:
        return list(self._tools.values())

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def get_definitions(self) -> list[dict[str, Any]]:
        """Get tool definitions in OpenAI function calling format."""
        return [
            {
                "type": "function",
                "function": {
                    "name": t.name,
                    "description": t.description,
                    "parameters": t.schema.to_json_schema(),
                },
            }
            for t in self._tools.values()
        ]
