"""Schema-validated content tools and their executor."""

from sitewright.tools.builtin import BUILTIN_TOOLS, default_registry
from sitewright.tools.executor import ToolContext, ToolError, ToolExecutionResult, ToolExecutor
from sitewright.tools.registry import ToolDefinition, ToolHandler, ToolRegistry
from sitewright.tools.schema import Param, ParameterSchema

__all__ = [
    "BUILTIN_TOOLS",
    "Param",
    "ParameterSchema",
    "ToolContext",
    "ToolDefinition",
    "ToolError",
    "ToolExecutionResult",
    "ToolExecutor",
    "ToolHandler",
    "ToolRegistry",
    "default_registry",
]
