"""Tool registry, tool definitions, and the dispatcher that runs them."""

from __future__ import annotations

from .registry import ToolContext, ToolDefinition, ToolParameter, ToolRegistry
from .tools import AUTH_TOOL, TOOLS
from .dispatcher import ToolDispatcher, normalize_arguments

__all__ = [
    "AUTH_TOOL",
    "TOOLS",
    "ToolContext",
    "ToolDefinition",
    "ToolDispatcher",
    "ToolParameter",
    "ToolRegistry",
    "normalize_arguments",
]
