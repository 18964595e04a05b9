"""MCP server for the calendar tools, built on the ``mcp`` low-level server."""

from .messages import AUTH_LOGGER_NAME, authorization_complete_notification
from .server import INSTRUCTIONS, as_mcp_tool, build_mcp_server, call_result

__all__ = [
    "AUTH_LOGGER_NAME",
    "INSTRUCTIONS",
    "as_mcp_tool",
    "authorization_complete_notification",
    "build_mcp_server",
    "call_result",
]
