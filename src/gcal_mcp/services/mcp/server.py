from __future__ import annotations

import logging
import warnings
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, AsyncIterator, Optional

from mcp.server.lowlevel import Server
from mcp.shared.exceptions import MCPDeprecationWarning
from mcp.types import CallToolResult, EmptyResult, ListToolsResult, TextContent, Tool

from ...core import APP_NAME, APP_VERSION
from ...domain import ToolInvocation, ToolResult
from ..events import NotificationHub, Session

if TYPE_CHECKING:
    from mcp.server.context import ServerRequestContext
    from mcp.types import CallToolRequestParams, PaginatedRequestParams, SetLevelRequestParams

    from ...api import ToolDefinition, ToolDispatcher

logger = logging.getLogger(__name__)

INSTRUCTIONS = (
    "Google Calendar tools. Calendar tools answer AUTHENTICATION_REQUIRED until the user "
    "authorizes access: call the auth tool with for_method set to the tool you want to run, "
    "open the returned URL, wait for the authorization_complete notification, then retry."
)


def as_mcp_tool(definition: "ToolDefinition") -> Tool:
    return Tool(
        name=definition.name,
        description=definition.description,
        input_schema=definition.input_schema,
    )


def call_result(result: ToolResult) -> CallToolResult:
    return CallToolResult(content=[TextContent(type="text", text=result.text)], is_error=result.is_error)


def build_mcp_server(
    dispatcher: "ToolDispatcher",
    hub: NotificationHub,
    *,
    name: str = APP_NAME,
    version: str = APP_VERSION,
) -> Server[Session]:
    """Build the MCP server answering tool calls through ``dispatcher``.

    Every connection the server runs gets its own hub session for the
    connection's lifetime; tool calls made on it are routed and notified
    through that session.
    """

    @asynccontextmanager
    async def connection_session(_: Server[Session]) -> AsyncIterator[Session]:
        session = hub.open_session()
        try:
            yield session
        finally:
            hub.close_session(session.id)

    async def list_tools(ctx: "ServerRequestContext[Session]", params: Optional["PaginatedRequestParams"]) -> ListToolsResult:
        return ListToolsResult(tools=[as_mcp_tool(definition) for definition in dispatcher.registry.definitions()])

    async def call_tool(ctx: "ServerRequestContext[Session]", params: "CallToolRequestParams") -> CallToolResult:
        session = ctx.lifespan_context
        hub.bind(session.id, ctx.session)
        invocation = ToolInvocation(
            tool_name=params.name,
            arguments=params.arguments,
            session_id=session.id,
            request_id=ctx.request_id,
        )
        return call_result(await dispatcher.dispatch(invocation))

    async def set_logging_level(ctx: "ServerRequestContext[Session]", params: "SetLevelRequestParams") -> EmptyResult:
        hub.set_level(ctx.lifespan_context.id, params.level)
        return EmptyResult()

    # Logging is deprecated for the newest protocol revision but still the
    # notification channel for every handshake-era client.
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", MCPDeprecationWarning)
        server: Server[Any] = Server(
            name,
            version=version,
            instructions=INSTRUCTIONS,
            lifespan=connection_session,
            on_list_tools=list_tools,
            on_call_tool=call_tool,
            on_set_logging_level=set_logging_level,
        )
    logger.debug("Built MCP server %s %s", name, version)
    return server
