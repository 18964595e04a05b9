from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional, Tuple

from ..domain import ParameterKind, ResultCode, ToolInvocation, ToolResult
from ..errors import ToolNotFoundError
from .registry import ToolContext, ToolDefinition, ToolParameter, ToolRegistry
from .tools import AUTH_TOOL

if TYPE_CHECKING:
    from ..services.auth import AuthorizationManager
    from ..services.calendar import CalendarProxy

logger = logging.getLogger(__name__)


def _matches_kind(value: Any, kind: ParameterKind) -> bool:
    if kind is ParameterKind.STRING:
        return isinstance(value, str)
    if kind is ParameterKind.NUMBER:
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    return False


def normalize_arguments(
    definition: ToolDefinition,
    arguments: Dict[str, Any],
) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
    """Validate ``arguments`` against the tool's parameters and fill defaults.

    Returns ``(normalized, None)`` on success or ``(None, message)`` on failure.
    Arguments the tool does not declare are dropped.
    """

    normalized: Dict[str, Any] = {}
    for param in definition.parameters:
        value = arguments.get(param.name)
        if value is None or (param.required and value == ""):
            if param.required:
                return None, f"missing required parameter '{param.name}'"
            if param.default is not None:
                normalized[param.name] = param.default
            continue
        if not _matches_kind(value, param.kind):
            return None, _type_error(param, value)
        normalized[param.name] = value
    return normalized, None


def _type_error(param: ToolParameter, value: Any) -> str:
    return f"parameter '{param.name}' must be a {param.kind.value}, got {type(value).__name__}"


class ToolDispatcher:
    """Resolves invocations to tools and turns every outcome into a :class:`ToolResult`."""

    def __init__(
        self,
        *,
        registry: ToolRegistry,
        auth: "AuthorizationManager",
        calendar: "CalendarProxy",
    ) -> None:
        self._registry = registry
        self._auth = auth
        self._calendar = calendar

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    async def dispatch(self, invocation: ToolInvocation) -> ToolResult:
        try:
            definition = self._registry.resolve(invocation.tool_name)
        except ToolNotFoundError:
            logger.info("Unknown tool requested: %s", invocation.tool_name)
            return ToolResult.error(ResultCode.UNKNOWN_TOOL, f"unknown tool: {invocation.tool_name}")

        raw_arguments = {} if invocation.arguments is None else invocation.arguments
        if not isinstance(raw_arguments, dict):
            logger.info("Rejected %s arguments of type %s", definition.name, type(raw_arguments).__name__)
            return ToolResult.error(
                ResultCode.INVALID_ARGUMENTS, f"Invalid arguments for {definition.name}: arguments must be an object"
            )
        arguments, problem = normalize_arguments(definition, raw_arguments)
        if arguments is None:
            logger.info("Rejected %s arguments: %s", definition.name, problem)
            return ToolResult.error(ResultCode.INVALID_ARGUMENTS, f"Invalid arguments for {definition.name}: {problem}")

        if definition.requires_auth and not await self._ensure_credential():
            return self._authentication_required(definition.name)

        context = ToolContext(invocation=invocation, auth=self._auth, calendar=self._calendar)
        try:
            return await definition.handler(context, arguments)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Tool %s failed", definition.name)
            return ToolResult.error(ResultCode.INTERNAL_ERROR, f"Error running {definition.name}: {exc}")

    async def _ensure_credential(self) -> bool:
        credentials = self._auth.credentials
        if not credentials.is_present():
            return False
        if credentials.is_usable():
            return True
        return await self._auth.refresh() is not None

    @staticmethod
    def _authentication_required(tool_name: str) -> ToolResult:
        return ToolResult.error(
            ResultCode.AUTHENTICATION_REQUIRED,
            (
                f"{ResultCode.AUTHENTICATION_REQUIRED.value}: Google Calendar is not authorized yet. "
                f"Call the '{AUTH_TOOL}' tool with for_method='{tool_name}', open the returned URL, "
                f"and retry '{tool_name}' after the authorization notification arrives."
            ),
            retry_tool=tool_name,
        )
