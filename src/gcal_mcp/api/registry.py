from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, Iterable, List, Optional

from ..domain import ParameterKind, ToolInvocation, ToolResult
from ..errors import DuplicateToolError, ToolNotFoundError

if TYPE_CHECKING:
    from ..services.auth import AuthorizationManager
    from ..services.calendar import CalendarProxy

logger = logging.getLogger(__name__)

JsonSchema = Dict[str, Any]


@dataclass(frozen=True)
class ToolParameter:
    name: str
    kind: ParameterKind = ParameterKind.STRING
    description: str = ""
    required: bool = False
    default: Optional[Any] = None

    @property
    def schema(self) -> JsonSchema:
        schema: JsonSchema = {"type": self.kind.value}
        if self.description:
            schema["description"] = self.description
        if self.default is not None:
            schema["default"] = self.default
        return schema


@dataclass(frozen=True)
class ToolContext:
    """Collaborators handed to a tool handler for one invocation."""

    invocation: ToolInvocation
    auth: "AuthorizationManager"
    calendar: "CalendarProxy"


ToolHandler = Callable[[ToolContext, Dict[str, Any]], Awaitable[ToolResult]]


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    description: str
    handler: ToolHandler
    parameters: tuple[ToolParameter, ...] = field(default_factory=tuple)
    requires_auth: bool = True

    @property
    def input_schema(self) -> JsonSchema:
        schema: JsonSchema = {"type": "object", "properties": {}}
        required: List[str] = []
        for param in self.parameters:
            schema["properties"][param.name] = param.schema
            if param.required:
                required.append(param.name)
        if required:
            schema["required"] = required
        return schema

    def describe(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "requires_auth": self.requires_auth,
            "input_schema": self.input_schema,
        }


class ToolRegistry:
    """Name-indexed set of tool definitions, filled once at import time."""

    def __init__(self, definitions: Iterable[ToolDefinition] = ()) -> None:
        self._tools: Dict[str, ToolDefinition] = {}
        for definition in definitions:
            self.register(definition)

    def register(self, definition: ToolDefinition) -> ToolDefinition:
        if definition.name in self._tools:
            raise DuplicateToolError(f"Tool '{definition.name}' is already registered.")
        self._tools[definition.name] = definition
        logger.debug("Registered tool '%s'", definition.name)
        return definition

    def resolve(self, name: str) -> ToolDefinition:
        try:
            return self._tools[name]
        except KeyError:
            raise ToolNotFoundError(f"Tool '{name}' is not registered.") from None

    def tool(
        self,
        name: str,
        *,
        description: str,
        parameters: Iterable[ToolParameter] = (),
        requires_auth: bool = True,
    ) -> Callable[[ToolHandler], ToolHandler]:
        def decorator(func: ToolHandler) -> ToolHandler:
            self.register(
                ToolDefinition(
                    name=name,
                    description=description,
                    handler=func,
                    parameters=tuple(parameters),
                    requires_auth=requires_auth,
                )
            )
            return func

        return decorator

    def definitions(self) -> List[ToolDefinition]:
        return list(self._tools.values())

    def names(self) -> List[str]:
        return list(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)
