"""Domain models for tool dispatch and deferred authorization."""

from __future__ import annotations

from .enums import AuthStage, ParameterKind, ResultCode
from .models import Credential, PendingAuthorization, ServiceReply, ToolInvocation, ToolResult

__all__ = [
    "AuthStage",
    "Credential",
    "ParameterKind",
    "PendingAuthorization",
    "ResultCode",
    "ServiceReply",
    "ToolInvocation",
    "ToolResult",
]
