"""Exception hierarchy shared across the registry, auth flow, and services."""

from __future__ import annotations

from typing import Optional


class GcalMcpError(Exception):
    """Base exception for the calendar tool server."""


class ConfigurationError(GcalMcpError):
    """Raised at startup when required settings are missing."""


class DuplicateToolError(GcalMcpError):
    """Raised when a tool name is registered twice."""


class ToolNotFoundError(GcalMcpError, KeyError):
    """Raised when a tool name cannot be resolved."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "tool not found"


class CredentialMissingError(GcalMcpError):
    """Raised when a credential-dependent call runs before authorization."""


class AuthorizationExchangeError(GcalMcpError):
    """Raised when the authorization server rejects or fails a token request."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


__all__ = [
    "AuthorizationExchangeError",
    "ConfigurationError",
    "CredentialMissingError",
    "DuplicateToolError",
    "GcalMcpError",
    "ToolNotFoundError",
]
