"""Notifications the server pushes to waiting MCP sessions."""

from __future__ import annotations

from ..events import Notification

AUTH_LOGGER_NAME = "gcal_mcp.auth"


def authorization_complete_notification(token: str) -> Notification:
    """Logging notification telling the caller that ``token``'s flow finished."""

    return Notification(
        level="info",
        logger=AUTH_LOGGER_NAME,
        data={
            "event": "authorization_complete",
            "correlation_token": token,
            "message": f"Authentication successful. You can now retry '{token}'.",
        },
    )
