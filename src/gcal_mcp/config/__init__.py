"""Configuration models and helpers."""

from __future__ import annotations

from .settings import (
    CALENDAR_SCOPE,
    GOOGLE_AUTH_URI,
    GOOGLE_CALENDAR_API,
    GOOGLE_TOKEN_URI,
    AppSettings,
    AuthFlowSettings,
    CalendarSettings,
    GoogleOAuthSettings,
    ServerSettings,
    get_settings,
    load_settings,
)

__all__ = [
    "CALENDAR_SCOPE",
    "GOOGLE_AUTH_URI",
    "GOOGLE_CALENDAR_API",
    "GOOGLE_TOKEN_URI",
    "AppSettings",
    "AuthFlowSettings",
    "CalendarSettings",
    "GoogleOAuthSettings",
    "ServerSettings",
    "get_settings",
    "load_settings",
]
