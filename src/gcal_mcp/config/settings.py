from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

from ..errors import ConfigurationError

load_dotenv()

CALENDAR_SCOPE = "https://www.googleapis.com/auth/calendar"
GOOGLE_AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"
GOOGLE_CALENDAR_API = "https://www.googleapis.com/calendar/v3"


@dataclass(frozen=True)
class GoogleOAuthSettings:
    client_id: Optional[str]
    client_secret: Optional[str]
    redirect_url: str
    scopes: tuple[str, ...] = (CALENDAR_SCOPE,)
    auth_uri: str = GOOGLE_AUTH_URI
    token_uri: str = GOOGLE_TOKEN_URI

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    @property
    def missing_env_vars(self) -> list[str]:
        missing = []
        if not self.client_id:
            missing.append("GOOGLE_CLIENT_ID")
        if not self.client_secret:
            missing.append("GOOGLE_CLIENT_SECRET")
        return missing

    def require_configured(self) -> None:
        if not self.is_configured:
            raise ConfigurationError(f"Missing required environment values: {', '.join(self.missing_env_vars)}")


@dataclass(frozen=True)
class ServerSettings:
    host: str
    port: int
    base_path: str
    session_queue_size: int

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @property
    def callback_url(self) -> str:
        return f"{self.base_url}/auth/callback"


@dataclass(frozen=True)
class AuthFlowSettings:
    pending_ttl: timedelta
    max_pending: int


@dataclass(frozen=True)
class CalendarSettings:
    api_base_url: str
    timeout_seconds: float


@dataclass(frozen=True)
class AppSettings:
    oauth: GoogleOAuthSettings
    server: ServerSettings
    auth_flow: AuthFlowSettings
    calendar: CalendarSettings


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _float_from_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _scopes_from_env(name: str) -> tuple[str, ...]:
    raw = os.getenv(name)
    if not raw:
        return (CALENDAR_SCOPE,)
    scopes = tuple(scope for scope in raw.replace(",", " ").split() if scope)
    return scopes or (CALENDAR_SCOPE,)


def _normalize_base_path(raw: str) -> str:
    cleaned = "/" + raw.strip().strip("/")
    return "" if cleaned == "/" else cleaned


def load_settings() -> AppSettings:
    """Build settings from the current environment without caching."""

    server = ServerSettings(
        host=os.getenv("GCAL_MCP_HOST", "localhost"),
        port=_int_from_env("GCAL_MCP_PORT", 12345),
        base_path=_normalize_base_path(os.getenv("GCAL_MCP_BASE_PATH", "/mcp")),
        session_queue_size=max(1, _int_from_env("GCAL_MCP_SESSION_QUEUE_SIZE", 64)),
    )

    oauth = GoogleOAuthSettings(
        client_id=os.getenv("GOOGLE_CLIENT_ID"),
        client_secret=os.getenv("GOOGLE_CLIENT_SECRET"),
        redirect_url=os.getenv("GOOGLE_REDIRECT_URL") or server.callback_url,
        scopes=_scopes_from_env("GOOGLE_OAUTH_SCOPES"),
    )

    auth_flow = AuthFlowSettings(
        pending_ttl=timedelta(seconds=_int_from_env("GCAL_MCP_PENDING_AUTH_TTL_SECONDS", 900)),
        max_pending=max(1, _int_from_env("GCAL_MCP_PENDING_AUTH_MAX", 256)),
    )

    calendar = CalendarSettings(
        api_base_url=os.getenv("GCAL_API_BASE_URL", GOOGLE_CALENDAR_API).rstrip("/"),
        timeout_seconds=_float_from_env("GCAL_HTTP_TIMEOUT_SECONDS", 15.0),
    )

    return AppSettings(oauth=oauth, server=server, auth_flow=auth_flow, calendar=calendar)


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return load_settings()
