from datetime import timedelta

import pytest

from gcal_mcp.config import CALENDAR_SCOPE, GOOGLE_CALENDAR_API, load_settings
from gcal_mcp.errors import ConfigurationError

ENV_VARS = (
    "GOOGLE_CLIENT_ID",
    "GOOGLE_CLIENT_SECRET",
    "GOOGLE_REDIRECT_URL",
    "GOOGLE_OAUTH_SCOPES",
    "GCAL_MCP_HOST",
    "GCAL_MCP_PORT",
    "GCAL_MCP_BASE_PATH",
    "GCAL_MCP_SESSION_QUEUE_SIZE",
    "GCAL_MCP_PENDING_AUTH_TTL_SECONDS",
    "GCAL_MCP_PENDING_AUTH_MAX",
    "GCAL_API_BASE_URL",
    "GCAL_HTTP_TIMEOUT_SECONDS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_match_local_server():
    settings = load_settings()

    assert settings.server.host == "localhost"
    assert settings.server.port == 12345
    assert settings.server.base_path == "/mcp"
    assert settings.oauth.redirect_url == "http://localhost:12345/auth/callback"
    assert settings.oauth.scopes == (CALENDAR_SCOPE,)
    assert settings.auth_flow.pending_ttl == timedelta(minutes=15)
    assert settings.auth_flow.max_pending == 256
    assert settings.calendar.api_base_url == GOOGLE_CALENDAR_API


def test_missing_credentials_are_reported():
    settings = load_settings()

    assert not settings.oauth.is_configured
    assert settings.oauth.missing_env_vars == ["GOOGLE_CLIENT_ID", "GOOGLE_CLIENT_SECRET"]


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("GOOGLE_CLIENT_ID", "id")
    monkeypatch.setenv("GOOGLE_CLIENT_SECRET", "secret")
    monkeypatch.setenv("GOOGLE_REDIRECT_URL", "https://example.org/cb")
    monkeypatch.setenv("GOOGLE_OAUTH_SCOPES", "scope-a, scope-b")
    monkeypatch.setenv("GCAL_MCP_PORT", "8080")
    monkeypatch.setenv("GCAL_API_BASE_URL", "https://calendar.test/v3/")

    settings = load_settings()

    assert settings.oauth.is_configured
    assert settings.oauth.redirect_url == "https://example.org/cb"
    assert settings.oauth.scopes == ("scope-a", "scope-b")
    assert settings.server.port == 8080
    assert settings.calendar.api_base_url == "https://calendar.test/v3"


def test_malformed_numbers_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv("GCAL_MCP_PORT", "eighty")
    monkeypatch.setenv("GCAL_MCP_SESSION_QUEUE_SIZE", "0")
    monkeypatch.setenv("GCAL_HTTP_TIMEOUT_SECONDS", "slow")

    settings = load_settings()

    assert settings.server.port == 12345
    assert settings.server.session_queue_size == 1
    assert settings.calendar.timeout_seconds == 15.0


@pytest.mark.parametrize("raw, expected", [("/", ""), ("mcp/", "/mcp"), ("/api/mcp", "/api/mcp")])
def test_base_path_is_normalized(monkeypatch, raw, expected):
    monkeypatch.setenv("GCAL_MCP_BASE_PATH", raw)

    assert load_settings().server.base_path == expected


def test_require_configured_names_missing_values():
    with pytest.raises(ConfigurationError, match="GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET"):
        load_settings().oauth.require_configured()
