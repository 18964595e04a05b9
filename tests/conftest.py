from __future__ import annotations

import json
from datetime import timedelta
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qs

import httpx
import pytest

from gcal_mcp.config import AppSettings, AuthFlowSettings, CalendarSettings, GoogleOAuthSettings, ServerSettings
from gcal_mcp.domain import Credential
from gcal_mcp.services import ServiceContext

CALENDAR_BASE = "https://calendar.test/calendar/v3"
TOKEN_URI = "https://test.com/token"


class FakeGoogle:
    """Programmable stand-in for the Google token endpoint and Calendar API."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.calendars: List[Dict[str, Any]] = [
            {"id": "primary", "summary": "Work"},
            {"id": "family@group.calendar.google.com", "summary": "Family"},
        ]
        self.events: List[Dict[str, Any]] = [
            {"id": "evt1", "summary": "Standup", "start": {"dateTime": "2024-01-01T09:00:00Z"}},
            {"id": "evt2", "summary": "Holiday", "start": {"date": "2024-01-02"}},
        ]
        self.calendar_error: Optional[httpx.Response] = None
        self.issued = 0

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if str(request.url) == TOKEN_URI:
            return self._token(request)
        if self.calendar_error is not None:
            return self.calendar_error
        return self._calendar(request)

    def form(self, request: httpx.Request) -> Dict[str, str]:
        return {key: values[0] for key, values in parse_qs(request.content.decode()).items()}

    def _token(self, request: httpx.Request) -> httpx.Response:
        form = self.form(request)
        if form.get("grant_type") == "refresh_token":
            if form.get("refresh_token") == "revoked":
                return httpx.Response(400, json={"error": "invalid_grant"})
            self.issued += 1
            return httpx.Response(200, json={"access_token": f"refreshed-{self.issued}", "expires_in": 3600})
        code = form.get("code", "")
        if code.startswith("bad"):
            return httpx.Response(400, json={"error": "invalid_grant", "error_description": "Bad Request"})
        self.issued += 1
        return httpx.Response(
            200,
            json={
                "access_token": f"token-for-{code}",
                "refresh_token": f"refresh-for-{code}",
                "expires_in": 3599,
                "token_type": "Bearer",
                "scope": "https://www.googleapis.com/auth/calendar",
            },
        )

    def _calendar(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.replace("/calendar/v3", "", 1)
        if path == "/users/me/calendarList":
            return httpx.Response(200, json={"items": self.calendars})
        parts = path.strip("/").split("/")
        if len(parts) == 3 and parts[0] == "calendars" and parts[2] == "events":
            if request.method == "GET":
                limit = int(request.url.params.get("maxResults", "10"))
                return httpx.Response(200, json={"items": self.events[:limit]})
            if request.method == "POST":
                body = json.loads(request.content)
                created = {**body, "id": "new-event", "htmlLink": "https://calendar.test/event?eid=new-event"}
                return httpx.Response(200, json=created)
        if len(parts) == 4 and parts[0] == "calendars" and parts[2] == "events":
            event = next((item for item in self.events if item["id"] == parts[3]), None)
            if event is None:
                return httpx.Response(404, json={"error": {"code": 404, "message": "Not Found"}})
            if request.method == "DELETE":
                return httpx.Response(204)
            return httpx.Response(200, json={**event, "status": "confirmed", "end": {"dateTime": "2024-01-01T09:15:00Z"}})
        return httpx.Response(404, json={"error": {"code": 404, "message": "Unknown path"}})


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(
        oauth=GoogleOAuthSettings(
            client_id="test-client-id",
            client_secret="test-client-secret",
            redirect_url="http://localhost:5555/auth/callback",
            auth_uri="https://test.com/auth",
            token_uri=TOKEN_URI,
        ),
        server=ServerSettings(
            host="localhost",
            port=12345,
            base_path="/mcp",
            session_queue_size=4,
        ),
        auth_flow=AuthFlowSettings(pending_ttl=timedelta(minutes=15), max_pending=8),
        calendar=CalendarSettings(api_base_url=CALENDAR_BASE, timeout_seconds=5.0),
    )


@pytest.fixture
def google() -> FakeGoogle:
    return FakeGoogle()


@pytest.fixture
def context(settings: AppSettings, google: FakeGoogle) -> ServiceContext:
    return ServiceContext(settings=settings, transport=google.transport())


@pytest.fixture
def authenticated(context: ServiceContext) -> ServiceContext:
    context.credentials.install(Credential(access_token="live-token", refresh_token="live-refresh"))
    return context
