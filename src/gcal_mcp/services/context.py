from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

import httpx
from mcp.server.lowlevel import Server

from ..api import TOOLS, ToolDispatcher, ToolRegistry
from ..config import AppSettings, get_settings
from ..data import PendingAuthorizationCache
from .auth import AuthorizationManager
from .calendar import CalendarProxy
from .credentials import CredentialStore
from .events import NotificationHub
from .mcp import build_mcp_server


@dataclass(slots=True)
class ServiceContext:
    """Aggregate root wiring settings, the credential slot, and the services around it."""

    settings: AppSettings = field(default_factory=get_settings)
    registry: ToolRegistry = field(default=TOOLS)
    transport: Optional[httpx.AsyncBaseTransport] = None
    credentials: CredentialStore = field(init=False)
    hub: NotificationHub = field(init=False)
    pending: PendingAuthorizationCache = field(init=False)
    auth: AuthorizationManager = field(init=False)
    calendar: CalendarProxy = field(init=False)
    dispatcher: ToolDispatcher = field(init=False)
    mcp_server: Server[Any] = field(init=False)

    def __post_init__(self) -> None:
        self.credentials = CredentialStore()
        self.hub = NotificationHub(queue_size=self.settings.server.session_queue_size)
        self.pending = PendingAuthorizationCache(
            ttl=self.settings.auth_flow.pending_ttl,
            max_entries=self.settings.auth_flow.max_pending,
        )
        self.auth = AuthorizationManager(
            settings=self.settings.oauth,
            store=self.credentials,
            hub=self.hub,
            pending=self.pending,
            transport=self.transport,
            timeout=self.settings.calendar.timeout_seconds,
        )
        self.calendar = CalendarProxy(
            settings=self.settings.calendar,
            credentials=self.credentials.reader(),
            transport=self.transport,
        )
        self.dispatcher = ToolDispatcher(registry=self.registry, auth=self.auth, calendar=self.calendar)
        self.mcp_server = build_mcp_server(self.dispatcher, self.hub)
