"""Application services: authorization, calendar proxy, and the event-stream hub."""

from __future__ import annotations

from .auth import AuthorizationManager
from .calendar import CalendarProxy
from .context import ServiceContext
from .credentials import CredentialReader, CredentialStore
from .events import NotificationHub, Session

__all__ = [
    "AuthorizationManager",
    "CalendarProxy",
    "CredentialReader",
    "CredentialStore",
    "NotificationHub",
    "ServiceContext",
    "Session",
]
