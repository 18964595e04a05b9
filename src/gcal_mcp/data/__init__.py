"""In-memory state held for the lifetime of the process."""

from __future__ import annotations

from .cache import PendingAuthorizationCache

__all__ = ["PendingAuthorizationCache"]
