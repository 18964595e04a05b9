from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from ...domain import AuthStage, PendingAuthorization


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class PendingAuthorizationCache:
    """Bounded, expiring index of authorization flows awaiting their callback."""

    ttl: timedelta
    max_entries: int
    entries: Dict[str, PendingAuthorization] = field(default_factory=dict)

    def add(self, pending: PendingAuthorization, *, now: Optional[datetime] = None) -> List[str]:
        """Store ``pending`` and return the tokens evicted to make room for it."""

        evicted = self.prune(now=now)
        # Re-requesting a token moves it to the back of the eviction order.
        self.entries.pop(pending.token, None)
        self.entries[pending.token] = pending
        while len(self.entries) > self.max_entries:
            oldest = next(iter(self.entries))
            self.entries.pop(oldest)
            evicted.append(oldest)
        return evicted

    def get(self, token: str, *, now: Optional[datetime] = None) -> Optional[PendingAuthorization]:
        pending = self.entries.get(token)
        if pending is None:
            return None
        if pending.is_expired(self.ttl, now):
            self.entries.pop(token, None)
            return None
        return pending

    def consume(self, token: str) -> Optional[PendingAuthorization]:
        return self.entries.pop(token, None)

    def prune(self, *, now: Optional[datetime] = None) -> List[str]:
        current = now or _utcnow()
        expired = [token for token, pending in self.entries.items() if pending.is_expired(self.ttl, current)]
        for token in expired:
            self.entries.pop(token, None)
        return expired

    def tokens_in_stage(self, stage: AuthStage) -> List[str]:
        return [token for token, pending in self.entries.items() if pending.stage is stage]

    def __contains__(self, token: object) -> bool:
        return token in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def clear(self) -> None:
        self.entries.clear()
