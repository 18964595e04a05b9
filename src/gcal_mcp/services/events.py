"""Per-connection notification queues and correlation-token routing."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from mcp.types import LoggingMessageNotification, LoggingMessageNotificationParams

logger = logging.getLogger(__name__)

# RFC 5424 severities, lowest first, as used by MCP logging notifications.
LOG_LEVELS = ("debug", "info", "notice", "warning", "error", "critical", "alert", "emergency")


@dataclass(frozen=True, slots=True)
class Notification:
    level: str
    logger: Optional[str]
    data: Any

    def to_mcp(self) -> LoggingMessageNotification:
        return LoggingMessageNotification(
            params=LoggingMessageNotificationParams(level=self.level, logger=self.logger, data=self.data)
        )


@dataclass
class Session:
    """One MCP connection's outbound notification channel backed by a bounded queue."""

    id: str
    queue: "asyncio.Queue[Notification]"
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    closed: bool = False
    dropped: int = 0
    min_level: str = "debug"
    peer: Any = None
    pump: Optional["asyncio.Task[None]"] = None

    def offer(self, notification: Notification) -> bool:
        """Enqueue without waiting; drops the notification when closed or full."""

        if self.closed:
            return False
        try:
            self.queue.put_nowait(notification)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning("Session %s queue full; dropped notification (%d so far)", self.id, self.dropped)
            return False
        return True

    def accepts(self, level: str) -> bool:
        return LOG_LEVELS.index(level) >= LOG_LEVELS.index(self.min_level)


class NotificationHub:
    """Tracks open sessions and which of them asked for each correlation token."""

    def __init__(self, *, queue_size: int = 64) -> None:
        self._queue_size = queue_size
        self._sessions: Dict[str, Session] = {}
        self._routes: Dict[str, List[str]] = {}

    def open_session(self) -> Session:
        session = Session(id=uuid4().hex, queue=asyncio.Queue(maxsize=self._queue_size))
        self._sessions[session.id] = session
        logger.info("Opened session %s (%d active)", session.id, len(self._sessions))
        return session

    def close_session(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return
        session.closed = True
        if session.pump is not None and session.pump is not asyncio.current_task():
            session.pump.cancel()
        for token in list(self._routes):
            remaining = [sid for sid in self._routes[token] if sid != session_id]
            if remaining:
                self._routes[token] = remaining
            else:
                del self._routes[token]
        logger.info("Closed session %s (%d active)", session_id, len(self._sessions))

    def get(self, session_id: str) -> Optional[Session]:
        return self._sessions.get(session_id)

    @property
    def session_count(self) -> int:
        return len(self._sessions)

    def bind(self, session_id: str, peer: Any) -> bool:
        """Attach the protocol session that delivers ``session_id``'s queue and start draining it.

        ``peer`` needs an async ``send_notification(notification)``; the MCP
        ``ServerSession`` handed to request handlers is one.
        """

        session = self._sessions.get(session_id)
        if session is None or session.closed:
            return False
        session.peer = peer
        if session.pump is None or session.pump.done():
            session.pump = asyncio.create_task(self._pump(session), name=f"notify-{session_id}")
        return True

    def set_level(self, session_id: str, level: str) -> bool:
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown logging level: {level!r}")
        session = self._sessions.get(session_id)
        if session is None:
            return False
        session.min_level = level
        logger.debug("Session %s logging level set to %s", session_id, level)
        return True

    def route(self, token: str, session_id: str) -> bool:
        """Remember that ``session_id`` is waiting on ``token``."""

        if session_id not in self._sessions:
            logger.debug("Not routing token for unknown session %s", session_id)
            return False
        subscribers = self._routes.setdefault(token, [])
        if session_id not in subscribers:
            subscribers.append(session_id)
        return True

    def routes_for(self, token: str) -> List[str]:
        return list(self._routes.get(token, ()))

    def discard(self, token: str) -> None:
        self._routes.pop(token, None)

    def notify(self, token: str, notification: Notification) -> int:
        """Queue ``notification`` for the sessions routed for ``token``; at most once, never raises."""

        subscribers = self._routes.pop(token, [])
        delivered = 0
        for session_id in subscribers:
            session = self._sessions.get(session_id)
            if session is not None and session.offer(notification):
                delivered += 1
        if not delivered:
            logger.debug("Notification for token %r had no live session; dropped", token)
        return delivered

    async def _pump(self, session: Session) -> None:
        while not session.closed:
            notification = await session.queue.get()
            try:
                if not session.accepts(notification.level):
                    logger.debug("Session %s filtered %s notification", session.id, notification.level)
                    continue
                await session.peer.send_notification(notification.to_mcp())
            except Exception:  # noqa: BLE001
                logger.exception("Delivering notification to session %s failed; closing it", session.id)
                self.close_session(session.id)
            finally:
                session.queue.task_done()
