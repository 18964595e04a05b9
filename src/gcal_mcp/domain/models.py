from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from .enums import AuthStage, ResultCode

EXPIRY_LEEWAY = timedelta(seconds=10)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class Credential:
    access_token: str
    refresh_token: Optional[str] = None
    expiry: Optional[datetime] = None
    token_type: str = "Bearer"
    scope: Optional[str] = None

    @classmethod
    def from_token_response(
        cls,
        payload: Dict[str, Any],
        *,
        now: Optional[datetime] = None,
        previous_refresh_token: Optional[str] = None,
    ) -> "Credential":
        """Build a credential from an OAuth2 token endpoint JSON body."""

        access_token = payload.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise ValueError("token response is missing access_token")
        expiry: Optional[datetime] = None
        expires_in = payload.get("expires_in")
        if isinstance(expires_in, (int, float)) and not isinstance(expires_in, bool):
            expiry = (now or _utcnow()) + timedelta(seconds=float(expires_in))
        token_type = payload.get("token_type") or "Bearer"
        # The provider answers "bearer" or "Bearer" depending on the endpoint.
        if token_type.lower() == "bearer":
            token_type = "Bearer"
        return cls(
            access_token=access_token,
            refresh_token=payload.get("refresh_token") or previous_refresh_token,
            expiry=expiry,
            token_type=token_type,
            scope=payload.get("scope"),
        )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expiry is None:
            return False
        return (now or _utcnow()) >= self.expiry - EXPIRY_LEEWAY

    @property
    def can_refresh(self) -> bool:
        return bool(self.refresh_token)

    @property
    def authorization_header(self) -> str:
        return f"{self.token_type} {self.access_token}"


@dataclass(slots=True)
class PendingAuthorization:
    token: str
    authorization_url: str
    created_at: datetime = field(default_factory=_utcnow)
    stage: AuthStage = AuthStage.REQUESTED

    def expires_at(self, ttl: timedelta) -> datetime:
        return self.created_at + ttl

    def is_expired(self, ttl: timedelta, now: Optional[datetime] = None) -> bool:
        return (now or _utcnow()) >= self.expires_at(ttl)


@dataclass(frozen=True, slots=True)
class ToolInvocation:
    tool_name: str
    arguments: Dict[str, Any] = field(default_factory=dict)
    session_id: Optional[str] = None
    request_id: Optional[Any] = None


@dataclass(frozen=True, slots=True)
class ServiceReply:
    """Outcome of a single remote calendar call rendered as text."""

    text: str
    ok: bool = True

    @classmethod
    def failure(cls, text: str) -> "ServiceReply":
        return cls(text=text, ok=False)


@dataclass(frozen=True, slots=True)
class ToolResult:
    text: str
    is_error: bool = False
    code: Optional[ResultCode] = None
    retry_tool: Optional[str] = None

    @classmethod
    def success(cls, text: str) -> "ToolResult":
        return cls(text=text)

    @classmethod
    def error(cls, code: ResultCode, text: str, *, retry_tool: Optional[str] = None) -> "ToolResult":
        return cls(text=text, is_error=True, code=code, retry_tool=retry_tool)

    @classmethod
    def from_reply(cls, reply: ServiceReply) -> "ToolResult":
        if reply.ok:
            return cls.success(reply.text)
        return cls.error(ResultCode.SERVICE_ERROR, reply.text)

    @property
    def requires_authentication(self) -> bool:
        return self.code is ResultCode.AUTHENTICATION_REQUIRED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "is_error": self.is_error,
            "code": self.code.value if self.code else None,
            "retry_tool": self.retry_tool,
        }
