from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlencode

import httpx

from ..config import GoogleOAuthSettings
from ..data import PendingAuthorizationCache
from ..domain import AuthStage, Credential, PendingAuthorization
from ..errors import AuthorizationExchangeError
from ..logging import redact
from .credentials import CredentialReader, CredentialStore
from .events import NotificationHub
from .mcp.messages import authorization_complete_notification

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuthorizationManager:
    """Runs the OAuth2 authorization-code flow and owns the live credential.

    The ``state`` parameter of each flow carries the correlation token of the
    tool call that asked for authentication, so the redirect callback can be
    announced to the session that is waiting on it.
    """

    def __init__(
        self,
        *,
        settings: GoogleOAuthSettings,
        store: CredentialStore,
        hub: NotificationHub,
        pending: PendingAuthorizationCache,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 15.0,
        clock: Clock = _utcnow,
    ) -> None:
        self._settings = settings
        self._store = store
        self._hub = hub
        self._pending = pending
        self._transport = transport
        self._timeout = timeout
        self._clock = clock

    @property
    def credentials(self) -> CredentialReader:
        return self._store.reader()

    @property
    def pending(self) -> PendingAuthorizationCache:
        return self._pending

    def authorization_url(self, state: str) -> str:
        params = {
            "access_type": "offline",
            "client_id": self._settings.client_id or "",
            "redirect_uri": self._settings.redirect_url,
            "response_type": "code",
            "scope": " ".join(self._settings.scopes),
            "state": state,
        }
        return f"{self._settings.auth_uri}?{urlencode(params)}"

    def begin_authorization(self, token: str, session_id: Optional[str] = None) -> str:
        url = self.authorization_url(token)
        pending = PendingAuthorization(token=token, authorization_url=url, created_at=self._clock())
        for evicted in self._pending.add(pending, now=self._clock()):
            if evicted != token:
                self._hub.discard(evicted)
                logger.info("Evicted unresolved authorization for token %r", evicted)
        if session_id is not None:
            self._hub.route(token, session_id)
        logger.info("Authorization requested for token %r (session %s)", token, session_id or "-")
        return url

    async def complete_authorization(self, code: str, token: str) -> Credential:
        """Exchange ``code``, install the credential, and notify whoever waits on ``token``."""

        pending = self._pending.get(token, now=self._clock())
        if pending is not None:
            pending.stage = AuthStage.CALLBACK_RECEIVED
        else:
            # Expired or never requested: no session may be told about it.
            self._hub.discard(token)
            logger.info("Callback for token %r has no pending authorization", token)

        try:
            credential = await self._request_token(
                {
                    "grant_type": "authorization_code",
                    "code": code,
                    "redirect_uri": self._settings.redirect_url,
                }
            )
        except AuthorizationExchangeError:
            if pending is not None:
                pending.stage = AuthStage.FAILED
            logger.warning("Code exchange failed for token %r (code %s)", token, redact(code))
            raise

        self._install(credential)
        self._pending.consume(token)
        if pending is not None:
            pending.stage = AuthStage.EXCHANGED

        delivered = self._hub.notify(token, authorization_complete_notification(token))
        if pending is not None:
            pending.stage = AuthStage.NOTIFIED
        logger.info("Authorization for token %r complete; notified %d session(s)", token, delivered)
        return credential

    async def refresh(self) -> Optional[Credential]:
        """Refresh the live credential once if it is expired and refreshable."""

        current = self._store.current()
        if current is None or not current.is_expired(self._clock()):
            return current
        if not current.can_refresh:
            logger.info("Credential expired and has no refresh token")
            return None
        try:
            credential = await self._request_token(
                {"grant_type": "refresh_token", "refresh_token": current.refresh_token or ""},
                previous_refresh_token=current.refresh_token,
            )
        except AuthorizationExchangeError as exc:
            logger.warning("Credential refresh failed: %s", exc)
            return None
        if not self._store.replace_if(current, credential):
            # A completed authorization replaced the slot while the refresh was in flight.
            logger.info("Discarding refreshed credential; a newer one was installed meanwhile")
            return self._store.current()
        logger.info("Credential refreshed")
        return credential

    def _install(self, credential: Credential) -> None:
        previous = self._store.install(credential)
        if previous is not None:
            logger.info("Replaced existing credential")

    async def _request_token(
        self,
        form: Dict[str, str],
        *,
        previous_refresh_token: Optional[str] = None,
    ) -> Credential:
        data = {
            **form,
            "client_id": self._settings.client_id or "",
            "client_secret": self._settings.client_secret or "",
        }
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
                response = await client.post(
                    self._settings.token_uri,
                    data=data,
                    headers={"Accept": "application/json"},
                )
        except httpx.HTTPError as exc:
            raise AuthorizationExchangeError(f"token endpoint unreachable: {exc}") from exc

        if response.status_code >= 400:
            raise AuthorizationExchangeError(
                f"token endpoint returned {response.status_code}: {_error_detail(response)}",
                status_code=response.status_code,
            )
        try:
            payload = response.json()
            if not isinstance(payload, dict):
                raise ValueError("token response is not a JSON object")
            return Credential.from_token_response(
                payload,
                now=self._clock(),
                previous_refresh_token=previous_refresh_token,
            )
        except ValueError as exc:
            raise AuthorizationExchangeError(f"malformed token response: {exc}") from exc


def _error_detail(response: httpx.Response) -> str:
    try:
        body: Any = response.json()
    except ValueError:
        return response.text.strip() or response.reason_phrase
    if isinstance(body, dict):
        description = body.get("error_description")
        error = body.get("error")
        if description and error:
            return f"{error}: {description}"
        if error:
            return str(error)
    return response.reason_phrase
