from __future__ import annotations

import threading
from datetime import datetime
from typing import Optional

from ..domain import Credential
from ..errors import CredentialMissingError


class CredentialStore:
    """Single-slot holder for the live OAuth credential.

    Only the authorization manager writes, through ``install`` or
    ``replace_if``; everything else receives a :class:`CredentialReader`.
    """

    def __init__(self, credential: Optional[Credential] = None) -> None:
        self._credential = credential
        self._lock = threading.Lock()

    def current(self) -> Optional[Credential]:
        with self._lock:
            return self._credential

    def install(self, credential: Credential) -> Optional[Credential]:
        """Swap in ``credential`` and return the one it replaced."""

        with self._lock:
            previous, self._credential = self._credential, credential
        return previous

    def replace_if(self, expected: Optional[Credential], credential: Credential) -> bool:
        """Install ``credential`` only while ``expected`` is still the live credential."""

        with self._lock:
            if self._credential is not expected:
                return False
            self._credential = credential
        return True

    def reader(self) -> "CredentialReader":
        return CredentialReader(self)


class CredentialReader:
    """Read-only view over a :class:`CredentialStore`."""

    __slots__ = ("_store",)

    def __init__(self, store: CredentialStore) -> None:
        self._store = store

    def current(self) -> Optional[Credential]:
        return self._store.current()

    def is_present(self) -> bool:
        return self._store.current() is not None

    def is_usable(self, now: Optional[datetime] = None) -> bool:
        credential = self._store.current()
        return credential is not None and not credential.is_expired(now)

    def require(self) -> Credential:
        credential = self._store.current()
        if credential is None:
            raise CredentialMissingError("No Google credential is installed. Run the auth tool first.")
        return credential
