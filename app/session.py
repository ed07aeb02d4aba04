"""Holder for the credential of the signed-in user."""

from __future__ import annotations

import threading


class ClientSession:
    def __init__(self, credential: str | None = None) -> None:
        self._lock = threading.Lock()
        self._credential = credential

    @property
    def credential(self) -> str | None:
        with self._lock:
            return self._credential

    @credential.setter
    def credential(self, value: str | None) -> None:
        with self._lock:
            self._credential = value

    def require_credential(self) -> str:
        """Return the credential, raising ``RuntimeError`` if nobody is signed in."""
        credential = self.credential
        if credential is None:
            raise RuntimeError("No user is signed in.")
        return credential
