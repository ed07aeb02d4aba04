"""User store boundary and two implementations.

``load`` always returns a private copy and ``save`` stores a copy, so a
caller's in-memory edits are never visible to other callers until saved.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from models.user import User
from utility.errors import PersistenceError, UserValidationError

logger = logging.getLogger(__name__)


class UserStore(Protocol):
    def load(self, credential: str) -> User:
        """Return a copy of the user for *credential*.

        Raises ``UserValidationError`` for an unknown credential and
        ``PersistenceError`` if the backing storage cannot be read.
        """
        ...

    def save(self, user: User) -> None:
        """Persist *user*; raises ``PersistenceError``."""
        ...


class InMemoryUserStore:
    """Keeps users in a dict. Used by tests and when no store path is configured."""

    def __init__(self, users: list[User] | None = None) -> None:
        self._lock = threading.Lock()
        self._users: dict[str, User] = {}
        for user in users or []:
            self._users[user.credential] = user.model_copy(deep=True)

    def load(self, credential: str) -> User:
        with self._lock:
            user = self._users.get(credential)
        if user is None:
            raise UserValidationError(f"Unknown credential '{credential}'.")
        return user.model_copy(deep=True)

    def save(self, user: User) -> None:
        with self._lock:
            self._users[user.credential] = user.model_copy(deep=True)

    def add_user(self, user: User) -> None:
        self.save(user)


class JsonFileUserStore:
    """Keeps all users in one JSON file keyed by credential.

    Writes go to a temporary file that replaces the original, so a crash mid
    write leaves the previous file intact.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def load(self, credential: str) -> User:
        with self._lock:
            try:
                users = self._read()
            except (OSError, ValueError) as exc:
                logger.error("Failed to read user store %s: %s", self._path, exc)
                raise PersistenceError(f"Could not read {self._path}.") from exc
        raw = users.get(credential)
        if raw is None:
            raise UserValidationError(f"Unknown credential '{credential}'.")
        try:
            return User.model_validate(raw)
        except ValidationError as exc:
            raise UserValidationError(
                f"Stored record for '{credential}' is invalid: {exc}"
            ) from exc

    def save(self, user: User) -> None:
        with self._lock:
            try:
                users = self._read()
                users[user.credential] = user.model_dump(mode="json")
                self._write(users)
            except (OSError, ValueError) as exc:
                logger.error("Failed to save user '%s': %s", user.credential, exc)
                raise PersistenceError(f"Could not save user '{user.credential}'.") from exc
        logger.debug("Saved user '%s' to %s", user.credential, self._path)

    def add_user(self, user: User) -> None:
        self.save(user)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _read(self) -> dict[str, dict]:
        if not self._path.exists():
            return {}
        data = json.loads(self._path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object in {self._path}.")
        return data

    def _write(self, users: dict[str, dict]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(users, indent=2), encoding="utf-8")
        os.replace(tmp_path, self._path)
