"""Current-session record for the application's operators."""

from __future__ import annotations

import json
import logging
import secrets

from pydantic import ValidationError

from fleetfines.models.user import User
from fleetfines.state.repository import Repository
from fleetfines.storage.backend import StorageBackend

_logger = logging.getLogger(__name__)


class SessionManager:
    """Login, logout and "who is logged in" over a single session key.

    Parameters
    ----------
    backend : StorageBackend
        Backend shared with the repositories.
    key : str
        Namespaced key holding the logged-in user.
    users : Repository
        Repository of registered users.
    """

    def __init__(self, backend: StorageBackend, key: str, users: Repository[User]) -> None:
        self._backend = backend
        self._key = key
        self._users = users

    def register(self, user: User) -> bool:
        """Add a user; ``False`` when the username is taken."""
        return self._users.create(user)

    def login(self, username: str, password: str) -> User | None:
        """Open a session when *username*/*password* match a registered user.

        Passwords are compared verbatim.
        """
        for user in self._users.all():
            if user.username == username and secrets.compare_digest(
                user.password.encode("utf-8"), password.encode("utf-8")
            ):
                self._backend.set(self._key, json.dumps(user.to_storage(), ensure_ascii=False))
                _logger.debug("Session opened for %s", username)
                return user
        _logger.debug("Login rejected for %s", username)
        return None

    def current_user(self) -> User | None:
        raw = self._backend.get(self._key)
        if raw is None:
            return None
        try:
            return User.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError):
            _logger.warning("Corrupt session record %s; treating as logged out", self._key)
            return None

    @property
    def is_authenticated(self) -> bool:
        return self.current_user() is not None

    def logout(self) -> None:
        self._backend.remove(self._key)
