# Overview: Local login session; "logged in" is process state, never a stored field.

"""
Local Session

WHY: The till has one operator at a time. Whether someone is logged in is
a flag on the running process (DokanContext.session), kept apart from the
UserCredential row so that syncing or restoring the users table never logs
anyone in or out.

SECURITY NOTES:
- PINs are hashed with bcrypt; the plaintext never reaches the store
- verify_pin is timing-safe (bcrypt.checkpw)
"""

from __future__ import annotations

import threading

import bcrypt
from flask import current_app

from . import store_service


def hash_pin(pin: str) -> str:
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    hashed = bcrypt.hashpw(pin.encode("utf-8"), bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def verify_pin(pin: str, pin_hash: str) -> bool:
    try:
        return bcrypt.checkpw(pin.encode("utf-8"), pin_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash in the store
        return False


class LocalSession:
    """At most one active user per process."""

    def __init__(self) -> None:
        self._username: str | None = None
        self._lock = threading.Lock()

    @property
    def username(self) -> str | None:
        with self._lock:
            return self._username

    def start(self, username: str) -> None:
        with self._lock:
            self._username = username

    def end(self) -> None:
        with self._lock:
            self._username = None


def _session() -> LocalSession:
    from ..context import get_context
    return get_context().session


def login(username: str, pin: str) -> bool:
    """Start a session if the PIN matches. Returns False for unknown user or wrong PIN."""
    user = store_service.find("users", (username or "").strip())
    if user is None or not verify_pin(pin or "", user.pin_hash):
        current_app.logger.info("Rejected login for %r", username)
        return False
    _session().start(user.username)
    return True


def current_user():
    """The logged-in UserCredential, or None."""
    session = _session()
    username = session.username
    if username is None:
        return None
    user = store_service.find("users", username)
    if user is None:
        # Account removed underneath the session
        session.end()
    return user


def logout() -> None:
    _session().end()


def is_logged_in() -> bool:
    return current_user() is not None
