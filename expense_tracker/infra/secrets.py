"""Keyring-backed persistence for the signed-in session token."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass

try:  # pragma: no cover - optional dependency
    import keyring  # type: ignore[import-not-found]
except ImportError:  # pragma: no cover - optional dependency
    keyring = None  # type: ignore[assignment]

LOG = logging.getLogger(__name__)
_SERVICE_PREFIX = "expense-tracker"
_USERNAME = "session"


@dataclass(frozen=True, slots=True)
class StoredSession:
    username: str
    access_token: str


def _service(user_pool_id: str) -> str:
    return f"{_SERVICE_PREFIX}:{user_pool_id}".lower()


def is_backend_available() -> bool:
    """Return ``True`` when the keyring backend can be used."""

    return keyring is not None


def save_session(user_pool_id: str, session: StoredSession) -> bool:
    """Persist ``session``; returns ``False`` when the keyring backend refuses it."""

    if keyring is None:
        raise RuntimeError("keyring is not installed; install the gui extras to remember sessions")
    payload = json.dumps({"username": session.username, "access_token": session.access_token})
    try:
        keyring.set_password(_service(user_pool_id), _USERNAME, payload)
    except keyring.errors.KeyringError as exc:  # type: ignore[attr-defined]
        LOG.warning("Keyring backend refused to store the session: %s", exc)
        return False
    LOG.debug("Stored session for %s", session.username)
    return True


def load_session(user_pool_id: str) -> StoredSession | None:
    if keyring is None:  # pragma: no cover - optional dependency guard
        return None
    try:
        payload = keyring.get_password(_service(user_pool_id), _USERNAME)
    except keyring.errors.KeyringError:  # type: ignore[attr-defined]
        LOG.warning("Keyring backend raised an error while reading the stored session")
        return None
    if not payload:
        return None
    try:
        data = json.loads(payload)
        return StoredSession(username=str(data["username"]), access_token=str(data["access_token"]))
    except (json.JSONDecodeError, KeyError, TypeError):
        LOG.warning("Invalid stored session payload; ignoring it")
        return None


def clear_session(user_pool_id: str) -> None:
    if keyring is None:  # pragma: no cover - optional dependency guard
        return
    try:
        keyring.delete_password(_service(user_pool_id), _USERNAME)
    except keyring.errors.PasswordDeleteError:  # type: ignore[attr-defined]
        LOG.debug("No stored session to delete")
    except keyring.errors.KeyringError as exc:  # type: ignore[attr-defined]
        LOG.warning("Keyring backend refused to delete the stored session: %s", exc)


__all__ = [
    "StoredSession",
    "clear_session",
    "is_backend_available",
    "load_session",
    "save_session",
]
