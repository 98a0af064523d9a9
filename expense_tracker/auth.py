"""User-pool session management: sign up, sign in, sign out, restore."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from types import ModuleType
from typing import TYPE_CHECKING, Callable

from expense_tracker.errors import NotAuthenticatedError
from expense_tracker.infra import secrets

if TYPE_CHECKING:  # pragma: no cover - typing only
    from expense_tracker.client import Backend

LOG = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AuthUser:
    username: str
    access_token: str
    expires_at: str | None = None


AuthListener = Callable[["AuthUser | None"], None]


class AuthSession:
    """Hold the signed-in user and hand out bearer tokens.

    Listeners are called with the new user (or ``None``) on every sign-in,
    restore and sign-out.
    """

    def __init__(
        self,
        backend: "Backend",
        *,
        remember: bool = True,
        store: ModuleType | None = None,
    ) -> None:
        self._backend = backend
        self._remember = remember
        self._store = store or secrets
        self._user: AuthUser | None = None
        self._listeners: list[AuthListener] = []
        self._lock = threading.Lock()

    @property
    def user_pool_id(self) -> str:
        return self._backend.outputs.auth.user_pool_id

    @property
    def current_user(self) -> AuthUser | None:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    def access_token(self) -> str:
        user = self._user
        if user is None:
            raise NotAuthenticatedError("Sign in before calling the backend")
        return user.access_token

    def add_listener(self, listener: AuthListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    # ------------------------------------------------------------------
    def sign_up(self, username: str, password: str) -> str:
        response = self._backend.auth.request(
            "POST",
            "auth/sign-up",
            json={"username": username, "password": password},
            authenticated=False,
        )
        created = response.json()["username"]
        LOG.info("Registered account %s", created)
        return created

    def sign_in(self, username: str, password: str) -> AuthUser:
        response = self._backend.auth.request(
            "POST",
            "auth/sign-in",
            json={
                "username": username,
                "password": password,
                "client_id": self._backend.outputs.auth.user_pool_client_id,
            },
            authenticated=False,
        )
        payload = response.json()
        user = AuthUser(
            username=payload["username"],
            access_token=payload["access_token"],
            expires_at=payload.get("expires_at"),
        )
        if self._remember and self._store.is_backend_available():
            self._store.save_session(
                self.user_pool_id,
                self._store.StoredSession(username=user.username, access_token=user.access_token),
            )
        self._set_user(user)
        LOG.info("Signed in as %s", user.username)
        return user

    def restore(self) -> AuthUser | None:
        """Revalidate a session remembered in the keyring, discarding stale ones."""

        if not self._remember or not self._store.is_backend_available():
            return None
        stored = self._store.load_session(self.user_pool_id)
        if stored is None:
            return None
        try:
            self._backend.auth.request("GET", "auth/session", token=stored.access_token)
        except NotAuthenticatedError:
            LOG.info("Stored session for %s is no longer valid", stored.username)
            self._store.clear_session(self.user_pool_id)
            return None
        user = AuthUser(username=stored.username, access_token=stored.access_token)
        self._set_user(user)
        LOG.info("Restored session for %s", user.username)
        return user

    def sign_out(self) -> None:
        user = self._user
        if user is None:
            return
        try:
            self._backend.auth.request("POST", "auth/sign-out", token=user.access_token)
        except NotAuthenticatedError:
            LOG.debug("Session already invalid on the backend")
        finally:
            try:
                self._forget_stored_session()
            finally:
                self._set_user(None)
        LOG.info("Signed out %s", user.username)

    def session_expired(self) -> None:
        """Drop a session the backend no longer accepts (expired or revoked token)."""

        user = self._user
        if user is None:
            return
        try:
            self._forget_stored_session()
        finally:
            self._set_user(None)
        LOG.warning("Session for %s expired; sign in again", user.username)

    # ------------------------------------------------------------------
    def _forget_stored_session(self) -> None:
        if self._remember and self._store.is_backend_available():
            self._store.clear_session(self.user_pool_id)

    def _set_user(self, user: AuthUser | None) -> None:
        with self._lock:
            self._user = user
        for listener in list(self._listeners):
            listener(user)


__all__ = ["AuthSession", "AuthUser"]
