from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from expense_tracker.auth import AuthSession, AuthUser
from expense_tracker.client import configure
from expense_tracker.config import BackendOutputs
from expense_tracker.errors import BackendError, NotAuthenticatedError
from expense_tracker.infra import secrets

PASSWORD = "correct-horse-battery"


@pytest.fixture
def dummy_keyring(monkeypatch: pytest.MonkeyPatch) -> dict[str, dict[str, str]]:
    storage: dict[str, dict[str, str]] = {}

    class _Errors:
        class PasswordDeleteError(Exception):
            pass

        class KeyringError(Exception):
            pass

    class DummyKeyring:
        errors = _Errors

        def set_password(self, service: str, username: str, password: str) -> None:
            storage.setdefault(service, {})[username] = password

        def get_password(self, service: str, username: str) -> str | None:
            return storage.get(service, {}).get(username)

        def delete_password(self, service: str, username: str) -> None:
            try:
                del storage[service][username]
            except KeyError as exc:
                raise self.errors.PasswordDeleteError from exc

    monkeypatch.setattr(secrets, "keyring", DummyKeyring())
    return storage


@pytest.fixture()
def backend(backend_client: TestClient, outputs: BackendOutputs):
    return configure(outputs, http=backend_client)


def test_secrets_roundtrip(dummy_keyring: dict[str, dict[str, str]]) -> None:
    secrets.save_session("pool", secrets.StoredSession(username="alice", access_token="tok"))
    assert secrets.load_session("pool") == secrets.StoredSession(username="alice", access_token="tok")
    secrets.clear_session("pool")
    assert secrets.load_session("pool") is None
    secrets.clear_session("pool")


def test_secrets_ignore_corrupt_payload(dummy_keyring: dict[str, dict[str, str]]) -> None:
    dummy_keyring["expense-tracker:pool"] = {"session": "not json"}
    assert secrets.load_session("pool") is None


def test_missing_keyring_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(secrets, "keyring", None)
    assert secrets.is_backend_available() is False
    with pytest.raises(RuntimeError):
        secrets.save_session("pool", secrets.StoredSession(username="alice", access_token="tok"))


def test_sign_in_notifies_and_remembers(backend, dummy_keyring: dict[str, dict[str, str]]) -> None:
    auth = AuthSession(backend)
    events: list[AuthUser | None] = []
    auth.add_listener(events.append)

    assert auth.sign_up("alice", PASSWORD) == "alice"
    user = auth.sign_in("alice", PASSWORD)

    assert auth.is_authenticated
    assert auth.access_token() == user.access_token
    assert events == [user]
    stored = secrets.load_session(auth.user_pool_id)
    assert stored is not None and stored.access_token == user.access_token


def test_wrong_password_is_rejected(backend) -> None:
    auth = AuthSession(backend, remember=False)
    auth.sign_up("alice", PASSWORD)
    with pytest.raises(NotAuthenticatedError):
        auth.sign_in("alice", "definitely-wrong")
    assert not auth.is_authenticated
    with pytest.raises(NotAuthenticatedError):
        auth.access_token()


def test_duplicate_sign_up_conflicts(backend) -> None:
    auth = AuthSession(backend, remember=False)
    auth.sign_up("alice", PASSWORD)
    with pytest.raises(BackendError) as excinfo:
        auth.sign_up("alice", PASSWORD)
    assert excinfo.value.status_code == 409


def test_restore_reuses_valid_session(backend, dummy_keyring: dict[str, dict[str, str]]) -> None:
    first = AuthSession(backend)
    first.sign_up("alice", PASSWORD)
    user = first.sign_in("alice", PASSWORD)

    second = AuthSession(backend)
    restored = second.restore()
    assert restored is not None
    assert restored.username == "alice"
    assert second.access_token() == user.access_token


def test_restore_discards_revoked_session(backend, dummy_keyring: dict[str, dict[str, str]]) -> None:
    first = AuthSession(backend)
    first.sign_up("alice", PASSWORD)
    token = first.sign_in("alice", PASSWORD).access_token
    backend.auth.request("POST", "auth/sign-out", token=token)

    second = AuthSession(backend)
    assert second.restore() is None
    assert secrets.load_session(second.user_pool_id) is None


def test_sign_out_clears_user_and_keyring(backend, dummy_keyring: dict[str, dict[str, str]]) -> None:
    auth = AuthSession(backend)
    auth.sign_up("alice", PASSWORD)
    token = auth.sign_in("alice", PASSWORD).access_token
    events: list[AuthUser | None] = []
    auth.add_listener(events.append)

    auth.sign_out()

    assert events == [None]
    assert not auth.is_authenticated
    assert secrets.load_session(auth.user_pool_id) is None
    with pytest.raises(NotAuthenticatedError):
        backend.auth.request("GET", "auth/session", token=token)


def test_listener_can_be_removed(backend) -> None:
    auth = AuthSession(backend, remember=False)
    events: list[AuthUser | None] = []
    remove = auth.add_listener(events.append)
    remove()
    auth.sign_up("alice", PASSWORD)
    auth.sign_in("alice", PASSWORD)
    assert events == []


@pytest.fixture
def broken_keyring(monkeypatch: pytest.MonkeyPatch) -> None:
    """A keyring that is installed but has no usable backend."""

    class _Errors:
        class KeyringError(Exception):
            pass

        class PasswordDeleteError(KeyringError):
            pass

    class BrokenKeyring:
        errors = _Errors

        def set_password(self, service: str, username: str, password: str) -> None:
            raise self.errors.KeyringError("no backend")

        def get_password(self, service: str, username: str) -> str | None:
            raise self.errors.KeyringError("no backend")

        def delete_password(self, service: str, username: str) -> None:
            raise self.errors.KeyringError("no backend")

    monkeypatch.setattr(secrets, "keyring", BrokenKeyring())


def test_sign_in_survives_keyring_write_failure(backend, broken_keyring: None) -> None:
    auth = AuthSession(backend)
    events: list[AuthUser | None] = []
    auth.add_listener(events.append)
    auth.sign_up("alice", PASSWORD)

    user = auth.sign_in("alice", PASSWORD)

    assert auth.is_authenticated
    assert events == [user]
    assert secrets.load_session(auth.user_pool_id) is None


def test_sign_out_survives_keyring_delete_failure(backend, broken_keyring: None) -> None:
    auth = AuthSession(backend)
    auth.sign_up("alice", PASSWORD)
    auth.sign_in("alice", PASSWORD)
    events: list[AuthUser | None] = []
    auth.add_listener(events.append)

    auth.sign_out()

    assert not auth.is_authenticated
    assert events == [None]


def test_session_expired_drops_user_and_stored_token(backend, dummy_keyring: dict[str, dict[str, str]]) -> None:
    auth = AuthSession(backend)
    auth.sign_up("alice", PASSWORD)
    auth.sign_in("alice", PASSWORD)
    events: list[AuthUser | None] = []
    auth.add_listener(events.append)

    auth.session_expired()
    auth.session_expired()

    assert not auth.is_authenticated
    assert events == [None]
    assert secrets.load_session(auth.user_pool_id) is None
