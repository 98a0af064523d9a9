"""Data client for the managed expense backend.

Usage mirrors a generated client::

    backend = configure(outputs)
    auth = AuthSession(backend)
    client = generate_client(backend, auth, auth_mode="userPool")
    client.models.Expense.observe_query().subscribe(next=render)
    client.models.Expense.create({"name": "Coffee", "amount": "4.50"})
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import SimpleNamespace
from typing import TYPE_CHECKING, Any

from expense_tracker.client.http import DEFAULT_TIMEOUT, BackendSession
from expense_tracker.client.models import ModelClient
from expense_tracker.client.observe import FetchResult, LiveQuery, QuerySnapshot, Subscription
from expense_tracker.client.records import MODEL_REGISTRY, ExpenseRecord
from expense_tracker.config import AUTH_MODES, BackendOutputs
from expense_tracker.errors import ConfigurationError

if TYPE_CHECKING:  # pragma: no cover - typing only
    from expense_tracker.auth import AuthSession

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class Backend:
    """Configured connection to one backend deployment."""

    outputs: BackendOutputs
    data: BackendSession
    auth: BackendSession


@dataclass(frozen=True)
class DataClient:
    backend: Backend
    auth_mode: str
    models: Any


def configure(outputs: BackendOutputs, *, timeout: float = DEFAULT_TIMEOUT, http: Any | None = None) -> Backend:
    """Build the HTTP sessions described by ``outputs``."""

    LOG.info("Configuring backend at %s (user pool %s)", outputs.data.url, outputs.auth.user_pool_id)
    return Backend(
        outputs=outputs,
        data=BackendSession(outputs.data.url, timeout=timeout, http=http),
        auth=BackendSession(outputs.auth.url, timeout=timeout, http=http),
    )


def generate_client(backend: Backend, auth: "AuthSession", *, auth_mode: str = "userPool") -> DataClient:
    """Return a client whose requests are authorised through ``auth``."""

    required = AUTH_MODES.get(auth_mode)
    if required is None:
        raise ConfigurationError(f"Unsupported auth mode {auth_mode!r}")
    if required not in backend.outputs.data.authorization_types:
        raise ConfigurationError(f"Backend does not accept the {auth_mode!r} auth mode")

    session = backend.data.with_token_provider(auth.access_token)
    models: dict[str, ModelClient[Any]] = {}
    for name in backend.outputs.data.models:
        entry = MODEL_REGISTRY.get(name)
        if entry is None:
            LOG.warning("Skipping unknown model %s declared by the backend", name)
            continue
        record_type, path = entry
        models[name] = ModelClient(name, session, record_type, path)
    return DataClient(backend=backend, auth_mode=auth_mode, models=SimpleNamespace(**models))


__all__ = [
    "Backend",
    "BackendSession",
    "DataClient",
    "ExpenseRecord",
    "FetchResult",
    "LiveQuery",
    "ModelClient",
    "QuerySnapshot",
    "Subscription",
    "configure",
    "generate_client",
]
