"""One-time wiring of configuration, backend connection, auth and data client."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import Any

from expense_tracker.auth import AuthSession
from expense_tracker.client import Backend, DataClient, configure, generate_client
from expense_tracker.config import (
    BackendOutputs,
    TrackerSettings,
    load_outputs,
    resolve_outputs_path,
)

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppContext:
    """Handle passed explicitly to the view; nothing is configured at import time."""

    outputs: BackendOutputs
    settings: TrackerSettings
    backend: Backend
    auth: AuthSession
    client: DataClient


def initialize(
    outputs_path: Path | str | None = None,
    settings: TrackerSettings | None = None,
    *,
    outputs: BackendOutputs | None = None,
    http: Any | None = None,
    secret_store: ModuleType | None = None,
) -> AppContext:
    """Load the outputs document and build every collaborator of the view.

    Raises :class:`~expense_tracker.errors.ConfigurationError` when the outputs
    are missing or malformed; callers let it propagate so nothing is mounted.
    """

    settings = settings or TrackerSettings()
    if outputs is None:
        path = resolve_outputs_path(outputs_path, settings)
        LOG.info("Loading backend outputs from %s", path)
        outputs = load_outputs(path)

    backend = configure(outputs, timeout=settings.request_timeout, http=http)
    auth = AuthSession(backend, remember=settings.remember_session, store=secret_store)
    client = generate_client(backend, auth, auth_mode="userPool")
    return AppContext(outputs=outputs, settings=settings, backend=backend, auth=auth, client=client)


__all__ = ["AppContext", "initialize"]
