"""Infrastructure helpers (credential storage) for the expense tracker."""

from __future__ import annotations

from .secrets import StoredSession, clear_session, is_backend_available, load_session, save_session

__all__ = [
    "StoredSession",
    "clear_session",
    "is_backend_available",
    "load_session",
    "save_session",
]
