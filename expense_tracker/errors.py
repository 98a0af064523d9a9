"""Exception hierarchy shared by the client SDK, the auth session and the view."""

from __future__ import annotations


class TrackerError(RuntimeError):
    """Base class for every error raised by :mod:`expense_tracker`."""


class ConfigurationError(TrackerError):
    """Raised when the outputs document or the settings file is missing or invalid."""


class BackendError(TrackerError):
    """Raised when the backend answers with an error status."""

    def __init__(self, status_code: int, detail: str) -> None:
        super().__init__(f"Backend returned {status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


class BackendUnavailableError(TrackerError):
    """Raised when the backend cannot be reached at all."""


class NotAuthenticatedError(BackendError):
    """Raised when no session exists or the backend rejects the session token."""

    def __init__(self, detail: str = "Not authenticated") -> None:
        super().__init__(401, detail)


class RecordNotFoundError(BackendError):
    """Raised when the addressed record does not exist."""

    def __init__(self, detail: str = "Record not found") -> None:
        super().__init__(404, detail)


__all__ = [
    "BackendError",
    "BackendUnavailableError",
    "ConfigurationError",
    "NotAuthenticatedError",
    "RecordNotFoundError",
    "TrackerError",
]
