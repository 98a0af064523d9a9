"""HTTP plumbing shared by the data and auth clients."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Mapping

import requests

from expense_tracker.errors import (
    BackendError,
    BackendUnavailableError,
    NotAuthenticatedError,
    RecordNotFoundError,
)

LOG = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0

TokenProvider = Callable[[], str]


def _error_detail(response: Any) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(payload, dict) and "detail" in payload:
        return str(payload["detail"])
    return str(payload)


class BackendSession:
    """Thin wrapper around :class:`requests.Session` bound to one base URL.

    ``http`` may be any object exposing ``request(method, url, **kwargs)`` with
    the requests calling convention, which lets tests plug in a FastAPI
    ``TestClient``.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        http: Any | None = None,
        token_provider: TokenProvider | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._http = http if http is not None else requests.Session()
        self._token_provider = token_provider

    def with_token_provider(self, token_provider: TokenProvider) -> "BackendSession":
        return BackendSession(
            self.base_url,
            timeout=self.timeout,
            http=self._http,
            token_provider=token_provider,
        )

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(
        self,
        method: str,
        path: str,
        *,
        json: Any | None = None,
        headers: Mapping[str, str] | None = None,
        authenticated: bool = True,
        token: str | None = None,
        expected: tuple[int, ...] = (),
    ) -> Any:
        """Send a request and translate error statuses into tracker errors.

        Statuses listed in ``expected`` are returned untouched even when they
        are not 2xx (used for ``304 Not Modified``).
        """

        merged = dict(headers or {})
        if authenticated:
            bearer = token if token is not None else self._access_token()
            merged["Authorization"] = f"Bearer {bearer}"

        started = time.perf_counter()
        try:
            response = self._http.request(
                method,
                self.url(path),
                json=json,
                headers=merged,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            LOG.warning("%s %s failed: %s", method, path, exc)
            raise BackendUnavailableError(f"Could not reach the backend at {self.base_url}: {exc}") from exc
        elapsed_ms = (time.perf_counter() - started) * 1000.0
        LOG.debug(
            "%s %s -> %s",
            method,
            path,
            response.status_code,
            extra={"operation": f"{method} {path}", "elapsed_ms": elapsed_ms},
        )

        status = response.status_code
        if status in expected or 200 <= status < 300:
            return response
        detail = _error_detail(response)
        if status == 401:
            raise NotAuthenticatedError(detail)
        if status == 404:
            raise RecordNotFoundError(detail)
        raise BackendError(status, detail)

    def _access_token(self) -> str:
        if self._token_provider is None:
            raise NotAuthenticatedError("No session is available for this client")
        return self._token_provider()


__all__ = ["BackendSession", "DEFAULT_TIMEOUT", "TokenProvider"]
