"""Per-model data access: list, create, delete and live queries."""

from __future__ import annotations

import logging
from typing import Any, Generic, Mapping, TypeVar

from expense_tracker.client.http import BackendSession
from expense_tracker.client.observe import FetchResult, LiveQuery
from expense_tracker.client.records import ExpenseRecord

LOG = logging.getLogger(__name__)

R = TypeVar("R", bound=ExpenseRecord)


class ModelClient(Generic[R]):
    """Operations on one named record collection of the backend."""

    def __init__(self, name: str, session: BackendSession, record_type: type[R], path: str) -> None:
        self.name = name
        self._session = session
        self._record_type = record_type
        self._path = path.strip("/")

    def _parse_list(self, payload: Any) -> tuple[R, ...]:
        if not isinstance(payload, list):
            raise ValueError(f"Expected a list of {self.name} records, got {type(payload).__name__}")
        return tuple(self._record_type.from_payload(item) for item in payload)

    def list(self) -> tuple[R, ...]:
        response = self._session.request("GET", self._path)
        return self._parse_list(response.json())

    def get(self, identifier: str) -> R:
        response = self._session.request("GET", f"{self._path}/{identifier}")
        return self._record_type.from_payload(response.json())

    def create(self, fields: Mapping[str, Any]) -> R:
        response = self._session.request("POST", self._path, json=dict(fields))
        record = self._record_type.from_payload(response.json())
        LOG.info("Created %s", self.name, extra={"operation": "create", "record_id": record.id})
        return record

    def delete(self, identifier: str) -> R:
        if not identifier:
            raise ValueError(f"Cannot delete a {self.name} without an identifier")
        response = self._session.request("DELETE", f"{self._path}/{identifier}")
        LOG.info("Deleted %s", self.name, extra={"operation": "delete", "record_id": identifier})
        return self._record_type.from_payload(response.json())

    def fetch_snapshot(self, etag: str | None = None) -> FetchResult[R] | None:
        """Conditional GET of the collection; ``None`` when nothing changed."""

        headers = {"If-None-Match": etag} if etag else None
        response = self._session.request("GET", self._path, headers=headers, expected=(304,))
        if response.status_code == 304:
            return None
        return FetchResult(items=self._parse_list(response.json()), etag=response.headers.get("ETag"))

    def observe_query(self) -> LiveQuery[R]:
        return LiveQuery(self.fetch_snapshot)


__all__ = ["ModelClient"]
