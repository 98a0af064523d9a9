"""Live query primitive: push full snapshots of a collection to listeners."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

LOG = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class QuerySnapshot(Generic[T]):
    """The complete result set of a live query at one point in time."""

    items: tuple[T, ...]
    is_synced: bool = True


@dataclass(frozen=True, slots=True)
class FetchResult(Generic[T]):
    items: tuple[T, ...]
    etag: str | None = None


SnapshotFetcher = Callable[[str | None], "FetchResult[T] | None"]


class Subscription:
    """Handle returned by :meth:`LiveQuery.subscribe`."""

    def __init__(self, query: "LiveQuery[Any]", listener_id: int) -> None:
        self._query = query
        self._listener_id = listener_id

    @property
    def closed(self) -> bool:
        return not self._query.has_listener(self._listener_id)

    def unsubscribe(self) -> None:
        self._query.remove_listener(self._listener_id)


class LiveQuery(Generic[T]):
    """Deliver the full current result set to subscribers whenever it changes.

    Fetching and publishing are split so the network call can run on a worker
    thread while delivery happens on the caller's (GUI) thread:
    ``publish(fetch())``. :meth:`refresh` does both inline.
    """

    def __init__(self, fetcher: SnapshotFetcher) -> None:
        self._fetcher = fetcher
        self._listeners: dict[int, tuple[Callable[[QuerySnapshot[T]], None], Callable[[BaseException], None] | None]] = {}
        self._next_id = 0
        self._etag: str | None = None
        self._last: tuple[T, ...] | None = None

    @property
    def latest(self) -> QuerySnapshot[T] | None:
        if self._last is None:
            return None
        return QuerySnapshot(items=self._last)

    def has_listener(self, listener_id: int) -> bool:
        return listener_id in self._listeners

    def subscribe(
        self,
        next: Callable[[QuerySnapshot[T]], None],  # noqa: A002 - mirrors observer naming
        error: Callable[[BaseException], None] | None = None,
    ) -> Subscription:
        listener_id = self._next_id
        self._next_id += 1
        self._listeners[listener_id] = (next, error)
        if self._last is not None:
            next(QuerySnapshot(items=self._last))
        return Subscription(self, listener_id)

    def remove_listener(self, listener_id: int) -> None:
        self._listeners.pop(listener_id, None)

    def fetch(self) -> FetchResult[T] | None:
        """Fetch the current result set; ``None`` means unchanged since the last publish."""

        return self._fetcher(self._etag)

    def publish(self, result: FetchResult[T] | None) -> bool:
        """Deliver ``result`` to every listener if it differs from the last snapshot."""

        if result is None:
            return False
        self._etag = result.etag
        if self._last is not None and tuple(result.items) == self._last:
            return False
        self._last = tuple(result.items)
        snapshot = QuerySnapshot(items=self._last)
        LOG.debug("Delivering snapshot with %d items", len(snapshot.items))
        for on_next, _ in list(self._listeners.values()):
            on_next(snapshot)
        return True

    def fail(self, exc: BaseException) -> None:
        """Forward a fetch failure to listeners that registered an error callback."""

        for _, on_error in list(self._listeners.values()):
            if on_error is not None:
                on_error(exc)

    def refresh(self) -> bool:
        try:
            result = self.fetch()
        except Exception as exc:
            self.fail(exc)
            raise
        return self.publish(result)

    def reset(self) -> None:
        """Forget the cached snapshot so the next fetch is delivered again."""

        self._etag = None
        self._last = None


__all__ = ["FetchResult", "LiveQuery", "QuerySnapshot", "Subscription"]
