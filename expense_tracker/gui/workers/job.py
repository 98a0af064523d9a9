"""Utilities for running backend calls off the GUI thread."""

from __future__ import annotations

from typing import Any, Callable, Protocol


class Runner(Protocol):
    def submit(
        self,
        fn: Callable[..., Any],
        *,
        args: tuple[Any, ...] = (),
        kwargs: dict[str, Any] | None = None,
        on_success: Callable[[Any], None] | None = None,
        on_error: Callable[[BaseException], None] | None = None,
    ) -> None: ...


class JobRunner:
    """Submit callables to a Qt thread pool and forward the results via signals."""

    def __init__(self, qt_core: Any, *, thread_pool: Any | None = None) -> None:
        self._qt_core = qt_core
        self._pool = thread_pool or qt_core.QThreadPool.globalInstance()
        self._inflight: set[Any] = set()

    def submit(
        self,
        fn: Callable[..., Any],
        *,
        args: tuple[Any, ...] = (),
        kwargs: dict[str, Any] | None = None,
        on_success: Callable[[Any], None] | None = None,
        on_error: Callable[[BaseException], None] | None = None,
    ) -> None:
        """Schedule ``fn`` to run in the background."""

        qt_core = self._qt_core
        kwargs = kwargs or {}

        class _Signals(qt_core.QObject):
            finished = qt_core.Signal(object)
            failed = qt_core.Signal(object)

        class _Runnable(qt_core.QRunnable):
            def __init__(self) -> None:
                super().__init__()
                self.signals = _Signals()

            def run(self) -> None:  # pragma: no cover - executed on worker threads
                try:
                    result = fn(*args, **kwargs)
                except BaseException as exc:  # noqa: BLE001 - propagate exact exception
                    self.signals.failed.emit(exc)
                else:
                    self.signals.finished.emit(result)

        runnable = _Runnable()
        signals = runnable.signals
        # The signals object must outlive the worker until the queued slots run.
        self._inflight.add(signals)

        def _release(*_: Any) -> None:
            self._inflight.discard(signals)

        if on_success is not None:
            signals.finished.connect(on_success)
        if on_error is not None:
            signals.failed.connect(on_error)
        signals.finished.connect(_release)
        signals.failed.connect(_release)

        self._pool.start(runnable)


class InlineJobRunner:
    """Run jobs synchronously on the calling thread (headless use and tests)."""

    def submit(
        self,
        fn: Callable[..., Any],
        *,
        args: tuple[Any, ...] = (),
        kwargs: dict[str, Any] | None = None,
        on_success: Callable[[Any], None] | None = None,
        on_error: Callable[[BaseException], None] | None = None,
    ) -> None:
        try:
            result = fn(*args, **(kwargs or {}))
        except Exception as exc:
            if on_error is None:
                raise
            on_error(exc)
            return
        if on_success is not None:
            on_success(result)


__all__ = ["InlineJobRunner", "JobRunner", "Runner"]
