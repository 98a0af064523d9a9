"""Main window: login gate in front of the expense form and list."""

from __future__ import annotations

import logging
from typing import Any, Callable

from expense_tracker.bootstrap import AppContext
from expense_tracker.client import ExpenseRecord
from expense_tracker.errors import BackendError, BackendUnavailableError
from expense_tracker.gui.panels.authenticator import AuthenticatorPanel
from expense_tracker.gui.panels.expense_form import ExpenseFormPanel
from expense_tracker.gui.panels.expense_list import ExpenseListPanel
from expense_tracker.gui.workers.job import JobRunner
from expense_tracker.view import ExpenseForm, ExpenseView

try:  # pragma: no cover - optional dependency
    from PySide6 import QtCore, QtWidgets
except ImportError:  # pragma: no cover - optional dependency
    QtCore = QtWidgets = None  # type: ignore[assignment]

LOG = logging.getLogger(__name__)

_AUTH_PAGE = 0
_APP_PAGE = 1


class _LogEmitter(QtCore.QObject):  # type: ignore[misc]
    message = QtCore.Signal(str)  # type: ignore[call-arg]


class _Dispatcher(QtCore.QObject):  # type: ignore[misc]
    """Run callables on the thread that owns this object."""

    posted = QtCore.Signal(object)  # type: ignore[call-arg]

    def __init__(self) -> None:
        super().__init__()
        self.posted.connect(self._run)

    def post(self, fn: Callable[[], None]) -> None:
        self.posted.emit(fn)

    def _run(self, fn: Callable[[], None]) -> None:
        fn()


class _GuiLogHandler(logging.Handler):
    def __init__(self, emitter: _LogEmitter) -> None:
        super().__init__(level=logging.INFO)
        self._emitter = emitter
        self.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
        except (TypeError, ValueError):  # pragma: no cover - malformed record arguments
            message = record.getMessage()
        self._emitter.message.emit(message)


class ExpenseMainWindow(QtWidgets.QMainWindow):  # type: ignore[misc]
    """Authenticator page until sign-in, then the expense page."""

    def __init__(self, *, context: AppContext, qt_core: Any, qt_gui: Any) -> None:
        if QtWidgets is None:  # pragma: no cover
            raise RuntimeError("PySide6 is required to launch the expense tracker")
        super().__init__()
        self._context = context
        self._qt_core = qt_core
        self._qt_gui = qt_gui
        self._jobs = JobRunner(qt_core)
        self._dispatcher = _Dispatcher()
        self._emitter = _LogEmitter()
        self._log_handler = _GuiLogHandler(self._emitter)
        self._logging_attached = False

        self.setWindowTitle("Expense Tracker")
        self.resize(960, 720)

        self._build_ui()
        self._attach_logging()
        self._view = ExpenseView(
            context.client.models.Expense,
            context.auth,
            self._jobs,
            on_change=self._render,
            call_soon=self._dispatcher.post,
        )
        self._connect_signals()

        self._poll = qt_core.QTimer(self)
        self._poll.setInterval(context.settings.poll_interval_ms)
        self._poll.timeout.connect(self._view.sync)
        self._poll.start()

        self._render()
        self._jobs.submit(context.auth.restore, on_error=self._restore_failed)

    # ------------------------------------------------------------------
    def _build_ui(self) -> None:
        central = QtWidgets.QWidget()
        layout = QtWidgets.QVBoxLayout(central)

        self._pages = QtWidgets.QStackedWidget()
        self._authenticator = AuthenticatorPanel()
        self._pages.insertWidget(_AUTH_PAGE, self._authenticator)

        app_page = QtWidgets.QWidget()
        app_layout = QtWidgets.QVBoxLayout(app_page)
        heading = QtWidgets.QLabel("Expense Tracker")
        heading.setObjectName("heading")
        app_layout.addWidget(heading)
        self._form = ExpenseFormPanel()
        app_layout.addWidget(self._form)
        divider = QtWidgets.QFrame()
        divider.setFrameShape(QtWidgets.QFrame.HLine)
        app_layout.addWidget(divider)
        app_layout.addWidget(QtWidgets.QLabel("Expenses"))
        self._list = ExpenseListPanel()
        app_layout.addWidget(self._list, 1)
        self._sign_out_button = QtWidgets.QPushButton("Sign Out")
        app_layout.addWidget(self._sign_out_button)
        self._pages.insertWidget(_APP_PAGE, app_page)
        layout.addWidget(self._pages, 1)

        self._log_console = QtWidgets.QPlainTextEdit()
        self._log_console.setReadOnly(True)
        self._log_console.setMaximumBlockCount(500)
        self._log_console.setMaximumHeight(120)
        self._log_console.setPlaceholderText("Backend activity")
        layout.addWidget(self._log_console)

        self.setCentralWidget(central)
        self.statusBar().showMessage("Ready")

    def _attach_logging(self) -> None:
        root = logging.getLogger("expense_tracker")
        if self._log_handler not in root.handlers:
            root.addHandler(self._log_handler)
        if not self._logging_attached:
            self._emitter.message.connect(self._append_log)
            self._logging_attached = True

    def _connect_signals(self) -> None:
        self._authenticator.signInRequested.connect(self._sign_in)
        self._authenticator.signUpRequested.connect(self._sign_up)
        self._form.submitted.connect(self._submit_form)
        self._list.deleteRequested.connect(self._delete)
        self._sign_out_button.clicked.connect(self._view.sign_out)

    # ------------------------------------------------------------------
    def closeEvent(self, event: Any) -> None:  # noqa: D401 - Qt override
        """Stop polling and detach logging handlers on window close."""

        self._poll.stop()
        root = logging.getLogger("expense_tracker")
        if self._log_handler in root.handlers:
            root.removeHandler(self._log_handler)
        if self._logging_attached:
            self._emitter.message.disconnect(self._append_log)
            self._logging_attached = False
        super().closeEvent(event)

    # ------------------------------------------------------------------
    def _render(self) -> None:
        if "authenticator" in self._view.sections():
            self._pages.setCurrentIndex(_AUTH_PAGE)
            self._list.set_cards(())
        else:
            self._pages.setCurrentIndex(_APP_PAGE)
            self._list.set_cards(self._view.cards())
        user = self._context.auth.current_user
        if self._view.last_error:
            self.statusBar().showMessage(self._view.last_error)
        elif user is not None:
            self.statusBar().showMessage(f"Signed in as {user.username}")
        else:
            self.statusBar().showMessage("Signed out")

    def _append_log(self, message: str) -> None:
        self._log_console.appendPlainText(message)

    # ------------------------------------------------------------------
    def _sign_in(self, username: str, password: str) -> None:
        self._authenticator.set_busy(True)
        self._jobs.submit(
            self._context.auth.sign_in,
            args=(username, password),
            on_success=lambda _: self._authenticator.reset(),
            on_error=self._auth_failed,
        )

    def _sign_up(self, username: str, password: str) -> None:
        self._authenticator.set_busy(True)

        def _created(name: str) -> None:
            self._authenticator.set_busy(False)
            self._authenticator.show_message(f"Account {name} created. Sign in to continue.")

        self._jobs.submit(
            self._context.auth.sign_up,
            args=(username, password),
            on_success=_created,
            on_error=self._auth_failed,
        )

    def _auth_failed(self, exc: BaseException) -> None:
        self._authenticator.set_busy(False)
        if isinstance(exc, BackendUnavailableError):
            message = "Backend unreachable, try again later"
        elif isinstance(exc, BackendError):
            message = exc.detail or str(exc)
        else:
            message = str(exc)
        LOG.warning("Authentication failed: %s", message)
        self._authenticator.show_message(message)

    def _restore_failed(self, exc: BaseException) -> None:
        LOG.warning("Could not restore the previous session: %s", exc)

    def _submit_form(self, name: str, amount: str) -> None:
        form = ExpenseForm(name=name, amount=amount)
        if not self._view.submit_form(form, reset=self._form.reset):
            problems = form.problems()
            self._form.show_problems(problems)
            self.statusBar().showMessage("; ".join(problems))

    def _delete(self, record: ExpenseRecord) -> None:
        self._view.delete_expense(record)


__all__ = ["ExpenseMainWindow"]
