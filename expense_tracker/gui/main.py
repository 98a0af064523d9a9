"""Entry point for the expense tracker desktop client."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import TYPE_CHECKING

from expense_tracker.bootstrap import AppContext, initialize
from expense_tracker.config import load_settings
from expense_tracker.errors import ConfigurationError
from expense_tracker.logging import configure_cli_logging

if TYPE_CHECKING:  # pragma: no cover - typing only
    from PySide6 import QtWidgets

LOG = logging.getLogger(__name__)

_INSTALL_HINT = "pip install .[gui]"


def _ensure_qt() -> tuple[object, object, object] | None:
    """Attempt to import the Qt bindings used by the GUI."""

    try:  # pragma: no cover - optional dependency resolution
        from PySide6 import QtCore, QtGui, QtWidgets
    except ImportError as exc:  # pragma: no cover - optional dependency resolution
        LOG.error(
            "PySide6 is not installed. Install the GUI extras via `%s`. (%s)",
            _INSTALL_HINT,
            exc,
        )
        return None
    return QtCore, QtGui, QtWidgets


def _maybe_apply_theme(app: "QtWidgets.QApplication") -> None:
    """Load the design tokens and apply the stylesheet."""

    from .ui.theme import apply_tokens

    try:
        stylesheet = apply_tokens()
    except (OSError, ValueError) as exc:
        LOG.warning("Unable to apply GUI theme: %s", exc)
        return
    app.setStyleSheet(stylesheet)


def launch_gui(context: AppContext | None = None, *, auto_exec: bool = True) -> bool:
    """Show the expense tracker window if the Qt bindings are available.

    ``context`` defaults to :func:`~expense_tracker.bootstrap.initialize` with
    the standard outputs lookup; configuration errors propagate unchanged.
    """

    qt_modules = _ensure_qt()
    if qt_modules is None:
        return False
    QtCore, QtGui, QtWidgets = qt_modules
    if context is None:
        context = initialize()
    from .mainwindow import ExpenseMainWindow

    app = QtWidgets.QApplication.instance()
    if app is None:
        app = QtWidgets.QApplication(sys.argv or ["expense-tracker"])
    _maybe_apply_theme(app)

    window = ExpenseMainWindow(context=context, qt_core=QtCore, qt_gui=QtGui)
    window.show()
    if auto_exec:
        app.exec()
    return True


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Expense tracker desktop client")
    parser.add_argument("--outputs", help="Path to the backend outputs document")
    parser.add_argument("--settings", help="Optional YAML settings file")
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Also write JSON log lines under artifacts/logs",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Override the log level (DEBUG, INFO, WARNING, ...)",
    )
    parser.add_argument(
        "--no-exec",
        action="store_true",
        help="Initialise the GUI without starting the Qt event loop (testing)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Console script entry point used by `expense-tracker`."""

    parser = _build_parser()
    args = parser.parse_args(argv)
    settings = load_settings(args.settings)
    configure_cli_logging(args.json_logs, args.log_level or settings.log_level)
    try:
        context = initialize(args.outputs, settings)
    except ConfigurationError as exc:
        LOG.error("Cannot start the expense tracker: %s", exc)
        raise
    launched = launch_gui(context, auto_exec=not args.no_exec)
    return 0 if launched else 1


__all__ = ["launch_gui", "main"]
