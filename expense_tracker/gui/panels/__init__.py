"""Subpackage containing the GUI panels used by :mod:`expense_tracker.gui`."""

from .authenticator import AuthenticatorPanel
from .expense_form import ExpenseFormPanel
from .expense_list import ExpenseListPanel

__all__ = ["AuthenticatorPanel", "ExpenseFormPanel", "ExpenseListPanel"]
