"""Toolkit-independent state and handlers behind the expense tracker window.

The window renders whatever this view model exposes:

* :meth:`ExpenseView.sections` decides between the authenticator and the
  main page (form, list and sign-out control);
* :meth:`ExpenseView.cards` lists one card per record of the last snapshot;
* :meth:`ExpenseView.submit_form` and :meth:`ExpenseView.delete_expense`
  issue backend requests without touching the displayed list, which only
  changes when the live query delivers a new snapshot.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any, Callable, Final, Protocol

from expense_tracker.auth import AuthSession, AuthUser
from expense_tracker.client import ExpenseRecord, LiveQuery, QuerySnapshot, Subscription
from expense_tracker.errors import NotAuthenticatedError

if TYPE_CHECKING:  # pragma: no cover - typing only
    from expense_tracker.gui.workers.job import Runner

LOG = logging.getLogger(__name__)

AUTH_SECTIONS: Final[frozenset[str]] = frozenset({"authenticator"})
APP_SECTIONS: Final[frozenset[str]] = frozenset({"form", "list", "sign_out"})


class ExpenseModel(Protocol):
    def create(self, fields: dict[str, Any]) -> ExpenseRecord: ...

    def delete(self, identifier: str) -> ExpenseRecord: ...

    def observe_query(self) -> LiveQuery[ExpenseRecord]: ...


@dataclass(frozen=True, slots=True)
class ExpenseForm:
    """Raw values of the creation form, as typed by the user."""

    name: str
    amount: str

    def problems(self) -> list[str]:
        issues: list[str] = []
        if not self.name.strip():
            issues.append("Expense name is required")
        amount = self.amount.strip()
        if not amount:
            issues.append("Expense amount is required")
        else:
            try:
                value = Decimal(amount)
            except InvalidOperation:
                issues.append("Expense amount must be a number")
            else:
                if not value.is_finite():
                    issues.append("Expense amount must be a number")
        return issues

    def fields(self) -> dict[str, str]:
        """Values sent to the backend, exactly as typed."""

        return {"name": self.name, "amount": self.amount}


@dataclass(frozen=True, slots=True)
class ExpenseCard:
    key: str
    name: str
    amount_label: str
    record: ExpenseRecord


class ExpenseView:
    """Stateful view: login gate, creation form, deletable list."""

    def __init__(
        self,
        model: ExpenseModel,
        auth: AuthSession,
        runner: "Runner",
        *,
        on_change: Callable[[], None] | None = None,
        call_soon: Callable[[Callable[[], None]], None] | None = None,
    ) -> None:
        """``call_soon`` moves auth notifications onto the thread that owns the view."""

        self._model = model
        self._auth = auth
        self._runner = runner
        self._on_change = on_change
        self._expenses: tuple[ExpenseRecord, ...] = ()
        self._query: LiveQuery[ExpenseRecord] | None = None
        self._subscription: Subscription | None = None
        self._sync_in_flight = False
        self._sync_pending = False
        self.last_error: str | None = None
        self._call_soon = call_soon
        self._auth.add_listener(self._auth_listener)

    # ------------------------------------------------------------------
    @property
    def expenses(self) -> tuple[ExpenseRecord, ...]:
        return self._expenses

    @property
    def is_authenticated(self) -> bool:
        return self._auth.is_authenticated

    @property
    def is_mounted(self) -> bool:
        return self._subscription is not None

    def sections(self) -> frozenset[str]:
        return APP_SECTIONS if self.is_authenticated else AUTH_SECTIONS

    def cards(self) -> list[ExpenseCard]:
        return [
            ExpenseCard(key=record.key, name=record.name, amount_label=record.amount_label, record=record)
            for record in self._expenses
        ]

    # ------------------------------------------------------------------
    def mount(self) -> None:
        """Open the live query once and request the first snapshot."""

        if self._subscription is None:
            self._query = self._model.observe_query()
            self._subscription = self._query.subscribe(next=self._receive_snapshot)
            LOG.debug("Expense list subscription opened")
        self.sync()

    def sync(self) -> None:
        """Ask the live query for a fresh snapshot; overlapping requests are coalesced."""

        if self._query is None or not self.is_authenticated:
            return
        if self._sync_in_flight:
            self._sync_pending = True
            return
        self._sync_in_flight = True
        self._runner.submit(self._query.fetch, on_success=self._fetched, on_error=self._sync_failed)

    def _fetched(self, result: Any) -> None:
        self._sync_in_flight = False
        if self._query is not None and self.is_authenticated:
            self._query.publish(result)
        self._resync_if_pending()

    def _sync_failed(self, exc: BaseException) -> None:
        self._sync_in_flight = False
        self._report_error("Could not refresh expenses", exc)
        self._resync_if_pending()

    def _resync_if_pending(self) -> None:
        if self._sync_pending:
            self._sync_pending = False
            self.sync()

    def _receive_snapshot(self, snapshot: QuerySnapshot[ExpenseRecord]) -> None:
        self._expenses = tuple(snapshot.items)
        self._notify()

    # ------------------------------------------------------------------
    def submit_form(self, form: ExpenseForm, *, reset: Callable[[], None] | None = None) -> bool:
        """Issue one create request for a valid form; returns whether it was sent."""

        issues = form.problems()
        if issues:
            LOG.debug("Form rejected: %s", "; ".join(issues))
            return False
        fields = form.fields()

        def _created(record: ExpenseRecord) -> None:
            LOG.debug("Expense %s created", record.key, extra={"operation": "create", "record_id": record.id})
            self.last_error = None
            if reset is not None:
                reset()
            self.sync()

        self._runner.submit(
            self._model.create,
            args=(fields,),
            on_success=_created,
            on_error=lambda exc: self._report_error("Could not create expense", exc),
        )
        return True

    def delete_expense(self, record: ExpenseRecord) -> bool:
        """Issue one delete request for ``record``; returns whether it was sent."""

        if not record.id:
            LOG.warning("Cannot delete %r before the backend assigns an identifier", record.name)
            return False
        identifier = record.id
        self._runner.submit(
            self._model.delete,
            args=(identifier,),
            on_success=lambda _: self._deleted(identifier),
            on_error=lambda exc: self._report_error("Could not delete expense", exc),
        )
        return True

    def _deleted(self, identifier: str) -> None:
        LOG.debug("Expense %s deleted", identifier, extra={"operation": "delete", "record_id": identifier})
        self.last_error = None
        self.sync()

    def sign_out(self) -> None:
        self._runner.submit(
            self._auth.sign_out,
            on_error=lambda exc: self._report_error("Sign out failed", exc),
        )

    # ------------------------------------------------------------------
    def _auth_listener(self, user: AuthUser | None) -> None:
        if self._call_soon is None:
            self._auth_changed(user)
        else:
            self._call_soon(lambda: self._auth_changed(user))

    def _auth_changed(self, user: AuthUser | None) -> None:
        if user is None:
            self._expenses = ()
            if self._query is not None:
                self._query.reset()
            self._notify()
            return
        self.last_error = None
        self.mount()
        self._notify()

    def _report_error(self, message: str, exc: BaseException) -> None:
        LOG.error("%s: %s", message, exc)
        if isinstance(exc, NotAuthenticatedError):
            self.last_error = "Session expired, sign in again"
            self._auth.session_expired()
        else:
            self.last_error = f"{message}: {exc}"
        self._notify()

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change()


__all__ = ["APP_SECTIONS", "AUTH_SECTIONS", "ExpenseCard", "ExpenseForm", "ExpenseView"]
