from __future__ import annotations

from decimal import Decimal
from typing import Any

import pytest

try:
    from hypothesis import given
    from hypothesis import strategies as st
except ModuleNotFoundError:  # pragma: no cover - optional dependency
    pytest.skip("Requires the hypothesis library", allow_module_level=True)

from expense_tracker.auth import AuthUser
from expense_tracker.client import LiveQuery
from expense_tracker.client.observe import FetchResult
from expense_tracker.client.records import ExpenseRecord
from expense_tracker.gui.workers.job import InlineJobRunner
from expense_tracker.view import ExpenseView


class _Auth:
    is_authenticated = True
    current_user = AuthUser(username="alice", access_token="token")

    def add_listener(self, listener: Any) -> Any:
        return lambda: None


class _Model:
    def __init__(self) -> None:
        self.query: LiveQuery[ExpenseRecord] = LiveQuery(lambda etag: FetchResult(items=()))

    def observe_query(self) -> LiveQuery[ExpenseRecord]:
        return self.query


_amounts = st.decimals(min_value=0, max_value=10_000, places=2, allow_nan=False, allow_infinity=False)


@st.composite
def _snapshots(draw: st.DrawFn) -> tuple[ExpenseRecord, ...]:
    names = draw(st.lists(st.text(min_size=1, max_size=12), unique=True, max_size=15))
    records = []
    for index, name in enumerate(names):
        identifier = draw(st.one_of(st.none(), st.just(f"id-{index}")))
        records.append(ExpenseRecord(id=identifier, name=f"n:{name}", amount=Decimal(draw(_amounts))))
    return tuple(records)


@given(snapshots=st.lists(_snapshots(), min_size=1, max_size=5))
def test_displayed_list_tracks_last_snapshot(snapshots: list[tuple[ExpenseRecord, ...]]) -> None:
    model = _Model()
    view = ExpenseView(model, _Auth(), InlineJobRunner())
    view.mount()
    for snapshot in snapshots:
        model.query.publish(FetchResult(items=snapshot))
        model.query.publish(FetchResult(items=snapshot))
        assert view.expenses == snapshot

    cards = view.cards()
    assert len(cards) == len(snapshots[-1])
    assert len({card.key for card in cards}) == len(cards)
