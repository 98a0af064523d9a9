"""Grid of expense cards, each with a delete control."""

from __future__ import annotations

from typing import Iterable

from expense_tracker.view import ExpenseCard

try:  # pragma: no cover - optional dependency
    from PySide6 import QtCore, QtWidgets
except ImportError:  # pragma: no cover - optional dependency
    QtCore = QtWidgets = None  # type: ignore[assignment]

_COLUMNS = 3


class ExpenseListPanel(QtWidgets.QScrollArea):  # type: ignore[misc]
    """Render :class:`~expense_tracker.view.ExpenseCard` items in a grid."""

    deleteRequested = QtCore.Signal(object)  # type: ignore[call-arg]

    def __init__(self) -> None:
        if QtWidgets is None:  # pragma: no cover
            raise RuntimeError("PySide6 required for ExpenseListPanel")
        super().__init__()
        self.setWidgetResizable(True)
        self._container = QtWidgets.QWidget()
        self._grid = QtWidgets.QGridLayout(self._container)
        self._grid.setAlignment(QtCore.Qt.AlignTop)
        self.setWidget(self._container)
        self._keys: tuple[tuple[str, str, str], ...] = ()

    def set_cards(self, cards: Iterable[ExpenseCard]) -> None:
        cards = list(cards)
        keys = tuple((card.key, card.name, card.amount_label) for card in cards)
        if keys == self._keys:
            return
        self._keys = keys
        while self._grid.count():
            item = self._grid.takeAt(0)
            widget = item.widget()
            if widget is not None:
                widget.deleteLater()
        for index, card in enumerate(cards):
            row, column = divmod(index, _COLUMNS)
            self._grid.addWidget(self._build_card(card), row, column)

    def _build_card(self, card: ExpenseCard) -> "QtWidgets.QWidget":
        frame = QtWidgets.QGroupBox()
        frame.setObjectName(f"expense_{card.key}")
        layout = QtWidgets.QVBoxLayout(frame)
        name = QtWidgets.QLabel(card.name)
        name.setTextFormat(QtCore.Qt.PlainText)
        name.setWordWrap(True)
        layout.addWidget(name)
        amount = QtWidgets.QLabel(f"<i>{card.amount_label}</i>")
        layout.addWidget(amount)
        button = QtWidgets.QPushButton("Delete")
        button.clicked.connect(lambda _=False, record=card.record: self.deleteRequested.emit(record))
        layout.addWidget(button)
        return frame


__all__ = ["ExpenseListPanel"]
