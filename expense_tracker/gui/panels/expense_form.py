"""Creation form: expense name, amount and a submit button."""

from __future__ import annotations

try:  # pragma: no cover - optional dependency
    from PySide6 import QtCore, QtGui, QtWidgets
except ImportError:  # pragma: no cover - optional dependency
    QtCore = QtGui = QtWidgets = None  # type: ignore[assignment]


class ExpenseFormPanel(QtWidgets.QWidget):  # type: ignore[misc]
    """Emit ``submitted(name, amount)`` with the raw field values."""

    submitted = QtCore.Signal(str, str)  # type: ignore[call-arg]

    def __init__(self) -> None:
        if QtWidgets is None:  # pragma: no cover
            raise RuntimeError("PySide6 required for ExpenseFormPanel")
        super().__init__()
        layout = QtWidgets.QHBoxLayout(self)

        self._name = QtWidgets.QLineEdit()
        self._name.setPlaceholderText("Expense name")
        self._name.setMaxLength(255)
        layout.addWidget(self._name, 2)

        self._amount = QtWidgets.QLineEdit()
        self._amount.setPlaceholderText("Expense amount")
        validator = QtGui.QDoubleValidator(0.0, 1e10, 2, self._amount)
        validator.setNotation(QtGui.QDoubleValidator.StandardNotation)
        self._amount.setValidator(validator)
        self._amount.returnPressed.connect(self._emit)
        layout.addWidget(self._amount, 1)

        self._submit = QtWidgets.QPushButton("Create Expense")
        self._submit.clicked.connect(self._emit)
        layout.addWidget(self._submit)

    def values(self) -> tuple[str, str]:
        return self._name.text(), self._amount.text()

    def show_problems(self, problems: list[str]) -> None:
        self.setToolTip("\n".join(problems))

    def reset(self) -> None:
        self._name.clear()
        self._amount.clear()
        self.setToolTip("")

    def _emit(self) -> None:
        name, amount = self.values()
        self.submitted.emit(name, amount)


__all__ = ["ExpenseFormPanel"]
