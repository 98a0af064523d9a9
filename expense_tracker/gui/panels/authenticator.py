"""Sign-in / create-account panel shown while no user is signed in."""

from __future__ import annotations

try:  # pragma: no cover - optional dependency
    from PySide6 import QtCore, QtWidgets
except ImportError:  # pragma: no cover - optional dependency
    QtCore = QtWidgets = None  # type: ignore[assignment]


class AuthenticatorPanel(QtWidgets.QWidget):  # type: ignore[misc]
    """Collect credentials and emit them; the window performs the requests."""

    signInRequested = QtCore.Signal(str, str)  # type: ignore[call-arg]
    signUpRequested = QtCore.Signal(str, str)  # type: ignore[call-arg]

    def __init__(self) -> None:
        if QtWidgets is None:  # pragma: no cover
            raise RuntimeError("PySide6 required for AuthenticatorPanel")
        super().__init__()
        layout = QtWidgets.QVBoxLayout(self)
        layout.addStretch(1)

        title = QtWidgets.QLabel("Sign in to Expense Tracker")
        title.setObjectName("authTitle")
        title.setAlignment(QtCore.Qt.AlignCenter)
        layout.addWidget(title)

        form = QtWidgets.QFormLayout()
        self._username = QtWidgets.QLineEdit()
        self._username.setPlaceholderText("Username")
        self._password = QtWidgets.QLineEdit()
        self._password.setEchoMode(QtWidgets.QLineEdit.Password)
        self._password.setPlaceholderText("At least 8 characters")
        self._password.returnPressed.connect(self._emit_sign_in)
        form.addRow("Username", self._username)
        form.addRow("Password", self._password)
        layout.addLayout(form)

        buttons = QtWidgets.QHBoxLayout()
        self._sign_in_button = QtWidgets.QPushButton("Sign In")
        self._sign_in_button.clicked.connect(self._emit_sign_in)
        self._sign_up_button = QtWidgets.QPushButton("Create Account")
        self._sign_up_button.clicked.connect(self._emit_sign_up)
        buttons.addWidget(self._sign_in_button)
        buttons.addWidget(self._sign_up_button)
        layout.addLayout(buttons)

        self._message = QtWidgets.QLabel("")
        self._message.setWordWrap(True)
        layout.addWidget(self._message)
        layout.addStretch(1)

    def credentials(self) -> tuple[str, str]:
        return self._username.text().strip(), self._password.text()

    def show_message(self, message: str) -> None:
        self._message.setText(message)

    def set_busy(self, busy: bool) -> None:
        self._sign_in_button.setEnabled(not busy)
        self._sign_up_button.setEnabled(not busy)

    def reset(self) -> None:
        self._password.clear()
        self._message.clear()
        self.set_busy(False)

    def _emit_sign_in(self) -> None:
        username, password = self.credentials()
        if not username or not password:
            self.show_message("Enter a username and password")
            return
        self.signInRequested.emit(username, password)

    def _emit_sign_up(self) -> None:
        username, password = self.credentials()
        if not username or len(password) < 8:
            self.show_message("Choose a username and a password of at least 8 characters")
            return
        self.signUpRequested.emit(username, password)


__all__ = ["AuthenticatorPanel"]
