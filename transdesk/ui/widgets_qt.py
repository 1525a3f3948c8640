from __future__ import annotations

from typing import Optional

try:
    from PyQt6 import QtCore, QtWidgets

    _PYQT_IMPORT_ERROR: ImportError | None = None
except ImportError as e:  # pragma: no cover - import guard path
    QtCore = None  # type: ignore[assignment]
    QtWidgets = None  # type: ignore[assignment]
    _PYQT_IMPORT_ERROR = e


if QtWidgets is not None:
    class Banner(QtWidgets.QFrame):
        """Dismissible inline message scoped to one view."""

        dismissed = QtCore.pyqtSignal()

        def __init__(self, kind: str = "error", parent: QtWidgets.QWidget | None = None) -> None:
            super().__init__(parent)
            self.setObjectName("banner_success" if kind == "success" else "banner_error")
            lay = QtWidgets.QHBoxLayout(self)
            lay.setContentsMargins(12, 8, 8, 8)
            self.label = QtWidgets.QLabel("", self)
            self.label.setWordWrap(True)
            self.btn_close = QtWidgets.QToolButton(self)
            self.btn_close.setText("✕")
            self.btn_close.setAutoRaise(True)
            lay.addWidget(self.label, stretch=1)
            lay.addWidget(self.btn_close)
            self.btn_close.clicked.connect(self._on_close)
            self.hide()

        def _on_close(self) -> None:
            self.hide()
            self.dismissed.emit()

        def show_message(self, text: Optional[str]) -> None:
            if not text:
                self.hide()
                return
            self.label.setText(text)
            self.show()

    class Toast(QtWidgets.QLabel):
        """Transient notice that hides itself after a delay."""

        def __init__(self, parent: QtWidgets.QWidget | None = None) -> None:
            super().__init__(parent)
            self.setObjectName("toast")
            self.setAlignment(QtCore.Qt.AlignmentFlag.AlignCenter)
            self._timer = QtCore.QTimer(self)
            self._timer.setSingleShot(True)
            self._timer.timeout.connect(self.hide)
            self.hide()

        def flash(self, text: str, ms: int, on_hidden=None) -> None:
            self.setText(text)
            self.show()
            self._timer.stop()
            try:
                self._timer.timeout.disconnect()
            except TypeError:
                pass
            self._timer.timeout.connect(self.hide)
            if on_hidden is not None:
                self._timer.timeout.connect(on_hidden)
            self._timer.start(max(1, int(ms)))

    def password_input(parent: QtWidgets.QWidget, placeholder: str) -> QtWidgets.QLineEdit:
        field = QtWidgets.QLineEdit(parent)
        field.setPlaceholderText(placeholder)
        field.setEchoMode(QtWidgets.QLineEdit.EchoMode.Password)
        return field

    def text_input(parent: QtWidgets.QWidget, placeholder: str) -> QtWidgets.QLineEdit:
        field = QtWidgets.QLineEdit(parent)
        field.setPlaceholderText(placeholder)
        return field

    def field_error_label(parent: QtWidgets.QWidget) -> QtWidgets.QLabel:
        label = QtWidgets.QLabel("", parent)
        label.setObjectName("field_error")
        label.hide()
        return label

    def set_field_error(label: QtWidgets.QLabel, text: Optional[str]) -> None:
        label.setText(text or "")
        label.setVisible(bool(text))
else:
    class Banner:  # type: ignore[no-redef]
        def __init__(self, *args, **kwargs) -> None:
            raise ModuleNotFoundError(
                "PyQt6 is required for the desktop UI. Install with: python -m pip install PyQt6"
            ) from _PYQT_IMPORT_ERROR
