from __future__ import annotations

from transdesk.app.state import SessionState
from transdesk.translator.session import TranslationSession

try:
    from PyQt6 import QtCore, QtGui, QtWidgets

    _PYQT_IMPORT_ERROR: ImportError | None = None
except ImportError as e:  # pragma: no cover - import guard path
    QtCore = None  # type: ignore[assignment]
    QtGui = None  # type: ignore[assignment]
    QtWidgets = None  # type: ignore[assignment]
    _PYQT_IMPORT_ERROR = e

COPY_NOTICE = "Copied to clipboard!"


def mic_button_text(state: SessionState) -> str:
    return "Stop recording" if state == SessionState.RECORDING else "Speak"


def translate_button_text(state: SessionState) -> str:
    return "Translating..." if state == SessionState.TRANSLATING else "Translate"


def status_text(state: SessionState) -> str:
    return {
        SessionState.RECORDING: "Listening... speak in English.",
        SessionState.TRANSLATING: "Translating to Telugu...",
        SessionState.SPEAKING: "Playing translation...",
    }.get(state, "")


if QtWidgets is not None:
    from transdesk.ui.widgets_qt import Banner, Toast

    class TranslatorView(QtWidgets.QWidget):
        """Source and translated panels bound to a TranslationSession; `render()` pulls state."""

        translate_requested = QtCore.pyqtSignal()
        history_requested = QtCore.pyqtSignal()

        def __init__(self, session: TranslationSession, *, copy_notice_ms: int = 3000, parent=None) -> None:
            super().__init__(parent)
            self.setObjectName("page")
            self.session = session
            self.copy_notice_ms = int(copy_notice_ms)
            self._last_snapshot: tuple | None = None

            lay = QtWidgets.QVBoxLayout(self)
            lay.setContentsMargins(0, 0, 0, 0)
            lay.setSpacing(12)

            title = QtWidgets.QLabel("English → Telugu", self)
            title.setObjectName("title")
            lay.addWidget(title)

            self.error_banner = Banner("error", self)
            lay.addWidget(self.error_banner)

            src_card = QtWidgets.QFrame(self)
            src_card.setObjectName("card")
            src_lay = QtWidgets.QVBoxLayout(src_card)
            src_lay.setContentsMargins(14, 12, 14, 12)
            src_head = QtWidgets.QLabel("English", src_card)
            src_head.setObjectName("subhead")
            self.source_edit = QtWidgets.QPlainTextEdit(src_card)
            self.source_edit.setPlaceholderText("Type or speak English text...")
            src_row = QtWidgets.QHBoxLayout()
            self.btn_mic = QtWidgets.QPushButton("Speak", src_card)
            self.btn_clear = QtWidgets.QPushButton("Clear", src_card)
            self.btn_translate = QtWidgets.QPushButton("Translate", src_card)
            self.btn_translate.setObjectName("primary")
            src_row.addWidget(self.btn_mic)
            src_row.addWidget(self.btn_clear)
            src_row.addStretch(1)
            src_row.addWidget(self.btn_translate)
            src_lay.addWidget(src_head)
            src_lay.addWidget(self.source_edit)
            src_lay.addLayout(src_row)
            lay.addWidget(src_card, stretch=1)

            self.status_label = QtWidgets.QLabel("", self)
            self.status_label.setObjectName("status")
            lay.addWidget(self.status_label)

            out_card = QtWidgets.QFrame(self)
            out_card.setObjectName("card")
            out_lay = QtWidgets.QVBoxLayout(out_card)
            out_lay.setContentsMargins(14, 12, 14, 12)
            out_head = QtWidgets.QLabel("Telugu", out_card)
            out_head.setObjectName("subhead")
            self.translated_view = QtWidgets.QPlainTextEdit(out_card)
            self.translated_view.setReadOnly(True)
            self.translated_view.setPlaceholderText("Translation will appear here")
            out_row = QtWidgets.QHBoxLayout()
            self.btn_listen = QtWidgets.QPushButton("Listen", out_card)
            self.btn_copy = QtWidgets.QPushButton("Copy", out_card)
            self.btn_history = QtWidgets.QPushButton("History", out_card)
            out_row.addWidget(self.btn_listen)
            out_row.addWidget(self.btn_copy)
            out_row.addStretch(1)
            out_row.addWidget(self.btn_history)
            out_lay.addWidget(out_head)
            out_lay.addWidget(self.translated_view)
            out_lay.addLayout(out_row)
            lay.addWidget(out_card, stretch=1)

            self.toast = Toast(self)
            lay.addWidget(self.toast, 0, QtCore.Qt.AlignmentFlag.AlignHCenter)

            self.source_edit.textChanged.connect(self._on_source_edited)
            self.btn_mic.clicked.connect(self._on_mic)
            self.btn_clear.clicked.connect(self._on_clear)
            self.btn_translate.clicked.connect(self.translate_requested.emit)
            self.btn_listen.clicked.connect(self._on_listen)
            self.btn_copy.clicked.connect(self._on_copy)
            self.btn_history.clicked.connect(self.history_requested.emit)
            self.error_banner.dismissed.connect(self._on_error_dismissed)

        def focus_source(self) -> None:
            self.source_edit.setFocus()

        def _on_source_edited(self) -> None:
            self.session.set_source_text(self.source_edit.toPlainText())
            self.render()

        def _on_mic(self) -> None:
            self.session.toggle_recording()
            self.render()

        def _on_clear(self) -> None:
            self.session.reset()
            self.render()

        def _on_listen(self) -> None:
            self.session.speak()
            self.render()

        def _on_copy(self) -> None:
            if self.session.copy():
                self.toast.flash(COPY_NOTICE, self.copy_notice_ms, on_hidden=self.session.dismiss_copy_notice)

        def _on_error_dismissed(self) -> None:
            self.session.dismiss_error()
            self.render()

        def render(self) -> None:
            s = self.session
            snapshot = (s.state, s.error, s.source_text, s.translated_text, s.can_translate, s.can_speak)
            if snapshot == self._last_snapshot:
                return
            self._last_snapshot = snapshot

            if self.source_edit.toPlainText() != s.source_text:
                self.source_edit.blockSignals(True)
                self.source_edit.setPlainText(s.source_text)
                self.source_edit.moveCursor(QtGui.QTextCursor.MoveOperation.End)
                self.source_edit.blockSignals(False)
            if self.translated_view.toPlainText() != s.translated_text:
                self.translated_view.setPlainText(s.translated_text)

            self.source_edit.setReadOnly(s.is_recording)
            self.btn_mic.setText(mic_button_text(s.state))
            self.btn_mic.setEnabled(not s.is_translating)
            self.btn_translate.setText(translate_button_text(s.state))
            self.btn_translate.setEnabled(s.can_translate)
            self.btn_listen.setEnabled(s.can_speak)
            self.btn_copy.setEnabled(bool(s.translated_text))
            self.status_label.setText(status_text(s.state))
            self.error_banner.show_message(s.error)
else:
    class TranslatorView:  # type: ignore[no-redef]
        def __init__(self, *args, **kwargs) -> None:
            raise ModuleNotFoundError(
                "PyQt6 is required for TranslatorView. Install with: python -m pip install PyQt6"
            ) from _PYQT_IMPORT_ERROR
