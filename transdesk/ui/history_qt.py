from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from transdesk.contracts import TranslationRecord
from transdesk.history.controller import HistoryController, format_created_at

try:
    from PyQt6 import QtCore, QtWidgets

    _PYQT_IMPORT_ERROR: ImportError | None = None
except ImportError as e:  # pragma: no cover - import guard path
    QtCore = None  # type: ignore[assignment]
    QtWidgets = None  # type: ignore[assignment]
    _PYQT_IMPORT_ERROR = e

EMPTY_HISTORY = "No translations yet. Your translations will appear here."
CONFIRM_CLEAR = "Are you sure you want to clear all translation history? This cannot be undone."


@dataclass(frozen=True)
class HistoryRow:
    record: TranslationRecord
    created: str
    copied: bool
    playing: bool

    @property
    def listen_text(self) -> str:
        return "Stop" if self.playing else "Listen"

    @property
    def copy_text(self) -> str:
        return "Copied!" if self.copied else "Copy"


def history_rows(records: list[TranslationRecord], copied_id: Optional[str], playing_id: Optional[str]) -> list[HistoryRow]:
    return [
        HistoryRow(
            record=r,
            created=format_created_at(r.created_at),
            copied=r.id == copied_id,
            playing=r.id == playing_id,
        )
        for r in records
    ]


if QtWidgets is not None:
    from transdesk.ui.widgets_qt import Banner

    class _RecordCard(QtWidgets.QFrame):
        def __init__(self, row: HistoryRow, parent=None) -> None:
            super().__init__(parent)
            self.setObjectName("card")
            lay = QtWidgets.QVBoxLayout(self)
            lay.setContentsMargins(14, 10, 14, 10)
            lay.setSpacing(4)

            when = QtWidgets.QLabel(row.created, self)
            when.setObjectName("muted")
            src = QtWidgets.QLabel(row.record.source_text, self)
            src.setWordWrap(True)
            out = QtWidgets.QLabel(row.record.translated_text, self)
            out.setWordWrap(True)
            out.setObjectName("subhead")
            for w in (src, out):
                w.setTextInteractionFlags(QtCore.Qt.TextInteractionFlag.TextSelectableByMouse)

            btn_row = QtWidgets.QHBoxLayout()
            self.btn_listen = QtWidgets.QPushButton(row.listen_text, self)
            self.btn_copy = QtWidgets.QPushButton(row.copy_text, self)
            self.btn_delete = QtWidgets.QPushButton("Delete", self)
            btn_row.addWidget(self.btn_listen)
            btn_row.addWidget(self.btn_copy)
            btn_row.addStretch(1)
            btn_row.addWidget(self.btn_delete)

            lay.addWidget(when)
            lay.addWidget(src)
            lay.addWidget(out)
            lay.addLayout(btn_row)

    class HistoryView(QtWidgets.QWidget):
        """Scrollable list of past translations; network actions are emitted, the rest go straight to the controller."""

        refresh_requested = QtCore.pyqtSignal()
        delete_requested = QtCore.pyqtSignal(str)
        clear_confirmed = QtCore.pyqtSignal()
        back_requested = QtCore.pyqtSignal()

        def __init__(self, controller: HistoryController, *, copy_notice_ms: int = 2000, parent=None) -> None:
            super().__init__(parent)
            self.setObjectName("page")
            self.controller = controller
            self.copy_notice_ms = int(copy_notice_ms)
            self._last_snapshot: tuple | None = None

            lay = QtWidgets.QVBoxLayout(self)
            lay.setContentsMargins(0, 0, 0, 0)
            lay.setSpacing(12)

            head = QtWidgets.QHBoxLayout()
            title = QtWidgets.QLabel("Translation History", self)
            title.setObjectName("title")
            self.btn_back = QtWidgets.QPushButton("Back to translator", self)
            self.btn_refresh = QtWidgets.QPushButton("Refresh", self)
            self.btn_clear = QtWidgets.QPushButton("Clear All", self)
            head.addWidget(title)
            head.addStretch(1)
            head.addWidget(self.btn_back)
            head.addWidget(self.btn_refresh)
            head.addWidget(self.btn_clear)
            lay.addLayout(head)

            self.error_banner = Banner("error", self)
            lay.addWidget(self.error_banner)

            self.status_label = QtWidgets.QLabel("", self)
            self.status_label.setObjectName("status")
            lay.addWidget(self.status_label)

            self.scroll = QtWidgets.QScrollArea(self)
            self.scroll.setWidgetResizable(True)
            self.scroll.setFrameShape(QtWidgets.QFrame.Shape.NoFrame)
            self._list_host = QtWidgets.QWidget(self.scroll)
            self._list_host.setObjectName("page")
            self._list_lay = QtWidgets.QVBoxLayout(self._list_host)
            self._list_lay.setContentsMargins(0, 0, 0, 0)
            self._list_lay.setSpacing(10)
            self._list_lay.addStretch(1)
            self.scroll.setWidget(self._list_host)
            lay.addWidget(self.scroll, stretch=1)

            self.btn_back.clicked.connect(self.back_requested.emit)
            self.btn_refresh.clicked.connect(self.refresh_requested.emit)
            self.btn_clear.clicked.connect(self._on_clear)
            self.error_banner.dismissed.connect(self._on_error_dismissed)

        def _on_error_dismissed(self) -> None:
            self.controller.dismiss_error()
            self.render()

        def _on_clear(self) -> None:
            if not self.controller.request_clear():
                return
            answer = QtWidgets.QMessageBox.question(
                self,
                "Clear history",
                CONFIRM_CLEAR,
                QtWidgets.QMessageBox.StandardButton.Yes | QtWidgets.QMessageBox.StandardButton.Cancel,
                QtWidgets.QMessageBox.StandardButton.Cancel,
            )
            if answer == QtWidgets.QMessageBox.StandardButton.Yes:
                self.clear_confirmed.emit()
            else:
                self.controller.cancel_clear()

        def _on_copy(self, record: TranslationRecord) -> None:
            if not self.controller.copy(record):
                return
            record_id = record.id

            def _dismiss() -> None:
                self.controller.dismiss_copy_notice(record_id)
                self.render()

            QtCore.QTimer.singleShot(max(1, self.copy_notice_ms), _dismiss)
            self.render()

        def _on_listen(self, record: TranslationRecord) -> None:
            self.controller.toggle_speak(record)
            self.render()

        def _clear_cards(self) -> None:
            while self._list_lay.count() > 1:
                item = self._list_lay.takeAt(0)
                widget = item.widget()
                if widget is not None:
                    widget.deleteLater()

        def render(self) -> None:
            c = self.controller
            snapshot = (
                tuple(r.id for r in c.records),
                c.loading,
                c.busy,
                c.error,
                c.copied_id,
                c.playing_id,
            )
            if snapshot == self._last_snapshot:
                return
            self._last_snapshot = snapshot

            self.error_banner.show_message(c.error)
            self.btn_clear.setEnabled(c.can_clear and not c.busy)
            self.btn_refresh.setEnabled(not c.loading)
            if c.loading:
                self.status_label.setText("Loading history...")
            elif not c.records:
                self.status_label.setText(EMPTY_HISTORY)
            else:
                self.status_label.setText(f"{len(c.records)} translation(s)")

            self._clear_cards()
            for i, row in enumerate(history_rows(c.records, c.copied_id, c.playing_id)):
                card = _RecordCard(row, self._list_host)
                record = row.record
                card.btn_listen.clicked.connect(lambda _=False, r=record: self._on_listen(r))
                card.btn_copy.clicked.connect(lambda _=False, r=record: self._on_copy(r))
                card.btn_delete.clicked.connect(lambda _=False, rid=record.id: self.delete_requested.emit(rid))
                card.btn_delete.setEnabled(not c.busy)
                self._list_lay.insertWidget(i, card)
else:
    class HistoryView:  # type: ignore[no-redef]
        def __init__(self, *args, **kwargs) -> None:
            raise ModuleNotFoundError(
                "PyQt6 is required for HistoryView. Install with: python -m pip install PyQt6"
            ) from _PYQT_IMPORT_ERROR
