from __future__ import annotations

from typing import Optional

from transdesk.contracts import User

try:
    from PyQt6 import QtCore, QtWidgets

    _PYQT_IMPORT_ERROR: ImportError | None = None
except ImportError as e:  # pragma: no cover - import guard path
    QtCore = None  # type: ignore[assignment]
    QtWidgets = None  # type: ignore[assignment]
    _PYQT_IMPORT_ERROR = e

NAV_ITEMS: tuple[tuple[str, str], ...] = (
    ("Translator", "/"),
    ("History", "/history"),
    ("Profile", "/profile"),
)

_PALETTES: dict[str, dict[str, str]] = {
    "dark": {
        "bg": "#121416",
        "fg": "#e8ecef",
        "muted": "#a7b0b8",
        "card": "#1a1e22",
        "border": "#2a3138",
        "button": "#22272d",
        "button_border": "#313840",
        "button_hover": "#2a3037",
        "accent": "#c8f25f",
        "accent_fg": "#172005",
        "accent_hover": "#d3f67f",
        "input": "#13181d",
        "error_bg": "#3a1d20",
        "error_fg": "#ffb4b4",
        "ok_bg": "#1d3a26",
        "ok_fg": "#b4ffc8",
    },
    "light": {
        "bg": "#f4f6f8",
        "fg": "#1b1f23",
        "muted": "#5b6570",
        "card": "#ffffff",
        "border": "#d6dce2",
        "button": "#ffffff",
        "button_border": "#c9d1d9",
        "button_hover": "#eef1f4",
        "accent": "#3b6fe0",
        "accent_fg": "#ffffff",
        "accent_hover": "#5283ec",
        "input": "#ffffff",
        "error_bg": "#fde8e8",
        "error_fg": "#9b1c1c",
        "ok_bg": "#e6f6ea",
        "ok_fg": "#1c6b32",
    },
}


def stylesheet_for(theme: str) -> str:
    c = _PALETTES.get(str(theme or "dark").lower(), _PALETTES["dark"])
    return f"""
        QMainWindow, QWidget#page {{ background: {c['bg']}; color: {c['fg']}; }}
        QLabel {{ color: {c['fg']}; }}
        QLabel#title {{ font-size: 28px; font-weight: 700; letter-spacing: 0.3px; }}
        QLabel#brand {{ font-size: 18px; font-weight: 700; }}
        QLabel#status, QLabel#muted {{ color: {c['muted']}; font-size: 13px; }}
        QLabel#subhead {{ color: {c['muted']}; font-size: 12px; font-weight: 600; }}
        QLabel#field_error {{ color: {c['error_fg']}; font-size: 12px; }}
        QLabel#toast {{
            background: {c['ok_bg']};
            color: {c['ok_fg']};
            border-radius: 8px;
            padding: 6px 12px;
        }}
        QFrame#card, QFrame#navbar {{
            background: {c['card']};
            border: 1px solid {c['border']};
            border-radius: 14px;
        }}
        QFrame#banner_error {{ background: {c['error_bg']}; border-radius: 10px; }}
        QFrame#banner_error QLabel {{ color: {c['error_fg']}; }}
        QFrame#banner_success {{ background: {c['ok_bg']}; border-radius: 10px; }}
        QFrame#banner_success QLabel {{ color: {c['ok_fg']}; }}
        QLineEdit, QPlainTextEdit {{
            background: {c['input']};
            color: {c['fg']};
            border: 1px solid {c['button_border']};
            border-radius: 8px;
            padding: 8px;
            font-size: 14px;
        }}
        QPushButton {{
            background: {c['button']};
            border: 1px solid {c['button_border']};
            border-radius: 10px;
            color: {c['fg']};
            padding: 9px 16px;
            font-size: 13px;
            font-weight: 600;
        }}
        QPushButton:hover {{ background: {c['button_hover']}; }}
        QPushButton:disabled {{ color: {c['muted']}; }}
        QPushButton#primary {{
            background: {c['accent']};
            color: {c['accent_fg']};
            border-color: {c['accent']};
        }}
        QPushButton#primary:hover {{ background: {c['accent_hover']}; border-color: {c['accent_hover']}; }}
        QPushButton#link {{ background: transparent; border: none; color: {c['accent']}; padding: 2px; }}
        QPushButton#nav_active {{ border-color: {c['accent']}; }}
        QListWidget {{ background: transparent; border: none; }}
    """


def user_badge_text(user: Optional[User]) -> str:
    if user is None:
        return ""
    return user.display_name or user.email


if QtWidgets is not None:
    from transdesk.ui.widgets_qt import Toast

    class MainWindow(QtWidgets.QMainWindow):
        navigate_requested = QtCore.pyqtSignal(str)
        logout_requested = QtCore.pyqtSignal()

        def __init__(self, *, theme: str = "dark") -> None:
            super().__init__()
            self.setWindowTitle("TransDesk")
            self.resize(880, 640)
            self._views: dict[str, QtWidgets.QWidget] = {}
            self._current_path = "/"

            root = QtWidgets.QWidget(self)
            root.setObjectName("page")
            self.setCentralWidget(root)
            lay = QtWidgets.QVBoxLayout(root)
            lay.setContentsMargins(22, 16, 22, 20)
            lay.setSpacing(14)

            self.navbar = QtWidgets.QFrame(root)
            self.navbar.setObjectName("navbar")
            nav_lay = QtWidgets.QHBoxLayout(self.navbar)
            nav_lay.setContentsMargins(14, 8, 14, 8)
            nav_lay.setSpacing(8)
            brand = QtWidgets.QLabel("TransDesk", self.navbar)
            brand.setObjectName("brand")
            nav_lay.addWidget(brand)
            nav_lay.addSpacing(12)
            self._nav_buttons: dict[str, QtWidgets.QPushButton] = {}
            for label, path in NAV_ITEMS:
                btn = QtWidgets.QPushButton(label, self.navbar)
                btn.clicked.connect(lambda _=False, p=path: self.navigate_requested.emit(p))
                nav_lay.addWidget(btn)
                self._nav_buttons[path] = btn
            nav_lay.addStretch(1)
            self.user_label = QtWidgets.QLabel("", self.navbar)
            self.user_label.setObjectName("muted")
            self.btn_logout = QtWidgets.QPushButton("Logout", self.navbar)
            nav_lay.addWidget(self.user_label)
            nav_lay.addWidget(self.btn_logout)
            lay.addWidget(self.navbar)

            self.stack = QtWidgets.QStackedWidget(root)
            lay.addWidget(self.stack, stretch=1)

            self.toast = Toast(root)
            lay.addWidget(self.toast, 0, QtCore.Qt.AlignmentFlag.AlignHCenter)

            self.btn_logout.clicked.connect(self.logout_requested.emit)
            self.navbar.hide()
            self.apply_theme(theme)

        def apply_theme(self, theme: str) -> None:
            self.setStyleSheet(stylesheet_for(theme))

        def add_view(self, name: str, widget: QtWidgets.QWidget) -> None:
            self._views[name] = widget
            self.stack.addWidget(widget)

        def view(self, name: str) -> Optional[QtWidgets.QWidget]:
            return self._views.get(name)

        def current_view_name(self) -> str:
            current = self.stack.currentWidget()
            for name, widget in self._views.items():
                if widget is current:
                    return name
            return ""

        def show_view(self, name: str, path: str) -> None:
            widget = self._views.get(name)
            if widget is None:
                return
            self._current_path = path
            self.stack.setCurrentWidget(widget)
            for nav_path, btn in self._nav_buttons.items():
                btn.setObjectName("nav_active" if nav_path == path else "")
                btn.style().unpolish(btn)
                btn.style().polish(btn)

        def set_user(self, user: Optional[User]) -> None:
            self.user_label.setText(user_badge_text(user))
            self.navbar.setVisible(user is not None)
else:
    class MainWindow:  # type: ignore[no-redef]
        def __init__(self, *args, **kwargs) -> None:
            raise ModuleNotFoundError(
                "PyQt6 is required for MainWindow. Install with: python -m pip install PyQt6"
            ) from _PYQT_IMPORT_ERROR
