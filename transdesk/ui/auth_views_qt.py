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

RESET_LINK_SENT = "Password reset instructions have been sent to your email."
PASSWORD_RESET_DONE = "Password has been reset successfully! Redirecting to login..."
PASSWORD_UPDATED = "Password updated successfully!"
RESET_REDIRECT_MS = 3000


def busy_label(idle_text: str, busy: bool) -> str:
    return "Please wait..." if busy else idle_text


if QtWidgets is not None:
    from transdesk.ui.widgets_qt import (
        Banner,
        field_error_label,
        password_input,
        set_field_error,
        text_input,
    )

    class _FormPage(QtWidgets.QWidget):
        """Centered card with a title, inline banners, fields and a primary button."""

        navigate_requested = QtCore.pyqtSignal(str)

        def __init__(self, title: str, subtitle: str, submit_text: str, parent=None) -> None:
            super().__init__(parent)
            self.setObjectName("page")
            self._submit_text = submit_text
            self._field_errors: dict[str, QtWidgets.QLabel] = {}

            outer = QtWidgets.QVBoxLayout(self)
            outer.addStretch(1)
            self.card = QtWidgets.QFrame(self)
            self.card.setObjectName("card")
            self.card.setMaximumWidth(440)
            self.form = QtWidgets.QVBoxLayout(self.card)
            self.form.setContentsMargins(26, 22, 26, 22)
            self.form.setSpacing(10)
            outer.addWidget(self.card, 0, QtCore.Qt.AlignmentFlag.AlignHCenter)
            outer.addStretch(2)

            heading = QtWidgets.QLabel(title, self.card)
            heading.setObjectName("title")
            sub = QtWidgets.QLabel(subtitle, self.card)
            sub.setObjectName("muted")
            sub.setWordWrap(True)
            self.form.addWidget(heading)
            self.form.addWidget(sub)

            self.error_banner = Banner("error", self.card)
            self.success_banner = Banner("success", self.card)
            self.form.addWidget(self.error_banner)
            self.form.addWidget(self.success_banner)

            self.btn_submit = QtWidgets.QPushButton(submit_text, self.card)
            self.btn_submit.setObjectName("primary")

        def _add_field(self, key: str, widget: QtWidgets.QLineEdit) -> QtWidgets.QLineEdit:
            self.form.addWidget(widget)
            label = field_error_label(self.card)
            self.form.addWidget(label)
            self._field_errors[key] = label
            widget.returnPressed.connect(self.btn_submit.click)
            return widget

        def _finish_layout(self) -> None:
            self.form.addSpacing(6)
            self.form.addWidget(self.btn_submit)

        def _add_link(self, text: str, path: str) -> QtWidgets.QPushButton:
            btn = QtWidgets.QPushButton(text, self.card)
            btn.setObjectName("link")
            btn.clicked.connect(lambda: self.navigate_requested.emit(path))
            self.form.addWidget(btn, 0, QtCore.Qt.AlignmentFlag.AlignLeft)
            return btn

        def clear_messages(self) -> None:
            self.error_banner.show_message(None)
            self.success_banner.show_message(None)
            for label in self._field_errors.values():
                set_field_error(label, None)

        def show_error(self, message: str, fields: Optional[dict[str, str]] = None) -> None:
            self.success_banner.show_message(None)
            self.error_banner.show_message(message)
            fields = fields or {}
            for key, label in self._field_errors.items():
                set_field_error(label, fields.get(key))

        def show_success(self, message: str) -> None:
            self.error_banner.show_message(None)
            self.success_banner.show_message(message)

        def set_busy(self, busy: bool) -> None:
            self.btn_submit.setEnabled(not busy)
            self.btn_submit.setText(busy_label(self._submit_text, busy))

    class LoginView(_FormPage):
        submitted = QtCore.pyqtSignal(str, str)

        def __init__(self, parent=None) -> None:
            super().__init__("Welcome back", "Log in to continue translating.", "Log in", parent)
            self.email = self._add_field("email", text_input(self.card, "Email"))
            self.password = self._add_field("password", password_input(self.card, "Password"))
            self._finish_layout()
            self._add_link("Forgot password?", "/forgot-password")
            self._add_link("Don't have an account? Sign up", "/signup")
            self.btn_submit.clicked.connect(
                lambda: self.submitted.emit(self.email.text(), self.password.text())
            )

        def reset_form(self) -> None:
            self.password.clear()
            self.clear_messages()

    class SignupView(_FormPage):
        submitted = QtCore.pyqtSignal(str, str, str, str)

        def __init__(self, parent=None) -> None:
            super().__init__("Create account", "Sign up to save your translations.", "Sign up", parent)
            self.name = self._add_field("name", text_input(self.card, "Full name"))
            self.email = self._add_field("email", text_input(self.card, "Email"))
            self.password = self._add_field("password", password_input(self.card, "Password"))
            self.confirm = self._add_field("confirm_password", password_input(self.card, "Confirm password"))
            self._finish_layout()
            self._add_link("Already have an account? Log in", "/login")
            self.btn_submit.clicked.connect(
                lambda: self.submitted.emit(
                    self.name.text(), self.email.text(), self.password.text(), self.confirm.text()
                )
            )

        def reset_form(self) -> None:
            self.password.clear()
            self.confirm.clear()
            self.clear_messages()

    class ForgotPasswordView(_FormPage):
        submitted = QtCore.pyqtSignal(str)

        def __init__(self, parent=None) -> None:
            super().__init__(
                "Forgot password",
                "Enter your email and we will send you a reset link.",
                "Send reset link",
                parent,
            )
            self.email = self._add_field("email", text_input(self.card, "Email"))
            self._finish_layout()
            self._add_link("Back to login", "/login")
            self.btn_submit.clicked.connect(lambda: self.submitted.emit(self.email.text()))

        def reset_form(self) -> None:
            self.clear_messages()

    class ResetPasswordView(_FormPage):
        submitted = QtCore.pyqtSignal(str, str)

        def __init__(self, parent=None) -> None:
            super().__init__("Reset password", "Choose a new password.", "Reset password", parent)
            self.token: Optional[str] = None
            self.password = self._add_field("password", password_input(self.card, "New password"))
            self.confirm = self._add_field("confirm_password", password_input(self.card, "Confirm password"))
            self._finish_layout()
            self._add_link("Back to login", "/login")
            self.btn_submit.clicked.connect(
                lambda: self.submitted.emit(self.password.text(), self.confirm.text())
            )

        def set_token(self, token: Optional[str]) -> None:
            self.token = token

        def reset_form(self) -> None:
            self.password.clear()
            self.confirm.clear()
            self.clear_messages()

    class ProfileView(_FormPage):
        submitted = QtCore.pyqtSignal(str, str, str)
        logout_requested = QtCore.pyqtSignal()

        def __init__(self, parent=None) -> None:
            super().__init__("Profile", "", "Update password", parent)
            self.name_label = QtWidgets.QLabel("", self.card)
            self.email_label = QtWidgets.QLabel("", self.card)
            self.email_label.setObjectName("muted")
            self.form.addWidget(self.name_label)
            self.form.addWidget(self.email_label)
            subhead = QtWidgets.QLabel("Change password", self.card)
            subhead.setObjectName("subhead")
            self.form.addWidget(subhead)
            self.current = self._add_field("current_password", password_input(self.card, "Current password"))
            self.new = self._add_field("new_password", password_input(self.card, "New password"))
            self.confirm = self._add_field("confirm_password", password_input(self.card, "Confirm new password"))
            self._finish_layout()
            self.btn_logout = QtWidgets.QPushButton("Logout", self.card)
            self.form.addWidget(self.btn_logout)
            self.btn_submit.clicked.connect(
                lambda: self.submitted.emit(self.current.text(), self.new.text(), self.confirm.text())
            )
            self.btn_logout.clicked.connect(self.logout_requested.emit)

        def set_user(self, user: Optional[User]) -> None:
            self.name_label.setText(user.display_name if user is not None else "")
            self.email_label.setText(user.email if user is not None else "")

        def reset_form(self) -> None:
            self.current.clear()
            self.new.clear()
            self.confirm.clear()

    class LoadingView(QtWidgets.QWidget):
        def __init__(self, parent=None) -> None:
            super().__init__(parent)
            self.setObjectName("page")
            lay = QtWidgets.QVBoxLayout(self)
            label = QtWidgets.QLabel("Loading...", self)
            label.setObjectName("status")
            lay.addWidget(label, 0, QtCore.Qt.AlignmentFlag.AlignCenter)

    class NotFoundView(QtWidgets.QWidget):
        navigate_requested = QtCore.pyqtSignal(str)

        def __init__(self, parent=None) -> None:
            super().__init__(parent)
            self.setObjectName("page")
            lay = QtWidgets.QVBoxLayout(self)
            lay.addStretch(1)
            title = QtWidgets.QLabel("404", self)
            title.setObjectName("title")
            msg = QtWidgets.QLabel("Page not found.", self)
            msg.setObjectName("muted")
            btn = QtWidgets.QPushButton("Go home", self)
            btn.setObjectName("primary")
            btn.clicked.connect(lambda: self.navigate_requested.emit("/"))
            for w in (title, msg, btn):
                lay.addWidget(w, 0, QtCore.Qt.AlignmentFlag.AlignHCenter)
            lay.addStretch(2)
else:
    class LoginView:  # type: ignore[no-redef]
        def __init__(self, *args, **kwargs) -> None:
            raise ModuleNotFoundError(
                "PyQt6 is required for the auth views. Install with: python -m pip install PyQt6"
            ) from _PYQT_IMPORT_ERROR
