from __future__ import annotations

import signal
import sys
from typing import Any, Callable

from transdesk.app.config import persist_args, resolve_args
from transdesk.app.logging_setup import setup_app_logger
from transdesk.app.routes import follow_route
from transdesk.app.services import build_app_services
from transdesk.audio.mic import SoundDeviceMicSource
from transdesk.auth.forms import (
    reset_token_from_location,
    validate_forgot_password,
    validate_login,
    validate_password_change,
    validate_reset_password,
    validate_signup,
)
from transdesk.auth.session import AuthStatus
from transdesk.errors import AppError, CaptureError
from transdesk.history.controller import HistoryController, HistoryRequest
from transdesk.translator.session import TranslateOutcome, TranslationSession
from transdesk.ui.bridge import TaskRunner, UiBus

FORM_VIEWS = ("login", "signup", "forgot_password", "reset_password")


def main(argv: list[str] | None = None) -> int:
    args = resolve_args(argv)
    logger, _, log_path = setup_app_logger(debug=bool(args.debug))
    if args.remember:
        saved = persist_args(args)
        logger.info("config_saved", extra={"config_path": str(saved)})
    logger.info(
        "app_start",
        extra={"config_path": str(getattr(args, "config", "")), "api_url": args.api_url, "argv": argv or []},
    )

    if args.list_devices:
        try:
            print(SoundDeviceMicSource.list_devices())
        except CaptureError as e:
            print(e.message)
            return 1
        return 0

    from PyQt6 import QtCore, QtGui, QtWidgets
    from transdesk.app.main_window_qt import MainWindow
    from transdesk.speech.gtts_speech_qt import GTTSSynthesizer
    from transdesk.ui.auth_views_qt import (
        PASSWORD_RESET_DONE,
        PASSWORD_UPDATED,
        RESET_LINK_SENT,
        RESET_REDIRECT_MS,
        ForgotPasswordView,
        LoadingView,
        LoginView,
        NotFoundView,
        ProfileView,
        ResetPasswordView,
        SignupView,
    )
    from transdesk.ui.history_qt import HistoryView
    from transdesk.ui.translator_qt import TranslatorView

    app = QtWidgets.QApplication(sys.argv)

    bus = UiBus()
    runner = TaskRunner(bus, logger=logger)
    services = build_app_services(args, dispatch=bus.push, logger=logger)
    auth = services.auth
    synth = GTTSSynthesizer(logger=logger)

    def _copy_to_clipboard(text: str) -> None:
        QtGui.QGuiApplication.clipboard().setText(text)

    main_window = MainWindow(theme=str(args.theme))
    translator_view: TranslatorView | None = None

    def _focus_source() -> None:
        if translator_view is not None:
            translator_view.focus_source()

    session = TranslationSession(
        services.api,
        capture=services.capture,
        synth=synth,
        clipboard=_copy_to_clipboard,
        mic_check=services.mic_check,
        target_voice=str(args.target_voice),
        on_focus=_focus_source,
        logger=logger,
    )
    history = HistoryController(
        services.api,
        synth=synth,
        clipboard=_copy_to_clipboard,
        target_voice=str(args.target_voice),
        logger=logger,
    )

    login_view = LoginView()
    signup_view = SignupView()
    forgot_view = ForgotPasswordView()
    reset_view = ResetPasswordView()
    profile_view = ProfileView()
    translator_view = TranslatorView(session, copy_notice_ms=int(args.copy_notice_ms))
    history_view = HistoryView(history, copy_notice_ms=int(args.history_copy_notice_ms))
    not_found_view = NotFoundView()
    for name, widget in (
        ("loading", LoadingView()),
        ("not_found", not_found_view),
        ("login", login_view),
        ("signup", signup_view),
        ("forgot_password", forgot_view),
        ("reset_password", reset_view),
        ("translator", translator_view),
        ("history", history_view),
        ("profile", profile_view),
    ):
        main_window.add_view(name, widget)

    location = str(args.location or "/")

    def _run_history(name: str, request: HistoryRequest | None) -> None:
        history_view.render()
        if request is None:
            return
        runner.submit(
            name,
            lambda: history.execute(request),
            on_done=history.complete,
            on_error=lambda message: history.complete(history.failed(request, message)),
        )

    def _load_history() -> None:
        _run_history("history_load", history.begin_load())

    def _navigate(target: str) -> None:
        nonlocal location
        final, decision = follow_route(target, auth.status)
        previous = main_window.current_view_name()
        if previous == "translator" and decision.view != "translator":
            session.teardown()
        location = final
        view = decision.view or "not_found"

        if view == "reset_password":
            reset_view.set_token(reset_token_from_location(final))
        if view in FORM_VIEWS and view != previous:
            main_window.view(view).reset_form()
        if view == "profile":
            profile_view.set_user(auth.user)
        if view == "history":
            _load_history()
        if view == "translator":
            translator_view.render()

        main_window.set_user(auth.user if auth.is_authenticated else None)
        main_window.show_view(view, decision.path)
        logger.info("navigate", extra={"location": final, "view": view, "status": auth.status.value})

    def _on_auth_changed(status: AuthStatus) -> None:
        # Listeners can fire on worker threads.
        bus.push(lambda: _navigate(location))

    auth.add_listener(_on_auth_changed)

    def _run_form(
        view: Any,
        name: str,
        fn: Callable[[], Any],
        on_done: Callable[[Any], None] | None = None,
    ) -> None:
        view.clear_messages()
        view.set_busy(True)

        def _done(result: Any) -> None:
            view.set_busy(False)
            if on_done is not None:
                on_done(result)

        def _failed(message: str) -> None:
            view.set_busy(False)
            view.show_error(message)

        runner.submit(name, fn, on_done=_done, on_error=_failed)

    def _submit_login(email: str, password: str) -> None:
        try:
            email, password = validate_login(email, password)
        except AppError as e:
            login_view.show_error(e.message, e.fields)
            return
        _run_form(login_view, "login", lambda: auth.login(email, password))

    def _submit_signup(name: str, email: str, password: str, confirm: str) -> None:
        try:
            form = validate_signup(name, email, password, confirm)
        except AppError as e:
            signup_view.show_error(e.message, e.fields)
            return
        _run_form(
            signup_view,
            "signup",
            lambda: auth.signup(form.first_name, form.last_name, form.email, form.password),
        )

    def _submit_forgot(email: str) -> None:
        try:
            email = validate_forgot_password(email)
        except AppError as e:
            forgot_view.show_error(e.message, e.fields)
            return
        _run_form(
            forgot_view,
            "forgot_password",
            lambda: auth.forgot_password(email),
            on_done=lambda _: forgot_view.show_success(RESET_LINK_SENT),
        )

    def _on_reset_done(_: Any) -> None:
        reset_view.show_success(PASSWORD_RESET_DONE)
        QtCore.QTimer.singleShot(RESET_REDIRECT_MS, lambda: _navigate("/login"))

    def _submit_reset(password: str, confirm: str) -> None:
        try:
            token, password = validate_reset_password(reset_view.token, password, confirm)
        except AppError as e:
            reset_view.show_error(e.message, e.fields)
            return
        _run_form(reset_view, "reset_password", lambda: auth.reset_password(token, password), on_done=_on_reset_done)

    def _on_password_updated(_: Any) -> None:
        profile_view.reset_form()
        profile_view.show_success(PASSWORD_UPDATED)

    def _submit_password_change(current: str, new: str, confirm: str) -> None:
        try:
            current, new = validate_password_change(current, new, confirm)
        except AppError as e:
            profile_view.show_error(e.message, e.fields)
            return
        _run_form(
            profile_view,
            "update_password",
            lambda: auth.update_password(current, new),
            on_done=_on_password_updated,
        )

    def _logout() -> None:
        session.reset()
        synth.cancel()
        history.forget()
        auth.logout()
        logger.info("logout")

    def _translate() -> None:
        request = session.begin_translate()
        translator_view.render()
        if request is None:
            return
        runner.submit(
            "translate",
            lambda: session.execute_translate(request),
            on_done=session.complete_translate,
            on_error=lambda message: session.complete_translate(TranslateOutcome(seq=request.seq, error=message)),
        )

    def _delete_record(record_id: str) -> None:
        _run_history("history_delete", history.begin_delete(record_id))

    def _clear_history() -> None:
        _run_history("history_clear", history.begin_clear())

    for view in (login_view, signup_view, forgot_view, reset_view, not_found_view):
        view.navigate_requested.connect(_navigate)
    login_view.submitted.connect(_submit_login)
    signup_view.submitted.connect(_submit_signup)
    forgot_view.submitted.connect(_submit_forgot)
    reset_view.submitted.connect(_submit_reset)
    profile_view.submitted.connect(_submit_password_change)
    profile_view.logout_requested.connect(_logout)
    main_window.navigate_requested.connect(_navigate)
    main_window.logout_requested.connect(_logout)
    translator_view.translate_requested.connect(_translate)
    translator_view.history_requested.connect(lambda: _navigate("/history"))
    history_view.refresh_requested.connect(_load_history)
    history_view.delete_requested.connect(_delete_record)
    history_view.clear_confirmed.connect(_clear_history)
    history_view.back_requested.connect(lambda: _navigate("/"))

    timer = QtCore.QTimer()

    def _on_tick() -> None:
        bus.drain()
        current = main_window.current_view_name()
        if current == "translator":
            translator_view.render()
        elif current == "history":
            history_view.render()

    timer.timeout.connect(_on_tick)
    timer.start(max(10, int(args.poll_ms)))

    def _on_about_to_quit() -> None:
        logger.info("app_quit")
        timer.stop()
        session.teardown()
        synth.cancel()

    app.aboutToQuit.connect(_on_about_to_quit)
    signal.signal(signal.SIGINT, lambda *_: app.quit())

    _navigate(location)
    runner.submit("auth_initialize", auth.initialize)
    main_window.show()

    print("TransDesk ready.")
    print(f"Logs: {log_path}")
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
