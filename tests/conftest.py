from __future__ import annotations

import base64
import json
import threading
from typing import Callable, Optional

import pytest

from transdesk.contracts import AuthPayload, RecognitionEvent, RecognitionResult, TranslationRecord, User
from transdesk.errors import AppError, CaptureError
from transdesk.speech.base import CaptureEngine, MicrophoneCheck, SpeechSynthesizer


def make_token(claims: dict) -> str:
    def _seg(obj: dict) -> str:
        raw = json.dumps(obj).encode("utf-8")
        return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")

    return f"{_seg({'alg': 'HS256', 'typ': 'JWT'})}.{_seg(claims)}.signature"


class FakeApi:
    """In-memory stand-in for ApiClient; `fail[name]` makes that call raise."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.token: Optional[str] = None
        self.user = User(id="u1", first_name="Ravi", last_name="Kumar", email="ravi@example.com")
        self.accounts: dict[str, tuple[str, User]] = {self.user.email: ("secret1", self.user)}
        self.records: list[TranslationRecord] = []
        self.translations: dict[str, str] = {}
        self.fail: dict[str, AppError] = {}
        self.args: dict[str, tuple] = {}
        self._next_id = 0

    def _call(self, name: str, *args) -> None:
        self.calls.append(name)
        self.args[name] = args
        err = self.fail.get(name)
        if err is not None:
            raise err

    def set_token(self, token: Optional[str]) -> None:
        self.token = token or None

    def register(self, first_name: str, last_name: str, email: str, password: str) -> AuthPayload:
        self._call("register", first_name, last_name, email, password)
        if email in self.accounts:
            raise AppError.server("User already exists", status=400)
        user = User(id=f"u{len(self.accounts) + 1}", first_name=first_name, last_name=last_name, email=email)
        self.accounts[email] = (password, user)
        return AuthPayload(token="tok-signup", user=user)

    def login(self, email: str, password: str) -> AuthPayload:
        self._call("login", email, password)
        known = self.accounts.get(email)
        if known is None or known[0] != password:
            raise AppError.server("Invalid credentials", status=401)
        return AuthPayload(token="tok-login", user=known[1])

    def forgot_password(self, email: str) -> None:
        self._call("forgot_password", email)

    def reset_password(self, token: str, password: str) -> None:
        self._call("reset_password", token, password)

    def me(self) -> User:
        self._call("me")
        return self.user

    def update_password(self, current_password: str, new_password: str) -> None:
        self._call("update_password", current_password, new_password)

    def translate(self, text: str) -> str:
        self._call("translate", text)
        return self.translations.get(text, f"te:{text}")

    def save_translation(self, source_text: str, translated_text: str) -> TranslationRecord:
        self._call("save_translation", source_text, translated_text)
        self._next_id += 1
        record = TranslationRecord(
            id=f"r{self._next_id}",
            user_id=self.user.id,
            source_text=source_text,
            translated_text=translated_text,
        )
        self.records.insert(0, record)
        return record

    def list_history(self) -> list[TranslationRecord]:
        self._call("list_history")
        return list(self.records)

    def delete_translation(self, record_id: str) -> None:
        self._call("delete_translation", record_id)
        self.records = [r for r in self.records if r.id != record_id]

    def clear_history(self) -> None:
        self._call("clear_history")
        self.records = []

    def add_record(self, source_text: str, translated_text: str) -> TranslationRecord:
        self._next_id += 1
        record = TranslationRecord(
            id=f"r{self._next_id}",
            user_id=self.user.id,
            source_text=source_text,
            translated_text=translated_text,
        )
        self.records.append(record)
        return record


class FakeCapture(CaptureEngine):
    def __init__(self) -> None:
        self.starts = 0
        self.stops = 0
        self.run = 0
        self.start_errors: list[Optional[CaptureError]] = []
        self.stop_error: Optional[CaptureError] = None

    @property
    def name(self) -> str:
        return "fake"

    def start(self) -> None:
        self.starts += 1
        self.run = self._next_run()
        if self.start_errors:
            err = self.start_errors.pop(0)
            if err is not None:
                raise err

    def stop(self) -> None:
        self.stops += 1
        if self.stop_error is not None:
            raise self.stop_error

    def hear(self, *results: tuple[str, bool], run: Optional[int] = None) -> None:
        event = RecognitionEvent(results=tuple(RecognitionResult(t, f) for t, f in results))
        self._emit_result(event, run)

    def fail(self, code: str, run: Optional[int] = None) -> None:
        self._emit_error(code, run)

    def end(self, run: Optional[int] = None) -> None:
        self._emit_end(run)


class FakeSynth(SpeechSynthesizer):
    def __init__(self) -> None:
        self.spoken: list[tuple[str, str]] = []
        self.cancels = 0
        self.cancel_threads: list[str] = []
        self._callbacks: list[tuple[Optional[Callable[[], None]], Optional[Callable[[], None]]]] = []
        self._current: Optional[int] = None

    @property
    def name(self) -> str:
        return "fake"

    def speak(self, text, lang, *, on_start=None, on_end=None) -> None:
        self.cancel()
        self.spoken.append((text, lang))
        self._callbacks.append((on_start, on_end))
        self._current = len(self._callbacks) - 1

    def cancel(self) -> None:
        self.cancels += 1
        self.cancel_threads.append(threading.current_thread().name)
        if self._current is not None:
            self.finish()

    def begin(self, index: int = -1) -> None:
        on_start, _ = self._callbacks[index]
        if on_start is not None:
            on_start()

    def finish(self, index: Optional[int] = None) -> None:
        if index is None:
            index = self._current if self._current is not None else -1
            self._current = None
        _, on_end = self._callbacks[index]
        if on_end is not None:
            on_end()


class FakeMicCheck(MicrophoneCheck):
    def __init__(self, ok: bool = True) -> None:
        self.ok = ok

    def check(self) -> bool:
        return self.ok


@pytest.fixture
def api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def capture() -> FakeCapture:
    return FakeCapture()


@pytest.fixture
def synth() -> FakeSynth:
    return FakeSynth()
