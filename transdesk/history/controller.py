from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from transdesk.api.client import ApiClient
from transdesk.app.logging_setup import log_event
from transdesk.contracts import TranslationRecord
from transdesk.errors import AppError
from transdesk.speech.base import SpeechSynthesizer
from transdesk.translator.session import TARGET_VOICE

LOAD_FAILED = "Failed to load translation history."
DELETE_FAILED = "Failed to delete translation."
CLEAR_FAILED = "Failed to clear history."


def format_created_at(value: Optional[datetime]) -> str:
    """Render like `Oct 18, 2026, 02:30 PM`."""
    if value is None:
        return ""
    if value.tzinfo is not None:
        value = value.astimezone()
    return f"{value.strftime('%b')} {value.day}, {value.year}, {value.strftime('%I:%M %p')}"


@dataclass(frozen=True)
class HistoryRequest:
    action: str  # "load" | "delete" | "clear"
    generation: int
    record_id: Optional[str] = None


@dataclass(frozen=True)
class HistoryOutcome:
    request: HistoryRequest
    records: Optional[tuple[TranslationRecord, ...]] = None
    error: Optional[str] = None


_FALLBACKS = {"load": LOAD_FAILED, "delete": DELETE_FAILED, "clear": CLEAR_FAILED}


class HistoryController:
    """
    List, delete and clear a user's translation records; the list only changes after the server confirms.

    Each server action is split like the translator's: `begin_*` marks the
    controller busy and returns a request, `execute` does the network call
    (safe on a worker thread, touches no state) and `complete` commits the
    outcome on the UI thread. `forget()` starts a new generation, so
    outcomes of requests made for a signed-out user are dropped.
    """

    def __init__(
        self,
        api: ApiClient,
        *,
        synth: Optional[SpeechSynthesizer] = None,
        clipboard: Optional[Callable[[str], None]] = None,
        target_voice: str = TARGET_VOICE,
        logger: logging.Logger | None = None,
    ) -> None:
        self.api = api
        self.synth = synth
        self.clipboard = clipboard
        self.target_voice = target_voice
        self.logger = logger

        self.records: list[TranslationRecord] = []
        self.loading = False
        self.busy = False
        self.error: Optional[str] = None
        self.confirm_clear_open = False
        self.copied_id: Optional[str] = None
        self.playing_id: Optional[str] = None
        self._generation = 0

    @property
    def can_clear(self) -> bool:
        return bool(self.records) and not self.loading

    def dismiss_error(self) -> None:
        self.error = None

    def forget(self) -> None:
        """Drop everything held for the signed-out user, including requests still in flight."""
        if self.playing_id is not None and self.synth is not None:
            self.synth.cancel()
        self._generation += 1
        self.records = []
        self.loading = False
        self.busy = False
        self.error = None
        self.confirm_clear_open = False
        self.copied_id = None
        self.playing_id = None

    def begin_load(self) -> HistoryRequest:
        self.loading = True
        return HistoryRequest("load", self._generation)

    def begin_delete(self, record_id: str) -> Optional[HistoryRequest]:
        if self.busy:
            return None
        self.busy = True
        return HistoryRequest("delete", self._generation, record_id=record_id)

    def request_clear(self) -> bool:
        if not self.can_clear:
            return False
        self.confirm_clear_open = True
        return True

    def cancel_clear(self) -> None:
        self.confirm_clear_open = False

    def begin_clear(self) -> Optional[HistoryRequest]:
        if not self.confirm_clear_open or self.busy:
            return None
        self.confirm_clear_open = False
        self.busy = True
        return HistoryRequest("clear", self._generation)

    def execute(self, request: HistoryRequest) -> HistoryOutcome:
        try:
            if request.action == "load":
                return HistoryOutcome(request, records=tuple(self.api.list_history()))
            if request.action == "delete":
                self.api.delete_translation(str(request.record_id))
            else:
                self.api.clear_history()
        except AppError as e:
            log_event(
                self.logger,
                logging.WARNING,
                f"history_{request.action}_failed",
                kind=e.kind.value,
                record_id=request.record_id,
                detail=e.message,
            )
            return self.failed(request, e.message)
        return HistoryOutcome(request)

    def failed(self, request: HistoryRequest, message: Optional[str]) -> HistoryOutcome:
        return HistoryOutcome(request, error=message or _FALLBACKS[request.action])

    def complete(self, outcome: HistoryOutcome) -> bool:
        request = outcome.request
        if request.generation != self._generation:
            log_event(self.logger, logging.INFO, "history_stale_discarded", action=request.action)
            return False
        if request.action == "load":
            self.loading = False
        else:
            self.busy = False
        if outcome.error is not None:
            self.error = outcome.error
            return False

        if request.action == "load":
            self.records = list(outcome.records or ())
            log_event(self.logger, logging.INFO, "history_loaded", count=len(self.records))
            return True
        if request.action == "delete":
            self.records = [r for r in self.records if r.id != request.record_id]
            stop_playback = self.playing_id == request.record_id
        else:
            self.records = []
            stop_playback = self.playing_id is not None
        if stop_playback and self.synth is not None:
            self.synth.cancel()
        log_event(self.logger, logging.INFO, f"history_{request.action}d", record_id=request.record_id)
        return True

    def _run_now(self, request: Optional[HistoryRequest]) -> bool:
        if request is None:
            return False
        return self.complete(self.execute(request))

    def load(self) -> bool:
        return self._run_now(self.begin_load())

    def delete(self, record_id: str) -> bool:
        return self._run_now(self.begin_delete(record_id))

    def confirm_clear(self) -> bool:
        return self._run_now(self.begin_clear())

    def copy(self, record: TranslationRecord) -> bool:
        if self.clipboard is None:
            return False
        self.clipboard(record.translated_text)
        self.copied_id = record.id
        return True

    def dismiss_copy_notice(self, record_id: Optional[str] = None) -> None:
        if record_id is None or self.copied_id == record_id:
            self.copied_id = None

    def toggle_speak(self, record: TranslationRecord) -> bool:
        """Start playback of `record`, stopping any other; toggling the playing record stops it."""
        if self.synth is None:
            return False
        if self.playing_id is not None:
            was_playing = self.playing_id
            self.synth.cancel()
            self.playing_id = None
            if was_playing == record.id:
                return False

        record_id = record.id

        def _on_start() -> None:
            self.playing_id = record_id

        def _on_end() -> None:
            if self.playing_id == record_id:
                self.playing_id = None

        self.synth.speak(record.translated_text, self.target_voice, on_start=_on_start, on_end=_on_end)
        return True
