from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from transdesk.api.client import ApiClient
from transdesk.app.logging_setup import log_event
from transdesk.app.state import SessionState, SessionStateTracker
from transdesk.contracts import RecognitionEvent
from transdesk.errors import AppError, CaptureError, capture_error_message
from transdesk.speech.base import CaptureEngine, MicrophoneCheck, SpeechSynthesizer

TARGET_VOICE = "te"

EMPTY_SOURCE = "Please enter some text to translate"
TRANSLATE_FAILED = "Failed to translate. Please try again."
CAPTURE_UNSUPPORTED = "Speech recognition is not supported in your browser"
MIC_PERMISSION = "Please allow microphone access in your browser settings"
CAPTURE_START_FAILED = "Failed to start speech recognition. Please try again."
CAPTURE_STOP_FAILED = "Failed to stop speech recognition. Please try again."
CAPTURE_STOPPED_UNEXPECTEDLY = "Speech recognition stopped unexpectedly. Please try again."


@dataclass(frozen=True)
class TranslateRequest:
    seq: int
    text: str


@dataclass(frozen=True)
class TranslateOutcome:
    seq: int
    translated_text: Optional[str] = None
    error: Optional[str] = None
    saved: bool = False


class TranslationSession:
    """
    State for the translator view.

    Every mutation happens through these methods on the UI thread, except
    `execute_translate`, which only performs network calls and may run on a
    worker thread.
    """

    def __init__(
        self,
        api: ApiClient,
        *,
        capture: Optional[CaptureEngine] = None,
        synth: Optional[SpeechSynthesizer] = None,
        clipboard: Optional[Callable[[str], None]] = None,
        mic_check: Optional[MicrophoneCheck] = None,
        target_voice: str = TARGET_VOICE,
        on_focus: Optional[Callable[[], None]] = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.api = api
        self.capture = capture
        self.synth = synth
        self.clipboard = clipboard
        self.mic_check = mic_check
        self.target_voice = target_voice
        self.on_focus = on_focus
        self.logger = logger

        self.tracker = SessionStateTracker()
        self.source_text = ""
        self.translated_text = ""
        self.copy_notice = False
        self._seq = 0
        self._accept_late_results = False
        self._utterance = 0
        self._playing: Optional[int] = None

        if capture is not None:
            capture.on_result = self._on_capture_result
            capture.on_error = self._on_capture_error
            capture.on_end = self._on_capture_end

    @property
    def state(self) -> SessionState:
        return self.tracker.state

    @property
    def error(self) -> Optional[str]:
        return self.tracker.last_error

    @property
    def is_recording(self) -> bool:
        return self.state == SessionState.RECORDING

    @property
    def is_translating(self) -> bool:
        return self.state == SessionState.TRANSLATING

    @property
    def is_speaking(self) -> bool:
        return self.state == SessionState.SPEAKING

    @property
    def can_translate(self) -> bool:
        return not self.is_translating and bool(self.source_text.strip())

    @property
    def can_speak(self) -> bool:
        # Playback may run alongside recording or translating; one utterance at a time.
        return bool(self.translated_text) and not self.is_speaking and self._playing is None

    def set_source_text(self, text: str) -> None:
        self.source_text = str(text or "")

    def dismiss_error(self) -> None:
        self.tracker.clear_error()

    def dismiss_copy_notice(self) -> None:
        self.copy_notice = False

    def _fail(self, message: str) -> None:
        self.tracker.set_error(message)
        log_event(self.logger, logging.WARNING, "session_error", message=message)

    def _reject(self, message: str) -> None:
        self.tracker.note_error(message)
        log_event(self.logger, logging.INFO, "session_rejected", message=message, state=self.state.value)

    # Recording
    def toggle_recording(self) -> None:
        if self.is_recording:
            self.stop_recording()
        else:
            self.start_recording()

    def start_recording(self) -> bool:
        if self.capture is None:
            self._reject(CAPTURE_UNSUPPORTED)
            return False
        if self.state not in (SessionState.IDLE, SessionState.SPEAKING):
            return False
        if self.mic_check is not None and not self.mic_check.check():
            self._reject(MIC_PERMISSION)
            return False

        self.source_text = ""
        self.tracker.clear_error()
        self._accept_late_results = False
        try:
            self.capture.start()
        except CaptureError as e:
            log_event(self.logger, logging.WARNING, "capture_start_failed", code=e.code, detail=e.detail)
            self._fail(CAPTURE_START_FAILED)
            return False
        self.tracker.set_recording()
        log_event(self.logger, logging.INFO, "recording_started", engine=self.capture.name)
        return True

    def stop_recording(self) -> None:
        if not self.is_recording or self.capture is None:
            return
        self.tracker.set_idle()
        # Words still being transcribed when the user stops belong to this run.
        self._accept_late_results = True
        try:
            self.capture.stop()
        except CaptureError as e:
            log_event(self.logger, logging.WARNING, "capture_stop_failed", code=e.code, detail=e.detail)
            self._fail(CAPTURE_STOP_FAILED)
        log_event(self.logger, logging.INFO, "recording_stopped")

    def _on_capture_result(self, event: RecognitionEvent) -> None:
        if not (self.is_recording or self._accept_late_results):
            return
        self.source_text = event.transcript()

    def _on_capture_error(self, code: str) -> None:
        self._accept_late_results = False
        if not self.is_recording:
            return
        self._fail(capture_error_message(code))

    def _on_capture_end(self) -> None:
        if not self.is_recording or self.capture is None:
            self._accept_late_results = False
            return
        # Engine ended on its own while the user still wants to record.
        try:
            self.capture.start()
        except CaptureError as e:
            log_event(self.logger, logging.WARNING, "capture_restart_failed", code=e.code, detail=e.detail)
            self._fail(CAPTURE_STOPPED_UNEXPECTEDLY)
            return
        log_event(self.logger, logging.INFO, "capture_restarted")

    # Translate
    def begin_translate(self) -> Optional[TranslateRequest]:
        if self.is_translating:
            return None
        text = self.source_text
        if not text.strip():
            self._reject(EMPTY_SOURCE)
            return None
        if self.is_recording:
            self.stop_recording()
        self._accept_late_results = False
        self._seq += 1
        self.tracker.set_translating()
        return TranslateRequest(seq=self._seq, text=text)

    def execute_translate(self, request: TranslateRequest) -> TranslateOutcome:
        t0 = time.perf_counter()
        try:
            translated = self.api.translate(request.text)
        except AppError as e:
            return TranslateOutcome(seq=request.seq, error=e.message or TRANSLATE_FAILED)
        try:
            self.api.save_translation(request.text, translated)
        except AppError as e:
            log_event(self.logger, logging.WARNING, "history_persist_failed", kind=e.kind.value, detail=e.message)
            return TranslateOutcome(seq=request.seq, translated_text=translated, error=TRANSLATE_FAILED)
        log_event(
            self.logger,
            logging.INFO,
            "translate_done",
            chars_src=len(request.text),
            chars_out=len(translated),
            ms=round((time.perf_counter() - t0) * 1000.0, 2),
        )
        return TranslateOutcome(seq=request.seq, translated_text=translated, saved=True)

    def complete_translate(self, outcome: TranslateOutcome) -> bool:
        if outcome.seq != self._seq or not self.is_translating:
            log_event(self.logger, logging.INFO, "translate_stale_discarded", seq=outcome.seq)
            return False
        if outcome.translated_text is not None:
            self.translated_text = outcome.translated_text
        if outcome.error:
            self._fail(outcome.error)
        else:
            self.tracker.set_idle()
        return outcome.saved

    def translate(self) -> bool:
        request = self.begin_translate()
        if request is None:
            return False
        return self.complete_translate(self.execute_translate(request))

    # Output
    def speak(self) -> bool:
        if self.synth is None or not self.can_speak:
            return False
        self._utterance += 1
        uid = self._utterance
        self._playing = uid

        def _on_end() -> None:
            if self._playing == uid:
                self._playing = None
            self.tracker.finish_speaking()

        self.synth.speak(self.translated_text, self.target_voice, on_start=self.tracker.set_speaking, on_end=_on_end)
        return True

    def copy(self) -> bool:
        if not self.translated_text or self.clipboard is None:
            return False
        self.clipboard(self.translated_text)
        self.copy_notice = True
        return True

    def reset(self) -> None:
        if self.is_recording and self.capture is not None:
            self.tracker.set_idle()
            self.capture.stop()
        self._accept_late_results = False
        self._seq += 1
        self.source_text = ""
        self.translated_text = ""
        self.tracker.set_idle()
        self.tracker.clear_error()
        if self.on_focus is not None:
            self.on_focus()

    def teardown(self) -> None:
        self._accept_late_results = False
        if self.is_recording and self.capture is not None:
            self.tracker.set_idle()
            self.capture.stop()
