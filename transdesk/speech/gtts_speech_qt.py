from __future__ import annotations

import logging
import os
import tempfile
import threading
from typing import Callable, Optional

from transdesk.app.logging_setup import log_event
from transdesk.speech.base import SpeechSynthesizer

try:
    from PyQt6 import QtCore, QtMultimedia

    _PYQT_IMPORT_ERROR: ImportError | None = None
except ImportError as e:  # pragma: no cover - import guard path
    QtCore = None  # type: ignore[assignment]
    QtMultimedia = None  # type: ignore[assignment]
    _PYQT_IMPORT_ERROR = e


def synthesize_mp3(text: str, lang: str) -> str:
    """Render `text` with Google TTS into a temp MP3 and return its path."""
    from gtts import gTTS

    fd, path = tempfile.mkstemp(suffix=".mp3", prefix="transdesk_tts_")
    os.close(fd)
    try:
        gTTS(text=text, lang=lang, slow=False).save(path)
    except Exception:
        _remove_quietly(path)
        raise
    return path


def _remove_quietly(path: str) -> None:
    try:
        os.remove(path)
    except OSError:
        pass


class _Utterance:
    def __init__(
        self,
        uid: int,
        on_start: Optional[Callable[[], None]],
        on_end: Optional[Callable[[], None]],
    ) -> None:
        self.uid = uid
        self.on_start = on_start
        self.on_end = on_end
        self.started = False
        self.path: Optional[str] = None


if QtCore is not None:
    class _SynthRelay(QtCore.QObject):
        # Emitted from the synthesis thread; delivered on the Qt thread.
        ready = QtCore.pyqtSignal(int, str)
        failed = QtCore.pyqtSignal(int, str)

    class GTTSSynthesizer(SpeechSynthesizer):
        """gTTS rendering on a worker thread, QtMultimedia playback on the Qt thread."""

        def __init__(self, *, logger: logging.Logger | None = None) -> None:
            self.logger = logger
            self._relay = _SynthRelay()
            self._relay.ready.connect(self._play)
            self._relay.failed.connect(self._on_failed)
            self._player: Optional[QtMultimedia.QMediaPlayer] = None
            self._output: Optional[QtMultimedia.QAudioOutput] = None
            self._next_uid = 0
            self._current: Optional[_Utterance] = None

        @property
        def name(self) -> str:
            return "gtts"

        def _ensure_player(self) -> QtMultimedia.QMediaPlayer:
            if self._player is None:
                self._player = QtMultimedia.QMediaPlayer()
                self._output = QtMultimedia.QAudioOutput()
                self._player.setAudioOutput(self._output)
                self._player.playbackStateChanged.connect(self._on_playback_state)
                self._player.errorOccurred.connect(self._on_player_error)
            return self._player

        def speak(
            self,
            text: str,
            lang: str,
            *,
            on_start: Optional[Callable[[], None]] = None,
            on_end: Optional[Callable[[], None]] = None,
        ) -> None:
            self.cancel()
            self._next_uid += 1
            utterance = _Utterance(self._next_uid, on_start, on_end)
            self._current = utterance

            def _work() -> None:
                try:
                    path = synthesize_mp3(text, lang)
                except Exception as e:
                    self._relay.failed.emit(utterance.uid, str(e))
                    return
                self._relay.ready.emit(utterance.uid, path)

            threading.Thread(target=_work, name="transdesk-tts", daemon=True).start()
            log_event(self.logger, logging.INFO, "tts_requested", lang=lang, chars=len(text))

        def cancel(self) -> None:
            if self._player is not None:
                self._player.stop()
            self._finish(self._current)

        def _finish(self, utterance: Optional[_Utterance]) -> None:
            if utterance is None or utterance is not self._current:
                return
            self._current = None
            if utterance.path:
                _remove_quietly(utterance.path)
            if utterance.on_end is not None:
                utterance.on_end()

        def _play(self, uid: int, path: str) -> None:
            utterance = self._current
            if utterance is None or utterance.uid != uid:
                _remove_quietly(path)
                return
            utterance.path = path
            player = self._ensure_player()
            player.setSource(QtCore.QUrl.fromLocalFile(path))
            player.play()

        def _on_failed(self, uid: int, detail: str) -> None:
            log_event(self.logger, logging.WARNING, "tts_failed", detail=detail)
            utterance = self._current
            if utterance is not None and utterance.uid == uid:
                self._finish(utterance)

        def _on_playback_state(self, state) -> None:
            utterance = self._current
            if utterance is None:
                return
            if state == QtMultimedia.QMediaPlayer.PlaybackState.PlayingState and not utterance.started:
                utterance.started = True
                if utterance.on_start is not None:
                    utterance.on_start()
            elif state == QtMultimedia.QMediaPlayer.PlaybackState.StoppedState and utterance.started:
                self._finish(utterance)

        def _on_player_error(self, _error, detail: str) -> None:
            log_event(self.logger, logging.WARNING, "tts_playback_failed", detail=detail)
            self._finish(self._current)
else:
    class GTTSSynthesizer:  # type: ignore[no-redef]
        def __init__(self, *args, **kwargs) -> None:
            raise ModuleNotFoundError(
                "PyQt6 is required for speech playback. Install with: python -m pip install PyQt6"
            ) from _PYQT_IMPORT_ERROR
