from __future__ import annotations

import logging
import threading
from typing import Callable, Iterable, Optional

from transdesk.app.logging_setup import log_event
from transdesk.audio.mic import AudioChunk, SoundDeviceMicSource
from transdesk.audio.vad import EnergyGate, pcm16_duration, pcm16_rms
from transdesk.contracts import RecognitionEvent, RecognitionResult
from transdesk.errors import CaptureError, CaptureErrorCode
from transdesk.speech.base import CaptureEngine
from transdesk.speech.transcriber import WhisperTranscriber

Dispatch = Callable[[Callable[[], None]], None]


def _call_now(fn: Callable[[], None]) -> None:
    fn()


class UtteranceRecognizer:
    """
    Turns a chunk stream into recognition events.

    Speech chunks accumulate into an utterance; every `interim_chunks`
    speech chunks the buffer is transcribed as an interim result, and after
    `silence_chunks` quiet chunks it is transcribed once more and committed
    as final. Returns an error code when the run should end in error,
    otherwise None.
    """

    def __init__(
        self,
        *,
        transcriber: WhisperTranscriber,
        gate: EnergyGate,
        on_event: Callable[[RecognitionEvent], None],
        silence_chunks: int = 2,
        interim_chunks: int = 2,
        no_speech_sec: float | None = 8.0,
        max_session_sec: float | None = None,
        min_utter_sec: float = 0.3,
        logger: logging.Logger | None = None,
    ) -> None:
        if silence_chunks <= 0:
            raise ValueError("silence_chunks must be > 0")
        if interim_chunks <= 0:
            raise ValueError("interim_chunks must be > 0")
        self.transcriber = transcriber
        self.gate = gate
        self.on_event = on_event
        self.silence_chunks = int(silence_chunks)
        self.interim_chunks = int(interim_chunks)
        self.no_speech_sec = no_speech_sec
        self.max_session_sec = max_session_sec
        self.min_utter_sec = float(min_utter_sec)
        self.logger = logger
        self.finals: list[RecognitionResult] = []
        self.interim: Optional[RecognitionResult] = None

    def _result(self, text: str, is_final: bool) -> RecognitionResult:
        # Results concatenate directly, so later ones carry their separator.
        prefix = " " if self.finals else ""
        return RecognitionResult(transcript=prefix + text, is_final=is_final)

    def _emit(self) -> None:
        results = list(self.finals)
        if self.interim is not None:
            results.append(self.interim)
        self.on_event(RecognitionEvent(results=tuple(results), result_index=len(self.finals)))

    def _transcribe(self, parts: list[bytes], sample_rate: int, channels: int) -> str:
        pcm16 = b"".join(parts)
        if pcm16_duration(pcm16, sample_rate, channels) < self.min_utter_sec:
            return ""
        context = "".join(r.transcript for r in self.finals)
        return self.transcriber.transcribe(pcm16, sample_rate, channels, context=context).strip()

    def _commit(self, parts: list[bytes], sample_rate: int, channels: int) -> None:
        text = self._transcribe(parts, sample_rate, channels)
        had_interim = self.interim is not None
        self.interim = None
        if text:
            self.finals.append(self._result(text, is_final=True))
        if text or had_interim:
            self._emit()

    def run(self, chunks: Iterable[AudioChunk]) -> Optional[str]:
        parts: list[bytes] = []
        sample_rate = 0
        channels = 0
        trailing_silence = 0
        since_interim = 0
        heard_speech = False

        for chunk in chunks:
            elapsed = chunk.start_time + chunk.duration
            is_speech = self.gate.is_speech(chunk.pcm16)
            log_event(
                self.logger,
                logging.DEBUG,
                "capture_chunk",
                t=round(elapsed, 2),
                rms=round(pcm16_rms(chunk.pcm16), 1),
                speech=is_speech,
            )

            if is_speech:
                if not parts:
                    sample_rate = int(chunk.sample_rate)
                    channels = int(chunk.channels)
                heard_speech = True
                parts.append(chunk.pcm16)
                trailing_silence = 0
                since_interim += 1
                if since_interim >= self.interim_chunks:
                    since_interim = 0
                    text = self._transcribe(parts, sample_rate, channels)
                    if text:
                        self.interim = self._result(text, is_final=False)
                        self._emit()
            elif parts:
                trailing_silence += 1
                if trailing_silence >= self.silence_chunks:
                    self._commit(parts, sample_rate, channels)
                    parts = []
                    trailing_silence = 0
                    since_interim = 0

            if not heard_speech and self.no_speech_sec is not None and elapsed >= self.no_speech_sec:
                return CaptureErrorCode.NO_SPEECH.value
            if self.max_session_sec is not None and elapsed >= self.max_session_sec:
                break

        if parts:
            self._commit(parts, sample_rate, channels)
        return None


class WhisperCaptureEngine(CaptureEngine):
    """
    Microphone capture session backed by sounddevice and faster-whisper.
    One daemon thread per run; handlers are invoked through `dispatch` so a
    UI can marshal them onto its own thread.
    """

    def __init__(
        self,
        *,
        mic: SoundDeviceMicSource,
        transcriber: WhisperTranscriber,
        gate: EnergyGate,
        silence_chunks: int = 2,
        interim_chunks: int = 2,
        no_speech_sec: float | None = 8.0,
        max_session_sec: float | None = 60.0,
        dispatch: Dispatch | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.mic = mic
        self.transcriber = transcriber
        self.gate = gate
        self.silence_chunks = silence_chunks
        self.interim_chunks = interim_chunks
        self.no_speech_sec = no_speech_sec
        self.max_session_sec = max_session_sec
        self.dispatch = dispatch or _call_now
        self.logger = logger
        self._thread: Optional[threading.Thread] = None
        self._active = False
        self._stop_event: Optional[threading.Event] = None
        self._aborted = False
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return "faster-whisper"

    @property
    def running(self) -> bool:
        return self._active

    def start(self) -> None:
        with self._lock:
            if self.running:
                raise CaptureError(CaptureErrorCode.ABORTED, "capture already running")
            self._aborted = False
            self._active = True
            run = self._next_run()
            stop_event = threading.Event()
            self._stop_event = stop_event
            self._thread = threading.Thread(
                target=lambda: self._run(stop_event, run),
                name="transdesk-capture",
                daemon=True,
            )
            self._thread.start()
        log_event(self.logger, logging.INFO, "capture_started", engine=self.name, run=run)

    def stop(self) -> None:
        with self._lock:
            if self._stop_event is not None:
                self._stop_event.set()

    def abort(self) -> None:
        self._aborted = True
        self.stop()

    def _run(self, stop_event: threading.Event, run: int) -> None:
        recognizer = UtteranceRecognizer(
            transcriber=self.transcriber,
            gate=self.gate,
            on_event=lambda event: self.dispatch(lambda: self._emit_result(event, run)),
            silence_chunks=self.silence_chunks,
            interim_chunks=self.interim_chunks,
            no_speech_sec=self.no_speech_sec,
            max_session_sec=self.max_session_sec,
            logger=self.logger,
        )
        code: Optional[str] = None
        try:
            self.transcriber.load()
            code = recognizer.run(self.mic.chunks(stop_event))
        except CaptureError as e:
            code = e.code
        except ImportError:
            code = CaptureErrorCode.UNSUPPORTED.value
        except OSError:
            # Model download or cache failure surfaces as OSError subclasses.
            log_event(self.logger, logging.WARNING, "capture_model_unavailable", model=self.transcriber.model_size)
            code = CaptureErrorCode.NETWORK.value
        except Exception:
            if self.logger is not None:
                self.logger.exception("capture_crash")
            code = "engine-failure"

        if code is None and self._aborted:
            code = CaptureErrorCode.ABORTED.value
        log_event(self.logger, logging.INFO, "capture_ended", error=code, finals=len(recognizer.finals))
        with self._lock:
            # The run is over before `on_end` fires, so a handler may start the next one.
            if self._stop_event is stop_event:
                self._active = False
        if code is not None:
            failed = code
            self.dispatch(lambda: self._emit_error(failed, run))
        self.dispatch(lambda: self._emit_end(run))
