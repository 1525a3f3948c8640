from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Optional

from transdesk.contracts import RecognitionEvent

ResultCallback = Callable[[RecognitionEvent], None]
ErrorCallback = Callable[[str], None]
EndCallback = Callable[[], None]


class CaptureEngine(ABC):
    """
    Continuous speech-to-text with interim results.

    Handlers are plain attributes so a controller can bind them once.
    Contract: every run started by `start()` ends with exactly one
    `on_end`, including runs that ended through `on_error` or `stop()`,
    unless a newer run has started before that `on_end` is delivered.
    `start()` raises CaptureError when a run cannot begin.

    Each run is numbered by `_next_run()`. Engines that deliver events
    later (through a dispatcher) pass the run number along, and events of a
    run that a newer `start()` has superseded are dropped on delivery.
    """

    on_result: Optional[ResultCallback] = None
    on_error: Optional[ErrorCallback] = None
    on_end: Optional[EndCallback] = None
    _run_id: int = 0

    @property
    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    def start(self) -> None: ...

    @abstractmethod
    def stop(self) -> None: ...

    def abort(self) -> None:
        self.stop()

    def _next_run(self) -> int:
        self._run_id += 1
        return self._run_id

    def _superseded(self, run: Optional[int]) -> bool:
        return run is not None and run != self._run_id

    def _emit_result(self, event: RecognitionEvent, run: Optional[int] = None) -> None:
        if self.on_result is not None and not self._superseded(run):
            self.on_result(event)

    def _emit_error(self, code: str, run: Optional[int] = None) -> None:
        if self.on_error is not None and not self._superseded(run):
            self.on_error(code)

    def _emit_end(self, run: Optional[int] = None) -> None:
        if self.on_end is not None and not self._superseded(run):
            self.on_end()


class SpeechSynthesizer(ABC):
    """Text-to-speech playback. `on_start`/`on_end` fire once per utterance."""

    @property
    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    def speak(
        self,
        text: str,
        lang: str,
        *,
        on_start: Optional[Callable[[], None]] = None,
        on_end: Optional[Callable[[], None]] = None,
    ) -> None: ...

    @abstractmethod
    def cancel(self) -> None: ...


class MicrophoneCheck(ABC):
    @abstractmethod
    def check(self) -> bool:
        """True when an input device can be opened."""
