from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SessionState(str, Enum):
    IDLE = "idle"
    RECORDING = "recording"
    TRANSLATING = "translating"
    SPEAKING = "speaking"


@dataclass
class SessionStateTracker:
    """Single discriminant for the translator view; recording, translating and speaking exclude each other."""

    state: SessionState = SessionState.IDLE
    last_error: str | None = None

    def set_recording(self) -> None:
        self.state = SessionState.RECORDING
        self.last_error = None

    def set_translating(self) -> None:
        self.state = SessionState.TRANSLATING
        self.last_error = None

    def set_speaking(self) -> bool:
        if self.state != SessionState.IDLE:
            return False
        self.state = SessionState.SPEAKING
        return True

    def set_idle(self) -> None:
        self.state = SessionState.IDLE

    def finish_speaking(self) -> None:
        if self.state == SessionState.SPEAKING:
            self.state = SessionState.IDLE

    def set_error(self, detail: str) -> None:
        self.state = SessionState.IDLE
        self.last_error = detail

    def note_error(self, detail: str) -> None:
        # Rejected action: report it without leaving the current state.
        self.last_error = detail

    def clear_error(self) -> None:
        self.last_error = None
