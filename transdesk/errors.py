from __future__ import annotations

from enum import Enum
from typing import Mapping, Optional

SERVER_DEFAULT_MESSAGE = "An error occurred with the request"
CONNECTIVITY_MESSAGE = "Unable to connect to the server. Please check your connection and try again."
SETUP_MESSAGE = "An error occurred while processing your request."


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    SERVER = "server"
    CONNECTIVITY = "connectivity"
    SETUP = "setup"


class AppError(Exception):
    """
    Normalized failure surfaced to the user.

    kind is a closed set: callers branch on it, never on transport details.
    fields maps form field names to per-field validation messages.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        status: Optional[int] = None,
        fields: Optional[Mapping[str, str]] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status = status
        self.fields: dict[str, str] = dict(fields or {})

    @classmethod
    def validation(cls, message: str, fields: Optional[Mapping[str, str]] = None) -> "AppError":
        return cls(ErrorKind.VALIDATION, message, fields=fields)

    @classmethod
    def server(cls, message: Optional[str], status: Optional[int] = None) -> "AppError":
        return cls(ErrorKind.SERVER, message or SERVER_DEFAULT_MESSAGE, status=status)

    @classmethod
    def connectivity(cls, message: str = CONNECTIVITY_MESSAGE) -> "AppError":
        return cls(ErrorKind.CONNECTIVITY, message)

    @classmethod
    def setup(cls) -> "AppError":
        return cls(ErrorKind.SETUP, SETUP_MESSAGE)

    def __repr__(self) -> str:
        return f"AppError(kind={self.kind.value!r}, message={self.message!r}, status={self.status!r})"


class CaptureErrorCode(str, Enum):
    AUDIO_CAPTURE = "audio-capture"
    NOT_ALLOWED = "not-allowed"
    NETWORK = "network"
    NO_SPEECH = "no-speech"
    ABORTED = "aborted"
    SERVICE_NOT_ALLOWED = "service-not-allowed"
    LANGUAGE_NOT_SUPPORTED = "language-not-supported"
    UNSUPPORTED = "unsupported"


_CAPTURE_MESSAGES: dict[str, str] = {
    CaptureErrorCode.AUDIO_CAPTURE.value: (
        "No microphone detected. Please check your microphone connection and permissions."
    ),
    CaptureErrorCode.NOT_ALLOWED.value: (
        "Microphone access was denied. Please allow microphone access in your browser settings."
    ),
    CaptureErrorCode.NETWORK.value: "Network error occurred. Please check your internet connection.",
    CaptureErrorCode.NO_SPEECH.value: "No speech was detected. Please try speaking again.",
    CaptureErrorCode.ABORTED.value: "Speech recognition was aborted.",
    CaptureErrorCode.SERVICE_NOT_ALLOWED.value: (
        "Speech recognition service is not allowed. Please check your browser settings."
    ),
    CaptureErrorCode.LANGUAGE_NOT_SUPPORTED.value: "Language not supported.",
    CaptureErrorCode.UNSUPPORTED.value: "Speech recognition is not supported in your browser",
}
CAPTURE_DEFAULT_MESSAGE = "Speech recognition error occurred."


def capture_error_message(code: str | CaptureErrorCode) -> str:
    key = code.value if isinstance(code, CaptureErrorCode) else str(code or "")
    return _CAPTURE_MESSAGES.get(key, CAPTURE_DEFAULT_MESSAGE)


class CaptureError(RuntimeError):
    def __init__(self, code: str | CaptureErrorCode, detail: str = "") -> None:
        self.code = code.value if isinstance(code, CaptureErrorCode) else str(code)
        self.detail = detail
        super().__init__(detail or capture_error_message(self.code))

    @property
    def message(self) -> str:
        return capture_error_message(self.code)
