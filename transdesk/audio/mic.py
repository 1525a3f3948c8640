from __future__ import annotations

import contextlib
import threading
from dataclasses import dataclass
from typing import Iterator, Optional

from transdesk.errors import CaptureError, CaptureErrorCode
from transdesk.speech.base import MicrophoneCheck


@dataclass(frozen=True)
class AudioChunk:
    """
    Raw PCM16 audio chunk captured from the microphone.
    pcm16: little-endian signed 16-bit PCM bytes (interleaved if channels > 1).
    """
    pcm16: bytes
    sample_rate: int
    channels: int
    start_time: float  # seconds since stream start
    duration: float    # seconds


def _open_error_code(exc: Exception) -> CaptureErrorCode:
    text = str(exc).lower()
    if "permission" in text or "denied" in text or "not allowed" in text:
        return CaptureErrorCode.NOT_ALLOWED
    return CaptureErrorCode.AUDIO_CAPTURE


class SoundDeviceMicSource:
    """
    Live microphone source using the `sounddevice` package (PortAudio).
    Captures raw PCM16 chunks of fixed duration.
    """

    def __init__(
        self,
        *,
        chunk_seconds: float = 0.5,
        sample_rate: int = 16000,
        channels: int = 1,
        device: Optional[int] = None,
    ) -> None:
        if chunk_seconds <= 0:
            raise ValueError("chunk_seconds must be > 0")
        if sample_rate <= 0:
            raise ValueError("sample_rate must be > 0")
        if channels not in (1, 2):
            raise ValueError("channels must be 1 or 2")

        self.chunk_seconds = float(chunk_seconds)
        self.sample_rate = int(sample_rate)
        self.channels = int(channels)
        self.device = device

    @staticmethod
    def _sounddevice():
        try:
            import sounddevice as sd
        except (ImportError, OSError) as e:
            # OSError: PortAudio shared library missing.
            raise CaptureError(CaptureErrorCode.UNSUPPORTED, f"sounddevice unavailable: {e}") from e
        return sd

    @classmethod
    def list_devices(cls) -> str:
        return str(cls._sounddevice().query_devices())

    def check_settings(self) -> None:
        sd = self._sounddevice()
        try:
            sd.check_input_settings(
                device=self.device,
                channels=self.channels,
                dtype="int16",
                samplerate=self.sample_rate,
            )
        except Exception as e:
            raise CaptureError(_open_error_code(e), f"unsupported input settings: {e}") from e

    @contextlib.contextmanager
    def _open_stream(self):
        sd = self._sounddevice()
        try:
            stream = sd.RawInputStream(
                samplerate=self.sample_rate,
                channels=self.channels,
                dtype="int16",
                device=self.device,
                blocksize=0,  # let PortAudio choose
            )
        except Exception as e:
            raise CaptureError(_open_error_code(e), f"failed to open microphone stream: {e}") from e

        with stream:
            yield stream

    def chunks(self, stop_event: Optional[threading.Event] = None) -> Iterator[AudioChunk]:
        frames_per_chunk = max(1, int(round(self.chunk_seconds * self.sample_rate)))
        frames_seen = 0

        with self._open_stream() as stream:
            while stop_event is None or not stop_event.is_set():
                data, _overflowed = stream.read(frames_per_chunk)
                start_time = frames_seen / self.sample_rate
                frames_seen += frames_per_chunk
                yield AudioChunk(
                    pcm16=bytes(data),
                    sample_rate=self.sample_rate,
                    channels=self.channels,
                    start_time=start_time,
                    duration=frames_per_chunk / self.sample_rate,
                )


class SoundDeviceMicCheck(MicrophoneCheck):
    """Open and immediately close an input stream, like a permission prompt would."""

    def __init__(self, mic: SoundDeviceMicSource) -> None:
        self.mic = mic

    def check(self) -> bool:
        try:
            self.mic.check_settings()
            with self.mic._open_stream():  # noqa: SLF001
                return True
        except CaptureError:
            return False
