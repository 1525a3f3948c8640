from __future__ import annotations

import io
import wave
from typing import Optional

NO_SPEECH_PROB_MAX = 0.6
PROMPT_CHARS = 200


def pcm16_wav_bytes(pcm16: bytes, sample_rate: int, channels: int) -> io.BytesIO:
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(2)
        wf.setframerate(sample_rate)
        wf.writeframes(pcm16)
    buf.seek(0)
    return buf


def whisper_language(lang_tag: Optional[str]) -> Optional[str]:
    """'en-US' -> 'en'; None or 'auto' lets whisper detect."""
    tag = str(lang_tag or "").strip().lower()
    if not tag or tag == "auto":
        return None
    return tag.split("-")[0]


def join_segments(segments, *, no_speech_prob_max: float = NO_SPEECH_PROB_MAX) -> str:
    """Concatenate segment texts, skipping the ones whisper itself flags as probable silence."""
    words: list[str] = []
    for seg in segments:
        if float(getattr(seg, "no_speech_prob", 0.0) or 0.0) > no_speech_prob_max:
            continue
        text = (seg.text or "").strip()
        if text:
            words.append(text)
    return " ".join(words)


class WhisperTranscriber:
    """faster-whisper over one buffered PCM16 utterance.

    The model is created on first use. `context` (usually the phrases already
    committed in this recording) is handed to whisper as its initial prompt so
    a re-transcribed utterance keeps the spelling of what came before.
    """

    def __init__(
        self,
        *,
        model_size: str = "tiny",
        device: str = "cpu",
        compute_type: str = "int8",
        language: Optional[str] = "en",
        beam_size: int = 1,
    ) -> None:
        self.model_size = model_size
        self.device = device
        self.compute_type = compute_type
        self.language = language
        self.beam_size = beam_size
        self._model = None

    def load(self):
        if self._model is None:
            from faster_whisper import WhisperModel

            self._model = WhisperModel(self.model_size, device=self.device, compute_type=self.compute_type)
        return self._model

    def transcribe(self, pcm16: bytes, sample_rate: int, channels: int, context: str = "") -> str:
        if not pcm16:
            return ""
        prompt = context.strip()[-PROMPT_CHARS:] or None
        segments, _info = self.load().transcribe(
            pcm16_wav_bytes(pcm16, sample_rate, channels),
            language=self.language,
            beam_size=self.beam_size,
            vad_filter=False,
            condition_on_previous_text=False,
            initial_prompt=prompt,
        )
        return join_segments(segments)
