from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from transdesk.api.client import ApiClient
from transdesk.audio.mic import SoundDeviceMicCheck, SoundDeviceMicSource
from transdesk.audio.vad import EnergyGate
from transdesk.auth.session import AuthSession
from transdesk.auth.tokens import TokenStore
from transdesk.speech.transcriber import WhisperTranscriber, whisper_language
from transdesk.speech.whisper_capture import WhisperCaptureEngine


@dataclass(frozen=True)
class AppServices:
    api: ApiClient
    auth: AuthSession
    capture: WhisperCaptureEngine
    mic_check: SoundDeviceMicCheck


def build_app_services(
    args: Any,
    *,
    dispatch: Optional[Callable[[Callable[[], None]], None]] = None,
    store: Optional[TokenStore] = None,
    logger: logging.Logger | None = None,
) -> AppServices:
    api = ApiClient(
        base_url=str(args.api_url),
        translate_url=str(args.translate_url),
        timeout=float(args.timeout_sec),
        logger=logger,
    )
    auth = AuthSession(api, store or TokenStore(), logger=logger)
    mic = SoundDeviceMicSource(
        chunk_seconds=float(args.chunk_sec),
        sample_rate=int(args.sr),
        channels=int(args.channels),
        device=args.device,
    )
    transcriber = WhisperTranscriber(model_size=str(args.model), language=whisper_language(args.source_lang))
    capture = WhisperCaptureEngine(
        mic=mic,
        transcriber=transcriber,
        gate=EnergyGate(rms_threshold=float(args.rms_th)),
        silence_chunks=max(1, int(args.silence_chunks)),
        interim_chunks=max(1, int(args.interim_chunks)),
        no_speech_sec=float(args.no_speech_sec) if args.no_speech_sec else None,
        max_session_sec=float(args.max_session_sec) if args.max_session_sec else None,
        dispatch=dispatch,
        logger=logger,
    )
    return AppServices(api=api, auth=auth, capture=capture, mic_check=SoundDeviceMicCheck(mic))
