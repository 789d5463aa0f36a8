from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from voxlate.audio.mic import SoundDeviceMicSource
from voxlate.audio.recorder import UtteranceRecorder
from voxlate.audio.vad import build_vad
from voxlate.capture.mic_capture import MicCaptureAdapter
from voxlate.languages.catalog import LanguageCatalog
from voxlate.nlp.translator.base import TranslationClient
from voxlate.nlp.translator.factory import get_client
from voxlate.session.orchestrator import OrchestratorSettings
from voxlate.tts.pyttsx3_playback import Pyttsx3Playback


@dataclass(frozen=True)
class SessionServices:
    catalog: LanguageCatalog
    client: TranslationClient
    capture: MicCaptureAdapter
    playback: Pyttsx3Playback
    settings: OrchestratorSettings


def build_settings(args: Any) -> OrchestratorSettings:
    return OrchestratorSettings(
        max_upload_bytes=int(args.max_upload_bytes),
        fallback_language=str(args.fallback_language),
        remote_timeout_sec=max(0.0, float(args.remote_timeout_sec)),
        playback_timeout_sec=max(0.0, float(args.playback_timeout_sec)),
    )


def build_capture(args: Any, logger: logging.Logger | None = None) -> MicCaptureAdapter:
    mic = SoundDeviceMicSource(
        chunk_seconds=float(args.chunk_sec),
        sample_rate=int(args.sr),
        channels=int(args.channels),
        device=args.device,
    )
    recorder = UtteranceRecorder(
        vad=build_vad(str(args.vad), rms_threshold=float(args.rms_th), sample_rate=int(args.sr)),
        silence_chunks_to_finalize=max(1, int(args.silence_chunks)),
        max_record_sec=float(args.max_record_sec) if float(args.max_record_sec) > 0 else None,
        debug=bool(args.debug),
    )
    return MicCaptureAdapter(mic=mic, recorder=recorder, logger=logger)


def build_session_services(args: Any, logger: logging.Logger | None = None) -> SessionServices:
    catalog = LanguageCatalog()
    client = get_client(
        str(args.translator),
        catalog=catalog,
        model_name=str(args.model),
        api_key_env=str(args.api_key_env),
        logger=logger,
    )
    playback = Pyttsx3Playback(rate=int(args.speech_rate) or None, logger=logger)
    return SessionServices(
        catalog=catalog,
        client=client,
        capture=build_capture(args, logger),
        playback=playback,
        settings=build_settings(args),
    )
