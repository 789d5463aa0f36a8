from __future__ import annotations

import asyncio
import logging
import threading

from voxlate.audio.mic import MicError, SoundDeviceMicSource
from voxlate.audio.recorder import UtteranceRecorder
from voxlate.capture.base import AudioCaptureAdapter
from voxlate.contracts import CaptureResult
from voxlate.session.errors import CaptureError


class MicCaptureAdapter(AudioCaptureAdapter):
    """
    Record one utterance from the microphone and hand it over as a WAV blob.
    Transcription happens remotely, so the language hint is only logged.
    """

    def __init__(
        self,
        *,
        mic: SoundDeviceMicSource,
        recorder: UtteranceRecorder,
        logger: logging.Logger | None = None,
    ) -> None:
        self.mic = mic
        self.recorder = recorder
        self.logger = logger
        self._stop_event: threading.Event | None = None

    @property
    def name(self) -> str:
        return "sounddevice"

    def is_available(self) -> bool:
        return self.mic.has_input_device()

    def _record_blocking(self, stop_event: threading.Event) -> CaptureResult:
        try:
            utterance = self.recorder.record(self.mic.chunks(stop_event), stop_event)
        except MicError as e:
            raise CaptureError(f"Speech capture failed: {e}") from e

        if self.logger is not None:
            self.logger.info(
                "capture_finished",
                extra={
                    "reason": utterance.reason,
                    "heard_speech": utterance.heard_speech,
                    "seconds": round(utterance.duration, 2),
                },
            )
        if not utterance.heard_speech:
            return CaptureResult(ended_naturally=utterance.ended_naturally)
        return CaptureResult(
            audio=utterance.to_wav(),
            mime_type="audio/wav",
            ended_naturally=utterance.ended_naturally,
        )

    async def start(self, language_hint: str) -> CaptureResult:
        if self._stop_event is not None and not self._stop_event.is_set():
            raise CaptureError("A recording is already in progress.")
        stop_event = threading.Event()
        self._stop_event = stop_event
        if self.logger is not None:
            self.logger.info("capture_started", extra={"language_hint": language_hint})
        try:
            return await asyncio.to_thread(self._record_blocking, stop_event)
        finally:
            stop_event.set()

    def stop(self) -> None:
        if self._stop_event is not None:
            self._stop_event.set()
