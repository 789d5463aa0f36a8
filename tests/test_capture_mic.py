from __future__ import annotations

import asyncio
import io
import threading
import wave
from array import array
from typing import Iterator

import pytest

from voxlate.audio.mic import MicError
from voxlate.audio.recorder import UtteranceRecorder
from voxlate.audio.vad import EnergyVAD
from voxlate.capture.mic_capture import MicCaptureAdapter
from voxlate.contracts import AudioChunk
from voxlate.session.errors import CaptureError


class _FakeMic:
    def __init__(self, pattern: str, *, available: bool = True, error: Exception | None = None) -> None:
        self.pattern = pattern
        self.available = available
        self.error = error

    def has_input_device(self) -> bool:
        return self.available

    def chunks(self, stop_event: threading.Event | None = None) -> Iterator[AudioChunk]:
        if self.error is not None:
            raise self.error
        for i, c in enumerate(self.pattern):
            amp = 1000 if c == "s" else 0
            yield AudioChunk(
                pcm16=array("h", [amp, -amp] * 2000).tobytes(),
                sample_rate=16000,
                channels=1,
                start_time=i * 0.25,
                duration=0.25,
            )


def _adapter(mic: _FakeMic) -> MicCaptureAdapter:
    recorder = UtteranceRecorder(vad=EnergyVAD(rms_threshold=300.0), silence_chunks_to_finalize=2)
    return MicCaptureAdapter(mic=mic, recorder=recorder)  # type: ignore[arg-type]


def test_capture_returns_wav_blob() -> None:
    result = asyncio.run(_adapter(_FakeMic(".sss..")).start("en-US"))
    assert result.transcript is None
    assert result.mime_type == "audio/wav"
    assert result.ended_naturally is True
    assert result.audio is not None
    with wave.open(io.BytesIO(result.audio), "rb") as wf:
        assert wf.getframerate() == 16000


def test_capture_without_speech_is_empty() -> None:
    result = asyncio.run(_adapter(_FakeMic("....")).start("en-US"))
    assert result.is_empty


def test_mic_failure_becomes_capture_error() -> None:
    adapter = _adapter(_FakeMic("", error=MicError("PortAudio is unavailable")))
    with pytest.raises(CaptureError, match="PortAudio"):
        asyncio.run(adapter.start("en-US"))


def test_availability_follows_input_device() -> None:
    assert _adapter(_FakeMic("", available=False)).is_available() is False
    assert _adapter(_FakeMic("")).is_available() is True
