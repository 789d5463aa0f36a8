from __future__ import annotations

import math
from array import array
from typing import Protocol


class SpeechDetector(Protocol):
    def is_speech(self, pcm16: bytes, channels: int = 1) -> bool:
        ...


def pcm16_rms(pcm16: bytes) -> float:
    """Return RMS energy for little-endian int16 PCM bytes."""
    # A trailing odd byte cannot form a sample.
    usable = len(pcm16) - (len(pcm16) % 2)
    if usable <= 0:
        return 0.0

    samples = array("h")
    samples.frombytes(pcm16[:usable])
    sum_sq = 0.0
    for value in samples:
        sum_sq += float(value) * float(value)
    return math.sqrt(sum_sq / len(samples))


class EnergyVAD:
    def __init__(self, rms_threshold: float = 250.0) -> None:
        if rms_threshold < 0:
            raise ValueError("rms_threshold must be >= 0")
        self.rms_threshold = float(rms_threshold)

    def is_speech(self, pcm16: bytes, channels: int = 1) -> bool:
        del channels  # RMS over interleaved samples is channel-agnostic
        return pcm16_rms(pcm16) >= self.rms_threshold


def build_vad(kind: str, *, rms_threshold: float, sample_rate: int) -> SpeechDetector:
    kind = (kind or "energy").lower().strip()
    if kind == "energy":
        return EnergyVAD(rms_threshold=rms_threshold)
    if kind == "webrtc":
        from voxlate.audio.vad_webrtc import WebRtcVad

        return WebRtcVad(sr=sample_rate)
    raise ValueError(f"Unknown VAD kind: {kind}")
