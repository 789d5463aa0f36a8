from __future__ import annotations

from array import array


def _first_channel_mono_pcm16(pcm16: bytes, channels: int) -> bytes:
    if channels <= 1:
        return pcm16
    samples = array("h")
    samples.frombytes(pcm16)
    return array("h", samples[::channels]).tobytes()


class WebRtcVad:
    """
    WebRTC VAD over arbitrary-length chunks.

    The underlying detector only accepts 10/20/30 ms frames of 16-bit mono PCM at
    8/16/32/48 kHz, so a chunk is split into frames and counts as speech when at
    least `min_speech_ratio` of its full frames are voiced.
    aggressiveness: 0 (least) .. 3 (most aggressive)
    """

    def __init__(
        self,
        sr: int = 16000,
        frame_ms: int = 30,
        aggressiveness: int = 2,
        min_speech_ratio: float = 0.3,
    ) -> None:
        if frame_ms not in (10, 20, 30):
            raise ValueError("frame_ms must be 10/20/30")
        if sr not in (8000, 16000, 32000, 48000):
            raise ValueError("sr must be one of 8000/16000/32000/48000")
        if not 0.0 < min_speech_ratio <= 1.0:
            raise ValueError("min_speech_ratio must be in (0, 1]")
        self.sr = sr
        self.frame_ms = frame_ms
        self.frame_bytes = int(sr * frame_ms / 1000) * 2  # int16 => 2 bytes
        self.min_speech_ratio = float(min_speech_ratio)
        try:
            import webrtcvad
        except ImportError as e:
            raise RuntimeError(
                "webrtcvad is not installed. Install with: python -m pip install webrtcvad-wheels"
            ) from e
        self.vad = webrtcvad.Vad(aggressiveness)

    def is_speech(self, pcm16: bytes, channels: int = 1) -> bool:
        mono = _first_channel_mono_pcm16(pcm16, channels)
        frames = [
            mono[i : i + self.frame_bytes]
            for i in range(0, len(mono) - self.frame_bytes + 1, self.frame_bytes)
        ]
        if not frames:
            return False
        voiced = sum(1 for f in frames if self.vad.is_speech(f, self.sr))
        return voiced / len(frames) >= self.min_speech_ratio
