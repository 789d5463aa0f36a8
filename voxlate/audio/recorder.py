from __future__ import annotations

import io
import threading
import wave
from dataclasses import dataclass
from typing import Iterable

from voxlate.audio.vad import SpeechDetector, pcm16_rms
from voxlate.contracts import AudioChunk

NATURAL_END_REASONS = frozenset({"silence", "max_record_sec", "no_speech", "stream_end"})


def pcm16_to_wav(pcm16: bytes, sample_rate: int, channels: int) -> bytes:
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(2)
        wf.setframerate(sample_rate)
        wf.writeframes(pcm16)
    return buf.getvalue()


def duration_from_pcm16(pcm16: bytes, sample_rate: int, channels: int) -> float:
    bytes_per_second = sample_rate * channels * 2
    if bytes_per_second <= 0:
        return 0.0
    return len(pcm16) / float(bytes_per_second)


@dataclass(frozen=True)
class RecordedUtterance:
    pcm16: bytes
    sample_rate: int
    channels: int
    reason: str
    heard_speech: bool

    @property
    def ended_naturally(self) -> bool:
        return self.reason in NATURAL_END_REASONS

    @property
    def duration(self) -> float:
        return duration_from_pcm16(self.pcm16, self.sample_rate, self.channels)

    def to_wav(self) -> bytes:
        return pcm16_to_wav(self.pcm16, self.sample_rate, self.channels)


class UtteranceRecorder:
    """
    Collect one utterance from a chunk stream.

    Recording ends on the first of: the stop event (explicit stop), a run of
    `silence_chunks_to_finalize` non-speech chunks after speech, `max_record_sec`
    of audio, `no_speech_sec` without any speech, or the end of the stream.
    One chunk of leading silence is kept as pre-roll so the onset is not clipped.
    """

    def __init__(
        self,
        *,
        vad: SpeechDetector,
        silence_chunks_to_finalize: int = 3,
        max_record_sec: float | None = 15.0,
        no_speech_sec: float | None = 6.0,
        min_utter_sec: float = 0.3,
        debug: bool = False,
    ) -> None:
        if silence_chunks_to_finalize <= 0:
            raise ValueError("silence_chunks_to_finalize must be > 0")
        if max_record_sec is not None and max_record_sec <= 0:
            raise ValueError("max_record_sec must be > 0 when set")
        if no_speech_sec is not None and no_speech_sec <= 0:
            raise ValueError("no_speech_sec must be > 0 when set")
        if min_utter_sec < 0:
            raise ValueError("min_utter_sec must be >= 0")

        self.vad = vad
        self.silence_chunks_to_finalize = int(silence_chunks_to_finalize)
        self.max_record_sec = float(max_record_sec) if max_record_sec is not None else None
        self.no_speech_sec = float(no_speech_sec) if no_speech_sec is not None else None
        self.min_utter_sec = float(min_utter_sec)
        self.debug = debug

    def record(
        self,
        chunks: Iterable[AudioChunk],
        stop_event: threading.Event | None = None,
    ) -> RecordedUtterance:
        parts: list[bytes] = []
        pre_roll: bytes = b""
        sample_rate = 0
        channels = 0
        heard_speech = False
        speech_sec = 0.0
        elapsed = 0.0
        trailing_silence = 0
        reason = "stream_end"

        for i, chunk in enumerate(chunks, start=1):
            sample_rate = int(chunk.sample_rate)
            channels = int(chunk.channels)
            elapsed += float(chunk.duration)
            is_speech = self.vad.is_speech(chunk.pcm16, chunk.channels)

            if self.debug:
                print(
                    f"[debug] chunk#{i} {chunk.start_time:.2f}s "
                    f"rms={pcm16_rms(chunk.pcm16):.1f} speech={is_speech}"
                )

            if is_speech:
                if not heard_speech and pre_roll:
                    parts.append(pre_roll)
                heard_speech = True
                trailing_silence = 0
                speech_sec += float(chunk.duration)
                parts.append(chunk.pcm16)
            elif heard_speech:
                trailing_silence += 1
                parts.append(chunk.pcm16)
            else:
                pre_roll = chunk.pcm16

            if stop_event is not None and stop_event.is_set():
                reason = "stopped"
                break
            if heard_speech and trailing_silence >= self.silence_chunks_to_finalize:
                reason = "silence"
                break
            if self.max_record_sec is not None and elapsed >= self.max_record_sec:
                reason = "max_record_sec"
                break
            if not heard_speech and self.no_speech_sec is not None and elapsed >= self.no_speech_sec:
                reason = "no_speech"
                break
        else:
            if stop_event is not None and stop_event.is_set():
                reason = "stopped"

        if speech_sec < self.min_utter_sec:
            heard_speech = False
        pcm16 = b"".join(parts) if heard_speech else b""
        if self.debug:
            print(f"[debug] recording ended reason={reason} speech={speech_sec:.2f}s bytes={len(pcm16)}")
        return RecordedUtterance(
            pcm16=pcm16,
            sample_rate=sample_rate,
            channels=channels,
            reason=reason,
            heard_speech=heard_speech,
        )
