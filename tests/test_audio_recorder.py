from __future__ import annotations

import io
import threading
import wave
from array import array
from typing import Iterator

from voxlate.audio.recorder import UtteranceRecorder, duration_from_pcm16, pcm16_to_wav
from voxlate.audio.vad import EnergyVAD
from voxlate.contracts import AudioChunk

SR = 16000
CHUNK_SEC = 0.25
FRAMES = int(SR * CHUNK_SEC)


def _chunk(i: int, amplitude: int) -> AudioChunk:
    return AudioChunk(
        pcm16=array("h", [amplitude, -amplitude] * (FRAMES // 2)).tobytes(),
        sample_rate=SR,
        channels=1,
        start_time=i * CHUNK_SEC,
        duration=CHUNK_SEC,
    )


def _stream(pattern: str) -> list[AudioChunk]:
    # "s" = speech chunk, "." = silence chunk
    return [_chunk(i, 1000 if c == "s" else 0) for i, c in enumerate(pattern)]


def _recorder(**kw) -> UtteranceRecorder:
    kw.setdefault("silence_chunks_to_finalize", 3)
    return UtteranceRecorder(vad=EnergyVAD(rms_threshold=300.0), **kw)


def test_silence_after_speech_ends_recording_with_preroll() -> None:
    chunks = _stream(".ss...ss")
    utt = _recorder().record(chunks)
    assert utt.reason == "silence"
    assert utt.ended_naturally is True
    assert utt.heard_speech is True
    # pre-roll + 2 speech + 3 trailing silence
    assert utt.pcm16 == b"".join(c.pcm16 for c in chunks[:6])
    assert abs(utt.duration - 6 * CHUNK_SEC) < 1e-9


def test_no_speech_timeout_returns_empty() -> None:
    utt = _recorder(no_speech_sec=1.0).record(_stream("........"))
    assert utt.reason == "no_speech"
    assert utt.ended_naturally is True
    assert utt.heard_speech is False
    assert utt.pcm16 == b""


def test_short_blip_below_min_utterance_is_dropped() -> None:
    utt = _recorder(min_utter_sec=0.5).record(_stream("s...."))
    assert utt.reason == "silence"
    assert utt.heard_speech is False
    assert utt.pcm16 == b""


def test_max_record_sec_caps_recording() -> None:
    utt = _recorder(max_record_sec=1.0).record(_stream("ssssssss"))
    assert utt.reason == "max_record_sec"
    assert len(utt.pcm16) == 4 * FRAMES * 2


def test_stop_event_ends_recording_as_stopped() -> None:
    stop = threading.Event()
    chunks = _stream("sssssss")

    def _gen() -> Iterator[AudioChunk]:
        for i, c in enumerate(chunks):
            if i == 3:
                stop.set()
            yield c

    utt = _recorder().record(_gen(), stop)
    assert utt.reason == "stopped"
    assert utt.ended_naturally is False
    assert len(utt.pcm16) == 4 * FRAMES * 2


def test_stream_end_keeps_what_was_heard() -> None:
    utt = _recorder().record(_stream("ss."))
    assert utt.reason == "stream_end"
    assert utt.heard_speech is True
    assert len(utt.pcm16) == 3 * FRAMES * 2


def test_to_wav_is_readable() -> None:
    pcm = array("h", [0, 100, -100, 0]).tobytes()
    blob = pcm16_to_wav(pcm, 16000, 1)
    with wave.open(io.BytesIO(blob), "rb") as wf:
        assert wf.getnchannels() == 1
        assert wf.getsampwidth() == 2
        assert wf.getframerate() == 16000
        assert wf.readframes(4) == pcm


def test_duration_from_pcm16() -> None:
    assert duration_from_pcm16(b"\x00" * 32000, 16000, 1) == 1.0
    assert duration_from_pcm16(b"\x00" * 32000, 16000, 2) == 0.5
    assert duration_from_pcm16(b"", 0, 1) == 0.0


def test_recorder_rejects_bad_settings() -> None:
    for kw in ({"silence_chunks_to_finalize": 0}, {"max_record_sec": 0}, {"min_utter_sec": -1}):
        try:
            _recorder(**kw)
        except ValueError:
            continue
        raise AssertionError(f"expected ValueError for {kw}")
