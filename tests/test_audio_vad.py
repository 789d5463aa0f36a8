from __future__ import annotations

import sys
import types
from array import array

import pytest

from voxlate.audio.vad import EnergyVAD, build_vad, pcm16_rms


def _pcm(values: list[int]) -> bytes:
    return array("h", values).tobytes()


def test_pcm16_rms() -> None:
    assert pcm16_rms(b"") == 0.0
    assert pcm16_rms(_pcm([1000, -1000, 1000, -1000])) == 1000.0
    # trailing odd byte is ignored
    assert pcm16_rms(_pcm([300, -300]) + b"\x7f") == 300.0


def test_energy_vad_threshold() -> None:
    vad = EnergyVAD(rms_threshold=300.0)
    assert vad.is_speech(_pcm([300, -300])) is True
    assert vad.is_speech(_pcm([299, -299])) is False
    assert vad.is_speech(_pcm([500, -500]), channels=2) is True


def test_energy_vad_rejects_negative_threshold() -> None:
    with pytest.raises(ValueError):
        EnergyVAD(rms_threshold=-1)


def test_build_vad_energy_and_unknown() -> None:
    vad = build_vad("energy", rms_threshold=123.0, sample_rate=16000)
    assert isinstance(vad, EnergyVAD)
    assert vad.rms_threshold == 123.0
    with pytest.raises(ValueError):
        build_vad("psychic", rms_threshold=1.0, sample_rate=16000)


def test_build_vad_webrtc_counts_voiced_frames(monkeypatch) -> None:
    class _FakeVad:
        def __init__(self, aggressiveness: int) -> None:
            self.aggressiveness = aggressiveness

        def is_speech(self, frame: bytes, sr: int) -> bool:
            return any(frame)

    monkeypatch.setitem(sys.modules, "webrtcvad", types.SimpleNamespace(Vad=_FakeVad))
    vad = build_vad("webrtc", rms_threshold=0.0, sample_rate=16000)

    frame = 480  # 30 ms at 16 kHz
    voiced = _pcm([1] * frame)
    silent = _pcm([0] * frame)
    assert vad.is_speech(voiced + silent + silent) is True  # 1/3 >= 0.3
    assert vad.is_speech(voiced + silent * 3) is False  # 1/4 < 0.3
    assert vad.is_speech(b"\x00" * 10) is False  # shorter than one frame
