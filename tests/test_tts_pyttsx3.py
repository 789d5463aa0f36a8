from __future__ import annotations

import asyncio
from types import SimpleNamespace
from typing import Any

import pytest

from voxlate.session.errors import PlaybackError
from voxlate.tts.pyttsx3_playback import Pyttsx3Playback, normalize_language_tag, voice_language


class _FakeEngine:
    def __init__(self, voices: list[Any] | None = None, fail: bool = False) -> None:
        self.voices = voices or []
        self.fail = fail
        self.props: dict[str, Any] = {}
        self.said: list[str] = []
        self.stops = 0

    def getProperty(self, name: str) -> Any:
        return self.voices if name == "voices" else self.props.get(name)

    def setProperty(self, name: str, value: Any) -> None:
        self.props[name] = value

    def say(self, text: str) -> None:
        self.said.append(text)

    def runAndWait(self) -> None:
        if self.fail:
            raise RuntimeError("driver crashed")

    def stop(self) -> None:
        self.stops += 1


def _playback(engine: _FakeEngine) -> Pyttsx3Playback:
    pb = Pyttsx3Playback()
    pb._engine = engine
    return pb


@pytest.mark.parametrize(
    "raw, expected",
    [
        (b"\x05en-gb", "en-GB"),
        ("en_US", "en-US"),
        ("ES-mx", "es-MX"),
        ("zh-Hans-CN", "zh-Hans-CN"),
        ("fr", "fr"),
        ("", ""),
        (None, ""),
    ],
)
def test_normalize_language_tag(raw: Any, expected: str) -> None:
    assert normalize_language_tag(raw) == expected


def test_voice_language_prefers_language_list() -> None:
    voice = SimpleNamespace(id="v1", name="Alex", languages=[b"\x05en-us"])
    assert voice_language(voice) == "en-US"


def test_voice_language_from_sapi_id() -> None:
    voice = SimpleNamespace(
        id=r"HKEY_LOCAL_MACHINE\SOFTWARE\Microsoft\Speech\Voices\Tokens\TTS_MS_JA-JP_HARUKA_11.0",
        name="Microsoft Haruka Desktop",
        languages=[],
    )
    assert voice_language(voice) == "ja-JP"


def test_voice_language_unknown() -> None:
    assert voice_language(SimpleNamespace(id="robot", name="Robot", languages=None)) == ""


def test_list_voices_normalizes_engine_voices() -> None:
    engine = _FakeEngine(
        voices=[
            SimpleNamespace(id="a", name="Anna", languages=["de_DE"]),
            SimpleNamespace(id="b", name="", languages=[]),
        ]
    )
    pb = _playback(engine)
    try:
        voices = pb.list_voices()
    finally:
        pb.close()
    assert [(v.id, v.name, v.language) for v in voices] == [("a", "Anna", "de-DE"), ("b", "b", "")]


def test_speak_sets_voice_and_waits() -> None:
    engine = _FakeEngine()
    pb = _playback(engine)
    try:
        asyncio.run(pb.speak("hola", "es-ES", "es-voice"))
    finally:
        pb.close()
    assert engine.props["voice"] == "es-voice"
    assert engine.said == ["hola"]


def test_speak_failure_raises_playback_error() -> None:
    pb = _playback(_FakeEngine(fail=True))
    try:
        with pytest.raises(PlaybackError):
            asyncio.run(pb.speak("hola", "es-ES", None))
    finally:
        pb.close()


def test_cancel_current_stops_engine() -> None:
    engine = _FakeEngine()
    pb = _playback(engine)
    pb.cancel_current()
    pb.close()
    assert engine.stops == 1
    # No engine yet: nothing to stop.
    idle = Pyttsx3Playback()
    idle.cancel_current()
    idle.close()


def test_cancel_current_tolerates_driver_refusal() -> None:
    class _RefusingEngine(_FakeEngine):
        def stop(self) -> None:
            raise RuntimeError("stop() called from the wrong thread")

    pb = _playback(_RefusingEngine())
    try:
        pb.cancel_current()
    finally:
        pb.close()
