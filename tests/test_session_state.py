from __future__ import annotations

import pytest

from voxlate.session.errors import InvalidTransition
from voxlate.session.state import Session, SessionState


def test_session_defaults() -> None:
    s = Session()
    assert s.state is SessionState.IDLE
    assert s.source_language == "auto"
    assert s.target_language == "es-ES"
    assert s.generation == 0
    assert s.last_error is None
    assert s.is_live is False


def test_allowed_cycle() -> None:
    s = Session()
    for state in (SessionState.RECORDING, SessionState.PROCESSING, SessionState.SPEAKING, SessionState.IDLE):
        s.advance(state)
        assert s.state is state
    s.advance(SessionState.ERROR)
    s.advance(SessionState.IDLE)


@pytest.mark.parametrize(
    "path",
    [
        (SessionState.SPEAKING, SessionState.RECORDING),
        (SessionState.ERROR, SessionState.SPEAKING),
        (SessionState.RECORDING, SessionState.SPEAKING),
        (SessionState.RECORDING, SessionState.RECORDING),
    ],
)
def test_invalid_transitions_raise(path) -> None:
    s = Session()
    first, second = path
    s.advance(first)
    with pytest.raises(InvalidTransition):
        s.advance(second)
    assert s.state is first


def test_generation_is_monotonic() -> None:
    s = Session()
    assert [s.next_generation() for _ in range(3)] == [1, 2, 3]


def test_clear_results_keeps_settings() -> None:
    s = Session(source_language="fr-FR", target_language="de-DE")
    s.original_text = "bonjour"
    s.translated_text = "hallo"
    s.detected_language_display = "French"
    s.last_error = "boom"
    s.spoken_language = "de-DE"
    s.clear_results()
    assert (s.original_text, s.translated_text, s.detected_language_display) == ("", "", "")
    assert s.last_error is None
    assert s.spoken_language == ""
    assert (s.source_language, s.target_language) == ("fr-FR", "de-DE")


def test_swap_requires_explicit_source() -> None:
    s = Session(source_language="auto", target_language="es-ES")
    assert s.can_swap is False
    assert s.swap() is False
    assert (s.source_language, s.target_language) == ("auto", "es-ES")

    s = Session(source_language="en-US", target_language="es-ES")
    assert s.swap() is True
    assert (s.source_language, s.target_language) == ("es-ES", "en-US")


def test_snapshot_is_independent_copy() -> None:
    s = Session()
    snap = s.snapshot()
    s.translated_text = "changed"
    assert snap.translated_text == ""
    assert snap == Session()
