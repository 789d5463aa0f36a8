from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum

from voxlate.contracts import AUTO_LANGUAGE
from voxlate.session.errors import InvalidTransition


class SessionState(str, Enum):
    IDLE = "idle"
    RECORDING = "recording"
    PROCESSING = "processing"
    SPEAKING = "speaking"
    ERROR = "error"


class VoicePreference(str, Enum):
    AUTO = "auto"
    MALE = "male"
    FEMALE = "female"


LIVE_STATES = frozenset({SessionState.RECORDING, SessionState.PROCESSING, SessionState.SPEAKING})

_ALLOWED: dict[SessionState, frozenset[SessionState]] = {
    SessionState.IDLE: frozenset(
        {SessionState.RECORDING, SessionState.PROCESSING, SessionState.SPEAKING, SessionState.ERROR}
    ),
    SessionState.RECORDING: frozenset({SessionState.PROCESSING, SessionState.ERROR, SessionState.IDLE}),
    SessionState.PROCESSING: frozenset({SessionState.SPEAKING, SessionState.ERROR, SessionState.IDLE}),
    SessionState.SPEAKING: frozenset({SessionState.IDLE, SessionState.ERROR}),
    SessionState.ERROR: frozenset({SessionState.IDLE}),
}


@dataclass
class Session:
    source_language: str = AUTO_LANGUAGE
    target_language: str = "es-ES"
    voice_preference: VoicePreference = VoicePreference.AUTO
    state: SessionState = SessionState.IDLE
    original_text: str = ""
    translated_text: str = ""
    detected_language_display: str = ""
    last_error: str | None = None
    generation: int = 0
    # Target code `translated_text` was produced for; replay speaks in this language.
    spoken_language: str = ""

    @property
    def is_live(self) -> bool:
        return self.state in LIVE_STATES

    @property
    def can_swap(self) -> bool:
        return self.source_language != AUTO_LANGUAGE

    def advance(self, new_state: SessionState) -> None:
        if new_state not in _ALLOWED[self.state]:
            raise InvalidTransition(f"{self.state.value} -> {new_state.value}")
        self.state = new_state

    def next_generation(self) -> int:
        self.generation += 1
        return self.generation

    def clear_results(self) -> None:
        self.original_text = ""
        self.translated_text = ""
        self.detected_language_display = ""
        self.last_error = None
        self.spoken_language = ""

    def swap(self) -> bool:
        if not self.can_swap:
            return False
        self.source_language, self.target_language = self.target_language, self.source_language
        return True

    def snapshot(self) -> "Session":
        return dataclasses.replace(self)
