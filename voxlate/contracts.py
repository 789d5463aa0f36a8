from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

AUTO_LANGUAGE = "auto"


@dataclass(frozen=True)
class LanguageEntry:
    code: str
    display_name: str


@dataclass(frozen=True)
class TranslationRequest:
    text: str
    source_lang: str = AUTO_LANGUAGE
    target_lang: str = "en-US"


@dataclass(frozen=True)
class AudioTranslationRequest:
    audio: bytes
    mime_type: str
    source_lang: str = AUTO_LANGUAGE
    target_lang: str = "en-US"


@dataclass(frozen=True)
class TranslationResult:
    detected_language: str
    translated_text: str
    provider: str
    # Only filled for audio input.
    transcribed_text: Optional[str] = None


@dataclass(frozen=True)
class CaptureResult:
    """
    Terminal outcome of one capture.
    Exactly one of `transcript` / `audio` is set, or neither when nothing was heard.
    """
    transcript: Optional[str] = None
    audio: Optional[bytes] = None
    mime_type: str = "audio/wav"
    ended_naturally: bool = False

    @property
    def is_empty(self) -> bool:
        if self.transcript is not None:
            return not self.transcript.strip()
        return not self.audio


@dataclass(frozen=True)
class VoiceCandidate:
    id: str
    name: str
    language: str  # normalized tag, e.g. "en-US"


@dataclass(frozen=True)
class AudioChunk:
    """
    Raw PCM16 audio chunk captured from a live source (e.g., microphone).
    pcm16: little-endian signed 16-bit PCM bytes (interleaved if channels > 1).
    """
    pcm16: bytes
    sample_rate: int
    channels: int
    start_time: float  # seconds since stream start
    duration: float    # seconds
