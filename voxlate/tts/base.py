from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List, Optional
from voxlate.contracts import VoiceCandidate

class PlaybackAdapter(ABC):
    @property
    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    async def speak(self, text: str, language_code: str, voice_id: Optional[str]) -> None:
        """Return when the utterance finished; raise PlaybackError on synthesis failure."""
        raise NotImplementedError

    @abstractmethod
    def cancel_current(self) -> None: ...

    def list_voices(self) -> List[VoiceCandidate]:
        return []

    async def load_voices(self) -> List[VoiceCandidate]:
        return self.list_voices()
