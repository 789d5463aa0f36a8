from __future__ import annotations
from abc import ABC, abstractmethod
from voxlate.contracts import AudioTranslationRequest, TranslationRequest, TranslationResult

class TranslationClient(ABC):
    """
    Remote transcription/translation service.
    Any transport fault or malformed response is raised as RemoteCallError.
    """

    @property
    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    async def translate(self, req: TranslationRequest) -> TranslationResult: ...

    @abstractmethod
    async def transcribe_and_translate(self, req: AudioTranslationRequest) -> TranslationResult: ...
