from __future__ import annotations
from voxlate.contracts import AUTO_LANGUAGE, AudioTranslationRequest, TranslationRequest, TranslationResult
from voxlate.languages.catalog import LanguageCatalog
from .base import TranslationClient

class StubTranslationClient(TranslationClient):
    """Deterministic, offline, test-friendly. Echoes the input tagged with the target code."""

    def __init__(self, catalog: LanguageCatalog | None = None) -> None:
        self.catalog = catalog or LanguageCatalog()

    @property
    def name(self) -> str:
        return "stub"

    def _detected(self, source_lang: str) -> str:
        if source_lang == AUTO_LANGUAGE:
            return "English"
        return self.catalog.lookup_by_code(source_lang) or source_lang

    async def translate(self, req: TranslationRequest) -> TranslationResult:
        return TranslationResult(
            detected_language=self._detected(req.source_lang),
            translated_text=f"[{req.target_lang}] {req.text}",
            provider=self.name,
        )

    async def transcribe_and_translate(self, req: AudioTranslationRequest) -> TranslationResult:
        transcript = f"({len(req.audio)} bytes of {req.mime_type})"
        return TranslationResult(
            detected_language=self._detected(req.source_lang),
            translated_text=f"[{req.target_lang}] {transcript}",
            provider=self.name,
            transcribed_text=transcript,
        )
