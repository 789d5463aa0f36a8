from __future__ import annotations

import json
import logging
from typing import Any, Sequence

from voxlate.contracts import AUTO_LANGUAGE, AudioTranslationRequest, TranslationRequest, TranslationResult
from voxlate.languages.catalog import LanguageCatalog
from voxlate.session.errors import RemoteCallError
from .base import TranslationClient

DEFAULT_MODEL = "gemini-2.5-flash"

TRANSLATION_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "detectedLanguage": {
            "type": "STRING",
            "description": 'The full name of the detected source language, e.g., "English".',
        },
        "translatedText": {"type": "STRING", "description": "The translated text."},
    },
    "required": ["detectedLanguage", "translatedText"],
}

TRANSCRIPTION_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "transcribedText": {"type": "STRING", "description": "The transcribed text from the audio."},
        "detectedLanguage": {
            "type": "STRING",
            "description": 'The full name of the language spoken in the audio, e.g., "English".',
        },
        "translatedText": {"type": "STRING", "description": "The translated text."},
    },
    "required": ["transcribedText", "detectedLanguage", "translatedText"],
}


def parse_response_payload(text: str | None, required: Sequence[str]) -> dict[str, str]:
    """Decode a JSON reply and require every field to be a non-empty string (ValueError otherwise)."""
    payload = json.loads((text or "").strip())
    if not isinstance(payload, dict):
        raise ValueError("response is not a JSON object")
    out: dict[str, str] = {}
    for key in required:
        value = payload.get(key)
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"response field missing or empty: {key}")
        out[key] = value.strip()
    return out


class GeminiTranslationClient(TranslationClient):
    def __init__(
        self,
        *,
        api_key: str,
        model_name: str = DEFAULT_MODEL,
        catalog: LanguageCatalog | None = None,
        logger: logging.Logger | None = None,
        model: Any = None,
    ) -> None:
        self.api_key = api_key
        self.model_name = model_name
        self.catalog = catalog or LanguageCatalog()
        self.logger = logger
        self._model = model

    @property
    def name(self) -> str:
        return "gemini"

    def _get_model(self) -> Any:
        if self._model is None:
            import google.generativeai as genai

            genai.configure(api_key=self.api_key)
            self._model = genai.GenerativeModel(self.model_name)
        return self._model

    def _language_name(self, code: str, fallback: str) -> str:
        return self.catalog.lookup_by_code(code) or fallback

    def _translate_prompt(self, req: TranslationRequest) -> str:
        target = self._language_name(req.target_lang, "the target language")
        if req.source_lang == AUTO_LANGUAGE:
            return (
                "You are an expert multilingual translator. First, identify the language of the "
                f"following text. Then, translate it to {target}. If the text is already in {target}, "
                "return it unchanged as the translated text.\n\n"
                f'Text to translate: "{req.text}"\n\n'
                "Provide the response in the specified JSON format."
            )
        source = self._language_name(req.source_lang, "the source language")
        return (
            "You are an expert multilingual translator. The user has specified that the source "
            f"language is {source}. Translate the following text to {target}.\n\n"
            f'Text to translate: "{req.text}"\n\n'
            'Provide the response in the specified JSON format. The "detectedLanguage" field '
            f'must be "{source}".'
        )

    def _transcribe_prompt(self, req: AudioTranslationRequest) -> str:
        target = self._language_name(req.target_lang, "the target language")
        if req.source_lang == AUTO_LANGUAGE:
            return (
                "You are an expert multilingual translator. First, transcribe the audio provided. "
                "Then, identify the language of the transcription. Finally, translate the "
                f"transcription to {target}. If it is already in {target}, return the transcription "
                "unchanged as the translated text.\n\n"
                'Provide the response in the specified JSON format. The "transcribedText" field '
                "must contain the full transcription."
            )
        source = self._language_name(req.source_lang, "the source language")
        return (
            "You are an expert multilingual translator. First, transcribe the audio provided, "
            f"assuming the spoken language is {source}. Then, translate the transcription to {target}.\n\n"
            'Provide the response in the specified JSON format. The "transcribedText" field must '
            f'contain the full transcription, and the "detectedLanguage" field must be "{source}".'
        )

    async def _generate(self, op: str, contents: Any, schema: dict[str, Any]) -> dict[str, str]:
        try:
            response = await self._get_model().generate_content_async(
                contents,
                generation_config={
                    "response_mime_type": "application/json",
                    "response_schema": schema,
                },
            )
            return parse_response_payload(response.text, schema["required"])
        except Exception as e:
            if self.logger is not None:
                self.logger.exception("gemini_call_failed", extra={"op": op, "model": self.model_name})
            raise RemoteCallError("Failed to get translation from Gemini API.") from e

    async def translate(self, req: TranslationRequest) -> TranslationResult:
        fields = await self._generate("translate", self._translate_prompt(req), TRANSLATION_SCHEMA)
        return TranslationResult(
            detected_language=fields["detectedLanguage"],
            translated_text=fields["translatedText"],
            provider=self.name,
        )

    async def transcribe_and_translate(self, req: AudioTranslationRequest) -> TranslationResult:
        contents = [
            {"mime_type": req.mime_type, "data": req.audio},
            self._transcribe_prompt(req),
        ]
        fields = await self._generate("transcribe_and_translate", contents, TRANSCRIPTION_SCHEMA)
        return TranslationResult(
            detected_language=fields["detectedLanguage"],
            translated_text=fields["translatedText"],
            provider=self.name,
            transcribed_text=fields["transcribedText"],
        )
