from __future__ import annotations
import logging
import os
from voxlate.languages.catalog import LanguageCatalog
from .base import TranslationClient
from .gemini import DEFAULT_MODEL, GeminiTranslationClient
from .stub import StubTranslationClient

def get_client(
    provider: str | None = None,
    *,
    catalog: LanguageCatalog | None = None,
    model_name: str = DEFAULT_MODEL,
    api_key_env: str = "GEMINI_API_KEY",
    logger: logging.Logger | None = None,
) -> TranslationClient:
    provider = (provider or os.getenv("VOXLATE_TRANSLATOR", "gemini")).lower().strip()

    if provider == "stub":
        return StubTranslationClient(catalog=catalog)
    if provider == "gemini":
        # Older setups exported the key as API_KEY.
        api_key = os.getenv(api_key_env) or os.getenv("API_KEY")
        if not api_key:
            raise ValueError(f"{api_key_env} environment variable not set")
        return GeminiTranslationClient(
            api_key=api_key,
            model_name=model_name,
            catalog=catalog,
            logger=logger,
        )

    raise ValueError(f"Unknown translator provider: {provider}")
