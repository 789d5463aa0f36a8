from __future__ import annotations

import asyncio
import logging
import re
from concurrent.futures import ThreadPoolExecutor
from typing import Any, List, Optional

from voxlate.contracts import VoiceCandidate
from voxlate.session.errors import PlaybackError
from voxlate.tts.base import PlaybackAdapter

_TAG_PATTERNS = (
    re.compile(r"(?<![A-Za-z])[A-Za-z]{2,3}-[A-Za-z]{2}(?![A-Za-z])"),
    re.compile(r"(?<![A-Za-z])[a-z]{2,3}_[A-Z]{2}(?![A-Za-z])"),
)


def normalize_language_tag(raw: Any) -> str:
    """
    Normalize driver language tags: espeak reports b"\\x05en-gb", NSSpeech "en_US".
    Returns "" when nothing usable is left.
    """
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="ignore")
    text = "".join(ch for ch in str(raw or "") if ch.isprintable()).strip()
    if not text:
        return ""
    parts = [p for p in text.replace("_", "-").split("-") if p]
    out = [parts[0].lower()]
    for part in parts[1:]:
        out.append(part.upper() if len(part) == 2 else part)
    return "-".join(out)


def voice_language(voice: Any) -> str:
    for raw in getattr(voice, "languages", None) or []:
        tag = normalize_language_tag(raw)
        if tag:
            return tag
    # SAPI5 voices usually carry no language list; the tag is embedded in the id.
    for pattern in _TAG_PATTERNS:
        for attr in ("id", "name"):
            m = pattern.search(str(getattr(voice, attr, "") or ""))
            if m:
                return normalize_language_tag(m.group(0))
    return ""


class Pyttsx3Playback(PlaybackAdapter):
    """
    Offline speech synthesis through `pyttsx3`.
    The engine lives on one dedicated worker thread; drivers such as SAPI5 are
    thread-affine and `runAndWait()` blocks until the utterance ends.
    """

    def __init__(
        self,
        *,
        rate: Optional[int] = None,
        volume: Optional[float] = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.rate = rate
        self.volume = volume
        self.logger = logger
        self._engine: Any = None
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="voxlate-tts")

    @property
    def name(self) -> str:
        return "pyttsx3"

    def _get_engine(self) -> Any:
        if self._engine is None:
            try:
                import pyttsx3
            except ImportError as e:
                raise PlaybackError(
                    "pyttsx3 is not installed. Install with: python -m pip install pyttsx3"
                ) from e
            engine = pyttsx3.init()
            if self.rate:
                engine.setProperty("rate", int(self.rate))
            if self.volume is not None:
                engine.setProperty("volume", float(self.volume))
            self._engine = engine
        return self._engine

    def _list_voices_blocking(self) -> List[VoiceCandidate]:
        engine = self._get_engine()
        out: List[VoiceCandidate] = []
        for v in engine.getProperty("voices") or []:
            out.append(
                VoiceCandidate(
                    id=str(v.id),
                    name=str(getattr(v, "name", "") or v.id),
                    language=voice_language(v),
                )
            )
        return out

    def list_voices(self) -> List[VoiceCandidate]:
        return self._executor.submit(self._list_voices_blocking).result()

    async def load_voices(self) -> List[VoiceCandidate]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, self._list_voices_blocking)

    def _speak_blocking(self, text: str, voice_id: Optional[str]) -> None:
        try:
            engine = self._get_engine()
            if voice_id:
                engine.setProperty("voice", voice_id)
            engine.say(text)
            engine.runAndWait()
        except PlaybackError:
            raise
        except Exception as e:
            raise PlaybackError() from e

    async def speak(self, text: str, language_code: str, voice_id: Optional[str]) -> None:
        if self.logger is not None:
            self.logger.info(
                "tts_speak",
                extra={"chars": len(text), "language": language_code, "voice_id": voice_id or ""},
            )
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(self._executor, self._speak_blocking, text, voice_id)

    def cancel_current(self) -> None:
        if self._engine is None:
            return
        try:
            self._engine.stop()
        except Exception:
            # runAndWait() owns the engine on the worker thread; thread-affine drivers may refuse.
            if self.logger is not None:
                self.logger.exception("tts_stop_failed")

    def close(self) -> None:
        self._executor.shutdown(wait=False)
