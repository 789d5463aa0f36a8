from __future__ import annotations

import asyncio
import locale
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Coroutine, Iterable, Optional, TypeVar

from voxlate.capture.base import AudioCaptureAdapter
from voxlate.contracts import (
    AUTO_LANGUAGE,
    AudioTranslationRequest,
    CaptureResult,
    TranslationRequest,
    TranslationResult,
    VoiceCandidate,
)
from voxlate.languages.catalog import LanguageCatalog
from voxlate.nlp.translator.base import TranslationClient
from voxlate.session.errors import (
    PayloadTooLarge,
    PlaybackError,
    RemoteCallError,
    UnsupportedEnvironment,
    VoxlateError,
)
from voxlate.session.state import Session, SessionState, VoicePreference
from voxlate.tts.base import PlaybackAdapter
from voxlate.tts.voice_selector import select_voice

T = TypeVar("T")

ChangeListener = Callable[[Session], None]


@dataclass(frozen=True)
class OrchestratorSettings:
    max_upload_bytes: int = 10 * 1024 * 1024
    fallback_language: str = "en-US"
    # 0 disables the timeout.
    remote_timeout_sec: float = 30.0
    playback_timeout_sec: float = 0.0


def system_locale_code() -> Optional[str]:
    code, _encoding = locale.getlocale()
    return code


def _log_event(logger: logging.Logger | None, level: int, event: str, **fields: Any) -> None:
    if logger is None:
        return
    logger.log(level, event, extra=fields)


class TranslationSessionOrchestrator:
    """
    Owns the single live translation session.

    Commands (`start_capture`, `stop_capture`, `submit_file`, `submit_text`, `replay`,
    `swap_languages`, `cancel`) run on the event-loop thread and return True when
    accepted; a command issued outside its accepting state is a no-op returning False.

    Every request is stamped with `session.generation` at launch. Collaborator results
    are applied only while that generation is still current, so a slow reply that
    arrives after the user moved on is dropped instead of overwriting newer state.
    Any failure drives the session through ERROR back to IDLE with `last_error` set.
    """

    def __init__(
        self,
        *,
        catalog: LanguageCatalog,
        client: TranslationClient,
        playback: PlaybackAdapter,
        capture: AudioCaptureAdapter | None = None,
        settings: OrchestratorSettings | None = None,
        session: Session | None = None,
        on_change: ChangeListener | None = None,
        logger: logging.Logger | None = None,
        locale_code: str | None = None,
    ) -> None:
        self.catalog = catalog
        self.client = client
        self.playback = playback
        self.capture = capture
        self.settings = settings or OrchestratorSettings()
        self.session = session or Session()
        self.on_change = on_change
        self.logger = logger
        self.locale_code = locale_code if locale_code is not None else system_locale_code()
        self._voices: tuple[VoiceCandidate, ...] = ()
        self._tasks: set[asyncio.Task[None]] = set()
        # Reason for the most recent refused command, e.g. "wrong_state", "empty_text".
        self.last_rejection: str | None = None

        if self.settings.max_upload_bytes <= 0:
            raise ValueError("max_upload_bytes must be > 0")
        if self.settings.fallback_language not in self.catalog:
            raise ValueError(f"Unknown fallback language: {self.settings.fallback_language}")
        self._check_source(self.session.source_language)
        self._check_target(self.session.target_language)
        self.session.voice_preference = VoicePreference(self.session.voice_preference)

        self.capture_supported = capture is not None and capture.is_available()
        if not self.capture_supported:
            self.session.last_error = UnsupportedEnvironment().user_message
            _log_event(
                self.logger,
                logging.WARNING,
                "capture_unsupported",
                adapter=getattr(capture, "name", None),
            )

    # --- read side ---

    @property
    def state(self) -> SessionState:
        return self.session.state

    @property
    def voices(self) -> tuple[VoiceCandidate, ...]:
        return self._voices

    def capture_language_hint(self, source_language: str) -> str:
        if source_language != AUTO_LANGUAGE:
            return source_language
        return self.catalog.best_match(self.locale_code) or self.settings.fallback_language

    # --- settings ---

    def _check_source(self, code: str) -> None:
        if code != AUTO_LANGUAGE and code not in self.catalog:
            raise ValueError(f"Unknown source language: {code}")

    def _check_target(self, code: str) -> None:
        if code not in self.catalog:
            raise ValueError(f"Unknown target language: {code}")

    def set_source_language(self, code: str) -> None:
        self._check_source(code)
        self.session.source_language = code
        self._notify()

    def set_target_language(self, code: str) -> None:
        self._check_target(code)
        self.session.target_language = code
        self._notify()

    def set_voice_preference(self, preference: VoicePreference | str) -> None:
        self.session.voice_preference = VoicePreference(preference)
        self._notify()

    def set_voices(self, voices: Iterable[VoiceCandidate]) -> None:
        self._voices = tuple(voices)
        _log_event(self.logger, logging.INFO, "voices_updated", count=len(self._voices))

    # --- commands ---

    def start_capture(self) -> bool:
        if not self.capture_supported:
            return self._reject("start_capture", "unsupported_environment")
        if self.state is not SessionState.IDLE:
            return self._reject("start_capture")
        loop = asyncio.get_running_loop()

        self.session.clear_results()
        generation = self.session.next_generation()
        source = self.session.source_language
        target = self.session.target_language
        self._transition(SessionState.RECORDING)
        self._spawn(loop, generation, "capture", self._run_capture(generation, source, target))
        return True

    def stop_capture(self) -> bool:
        if self.state is not SessionState.RECORDING or self.capture is None:
            return self._reject("stop_capture")
        self._transition(SessionState.PROCESSING)
        self.capture.stop()
        return True

    def submit_file(self, data: bytes, mime_type: str, *, file_size: int | None = None) -> bool:
        """`file_size` is the size on disk when `data` was read only up to the limit."""
        if self.state is not SessionState.IDLE:
            return self._reject("submit_file")
        if not data or not mime_type:
            return self._reject("submit_file", "empty_payload")
        loop = asyncio.get_running_loop()

        self.session.clear_results()
        generation = self.session.next_generation()
        limit = int(self.settings.max_upload_bytes)
        size = max(len(data), int(file_size or 0))
        if size > limit:
            self.last_rejection = "payload_too_large"
            self._fail(PayloadTooLarge(size, limit))
            return False

        source = self.session.source_language
        target = self.session.target_language
        self._transition(SessionState.PROCESSING)
        self._spawn(
            loop,
            generation,
            "upload",
            self._translate_audio(generation, bytes(data), mime_type, source, target),
        )
        return True

    def submit_text(self, text: str) -> bool:
        if self.state is not SessionState.IDLE:
            return self._reject("submit_text")
        text = (text or "").strip()
        if not text:
            return self._reject("submit_text", "empty_text")
        loop = asyncio.get_running_loop()

        self.session.clear_results()
        generation = self.session.next_generation()
        source = self.session.source_language
        target = self.session.target_language
        self._transition(SessionState.PROCESSING)
        self._spawn(loop, generation, "text", self._translate_text(generation, text, source, target))
        return True

    def replay(self) -> bool:
        if self.state is not SessionState.IDLE:
            return self._reject("replay")
        if not self.session.translated_text:
            return self._reject("replay", "nothing_to_replay")
        loop = asyncio.get_running_loop()

        generation = self.session.next_generation()
        self.session.last_error = None
        language = self.session.spoken_language or self.session.target_language
        speak = self._enter_speaking(self.session.translated_text, language)
        self._spawn(loop, generation, "replay", self._await_playback(generation, speak))
        return True

    def swap_languages(self) -> bool:
        if self.state is not SessionState.IDLE:
            return self._reject("swap_languages")
        if not self.session.swap():
            return self._reject("swap_languages", "auto_source")
        _log_event(
            self.logger,
            logging.INFO,
            "languages_swapped",
            source=self.session.source_language,
            target=self.session.target_language,
        )
        self._notify()
        return True

    def cancel(self) -> bool:
        if not self.session.is_live:
            return self._reject("cancel")
        previous = self.state
        # Outstanding results of the current request become stale.
        self.session.next_generation()
        if previous is SessionState.RECORDING and self.capture is not None:
            self.capture.stop()
        _log_event(self.logger, logging.INFO, "request_cancelled", state=previous.value)
        self._transition(SessionState.IDLE)
        return True

    async def join(self) -> None:
        """Wait until every request task launched so far (and any they start) has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def shutdown(self) -> None:
        """Cancel the live request, if any, and abandon every outstanding task."""
        self.cancel()
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.wait(tasks)
        _log_event(self.logger, logging.INFO, "orchestrator_shutdown", abandoned=len(tasks))

    # --- request pipeline ---

    async def _run_capture(self, generation: int, source: str, target: str) -> None:
        assert self.capture is not None
        outcome = await self.capture.start(self.capture_language_hint(source))
        if self._is_stale(generation, "capture"):
            return
        if self.state is SessionState.RECORDING:
            _log_event(self.logger, logging.INFO, "capture_ended_naturally", generation=generation)
            self._transition(SessionState.PROCESSING)
        await self._process_capture(generation, outcome, source, target)

    async def _process_capture(
        self,
        generation: int,
        outcome: CaptureResult,
        source: str,
        target: str,
    ) -> None:
        if outcome.is_empty:
            _log_event(self.logger, logging.INFO, "capture_empty", generation=generation)
            self._transition(SessionState.IDLE)
            return
        if outcome.transcript is not None:
            await self._translate_text(generation, outcome.transcript.strip(), source, target)
            return
        assert outcome.audio is not None
        await self._translate_audio(generation, outcome.audio, outcome.mime_type, source, target)

    async def _translate_text(self, generation: int, text: str, source: str, target: str) -> None:
        self.session.original_text = text
        self._notify()
        result = await self._call_remote(
            self.client.translate(TranslationRequest(text=text, source_lang=source, target_lang=target))
        )
        if self._is_stale(generation, "translation"):
            return
        await self._apply_translation(generation, result, text, source, target)

    async def _translate_audio(
        self,
        generation: int,
        audio: bytes,
        mime_type: str,
        source: str,
        target: str,
    ) -> None:
        result = await self._call_remote(
            self.client.transcribe_and_translate(
                AudioTranslationRequest(
                    audio=audio,
                    mime_type=mime_type,
                    source_lang=source,
                    target_lang=target,
                )
            )
        )
        if self._is_stale(generation, "transcription"):
            return
        await self._apply_translation(generation, result, (result.transcribed_text or "").strip(), source, target)

    async def _apply_translation(
        self,
        generation: int,
        result: TranslationResult,
        original: str,
        source: str,
        target: str,
    ) -> None:
        self.session.original_text = original
        self.session.translated_text = result.translated_text
        self.session.detected_language_display = self._detected_display(result.detected_language, source)
        self.session.spoken_language = target
        _log_event(
            self.logger,
            logging.INFO,
            "translation_ready",
            generation=generation,
            provider=result.provider,
            detected=self.session.detected_language_display,
            chars_in=len(original),
            chars_out=len(result.translated_text),
        )
        self._notify()

        if not result.translated_text:
            self._transition(SessionState.IDLE)
            return
        speak = self._enter_speaking(result.translated_text, target)
        await self._await_playback(generation, speak)

    def _detected_display(self, raw: str, source: str) -> str:
        raw = (raw or "").strip()
        if raw:
            return self.catalog.reconcile_display_name(raw)
        if source != AUTO_LANGUAGE:
            return self.catalog.lookup_by_code(source) or ""
        return ""

    def _enter_speaking(self, text: str, language: str) -> Awaitable[None]:
        voice = select_voice(language, self.session.voice_preference, self._voices)
        self._transition(SessionState.SPEAKING)
        _log_event(
            self.logger,
            logging.INFO,
            "playback_started",
            generation=self.session.generation,
            language=language,
            voice_id=voice.id if voice is not None else None,
        )
        return self.playback.speak(text, language, voice.id if voice is not None else None)

    async def _await_playback(self, generation: int, speak: Awaitable[None]) -> None:
        timeout = float(self.settings.playback_timeout_sec or 0)
        try:
            if timeout > 0:
                await asyncio.wait_for(speak, timeout)
            else:
                await speak
        except asyncio.TimeoutError as e:
            self.playback.cancel_current()
            raise PlaybackError("Speech playback timed out.") from e
        except VoxlateError:
            raise
        except Exception as e:
            if self.logger is not None:
                self.logger.exception("playback_failed", extra={"generation": generation})
            raise PlaybackError() from e
        if self._is_stale(generation, "playback"):
            return
        self._transition(SessionState.IDLE)

    async def _call_remote(self, call: Awaitable[T]) -> T:
        timeout = float(self.settings.remote_timeout_sec or 0)
        try:
            if timeout > 0:
                return await asyncio.wait_for(call, timeout)
            return await call
        except asyncio.TimeoutError as e:
            raise RemoteCallError("Translation timed out.") from e
        except RemoteCallError:
            raise
        except Exception as e:
            if self.logger is not None:
                self.logger.exception("remote_call_failed")
            raise RemoteCallError() from e

    # --- plumbing ---

    def _spawn(
        self,
        loop: asyncio.AbstractEventLoop,
        generation: int,
        kind: str,
        coro: Coroutine[Any, Any, None],
    ) -> None:
        task = loop.create_task(self._guarded(generation, kind, coro), name=f"voxlate-{kind}-{generation}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _guarded(self, generation: int, kind: str, coro: Coroutine[Any, Any, None]) -> None:
        try:
            await coro
        except VoxlateError as e:
            if not self._is_stale(generation, f"{kind}_error"):
                self._fail(e)
        except Exception as e:
            if self.logger is not None:
                self.logger.exception("request_crashed", extra={"kind": kind, "generation": generation})
            if not self._is_stale(generation, f"{kind}_error"):
                self._fail(e)

    def _is_stale(self, generation: int, result: str) -> bool:
        if generation == self.session.generation:
            return False
        _log_event(
            self.logger,
            logging.INFO,
            "stale_result_dropped",
            result=result,
            generation=generation,
            current_generation=self.session.generation,
        )
        return True

    def _fail(self, error: BaseException) -> None:
        if isinstance(error, VoxlateError):
            message = error.user_message
        else:
            message = str(error).strip() or error.__class__.__name__
        self.session.last_error = message
        _log_event(
            self.logger,
            logging.WARNING,
            "session_error",
            kind=error.__class__.__name__,
            detail=message,
            state=self.state.value,
            generation=self.session.generation,
        )
        self._transition(SessionState.ERROR)
        self._transition(SessionState.IDLE)

    def _reject(self, command: str, reason: str = "wrong_state") -> bool:
        self.last_rejection = reason
        _log_event(
            self.logger,
            logging.INFO,
            "command_rejected",
            command=command,
            reason=reason,
            state=self.state.value,
        )
        return False

    def _transition(self, new_state: SessionState) -> None:
        previous = self.session.state
        # Never let two utterances overlap.
        if new_state in (SessionState.SPEAKING, SessionState.IDLE):
            try:
                self.playback.cancel_current()
            except Exception:
                # A driver that cannot stop must not strand the session.
                if self.logger is not None:
                    self.logger.exception("playback_cancel_failed", extra={"to_state": new_state.value})
        self.session.advance(new_state)
        _log_event(
            self.logger,
            logging.INFO,
            "session_transition",
            from_state=previous.value,
            to_state=new_state.value,
            generation=self.session.generation,
        )
        self._notify()

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change(self.session.snapshot())
