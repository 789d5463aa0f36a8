from __future__ import annotations

import asyncio
import logging
import sys
import threading
from typing import Any

from voxlate.app.config import resolve_args, save_user_config
from voxlate.app.console import Command, SessionPrinter, dispatch, language_label, parse_command
from voxlate.app.diagnostics import hint_for_exception, summarize_exception
from voxlate.app.logging_setup import setup_app_logger
from voxlate.app.services import SessionServices, build_session_services
from voxlate.app.strings import ui_text
from voxlate.audio.mic import MicError, SoundDeviceMicSource
from voxlate.languages.catalog import LanguageCatalog
from voxlate.session.orchestrator import TranslationSessionOrchestrator
from voxlate.session.state import Session, VoicePreference
from voxlate.tts.base import PlaybackAdapter


def _print_failure(prefix: str, detail: str) -> None:
    summary = summarize_exception(detail)
    print(f"{prefix}: {summary}")
    print(f"Hint: {hint_for_exception(summary)}")


async def _refresh_voices(
    orchestrator: TranslationSessionOrchestrator,
    playback: PlaybackAdapter,
    logger: logging.Logger,
) -> None:
    try:
        voices = await playback.load_voices()
    except Exception:
        # Playback still works with the engine default voice.
        logger.exception("voice_load_failed")
        return
    orchestrator.set_voices(voices)


def _remember_choices(session: Session, args: Any) -> None:
    # Languages and voice picked during the session become the next run's defaults.
    save_user_config(
        {
            "source_language": session.source_language,
            "target_language": session.target_language,
            "voice_preference": session.voice_preference.value,
        },
        config_path=getattr(args, "config", None),
    )


def _start_stdin_reader(loop: asyncio.AbstractEventLoop, lines: "asyncio.Queue[str | None]") -> None:
    def _reader() -> None:
        try:
            for line in sys.stdin:
                loop.call_soon_threadsafe(lines.put_nowait, line)
            loop.call_soon_threadsafe(lines.put_nowait, None)
        except RuntimeError:
            return  # event loop already closed

    threading.Thread(target=_reader, name="voxlate-stdin", daemon=True).start()


async def _interactive(orchestrator: TranslationSessionOrchestrator, args: Any, log_path: Any) -> int:
    lang = str(args.ui_language)
    print(ui_text("ready", lang))
    print(ui_text("logs", lang, path=log_path))
    print(
        ui_text(
            "languages",
            lang,
            source=language_label(orchestrator.catalog, orchestrator.session.source_language, lang),
            target=language_label(orchestrator.catalog, orchestrator.session.target_language, lang),
            voice=orchestrator.session.voice_preference.value,
        )
    )
    if not orchestrator.capture_supported and orchestrator.session.last_error:
        print(ui_text("error", lang, message=orchestrator.session.last_error))

    lines: "asyncio.Queue[str | None]" = asyncio.Queue()
    _start_stdin_reader(asyncio.get_running_loop(), lines)
    while True:
        line = await lines.get()
        if line is None:
            break
        cmd = parse_command(line)
        if cmd is None:
            continue
        if not dispatch(orchestrator, cmd, ui_language=lang):
            break
    await orchestrator.shutdown()
    _remember_choices(orchestrator.session, args)
    return 0


async def _run_once(orchestrator: TranslationSessionOrchestrator, args: Any) -> int:
    cmd = Command("text", str(args.text)) if args.text else Command("file", str(args.file))
    dispatch(orchestrator, cmd, ui_language=str(args.ui_language))
    await orchestrator.join()
    session = orchestrator.session
    return 0 if session.translated_text and not session.last_error else 1


async def _run(args: Any, services: SessionServices, logger: logging.Logger, log_path: Any) -> int:
    session = Session(
        source_language=str(args.source_language),
        target_language=str(args.target_language),
        voice_preference=VoicePreference(str(args.voice_preference)),
    )
    try:
        orchestrator = TranslationSessionOrchestrator(
            catalog=services.catalog,
            client=services.client,
            playback=services.playback,
            capture=services.capture,
            settings=services.settings,
            session=session,
            on_change=SessionPrinter(ui_language=str(args.ui_language)),
            logger=logger,
        )
    except ValueError as e:
        _print_failure("Invalid settings", str(e))
        return 2

    if args.text or args.file:
        await _refresh_voices(orchestrator, services.playback, logger)
        return await _run_once(orchestrator, args)

    voices_task = asyncio.create_task(_refresh_voices(orchestrator, services.playback, logger))
    try:
        return await _interactive(orchestrator, args, log_path)
    finally:
        voices_task.cancel()


def main(argv: list[str] | None = None) -> int:
    args = resolve_args(argv)
    logger, _log_dir, log_path = setup_app_logger(debug=bool(args.debug))
    logger.info("app_start", extra={"config_path": str(getattr(args, "config", "")), "argv": argv or []})

    if args.list_devices:
        try:
            print(SoundDeviceMicSource.list_devices())
        except MicError as e:
            _print_failure("Audio devices unavailable", str(e))
            return 1
        return 0

    if args.list_languages:
        for entry in LanguageCatalog().all():
            print(f"{entry.code:<8} {entry.display_name}")
        return 0

    try:
        services = build_session_services(args, logger=logger)
    except (ValueError, RuntimeError) as e:
        logger.exception("startup_failed")
        _print_failure("Startup failed", str(e))
        return 2

    try:
        if args.list_voices:
            try:
                voices = services.playback.list_voices()
            except Exception as e:
                logger.exception("voice_list_failed")
                _print_failure("Voices unavailable", str(e))
                return 1
            for v in voices:
                print(f"{v.language or '?':<8} {v.name}  [{v.id}]")
            return 0
        return asyncio.run(_run(args, services, logger, log_path))
    except KeyboardInterrupt:
        logger.info("app_interrupted")
        return 130
    finally:
        services.playback.close()
        logger.info("app_quit")


if __name__ == "__main__":
    raise SystemExit(main())
