from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from voxlate.app.diagnostics import hint_for_exception
from voxlate.app.strings import ui_text
from voxlate.contracts import AUTO_LANGUAGE
from voxlate.languages.catalog import LanguageCatalog
from voxlate.session.errors import UnsupportedEnvironment
from voxlate.session.orchestrator import TranslationSessionOrchestrator
from voxlate.session.state import Session, SessionState

_ALIASES: dict[str, str] = {
    "r": "record",
    "rec": "record",
    "record": "record",
    "s": "stop",
    "stop": "stop",
    "t": "text",
    "text": "text",
    "f": "file",
    "file": "file",
    "p": "replay",
    "replay": "replay",
    "w": "swap",
    "swap": "swap",
    "x": "cancel",
    "cancel": "cancel",
    "from": "from",
    "to": "to",
    "voice": "voice",
    "langs": "languages",
    "languages": "languages",
    "status": "status",
    "?": "help",
    "h": "help",
    "help": "help",
    "q": "quit",
    "quit": "quit",
    "exit": "quit",
}


@dataclass(frozen=True)
class Command:
    name: str
    arg: str = ""


def parse_command(line: str) -> Optional[Command]:
    text = (line or "").strip()
    if not text:
        return None
    head, _, rest = text.partition(" ")
    name = _ALIASES.get(head.lower())
    if name is None:
        return Command(name="unknown", arg=head)
    return Command(name=name, arg=rest.strip())


def guess_mime_type(path: Path) -> str:
    mime, _ = mimetypes.guess_type(str(path))
    if mime and mime.startswith("audio/"):
        return mime
    return "audio/wav" if path.suffix.lower() == ".wav" else (mime or "application/octet-stream")


def read_upload(path: Path, limit: int) -> tuple[bytes, int]:
    """Read at most `limit + 1` bytes; returns the bytes and the size on disk."""
    size = path.stat().st_size
    with path.open("rb") as f:
        data = f.read(limit + 1)
    return data, max(size, len(data))


def language_label(catalog: LanguageCatalog, code: str, ui_language: str = "en") -> str:
    if code == AUTO_LANGUAGE:
        return ui_text("auto_detect", ui_language)
    return catalog.lookup_by_code(code) or code


class SessionPrinter:
    """Change listener that prints state changes and results once per transition."""

    def __init__(self, *, ui_language: str = "en", out: Callable[[str], None] = print) -> None:
        self.ui_language = ui_language
        self.out = out
        self._last_state: SessionState | None = None

    def __call__(self, session: Session) -> None:
        if session.state is self._last_state:
            return
        self._last_state = session.state

        if session.state is SessionState.SPEAKING:
            if session.original_text:
                title = (
                    ui_text("original_detected", self.ui_language, language=session.detected_language_display)
                    if session.detected_language_display
                    else ui_text("original", self.ui_language)
                )
                self.out(f"{title}: {session.original_text}")
            self.out(f"{ui_text('translation', self.ui_language)}: {session.translated_text}")
        if session.state is SessionState.ERROR and session.last_error:
            self.out(ui_text("error", self.ui_language, message=session.last_error))
            self.out(ui_text("hint", self.ui_language, hint=hint_for_exception(session.last_error)))
            return
        self.out(ui_text(f"state.{session.state.value}", self.ui_language))


def dispatch(
    orchestrator: TranslationSessionOrchestrator,
    cmd: Command,
    *,
    ui_language: str = "en",
    out: Callable[[str], None] = print,
) -> bool:
    """Run one command; returns False when the loop should exit."""
    session = orchestrator.session
    catalog = orchestrator.catalog

    def _status() -> None:
        out(
            ui_text(
                "languages",
                ui_language,
                source=language_label(catalog, session.source_language, ui_language),
                target=language_label(catalog, session.target_language, ui_language),
                voice=session.voice_preference.value,
            )
        )

    accepted = True
    if cmd.name == "quit":
        orchestrator.cancel()
        return False
    if cmd.name == "help":
        out(ui_text("help", ui_language))
    elif cmd.name == "status":
        _status()
    elif cmd.name == "languages":
        for entry in catalog.all():
            out(f"{entry.code:<8} {entry.display_name}")
    elif cmd.name == "record":
        accepted = orchestrator.start_capture()
    elif cmd.name == "stop":
        accepted = orchestrator.stop_capture()
    elif cmd.name == "text":
        accepted = orchestrator.submit_text(cmd.arg)
    elif cmd.name == "file":
        path = Path(cmd.arg).expanduser()
        try:
            data, size = read_upload(path, int(orchestrator.settings.max_upload_bytes))
        except OSError as e:
            out(ui_text("error", ui_language, message=str(e)))
            return True
        accepted = orchestrator.submit_file(data, guess_mime_type(path), file_size=size)
    elif cmd.name == "replay":
        accepted = orchestrator.replay()
    elif cmd.name == "swap":
        accepted = orchestrator.swap_languages()
        if accepted:
            _status()
    elif cmd.name == "cancel":
        accepted = orchestrator.cancel()
    elif cmd.name in ("from", "to", "voice"):
        try:
            if cmd.name == "from":
                orchestrator.set_source_language(cmd.arg)
            elif cmd.name == "to":
                orchestrator.set_target_language(cmd.arg)
            else:
                orchestrator.set_voice_preference(cmd.arg.lower())
        except ValueError as e:
            out(ui_text("error", ui_language, message=str(e)))
            return True
        _status()
    else:
        out(ui_text("unknown_command", ui_language, command=cmd.arg))
        return True

    if accepted:
        return True
    reason = orchestrator.last_rejection
    if reason == "payload_too_large":
        return True  # already reported through the change listener
    if reason == "unsupported_environment":
        out(ui_text("error", ui_language, message=UnsupportedEnvironment().user_message))
    elif reason in ("empty_payload", "empty_text"):
        out(ui_text("empty", ui_language))
    else:
        out(ui_text("rejected", ui_language, state=session.state.value))
    return True
