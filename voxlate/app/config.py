from __future__ import annotations

import argparse
import copy
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir


DEFAULTS: dict[str, Any] = {
    "source_language": "auto",
    "target_language": "es-ES",
    "voice_preference": "auto",
    "fallback_language": "en-US",
    "max_upload_bytes": 10 * 1024 * 1024,
    "translator": "gemini",
    "model": "gemini-2.5-flash",
    "api_key_env": "GEMINI_API_KEY",
    "remote_timeout_sec": 30.0,
    "playback_timeout_sec": 0.0,
    "device": None,
    "sr": 16000,
    "channels": 1,
    "chunk_sec": 0.25,
    "vad": "energy",
    "rms_th": 300.0,
    "silence_chunks": 6,
    "max_record_sec": 15.0,
    "speech_rate": 0,
    "ui_language": "en",
    "debug": False,
}
CONFIG_KEYS: tuple[str, ...] = tuple(DEFAULTS.keys())


@dataclass(frozen=True)
class AppPaths:
    config_dir: Path
    config_path: Path


def default_asset_config_path() -> Path:
    return Path(__file__).resolve().parents[2] / "assets" / "config" / "default.json"


def app_paths() -> AppPaths:
    config_dir = Path(user_config_dir("Voxlate", "Voxlate"))
    return AppPaths(config_dir=config_dir, config_path=config_dir / "config.json")


def _load_json_dict(path: Path) -> dict[str, Any]:
    # Accept UTF-8 with or without BOM for Windows-edited config files.
    with path.open("r", encoding="utf-8-sig") as f:
        loaded = json.load(f)
    if not isinstance(loaded, dict):
        raise ValueError(f"config must be a JSON object: {path}")
    return loaded


def _write_json_dict(path: Path, payload: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)
        f.write("\n")


def _known_only(payload: dict[str, Any]) -> dict[str, Any]:
    return {key: payload[key] for key in CONFIG_KEYS if key in payload}


def load_default_config() -> dict[str, Any]:
    out = copy.deepcopy(DEFAULTS)
    path = default_asset_config_path()
    if path.exists():
        out.update(_known_only(_load_json_dict(path)))
    return out


def ensure_user_config_exists(defaults: dict[str, Any] | None = None) -> Path:
    paths = app_paths()
    if paths.config_path.exists():
        return paths.config_path
    _write_json_dict(paths.config_path, defaults or load_default_config())
    return paths.config_path


def load_user_config(config_path: str | None = None) -> tuple[dict[str, Any], Path]:
    defaults = load_default_config()
    if config_path:
        chosen = Path(config_path)
        if not chosen.exists():
            raise SystemExit(f"Config file not found: {chosen}")
    else:
        chosen = ensure_user_config_exists(defaults)
    merged = dict(defaults)
    merged.update(_known_only(_load_json_dict(chosen)))
    return merged, chosen


def save_user_config(values: dict[str, Any], config_path: str | None = None) -> Path:
    if config_path:
        path = Path(config_path)
        existing = _known_only(_load_json_dict(path)) if path.exists() else {}
    else:
        path = ensure_user_config_exists()
        existing = _known_only(_load_json_dict(path))
    merged = load_default_config()
    merged.update(existing)
    merged.update(_known_only(values))
    _write_json_dict(path, merged)
    return path


def resolve_defaults(config_path: str | None = None) -> tuple[dict[str, Any], Path]:
    return load_user_config(config_path=config_path)


def parser_with_defaults(defaults: dict[str, Any]) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="voxlate", description="Speak or upload audio, hear it translated.")
    p.add_argument("--config", default=None, help="JSON config path (CLI flags override config)")
    p.add_argument("--list-devices", action="store_true", help="print audio devices and exit")
    p.add_argument("--list-languages", action="store_true", help="print supported languages and exit")
    p.add_argument("--list-voices", action="store_true", help="print speech voices and exit")
    p.add_argument("--text", default=None, help="translate this text once, speak it and exit")
    p.add_argument("--file", default=None, help="translate this audio file once, speak it and exit")
    p.add_argument(
        "--source-language",
        "--from",
        dest="source_language",
        default=defaults["source_language"],
        help='source language code or "auto"',
    )
    p.add_argument(
        "--target-language",
        "--to",
        dest="target_language",
        default=defaults["target_language"],
        help="target language code",
    )
    p.add_argument(
        "--voice-preference",
        default=defaults["voice_preference"],
        choices=["auto", "male", "female"],
        help="preferred output voice",
    )
    p.add_argument(
        "--fallback-language",
        default=defaults["fallback_language"],
        help="capture language when the source is auto and the locale is unknown",
    )
    p.add_argument(
        "--max-upload-bytes",
        type=int,
        default=defaults["max_upload_bytes"],
        help="largest audio file accepted for upload",
    )
    p.add_argument("--translator", default=defaults["translator"], choices=["gemini", "stub"])
    p.add_argument("--model", default=defaults["model"], help="Gemini model name")
    p.add_argument("--api-key-env", default=defaults["api_key_env"], help="env var holding the API key")
    p.add_argument(
        "--remote-timeout-sec",
        type=float,
        default=defaults["remote_timeout_sec"],
        help="fail a translation request after this many seconds (0 = never)",
    )
    p.add_argument(
        "--playback-timeout-sec",
        type=float,
        default=defaults["playback_timeout_sec"],
        help="fail speech playback after this many seconds (0 = never)",
    )
    p.add_argument("--device", type=int, default=defaults["device"], help="sounddevice input device id")
    p.add_argument("--sr", type=int, default=defaults["sr"], help="sample rate (Hz)")
    p.add_argument("--channels", type=int, default=defaults["channels"], help="input channels")
    p.add_argument("--chunk-sec", type=float, default=defaults["chunk_sec"], help="mic chunk size in seconds")
    p.add_argument("--vad", default=defaults["vad"], choices=["energy", "webrtc"], help="speech detector")
    p.add_argument("--rms-th", type=float, default=defaults["rms_th"], help="RMS threshold for energy VAD")
    p.add_argument(
        "--silence-chunks",
        type=int,
        default=defaults["silence_chunks"],
        help="end recording after this many non-speech chunks",
    )
    p.add_argument(
        "--max-record-sec",
        type=float,
        default=defaults["max_record_sec"],
        help="end recording after this many seconds",
    )
    p.add_argument("--speech-rate", type=int, default=defaults["speech_rate"], help="TTS words/min (0 = engine default)")
    p.add_argument(
        "--ui-language",
        default=defaults["ui_language"],
        choices=["en", "es", "ja"],
        help="interface language",
    )
    p.add_argument("--debug", action="store_true", help="print chunk RMS and speech decisions")
    return p


def resolve_args(argv: list[str] | None = None) -> argparse.Namespace:
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument("--config", default=None)
    pre_args, _ = pre.parse_known_args(argv)
    defaults, _ = resolve_defaults(config_path=pre_args.config)
    parser = parser_with_defaults(defaults)
    args = parser.parse_args(argv)
    if defaults.get("debug"):
        args.debug = True
    return args
