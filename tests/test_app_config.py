from __future__ import annotations

import json
from pathlib import Path

from voxlate.app import config as app_config


def test_load_default_config_contains_expected_keys() -> None:
    cfg = app_config.load_default_config()
    assert cfg["translator"] in {"gemini", "stub"}
    assert cfg["source_language"] == "auto"
    assert cfg["max_upload_bytes"] == 10 * 1024 * 1024
    assert "remote_timeout_sec" in cfg


def test_resolve_defaults_uses_explicit_config(tmp_path: Path) -> None:
    cfg_path = tmp_path / "explicit.json"
    cfg_path.write_text(json.dumps({"sr": 48000, "target_language": "fr-FR"}), encoding="utf-8")
    defaults, used = app_config.resolve_defaults(str(cfg_path))
    assert used == cfg_path
    assert defaults["sr"] == 48000
    assert defaults["target_language"] == "fr-FR"
    assert defaults["voice_preference"] == "auto"


def test_ensure_user_config_exists_creates_file(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(app_config, "user_config_dir", lambda appname, appauthor=None: str(tmp_path))
    created = app_config.ensure_user_config_exists({"translator": "stub", "sr": 16000})
    assert created.exists()
    assert created.parent == tmp_path
    loaded = json.loads(created.read_text(encoding="utf-8"))
    assert loaded["translator"] == "stub"
    assert loaded["sr"] == 16000


def test_load_user_config_ignores_unknown_keys(tmp_path: Path) -> None:
    cfg_path = tmp_path / "user.json"
    cfg_path.write_text(
        json.dumps({"sr": 48000, "translator": "stub", "unexpected": 1}),
        encoding="utf-8",
    )
    loaded, used = app_config.load_user_config(str(cfg_path))
    assert used == cfg_path
    assert loaded["sr"] == 48000
    assert loaded["translator"] == "stub"
    assert "unexpected" not in loaded


def test_load_user_config_accepts_utf8_bom(tmp_path: Path) -> None:
    cfg_path = tmp_path / "bom.json"
    cfg_path.write_bytes(b"\xef\xbb\xbf" + json.dumps({"ui_language": "ja"}).encode("utf-8"))
    loaded, _ = app_config.load_user_config(str(cfg_path))
    assert loaded["ui_language"] == "ja"


def test_load_user_config_missing_explicit_path_exits(tmp_path: Path) -> None:
    missing = tmp_path / "nope.json"
    try:
        app_config.load_user_config(str(missing))
    except SystemExit as e:
        assert "Config file not found" in str(e)
    else:
        raise AssertionError("expected SystemExit")


def test_save_user_config_merges_and_filters_keys(tmp_path: Path) -> None:
    cfg_path = tmp_path / "user.json"
    cfg_path.write_text(
        json.dumps({"sr": 16000, "translator": "stub", "debug": False}),
        encoding="utf-8",
    )
    saved = app_config.save_user_config(
        {"target_language": "ja-JP", "voice_preference": "female", "junk": "x"},
        config_path=str(cfg_path),
    )
    assert saved == cfg_path
    loaded = json.loads(cfg_path.read_text(encoding="utf-8"))
    assert loaded["sr"] == 16000
    assert loaded["translator"] == "stub"
    assert loaded["target_language"] == "ja-JP"
    assert loaded["voice_preference"] == "female"
    assert "junk" not in loaded
