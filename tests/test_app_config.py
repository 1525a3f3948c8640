from __future__ import annotations

import json
from pathlib import Path

import pytest

from transdesk.api.client import DEFAULT_API_URL, DEFAULT_TRANSLATE_URL
from transdesk.app import config as app_config


def test_load_default_config_contains_expected_keys() -> None:
    cfg = app_config.load_default_config()
    assert cfg["api_url"] == DEFAULT_API_URL
    assert cfg["translate_url"] == DEFAULT_TRANSLATE_URL
    assert cfg["target_voice"] == "te"
    assert cfg["copy_notice_ms"] == 3000
    assert cfg["history_copy_notice_ms"] == 2000
    assert cfg["theme"] in {"dark", "light"}


def test_app_paths_keep_session_beside_config(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(app_config, "user_config_dir", lambda appname, appauthor=None: str(tmp_path))
    paths = app_config.app_paths()
    assert paths.config_path == tmp_path / "config.json"
    assert paths.session_path == tmp_path / "session.json"


def test_ensure_user_config_exists_creates_file(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(app_config, "user_config_dir", lambda appname, appauthor=None: str(tmp_path))
    created = app_config.ensure_user_config_exists({"model": "base", "sr": 16000})
    assert created.exists()
    loaded = json.loads(created.read_text(encoding="utf-8"))
    assert loaded["model"] == "base"
    assert loaded["sr"] == 16000


def test_load_user_config_ignores_unknown_keys(tmp_path: Path) -> None:
    cfg_path = tmp_path / "user.json"
    cfg_path.write_text(
        json.dumps({"api_url": "http://10.0.0.5:5000/api", "theme": "light", "unexpected": 1}),
        encoding="utf-8",
    )
    loaded, used = app_config.load_user_config(str(cfg_path))
    assert used == cfg_path
    assert loaded["api_url"] == "http://10.0.0.5:5000/api"
    assert loaded["theme"] == "light"
    assert loaded["poll_ms"] == app_config.DEFAULTS["poll_ms"]
    assert "unexpected" not in loaded


def test_load_user_config_missing_explicit_path_exits(tmp_path: Path) -> None:
    with pytest.raises(SystemExit):
        app_config.load_user_config(str(tmp_path / "missing.json"))


def test_save_user_config_merges_and_filters_keys(tmp_path: Path) -> None:
    cfg_path = tmp_path / "user.json"
    cfg_path.write_text(json.dumps({"sr": 16000, "model": "tiny", "debug": False}), encoding="utf-8")
    saved = app_config.save_user_config({"model": "base", "poll_ms": 30, "junk": "x"}, config_path=str(cfg_path))
    assert saved == cfg_path
    loaded = json.loads(cfg_path.read_text(encoding="utf-8"))
    assert loaded["sr"] == 16000
    assert loaded["model"] == "base"
    assert loaded["poll_ms"] == 30
    assert "junk" not in loaded


def test_cli_flags_override_config(tmp_path: Path) -> None:
    cfg_path = tmp_path / "user.json"
    cfg_path.write_text(json.dumps({"model": "base", "theme": "light", "copy_notice_ms": 1500}), encoding="utf-8")
    args = app_config.resolve_args(
        ["--config", str(cfg_path), "--model", "small", "--open", "/reset-password?token=abc"]
    )
    assert args.model == "small"
    assert args.theme == "light"
    assert args.copy_notice_ms == 1500
    assert args.location == "/reset-password?token=abc"
    assert args.list_devices is False


def test_default_location_is_home(tmp_path: Path) -> None:
    cfg_path = tmp_path / "user.json"
    cfg_path.write_text("{}", encoding="utf-8")
    args = app_config.resolve_args(["--config", str(cfg_path), "--theme", "dark", "--timeout-sec", "3"])
    assert args.location == "/"
    assert args.timeout_sec == 3.0
    assert args.theme == "dark"


def test_wrongly_typed_values_fall_back_to_defaults(tmp_path: Path) -> None:
    cfg_path = tmp_path / "user.json"
    cfg_path.write_text(
        json.dumps({"poll_ms": "fast", "timeout_sec": 5, "debug": "yes", "device": 3, "sr": True}),
        encoding="utf-8",
    )
    loaded, _ = app_config.load_user_config(str(cfg_path))
    assert loaded["poll_ms"] == app_config.DEFAULTS["poll_ms"]
    assert loaded["timeout_sec"] == 5
    assert loaded["debug"] is False
    assert loaded["device"] == 3
    assert loaded["sr"] == 16000


def test_persist_args_saves_preferences_only(tmp_path: Path) -> None:
    cfg_path = tmp_path / "user.json"
    cfg_path.write_text(json.dumps({"model": "tiny"}), encoding="utf-8")
    args = app_config.resolve_args(
        ["--config", str(cfg_path), "--theme", "light", "--model", "base", "--debug", "--remember"]
    )
    assert args.remember is True
    assert app_config.persist_args(args) == cfg_path
    loaded = json.loads(cfg_path.read_text(encoding="utf-8"))
    assert loaded["theme"] == "light"
    assert loaded["model"] == "base"
    assert loaded["debug"] is False
    assert "location" not in loaded
    assert "remember" not in loaded
