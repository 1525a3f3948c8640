from __future__ import annotations

import argparse
import copy
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir

from transdesk.api.client import DEFAULT_API_URL, DEFAULT_TRANSLATE_URL

DEFAULTS: dict[str, Any] = {
    "api_url": DEFAULT_API_URL,
    "translate_url": DEFAULT_TRANSLATE_URL,
    "timeout_sec": 15.0,
    "source_lang": "en-US",
    "target_voice": "te",
    "list_devices": False,
    "device": None,
    "sr": 16000,
    "channels": 1,
    "chunk_sec": 0.5,
    "rms_th": 250.0,
    "silence_chunks": 2,
    "interim_chunks": 2,
    "no_speech_sec": 8.0,
    "max_session_sec": 60.0,
    "model": "tiny",
    "poll_ms": 40,
    "copy_notice_ms": 3000,
    "history_copy_notice_ms": 2000,
    "theme": "dark",
    "debug": False,
}
CONFIG_KEYS: tuple[str, ...] = tuple(DEFAULTS.keys())
# Flags that describe one run rather than a preference.
_RUN_ONLY_KEYS = frozenset({"list_devices", "debug"})


@dataclass(frozen=True)
class AppPaths:
    config_dir: Path
    config_path: Path
    session_path: Path


def app_paths() -> AppPaths:
    config_dir = Path(user_config_dir("TransDesk", "TransDesk"))
    return AppPaths(
        config_dir=config_dir,
        config_path=config_dir / "config.json",
        session_path=config_dir / "session.json",
    )


def load_json_dict(path: Path) -> dict[str, Any]:
    # Accept UTF-8 with or without BOM for hand-edited files.
    with path.open("r", encoding="utf-8-sig") as f:
        loaded = json.load(f)
    if not isinstance(loaded, dict):
        raise ValueError(f"expected a JSON object: {path}")
    return loaded


def write_json_dict(path: Path, payload: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)
        f.write("\n")


def _type_ok(key: str, value: Any) -> bool:
    default = DEFAULTS[key]
    if default is None or value is None:
        return True
    if isinstance(default, bool):
        return isinstance(value, bool)
    if isinstance(default, float):
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    return isinstance(value, type(default)) and not isinstance(value, bool)


def _known_only(payload: dict[str, Any]) -> dict[str, Any]:
    # Unknown keys and values of the wrong type fall back to defaults.
    return {key: payload[key] for key in CONFIG_KEYS if key in payload and _type_ok(key, payload[key])}


def load_default_config() -> dict[str, Any]:
    return copy.deepcopy(DEFAULTS)


def ensure_user_config_exists(defaults: dict[str, Any] | None = None) -> Path:
    paths = app_paths()
    if paths.config_path.exists():
        return paths.config_path
    write_json_dict(paths.config_path, defaults or load_default_config())
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
    merged.update(_known_only(load_json_dict(chosen)))
    return merged, chosen


def save_user_config(values: dict[str, Any], config_path: str | None = None) -> Path:
    if config_path:
        path = Path(config_path)
    else:
        path = ensure_user_config_exists()
    existing = _known_only(load_json_dict(path)) if path.exists() else {}
    merged = load_default_config()
    merged.update(existing)
    merged.update(_known_only(values))
    write_json_dict(path, merged)
    return path


def parser_with_defaults(defaults: dict[str, Any]) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="transdesk", description="English to Telugu translator")
    p.add_argument("--config", default=None, help="JSON config path (CLI flags override config)")
    p.add_argument("--api-url", default=defaults["api_url"], help="auth/history backend base URL")
    p.add_argument("--translate-url", default=defaults["translate_url"], help="translation endpoint URL")
    p.add_argument("--timeout-sec", type=float, default=defaults["timeout_sec"], help="HTTP timeout (seconds)")
    p.add_argument("--list-devices", action="store_true", help="print audio devices and exit")
    p.add_argument("--device", type=int, default=defaults["device"], help="sounddevice input device id")
    p.add_argument("--sr", type=int, default=defaults["sr"], help="capture sample rate (Hz)")
    p.add_argument("--model", default=defaults["model"], help="faster-whisper model size")
    p.add_argument(
        "--theme",
        default=defaults["theme"],
        choices=["dark", "light"],
        help="window colour theme",
    )
    p.add_argument(
        "--open",
        dest="location",
        default="/",
        help="initial location, e.g. a reset link '/reset-password?token=...'",
    )
    p.add_argument("--debug", action="store_true", help="log capture levels and speech decisions")
    p.add_argument(
        "--remember",
        action="store_true",
        help="write the effective settings (theme, URLs, device, model) back to the config file",
    )
    return p


def resolve_args(argv: list[str] | None = None) -> argparse.Namespace:
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument("--config", default=None)
    pre_args, _ = pre.parse_known_args(argv)
    defaults, _ = load_user_config(config_path=pre_args.config)
    args = parser_with_defaults(defaults).parse_args(argv)
    # Keys without a CLI flag come straight from the config.
    for key, value in defaults.items():
        if not hasattr(args, key):
            setattr(args, key, value)
    if defaults.get("list_devices"):
        args.list_devices = True
    if defaults.get("debug"):
        args.debug = True
    return args


def persist_args(args: argparse.Namespace) -> Path:
    """Save the settings in `args` that belong in the config file."""
    values = {k: v for k, v in vars(args).items() if k not in _RUN_ONLY_KEYS}
    return save_user_config(values, getattr(args, "config", None))
