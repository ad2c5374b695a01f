# -*- coding: utf-8 -*-
"""Settings persistence and validation."""

from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Any

from shotreview.constants import (
    DEFAULT_APPROVALS_FILE,
    DEFAULT_DEBOUNCE_MS,
    DEFAULT_GENERATOR_COMMAND,
    DEFAULT_SETTINGS_FILE,
)
from shotreview.utils.file_utils import read_json_file, write_json_file


DEFAULT_CONFIG: dict[str, Any] = {
    "review": {"output_dir": "", "raw_dir": "", "approvals_file": DEFAULT_APPROVALS_FILE},
    "watch": {"debounce_ms": DEFAULT_DEBOUNCE_MS},
    "generator": {"command": list(DEFAULT_GENERATOR_COMMAND)},
    "logging": {"log_dir": ""},
}


class ConfigError(ValueError):
    """Raised when settings are invalid."""


def get_default_config() -> dict[str, Any]:
    """Return a deep copy of the default config."""
    return deepcopy(DEFAULT_CONFIG)


def _merge_section(defaults: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Overlay `overrides` onto `defaults`, recursing into nested sections."""
    result = deepcopy(defaults)
    for name, value in overrides.items():
        current = result.get(name)
        if isinstance(current, dict) and isinstance(value, dict):
            result[name] = _merge_section(current, value)
        else:
            result[name] = deepcopy(value)
    return result


def _read_dotenv(env_path: Path) -> dict[str, str]:
    """Read `KEY=VALUE` lines from a .env file.

    Comment lines and lines without `=` are ignored, an `export ` prefix is
    allowed, and one pair of matching quotes around a value is dropped.
    """
    if not env_path.is_file():
        return {}

    entries: dict[str, str] = {}
    for line in env_path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        name, sep, value = line.partition("=")
        name = name.strip()
        if not sep or not name or name.startswith("#"):
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        entries[name] = value
    return entries


def _apply_env_overrides(config: dict[str, Any], env_values: dict[str, str]) -> dict[str, Any]:
    """Apply environment-based overrides to runtime config."""
    merged = deepcopy(config)
    debounce = env_values.get("SHOTREVIEW_DEBOUNCE_MS", "").strip()
    generator = env_values.get("SHOTREVIEW_GENERATOR", "").strip()

    if debounce:
        try:
            merged.setdefault("watch", {})["debounce_ms"] = int(debounce)
        except ValueError as exc:
            raise ConfigError("SHOTREVIEW_DEBOUNCE_MS must be an integer") from exc
    if generator:
        merged.setdefault("generator", {})["command"] = generator.split()
    return merged


def validate_config(config: dict[str, Any]) -> None:
    """Validate the fields the review and watch commands rely on."""
    debounce = config.get("watch", {}).get("debounce_ms")
    if not isinstance(debounce, int) or isinstance(debounce, bool) or not (1 <= debounce <= 60000):
        raise ConfigError("watch.debounce_ms must be an int in range 1..60000")

    command = config.get("generator", {}).get("command")
    if not isinstance(command, list) or not command or not all(isinstance(part, str) and part for part in command):
        raise ConfigError("generator.command must be a non-empty list of strings")

    approvals_file = config.get("review", {}).get("approvals_file")
    if not isinstance(approvals_file, str) or not approvals_file.strip():
        raise ConfigError("review.approvals_file must be a non-empty string")


def load_config(path: str | Path | None = None, environ: dict[str, str] | None = None) -> dict[str, Any]:
    """Load config from JSON and merge into defaults.

    Values from a `.env` file next to the settings file are applied first,
    then values from `environ` (usually `os.environ`).
    """
    config_path = Path(path or DEFAULT_SETTINGS_FILE)
    env_values = _read_dotenv(config_path.parent / ".env")
    if environ:
        env_values.update({k: v for k, v in environ.items() if k.startswith("SHOTREVIEW_")})

    merged = get_default_config()
    if config_path.exists():
        merged = _merge_section(merged, read_json_file(config_path))
    merged = _apply_env_overrides(merged, env_values)
    validate_config(merged)
    return merged


def save_config(config: dict[str, Any], path: str | Path | None = None) -> Path:
    """Validate and save config as JSON."""
    validate_config(config)
    config_path = Path(path or DEFAULT_SETTINGS_FILE)
    write_json_file(config_path, config)
    return config_path
