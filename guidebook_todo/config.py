"""Configuration loading for the task tracker."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from guidebook_todo.constants import DEFAULT_DATA_DIR


class ConfigError(RuntimeError):
    """Raised when configuration is invalid."""


@dataclass(frozen=True)
class AppConfig:
    data_dir: Path
    editor: str
    git_remote: str
    git_branch: str | None
    log_level: int
    log_file: Path | None


def _read_dotenv_value(dotenv_path: Path, key: str) -> str | None:
    """Read a single key from a .env file without mutating the environment."""
    if not dotenv_path.is_file():
        return None
    try:
        content = dotenv_path.read_text(encoding="utf-8")
    except OSError:
        return None

    for line in content.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if stripped.startswith("export "):
            stripped = stripped[len("export ") :].strip()
        if "=" not in stripped:
            continue
        name, value = stripped.split("=", 1)
        if name.strip() != key:
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
            value = value[1:-1]
        return value or None
    return None


def _read_setting(dotenv_path: Path, key: str) -> str | None:
    raw_value = os.environ.get(key)
    if raw_value is None:
        raw_value = _read_dotenv_value(dotenv_path, key)
    if raw_value is None:
        return None
    return raw_value.strip() or None


def _read_log_level(raw_value: str | None, *, key: str) -> int:
    if raw_value is None:
        return logging.WARNING
    level = logging.getLevelName(raw_value.upper())
    if not isinstance(level, int):
        raise ConfigError(
            f"{key} must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL."
        )
    return level


def _expand_path(raw_value: str) -> Path:
    path = Path(raw_value).expanduser()
    if not path.is_absolute():
        path = Path.cwd() / path
    return path


def load_config() -> AppConfig:
    """Load configuration from the environment, falling back to ./.env."""
    dotenv_path = Path.cwd() / ".env"

    data_dir_raw = _read_setting(dotenv_path, "GUIDEBOOK_DATA_DIR") or DEFAULT_DATA_DIR
    log_file_raw = _read_setting(dotenv_path, "GUIDEBOOK_LOG_FILE")
    level_key = "GUIDEBOOK_LOG_LEVEL"

    return AppConfig(
        data_dir=_expand_path(data_dir_raw),
        editor=_read_setting(dotenv_path, "GUIDEBOOK_EDITOR") or "code",
        git_remote=_read_setting(dotenv_path, "GUIDEBOOK_GIT_REMOTE") or "origin",
        git_branch=_read_setting(dotenv_path, "GUIDEBOOK_GIT_BRANCH"),
        log_level=_read_log_level(_read_setting(dotenv_path, level_key), key=level_key),
        log_file=_expand_path(log_file_raw) if log_file_raw else None,
    )
