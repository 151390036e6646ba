"""Configuration loading for zymproc."""

import functools
import json
import logging
import os
from pathlib import Path

from pydantic import ValidationError

from zymproc.models import Settings

log = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".zymproc"
CONFIG_FILE = CONFIG_DIR / "config.json"

ENV_OVERRIDES = {
    "ZYMPROC_READ_CHUNK_SIZE": "read_chunk_size",
    "ZYMPROC_DRAIN_INTERVAL": "drain_interval",
    "ZYMPROC_TERMINATE_GRACE_PERIOD": "terminate_grace_period",
    "ZYMPROC_PTY_ROWS": "pty_rows",
    "ZYMPROC_PTY_COLS": "pty_cols",
}


def _read_config_file(path: Path) -> dict:
    try:
        with open(path, encoding="utf-8") as f:
            payload = json.load(f)
    except FileNotFoundError:
        return {}
    except (OSError, json.JSONDecodeError) as e:
        log.debug("ignoring unreadable config %s: %s", path, e)
        return {}
    if not isinstance(payload, dict):
        log.debug("ignoring config %s: top level is not an object", path)
        return {}
    return {key: value for key, value in payload.items() if key in Settings.model_fields}


def _env_overrides() -> dict[str, str]:
    overrides: dict[str, str] = {}
    for env_key, field in ENV_OVERRIDES.items():
        value = os.environ.get(env_key, "").strip()
        if value:
            overrides[field] = value
    return overrides


def load_config(path: Path | None = None) -> Settings:
    """Load settings from the config file, then apply environment overrides."""
    data = _read_config_file(path or CONFIG_FILE)
    try:
        settings = Settings(**data)
    except ValidationError as e:
        log.debug("invalid config values, using defaults: %s", e)
        settings = Settings()

    overrides = _env_overrides()
    if not overrides:
        return settings
    try:
        return Settings(**{**settings.model_dump(), **overrides})
    except ValidationError as e:
        log.debug("invalid environment overrides ignored: %s", e)
        return settings


@functools.lru_cache(maxsize=1)
def default_settings() -> Settings:
    """Settings used when a caller passes none; loaded once per process."""
    return load_config()
