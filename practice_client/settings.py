"""Configuration helpers for the practice session client."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

_LOGGER_NAME = "DrawStack.Client"
_CLIENT_LOGGER = logging.getLogger(_LOGGER_NAME)

DEFAULT_SETTINGS_PATH = Path.home() / ".drawstack" / "settings.json"


@dataclass
class ClientSettings:
    """Values used to bootstrap the session window."""

    default_duration_seconds: int = 60
    auto_advance: bool = True
    chrome_hide_delay_ms: int = 3000
    client_log_retention: int = 5
    start_fullscreen: bool = False
    debug: bool = False


def load_client_settings(settings_path: Path) -> ClientSettings:
    """Read bootstrap defaults from settings.json if it exists."""
    defaults = ClientSettings()
    try:
        raw = settings_path.read_text(encoding="utf-8")
    except (FileNotFoundError, OSError):
        return defaults

    try:
        data: Dict[str, Any] = json.loads(raw)
    except json.JSONDecodeError:
        _CLIENT_LOGGER.debug("Settings file %s is not valid JSON; using defaults", settings_path)
        return defaults
    if not isinstance(data, dict):
        return defaults

    def _int(key: str, fallback: int, minimum: int) -> int:
        try:
            return max(minimum, int(data.get(key, fallback)))
        except (TypeError, ValueError):
            return fallback

    return ClientSettings(
        default_duration_seconds=_int("default_duration_seconds", defaults.default_duration_seconds, 1),
        auto_advance=bool(data.get("auto_advance", defaults.auto_advance)),
        chrome_hide_delay_ms=_int("chrome_hide_delay_ms", defaults.chrome_hide_delay_ms, 250),
        client_log_retention=_int("client_log_retention", defaults.client_log_retention, 1),
        start_fullscreen=bool(data.get("start_fullscreen", defaults.start_fullscreen)),
        debug=bool(data.get("debug", defaults.debug)),
    )
