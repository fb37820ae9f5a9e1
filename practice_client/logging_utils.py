from __future__ import annotations

import logging
import os
import tempfile
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

ROOT_LOGGER_NAME = "DrawStack"
LOG_FILENAME = "drawstack-practice.log"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def resolve_logs_dir(log_dir_name: str = "DrawStack") -> Path:
    """
    Resolve the directory to store session logs.

    Strategy:
    - Use DRAWSTACK_LOG_DIR if set.
    - Fall back to XDG state/cache locations, then `cwd/logs/<log_dir_name>`.
    - Final fallback: tempdir/<log_dir_name>.
    """
    candidates = []

    env_override = os.environ.get("DRAWSTACK_LOG_DIR")
    if env_override:
        candidates.append(Path(env_override).expanduser())

    state_home = Path(os.environ.get("XDG_STATE_HOME", Path.home() / ".local" / "state"))
    cache_home = Path(os.environ.get("XDG_CACHE_HOME", Path.home() / ".cache"))
    candidates.append(state_home / "drawstack" / "logs")
    candidates.append(cache_home / "drawstack" / "logs")
    candidates.append(Path.cwd() / "logs")

    for base in candidates:
        try:
            target = base / log_dir_name
            target.mkdir(parents=True, exist_ok=True)
            return target
        except OSError:
            continue

    temp_fallback = Path(tempfile.gettempdir()) / log_dir_name
    temp_fallback.mkdir(parents=True, exist_ok=True)
    return temp_fallback


def build_rotating_file_handler(
    log_dir: Path,
    filename: str = LOG_FILENAME,
    *,
    retention: int = 5,
    max_bytes: int = 512 * 1024,
    formatter: Optional[logging.Formatter] = None,
) -> logging.Handler:
    """Construct a rotating file handler with sane defaults."""
    retention = max(1, retention)
    backup_count = max(0, retention - 1)
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_dir / filename,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    if formatter is not None:
        handler.setFormatter(formatter)
    return handler


def resolve_log_level(debug_enabled: bool) -> int:
    """--debug wins; otherwise DRAWSTACK_LOG_LEVEL (name or number), defaulting to INFO."""
    if debug_enabled:
        return logging.DEBUG
    raw = (os.environ.get("DRAWSTACK_LOG_LEVEL") or "").strip()
    if not raw:
        return logging.INFO
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw.upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(*, debug: bool = False, retention: int = 5, log_dir: Optional[Path] = None) -> Path:
    """Attach the rotating file handler to the ``DrawStack`` logger tree. Returns the log file path."""
    target_dir = log_dir or resolve_logs_dir()
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for existing in list(logger.handlers):
        if isinstance(existing, RotatingFileHandler):
            logger.removeHandler(existing)
            existing.close()
    handler = build_rotating_file_handler(
        target_dir,
        retention=retention,
        formatter=logging.Formatter(LOG_FORMAT),
    )
    logger.addHandler(handler)
    logger.setLevel(resolve_log_level(debug))
    logger.propagate = False
    return target_dir / LOG_FILENAME
