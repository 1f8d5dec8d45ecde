"""Loguru sink setup for the TUI process.

The default stderr sink would paint over the alternate screen, so it is
replaced with a rotating file sink under the user log directory.
"""

from __future__ import annotations

import os
from pathlib import Path

from loguru import logger
from platformdirs import user_log_dir

APP_NAME = "vuit"
LOG_FILENAME = "vuit.log"
LOG_LEVEL_ENV = "VUIT_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"
LOG_ROTATION = "1 MB"
LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"


def default_log_path() -> Path:
    return Path(user_log_dir(APP_NAME, appauthor=False)) / LOG_FILENAME


def resolve_log_level(value: str | None = None) -> str:
    """Normalize a level name, falling back to ``DEFAULT_LOG_LEVEL``."""
    raw = value if value is not None else os.environ.get(LOG_LEVEL_ENV, "")
    candidate = raw.strip().upper()
    if not candidate:
        return DEFAULT_LOG_LEVEL
    try:
        logger.level(candidate)
    except ValueError:
        return DEFAULT_LOG_LEVEL
    return candidate


def configure_logging(log_path: Path | None = None, level: str | None = None) -> Path | None:
    """Route all loguru output to a file sink and return its path.

    Returns ``None`` when the log directory cannot be created; logging is then
    disabled entirely rather than falling back to stderr.
    """
    target = log_path if log_path is not None else default_log_path()
    logger.remove()
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
    except OSError:
        return None
    logger.add(
        target,
        level=resolve_log_level(level),
        format=LOG_FORMAT,
        rotation=LOG_ROTATION,
        retention=3,
        enqueue=True,
        backtrace=False,
        diagnose=False,
    )
    return target
