"""Centralized logging bootstrap for the cc-statusline process.

The status line runs once per prompt redraw, so the defaults keep stderr
silent (WARNING) and route anything more verbose to a small rotating file.

// [LAW:single-enforcer] Logger handler wiring is enforced in this module only.
// [LAW:one-source-of-truth] Runtime log path/level are derived here and returned to callers.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOGGER_NAME = "cc_statusline"
DEFAULT_LEVEL = "WARNING"
DEFAULT_LOG_DIR = "~/.local/share/cc-statusline/logs"
LOG_FILE_NAME = "statusline.log"
MAX_LOG_BYTES = 1024 * 1024
BACKUP_COUNT = 3


@dataclass(frozen=True)
class LoggingRuntime:
    """Resolved runtime logging configuration."""

    level_name: str
    level: int
    file_path: str | None


_RUNTIME: LoggingRuntime | None = None


def _parse_level(raw: str | None) -> tuple[str, int]:
    normalized = str(raw or DEFAULT_LEVEL).strip().upper()
    level = getattr(logging, normalized, None)
    if not isinstance(level, int):
        level = logging.WARNING
    return str(logging.getLevelName(level)), level


def _default_log_path() -> str:
    log_dir = Path(os.path.expanduser(os.environ.get("CC_STATUSLINE_LOG_DIR", DEFAULT_LOG_DIR)))
    return str(log_dir / LOG_FILE_NAME)


def _make_stream_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("[%(name)s] %(levelname)s %(message)s"))
    return handler


def _make_file_handler(level: int, file_path: str) -> logging.Handler:
    handler = RotatingFileHandler(
        file_path,
        maxBytes=MAX_LOG_BYTES,
        backupCount=BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s [pid %(process)d] %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )
    return handler


def configure() -> LoggingRuntime:
    """Configure the cc_statusline logger hierarchy with stderr + rotating file handlers.

    Idempotent: repeated calls return the originally configured runtime.
    An unwritable log directory degrades to stderr-only logging.
    """
    global _RUNTIME
    if _RUNTIME is not None:
        return _RUNTIME

    level_name, level = _parse_level(os.environ.get("CC_STATUSLINE_LOG_LEVEL"))
    file_path: str | None = os.environ.get("CC_STATUSLINE_LOG_FILE") or _default_log_path()

    # [LAW:single-enforcer] All cc_statusline module loggers propagate to this one logger.
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False
    logger.handlers.clear()
    logger.addHandler(_make_stream_handler(level))
    try:
        Path(file_path).parent.mkdir(parents=True, exist_ok=True)
        logger.addHandler(_make_file_handler(level, file_path))
    except OSError as exc:
        logger.debug("file logging disabled (%s): %s", file_path, exc)
        file_path = None

    logging.captureWarnings(True)

    _RUNTIME = LoggingRuntime(level_name=level_name, level=level, file_path=file_path)
    return _RUNTIME


def get_runtime() -> LoggingRuntime | None:
    """Return configured logging runtime, if configure() has run."""
    return _RUNTIME


def reset() -> None:
    """Detach handlers and forget the runtime so configure() runs again."""
    global _RUNTIME
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    _RUNTIME = None
