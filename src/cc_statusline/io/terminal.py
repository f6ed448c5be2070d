"""Terminal width detection.

Claude Code runs the status line with stdout piped, so the width comes from
an explicit override or the controlling terminal rather than stdout.
"""

import logging
import os

logger = logging.getLogger(__name__)

WIDTH_ENV_VARS = ("STATUSLINE_COLS", "COLUMNS")
DEFAULT_COLS = 80


def _env_cols() -> int | None:
    for name in WIDTH_ENV_VARS:
        value = os.environ.get(name, "")
        if value.isdigit() and int(value) > 0:
            return int(value)
    return None


def _tty_cols() -> int | None:
    try:
        fd = os.open("/dev/tty", os.O_RDONLY)
    except OSError:
        return None
    try:
        return os.get_terminal_size(fd).columns or None
    except OSError:
        return None
    finally:
        os.close(fd)


def detect_cols() -> int:
    """Env override, then the controlling terminal, then 80."""
    cols = _env_cols() or _tty_cols()
    if cols is None:
        logger.debug("terminal width unknown, using %d", DEFAULT_COLS)
        return DEFAULT_COLS
    return cols
