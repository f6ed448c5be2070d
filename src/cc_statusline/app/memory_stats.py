"""Process memory sampling for the memory widget.

// [LAW:locality-or-seam] Process resource sampling is centralized in this module.
"""

import psutil

MIB = 1024 * 1024


def capture_snapshot() -> dict[str, int]:
    """Resident set size of the current process."""
    info = psutil.Process().memory_info()
    return {"rss_bytes": int(info.rss)}
