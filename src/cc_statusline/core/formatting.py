"""Short human-readable renderings of status values."""

from __future__ import annotations

import math
import os
import re
from decimal import ROUND_HALF_UP, Decimal

# Known model ids → compact labels. First match wins, so longer ids go first.
_MODEL_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = tuple(
    (re.compile(pattern, re.IGNORECASE), label)
    for pattern, label in (
        (r"claude-opus-4-5", "opus-4.5"),
        (r"claude-sonnet-4-5", "sonnet-4.5"),
        (r"claude-haiku-4-5", "haiku-4.5"),
        (r"claude-opus-4", "opus-4"),
        (r"claude-sonnet-4", "sonnet-4"),
        (r"claude-3-5-sonnet", "sonnet-3.5"),
        (r"claude-3-5-haiku", "haiku-3.5"),
        (r"claude-3-opus", "opus-3"),
        (r"claude-3-sonnet", "sonnet-3"),
        (r"claude-3-haiku", "haiku-3"),
    )
)

MODEL_NAME_MAX = 15


def round_half_up(value: float) -> int:
    """Nearest integer with halves rounded up (2.5 -> 3, not 2)."""
    return math.floor(value + 0.5)


def fixed(value: float, places: int) -> str:
    """Fixed-point text with halves rounded up, from the exact binary value."""
    quantum = Decimal(1).scaleb(-places)
    return str(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def format_tokens(tokens: int) -> str:
    """1234 -> 1.2K, 1500000 -> 1.5M."""
    tokens = max(0, int(tokens))
    if tokens >= 1_000_000:
        return fixed(tokens / 1_000_000, 1) + "M"
    if tokens >= 1_000:
        return fixed(tokens / 1_000, 1) + "K"
    return str(tokens)


def format_cost(cost: float) -> str:
    if cost < 0.01:
        return "$" + fixed(cost, 4)
    if cost < 1:
        return "$" + fixed(cost, 3)
    return "$" + fixed(cost, 2)


def format_duration(ms: float) -> str:
    """1h 23m, 5m 30s, 42s. Zero components are dropped."""
    seconds = max(0, int(ms)) // 1000
    minutes = seconds // 60
    hours = minutes // 60

    if hours > 0:
        rem = minutes % 60
        return f"{hours}h {rem}m" if rem else f"{hours}h"
    if minutes > 0:
        rem = seconds % 60
        return f"{minutes}m {rem}s" if rem else f"{minutes}m"
    return f"{seconds}s"


def format_percent(value: float) -> str:
    return f"{round_half_up(value)}%"


def shorten_path(path: str, max_length: int = 30) -> str:
    """Collapse $HOME to ~ and elide the middle of long paths."""
    home = os.environ.get("HOME") or os.environ.get("USERPROFILE") or ""
    shortened = path
    if home and path.startswith(home):
        shortened = "~" + path[len(home):]
    shortened = shortened.replace("\\", "/")

    if len(shortened) > max_length:
        parts = shortened.split("/")
        if len(parts) > 3:
            shortened = f"{parts[0]}/.../{'/'.join(parts[-2:])}"
    return shortened


def shorten_model_name(model_id: str) -> str:
    for pattern, label in _MODEL_PATTERNS:
        if pattern.search(model_id):
            return label
    if len(model_id) > MODEL_NAME_MAX:
        return model_id[:MODEL_NAME_MAX] + "..."
    return model_id


def progress_bar(percent: float, width: int = 10, filled: str = "█", empty: str = "░") -> str:
    pct = max(0.0, min(100.0, float(percent)))
    n = round_half_up(pct / 100 * width)
    return filled * n + empty * (width - n)
