"""Pack colored segments into terminal-width-bounded powerline rows.

Every segment lands on some row: a segment that would overflow the current
row starts a new one instead of being dropped or truncated. A segment wider
than the terminal still gets a row of its own.

Widths are measured in terminal cells after stripping escape sequences:
East Asian wide, fullwidth and ambiguous characters take two cells,
control and format characters none, everything else one.

// [LAW:one-source-of-truth] Cell-width rules live only in char_width().
// [LAW:dataflow-not-control-flow] pack_lines() is pure: segments in, rows out.
"""

from __future__ import annotations

import unicodedata
from collections.abc import Sequence
from dataclasses import dataclass

from rich.color import ColorSystem
from rich.style import Style
from rich.text import Text

from cc_statusline.colors import DIM, RESET, SegmentColors

SEGMENT_PADDING = 2  # one space either side of the text
ESC = "\x1b"


@dataclass(frozen=True)
class Segment:
    id: str
    text: str
    colors: SegmentColors


def strip_ansi(text: str) -> str:
    if ESC not in text:
        return text
    return Text.from_ansi(text).plain


def char_width(ch: str) -> int:
    if unicodedata.category(ch) in ("Cc", "Cf"):
        return 0
    if unicodedata.east_asian_width(ch) in ("W", "F", "A"):
        return 2
    return 1


def display_width(text: str) -> int:
    return sum(char_width(ch) for ch in strip_ansi(text))


def segment_width(text: str, separator: str) -> int:
    """Cells a segment occupies: text, padding, and its trailing separator."""
    return display_width(text) + SEGMENT_PADDING + display_width(separator)


def pack_lines(segments: Sequence[Segment], width: int, separator: str) -> list[list[Segment]]:
    """Greedy left-to-right packing into rows no wider than width."""
    rows: list[list[Segment]] = []
    current: list[Segment] = []
    used = 0

    for seg in segments:
        w = segment_width(seg.text, separator)
        if current and used + w > width:
            rows.append(current)
            current = []
            used = 0
        current.append(seg)
        used += w

    if current:
        rows.append(current)
    return rows


def paint(text: str, fg: str | None = None, bg: str | None = None, bold: bool = False) -> str:
    """Wrap text in truecolor SGR codes, ending with a reset."""
    if not text:
        return ""
    return Style(color=fg, bgcolor=bg, bold=bold or None).render(text, color_system=ColorSystem.TRUECOLOR)


def render_segment(
    seg: Segment,
    separator: str,
    next_colors: SegmentColors | None,
    last_in_line: bool,
) -> str:
    bg, fg = seg.colors.bg, seg.colors.fg
    if ESC in seg.text:
        # Pre-colored content keeps its own codes; only the padding is painted.
        body = paint(" ", bg=bg) + seg.text + paint(" ", bg=bg)
    else:
        body = paint(f" {seg.text} ", fg=fg, bg=bg)

    if last_in_line or next_colors is None:
        tail = paint(separator, fg=bg) + RESET
    else:
        tail = paint(separator, fg=bg, bg=next_colors.bg)
    return body + tail


def render_row(row: Sequence[Segment], separator: str) -> str:
    parts = []
    last = len(row) - 1
    for i, seg in enumerate(row):
        next_colors = row[i + 1].colors if i < last else None
        parts.append(render_segment(seg, separator, next_colors, i == last))
    return "".join(parts)


def render_lines(
    segments: Sequence[Segment],
    width: int,
    separator: str,
    placeholder: str = "No widgets enabled",
) -> str:
    """Rows joined by newlines, or the dimmed placeholder when nothing is left to show."""
    if not segments:
        return DIM + placeholder + RESET
    rows = pack_lines(segments, width, separator)
    return "\n".join(render_row(row, separator) for row in rows)
