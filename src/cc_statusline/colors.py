"""Terminal color constants and per-widget segment palettes."""

from __future__ import annotations

from dataclasses import dataclass

RESET = "\033[0m"
DIM = "\033[2m"


@dataclass(frozen=True)
class SegmentColors:
    bg: str
    fg: str


@dataclass(frozen=True)
class Palette:
    id: str
    name: str
    separator: str
    segments: dict[str, SegmentColors]
    fallback: SegmentColors = SegmentColors(bg="#616161", fg="#ffffff")

    def colors_for(self, color_key: str) -> SegmentColors:
        return self.segments.get(color_key, self.fallback)


def _pairs(**pairs: tuple[str, str]) -> dict[str, SegmentColors]:
    return {key: SegmentColors(bg=bg, fg=fg) for key, (bg, fg) in pairs.items()}


POWERLINE_DARK = Palette(
    id="powerline-dark",
    name="Powerline Dark",
    separator="\ue0b0",
    segments=_pairs(
        model=("#5c6bc0", "#ffffff"),
        git=("#ffffff", "#37474f"),
        tokens=("#42a5f5", "#0d47a1"),
        cost=("#ffa726", "#e65100"),
        session=("#78909c", "#263238"),
        cwd=("#5c6bc0", "#ffffff"),
        context=("#ab47bc", "#ffffff"),
        todo=("#26a69a", "#004d40"),
        memory=("#ec407a", "#ffffff"),
        files=("#66bb6a", "#1b5e20"),
    ),
)

POWERLINE_LIGHT = Palette(
    id="powerline-light",
    name="Powerline Light",
    separator="\ue0b0",
    segments=_pairs(
        model=("#7986cb", "#1a237e"),
        git=("#ffffff", "#37474f"),
        tokens=("#64b5f6", "#0d47a1"),
        cost=("#ffb74d", "#e65100"),
        session=("#90a4ae", "#263238"),
        cwd=("#7986cb", "#1a237e"),
        context=("#ba68c8", "#4a148c"),
        todo=("#4db6ac", "#004d40"),
        memory=("#f48fb1", "#880e4f"),
        files=("#81c784", "#1b5e20"),
    ),
)

MINIMAL = Palette(
    id="minimal",
    name="Minimal (ASCII)",
    separator=">",
    segments=_pairs(
        model=("#6366f1", "#ffffff"),
        git=("#22c55e", "#ffffff"),
        tokens=("#3b82f6", "#ffffff"),
        cost=("#f59e0b", "#ffffff"),
        session=("#6b7280", "#ffffff"),
        cwd=("#6366f1", "#ffffff"),
        context=("#a855f7", "#ffffff"),
        todo=("#14b8a6", "#ffffff"),
        memory=("#ec4899", "#ffffff"),
        files=("#10b981", "#ffffff"),
    ),
)

PALETTES: dict[str, Palette] = {p.id: p for p in (POWERLINE_DARK, POWERLINE_LIGHT, MINIMAL)}
DEFAULT_PALETTE_ID = POWERLINE_DARK.id


def get_palette(palette_id: str | None) -> Palette:
    return PALETTES.get(palette_id or DEFAULT_PALETTE_ID, POWERLINE_DARK)
