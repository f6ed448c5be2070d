"""One status line render: fetch, enrich, compute widgets, pack.

Data flow per call:
    StatusInput -> (git state || session log) -> EnrichedInput
                -> (widget contents, concurrently) -> Segments -> rows

Nothing raised while fetching data or computing a widget reaches the caller;
each stage substitutes its fallback and logs at DEBUG.

// [LAW:dataflow-not-control-flow] Every enabled widget is computed every call; None drops it.
// [LAW:one-source-of-truth] Service instances are owned by StatusServices, never module globals.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from cc_statusline.app.context import EnrichedInput
from cc_statusline.app.session_log import SessionLogAggregate, SessionLogCache
from cc_statusline.app.vcs import NO_REPOSITORY, GitStateFetcher
from cc_statusline.app.widget_cache import WidgetContentCache
from cc_statusline.app.widgets import WidgetSpec, active_widgets, compute_widget_content
from cc_statusline.colors import DEFAULT_PALETTE_ID, Palette, get_palette
from cc_statusline.core.input_record import StatusInput
from cc_statusline.core.layout import Segment, render_lines

logger = logging.getLogger(__name__)

DEFAULT_WIDTH = 80

__all__ = [
    "DEFAULT_WIDTH",
    "EnrichedInput",
    "StatusServices",
    "build_segments",
    "compute_contents",
    "gather_context",
    "render_status_line",
]


@dataclass
class StatusServices:
    """Process-lifetime caches shared by every render."""

    git: GitStateFetcher = field(default_factory=GitStateFetcher)
    session_log: SessionLogCache = field(default_factory=SessionLogCache)
    widget_cache: WidgetContentCache = field(default_factory=WidgetContentCache)

    @classmethod
    def create(cls) -> "StatusServices":
        return cls()

    def clear(self) -> None:
        self.git.clear()
        self.session_log.clear()
        self.widget_cache.invalidate()


async def _load_session(services: StatusServices, path: str) -> SessionLogAggregate:
    # Transcript scan is blocking file I/O.
    return await asyncio.to_thread(services.session_log.fetch, path)


async def gather_context(data: StatusInput, services: StatusServices) -> EnrichedInput:
    """Fetch git state and session log concurrently and join them with the input."""
    git, session = await asyncio.gather(
        services.git.fetch(data.workdir),
        _load_session(services, data.transcript_path),
        return_exceptions=True,
    )
    if isinstance(git, BaseException):
        logger.debug("git fetch failed for %s: %r", data.workdir, git)
        git = NO_REPOSITORY
    if isinstance(session, BaseException):
        logger.debug("session log load failed for %s: %r", data.transcript_path, session)
        session = SessionLogAggregate.empty()
    return EnrichedInput(data=data, git=git, session=session)


async def _widget_content(spec: WidgetSpec, ctx: EnrichedInput, services: StatusServices) -> str | None:
    try:
        return services.widget_cache.get_or_compute(
            spec.id, ctx, lambda: compute_widget_content(spec.id, ctx)
        )
    except Exception as exc:
        logger.debug("widget %s failed: %r", spec.id, exc)
        return None


async def compute_contents(
    specs: list[WidgetSpec],
    ctx: EnrichedInput,
    services: StatusServices,
) -> list[tuple[WidgetSpec, str | None]]:
    """Contents paired with their widget, in the order of specs regardless of completion order."""
    contents = await asyncio.gather(*(_widget_content(spec, ctx, services) for spec in specs))
    return list(zip(specs, contents))


def build_segments(
    results: list[tuple[WidgetSpec, str | None]],
    palette: Palette,
) -> list[Segment]:
    return [
        Segment(id=spec.id, text=text, colors=palette.colors_for(spec.color_key))
        for spec, text in results
        if text
    ]


async def render_status_line(
    data: StatusInput,
    services: StatusServices,
    *,
    width: int = DEFAULT_WIDTH,
    palette: Palette | None = None,
    widget_configs: Mapping[str, object] | None = None,
) -> str:
    """Render the full status line for one input record."""
    palette = palette or get_palette(DEFAULT_PALETTE_ID)
    ctx = await gather_context(data, services)
    specs = active_widgets(widget_configs)
    results = await compute_contents(specs, ctx, services)
    segments = build_segments(results, palette)
    logger.debug("rendering %d of %d widgets at width %d", len(segments), len(specs), width)
    return render_lines(segments, width, palette.separator)
