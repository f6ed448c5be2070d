"""Widget catalogue and per-widget content computation.

A widget turns some slice of an EnrichedInput into a short string, or None
when it has nothing to show (no repository, no tasks, ...). None drops the
segment from the status line.

// [LAW:one-source-of-truth] Widget ids, defaults and colour keys are declared only in WIDGETS.
// [LAW:one-type-per-behavior] One WidgetSpec type models every widget.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass

from cc_statusline.app import memory_stats
from cc_statusline.app.context import EnrichedInput
from cc_statusline.core.formatting import (
    format_cost,
    format_duration,
    format_percent,
    format_tokens,
    progress_bar,
    round_half_up,
    shorten_model_name,
    shorten_path,
)
from cc_statusline.core.layout import paint

logger = logging.getLogger(__name__)

CWD_MAX_LENGTH = 20
CONTEXT_BAR_WIDTH = 8
DIRTY_MARK = "●"


@dataclass(frozen=True)
class WidgetSpec:
    id: str
    name: str
    description: str
    default_enabled: bool
    default_order: int
    color_key: str


@dataclass(frozen=True)
class WidgetConfig:
    enabled: bool
    order: int


WIDGETS: tuple[WidgetSpec, ...] = (
    WidgetSpec("model", "Model", "Displays the current Claude model name", True, 0, "model"),
    WidgetSpec("git", "Git Branch", "Displays the current Git branch and line changes", True, 1, "git"),
    WidgetSpec("tokens", "Tokens", "Displays total tokens consumed this session", True, 2, "tokens"),
    WidgetSpec("cost", "Cost", "Displays the API cost for this session", True, 3, "cost"),
    WidgetSpec("session", "Session", "Displays the session duration", True, 4, "session"),
    WidgetSpec("cwd", "Directory", "Displays the current working directory", True, 5, "cwd"),
    WidgetSpec("context", "Context Window", "Displays context window usage percentage", True, 6, "context"),
    WidgetSpec("todo", "Todo", "Displays todo list progress", False, 7, "todo"),
    WidgetSpec("memory", "Memory", "Displays status line process memory usage", False, 8, "memory"),
    WidgetSpec("files", "Files", "Displays the number of changed files", False, 9, "files"),
)

WIDGETS_BY_ID: dict[str, WidgetSpec] = {spec.id: spec for spec in WIDGETS}


def _coerce_config(spec: WidgetSpec, raw: object) -> WidgetConfig:
    if isinstance(raw, WidgetConfig):
        return raw
    if not isinstance(raw, Mapping):
        return WidgetConfig(enabled=spec.default_enabled, order=spec.default_order)
    enabled = raw.get("enabled", spec.default_enabled)
    order = raw.get("order", spec.default_order)
    return WidgetConfig(
        enabled=bool(enabled),
        order=order if isinstance(order, int) and not isinstance(order, bool) else spec.default_order,
    )


def resolve_config(spec: WidgetSpec, widget_configs: Mapping[str, object] | None) -> WidgetConfig:
    raw = (widget_configs or {}).get(spec.id)
    return _coerce_config(spec, raw)


def active_widgets(
    widget_configs: Mapping[str, object] | None = None,
    specs: Sequence[WidgetSpec] = WIDGETS,
) -> list[WidgetSpec]:
    """Enabled widgets in display order (configured order, then id)."""
    resolved = [(spec, resolve_config(spec, widget_configs)) for spec in specs]
    enabled = [(spec, cfg) for spec, cfg in resolved if cfg.enabled]
    enabled.sort(key=lambda pair: (pair[1].order, pair[0].id))
    return [spec for spec, _cfg in enabled]


# ─── Content ─────────────────────────────────────────────────────────────────


def _model(ctx: EnrichedInput) -> str | None:
    # Display name wins; the id is only a fallback.
    return shorten_model_name(ctx.data.model_display_name or ctx.data.model_id)


def _git(ctx: EnrichedInput) -> str | None:
    git = ctx.git
    if not git.is_repository:
        return None
    branch = git.branch + (f" {DIRTY_MARK}" if git.dirty else "")
    return (
        paint(branch, fg="#37474f", bg="#ffffff")
        + paint(" ", bg="#ffffff")
        + paint(f"+{git.lines_added}", fg="#2e7d32", bg="#ffffff", bold=True)
        + paint(" ", bg="#ffffff")
        + paint(f"-{git.lines_removed}", fg="#c62828", bg="#ffffff", bold=True)
    )


def _tokens(ctx: EnrichedInput) -> str | None:
    return f"{format_tokens(ctx.session.token_usage.total_consumed)} tok"


def _cost(ctx: EnrichedInput) -> str | None:
    return format_cost(ctx.data.cost_usd or 0.0)


def _session(ctx: EnrichedInput) -> str | None:
    return format_duration(ctx.data.duration_ms or 0)


def _cwd(ctx: EnrichedInput) -> str | None:
    return shorten_path(ctx.data.workdir, CWD_MAX_LENGTH)


def _context(ctx: EnrichedInput) -> str | None:
    used = ctx.session.token_usage.context_size
    pct = min(used / ctx.context_window * 100, 100.0)
    return f"CTX {progress_bar(pct, CONTEXT_BAR_WIDTH)} {format_percent(pct)}"


def _todo(ctx: EnrichedInput) -> str | None:
    progress = ctx.session.task_progress
    if progress.total == 0:
        return None
    return f"TODO {progress.completed}/{progress.total} [{progress.percent}%]"


def _memory(ctx: EnrichedInput) -> str | None:
    rss = memory_stats.capture_snapshot()["rss_bytes"]
    return f"{round_half_up(rss / memory_stats.MIB)} MB"


def _files(ctx: EnrichedInput) -> str | None:
    if not ctx.git.is_repository or ctx.git.files_changed == 0:
        return None
    return f"{ctx.git.files_changed} files"


CONTENT_FUNCTIONS: dict[str, Callable[[EnrichedInput], str | None]] = {
    "model": _model,
    "git": _git,
    "tokens": _tokens,
    "cost": _cost,
    "session": _session,
    "cwd": _cwd,
    "context": _context,
    "todo": _todo,
    "memory": _memory,
    "files": _files,
}


def compute_widget_content(widget_id: str, ctx: EnrichedInput) -> str | None:
    """Content for one widget. Unknown ids yield None; errors propagate to the caller."""
    fn = CONTENT_FUNCTIONS.get(widget_id)
    if fn is None:
        logger.debug("no content function for widget %r", widget_id)
        return None
    return fn(ctx)
