"""Memoized widget content keyed by the data each widget actually reads.

The key is ``<widget id>:<first 8 hex of sha256(relevant fields)>``, so a
change to a field a widget ignores leaves its cached content in place.
Widgets that share a data source (git/files) hash the same slice. The
memory widget hashes the current time and therefore never hits.

// [LAW:one-source-of-truth] Which fields each widget depends on is declared only in _relevant_fields().
"""

from __future__ import annotations

import dataclasses
import hashlib
import json
import time
from collections.abc import Callable

from cc_statusline.app.context import EnrichedInput
from cc_statusline.core.ttl_cache import MISSING, TTLCache, _Missing

WIDGET_CACHE_TTL_S = 1.0
WIDGET_CACHE_MAX_SIZE = 50
HASH_LENGTH = 8


def _relevant_fields(widget_id: str, ctx: EnrichedInput) -> object:
    data = ctx.data
    if widget_id == "model":
        return {"id": data.model_id, "name": data.model_display_name}
    if widget_id in ("git", "files"):
        return {"cwd": data.workdir, "git": dataclasses.asdict(ctx.git)}
    if widget_id in ("tokens", "todo"):
        return {"transcript": data.transcript_path, "session": dataclasses.asdict(ctx.session)}
    if widget_id == "context":
        return {
            "transcript": data.transcript_path,
            "session": dataclasses.asdict(ctx.session),
            "model": data.model_id,
            "window": ctx.context_window,
        }
    if widget_id == "cwd":
        return data.workdir
    if widget_id == "cost":
        return {"cost": data.cost_usd}
    if widget_id == "session":
        return {"duration": data.duration_ms}
    if widget_id == "memory":
        # Process counters move constantly; a fresh stamp forces a miss every call.
        return time.time_ns()
    return {"raw": data.raw, "git": dataclasses.asdict(ctx.git), "session": dataclasses.asdict(ctx.session)}


def content_hash(widget_id: str, ctx: EnrichedInput) -> str:
    payload = json.dumps(_relevant_fields(widget_id, ctx), sort_keys=True, default=str)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:HASH_LENGTH]


def widget_cache_key(widget_id: str, ctx: EnrichedInput) -> str:
    return f"{widget_id}:{content_hash(widget_id, ctx)}"


class WidgetContentCache:
    """Short-lived cache of rendered widget strings (None is a cacheable result)."""

    def __init__(self, cache: TTLCache[str | None] | None = None) -> None:
        self._cache = cache if cache is not None else TTLCache(ttl=WIDGET_CACHE_TTL_S, max_size=WIDGET_CACHE_MAX_SIZE)

    @property
    def size(self) -> int:
        return self._cache.size

    def get(self, key: str) -> str | None | _Missing:
        return self._cache.get(key)

    def set(self, key: str, content: str | None) -> None:
        self._cache.set(key, content)

    def get_or_compute(
        self,
        widget_id: str,
        ctx: EnrichedInput,
        compute: Callable[[], str | None],
    ) -> str | None:
        key = widget_cache_key(widget_id, ctx)
        cached = self._cache.get(key)
        if cached is not MISSING:
            return cached
        content = compute()
        self._cache.set(key, content)
        return content

    def invalidate(self, widget_id: str | None = None) -> None:
        """Drop one widget's entries, or everything when no id is given."""
        if widget_id is None:
            self._cache.invalidate()
            return
        prefix = f"{widget_id}:"
        for key in self._cache.keys():
            if key.startswith(prefix):
                self._cache.invalidate(key)
