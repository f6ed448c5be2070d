"""Token usage and task-list aggregates from a Claude Code session transcript.

The transcript is append-only JSONL. One full scan yields both aggregates:

- token usage: the most recent assistant ``message.usage`` record gives the
  current context size; input + output + cache-creation tokens (never
  cache-read) accumulate into ``total_consumed`` across the whole file.
- task progress: the last TodoWrite invocation's ``todos`` list replaces any
  earlier one outright, then statuses are tallied.

Malformed lines are skipped. Results are cached per path for two seconds and
re-scanned early when the file's mtime moves past the cached stamp.

// [LAW:one-source-of-truth] Transcript record interpretation lives only in this module.
// [LAW:dataflow-not-control-flow] A missing transcript is None at the scan layer and
// the zero aggregate at the cache layer; neither raises.
"""

from __future__ import annotations

import json
import logging
import math
import os
from collections.abc import Iterable
from dataclasses import dataclass, field

from cc_statusline.core.formatting import round_half_up
from cc_statusline.core.ttl_cache import MISSING, TTLCache

logger = logging.getLogger(__name__)

SESSION_LOG_TTL_S = 2.0
SESSION_LOG_MAX_SIZE = 10

TASK_LIST_TOOL = "TodoWrite"


@dataclass(frozen=True)
class TokenUsage:
    input: int = 0
    output: int = 0
    cache_creation: int = 0
    cache_read: int = 0
    context_size: int = 0
    total_consumed: int = 0


@dataclass(frozen=True)
class TaskProgress:
    completed: int = 0
    in_progress: int = 0
    pending: int = 0
    total: int = 0

    @property
    def percent(self) -> int:
        if self.total == 0:
            return 0
        return round_half_up(self.completed / self.total * 100)


@dataclass(frozen=True)
class SessionLogAggregate:
    token_usage: TokenUsage = field(default_factory=TokenUsage)
    task_progress: TaskProgress = field(default_factory=TaskProgress)

    @classmethod
    def empty(cls) -> "SessionLogAggregate":
        return cls()


def _count(value: object) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return int(value)
    return 0


def _reject_constant(name: str) -> float:
    raise ValueError(f"non-standard JSON constant {name}")


def _usage_of(record: dict) -> dict | None:
    """Usage sub-record of an assistant turn, if present."""
    if record.get("type") != "assistant":
        return None
    message = record.get("message")
    if not isinstance(message, dict):
        return None
    usage = message.get("usage")
    return usage if isinstance(usage, dict) else None


def _todos_from_input(tool_input: object) -> list | None:
    if not isinstance(tool_input, dict):
        return None
    todos = tool_input.get("todos")
    return todos if isinstance(todos, list) else None


def _task_lists_of(record: dict) -> Iterable[list]:
    """Every TodoWrite payload in a record, in order.

    Two shapes occur: a flat ``{"tool_name", "tool_input"}`` record, and
    ``tool_use`` blocks nested in an assistant message's content.
    """
    if record.get("tool_name") == TASK_LIST_TOOL:
        todos = _todos_from_input(record.get("tool_input"))
        if todos is not None:
            yield todos

    message = record.get("message")
    content = message.get("content") if isinstance(message, dict) else None
    if not isinstance(content, list):
        return
    for block in content:
        if (
            isinstance(block, dict)
            and block.get("type") == "tool_use"
            and block.get("name") == TASK_LIST_TOOL
        ):
            todos = _todos_from_input(block.get("input"))
            if todos is not None:
                yield todos


def _tally(todos: list) -> TaskProgress:
    statuses = [t.get("status") for t in todos if isinstance(t, dict)]
    return TaskProgress(
        completed=statuses.count("completed"),
        in_progress=statuses.count("in_progress"),
        pending=statuses.count("pending"),
        total=len(todos),
    )


def aggregate_lines(lines: Iterable[str]) -> SessionLogAggregate:
    """Fold transcript lines into a SessionLogAggregate. Bad lines are skipped."""
    last_usage: dict | None = None
    total_consumed = 0
    output_tokens = 0
    todos: list = []
    skipped = 0

    for line in lines:
        if not line.strip():
            continue
        try:
            record = json.loads(line, parse_constant=_reject_constant)
        except (ValueError, RecursionError):
            # JSONDecodeError is a ValueError; NaN/Infinity and runaway nesting land here too.
            skipped += 1
            continue
        if not isinstance(record, dict):
            continue

        usage = _usage_of(record)
        if usage is not None:
            last_usage = usage
            total_consumed += (
                _count(usage.get("input_tokens"))
                + _count(usage.get("output_tokens"))
                + _count(usage.get("cache_creation_input_tokens"))
            )
            output_tokens += _count(usage.get("output_tokens"))

        for task_list in _task_lists_of(record):
            todos = task_list

    if skipped:
        logger.debug("skipped %d malformed transcript lines", skipped)

    last = last_usage or {}
    input_tokens = _count(last.get("input_tokens"))
    cache_creation = _count(last.get("cache_creation_input_tokens"))
    cache_read = _count(last.get("cache_read_input_tokens"))
    return SessionLogAggregate(
        token_usage=TokenUsage(
            input=input_tokens,
            output=output_tokens,
            cache_creation=cache_creation,
            cache_read=cache_read,
            context_size=input_tokens + cache_creation + cache_read,
            total_consumed=total_consumed,
        ),
        task_progress=_tally(todos),
    )


def scan_session_log(path: str) -> SessionLogAggregate | None:
    """Scan the whole transcript. None when the file cannot be read."""
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            return aggregate_lines(f)
    except OSError as exc:
        logger.debug("transcript unreadable %s: %s", path, exc)
        return None


class SessionLogCache:
    """Per-path transcript aggregates with TTL and mtime invalidation."""

    def __init__(self, cache: TTLCache[SessionLogAggregate] | None = None) -> None:
        self._cache = cache if cache is not None else TTLCache(ttl=SESSION_LOG_TTL_S, max_size=SESSION_LOG_MAX_SIZE)

    @property
    def size(self) -> int:
        return self._cache.size

    def load(self, path: str | None) -> SessionLogAggregate | None:
        """Cached aggregate for path; None when there is no readable transcript."""
        if not path:
            return None
        try:
            mtime = os.stat(path).st_mtime_ns
        except OSError:
            return None

        if self._cache.is_valid(path, mtime):
            cached = self._cache.get(path)
            if cached is not MISSING:
                return cached

        aggregate = scan_session_log(path)
        if aggregate is None:
            return None
        self._cache.set(path, aggregate, mtime)
        return aggregate

    def fetch(self, path: str | None) -> SessionLogAggregate:
        aggregate = self.load(path)
        return aggregate if aggregate is not None else SessionLogAggregate.empty()

    def clear(self) -> None:
        self._cache.clear()
