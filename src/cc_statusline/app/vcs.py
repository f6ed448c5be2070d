"""Git working-tree state for the status line.

Four git commands run concurrently per fetch: current branch, porcelain
status, unstaged numstat, staged numstat. An empty branch means "not a
repository" and short-circuits to the zeroed state. Fetches are coalesced
per working directory and the result is cached for a few seconds.

// [LAW:one-source-of-truth] Numstat parsing lives only in parse_numstat().
"""

from __future__ import annotations

import logging
import os
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass

from cc_statusline.core.single_flight import SingleFlight
from cc_statusline.core.ttl_cache import MISSING, TTLCache
from cc_statusline.io.commands import DEFAULT_TIMEOUT_S, batch_execute

logger = logging.getLogger(__name__)

GIT_CACHE_TTL_S = 5.0
GIT_CACHE_MAX_SIZE = 5

BRANCH_CMD = ("git", "branch", "--show-current")
STATUS_CMD = ("git", "status", "--porcelain")
UNSTAGED_NUMSTAT_CMD = ("git", "diff", "--numstat")
STAGED_NUMSTAT_CMD = ("git", "diff", "--cached", "--numstat")
GIT_COMMANDS = (BRANCH_CMD, STATUS_CMD, UNSTAGED_NUMSTAT_CMD, STAGED_NUMSTAT_CMD)

BatchRunner = Callable[..., Awaitable[list[str]]]


@dataclass(frozen=True)
class GitState:
    branch: str | None = None
    dirty: bool = False
    lines_added: int = 0
    lines_removed: int = 0
    files_changed: int = 0

    @property
    def is_repository(self) -> bool:
        return self.branch is not None


NO_REPOSITORY = GitState()


@dataclass(frozen=True)
class NumstatTotals:
    added: int = 0
    removed: int = 0
    files: int = 0


def _as_int(field: str) -> int | None:
    try:
        return int(field.strip())
    except ValueError:
        return None


def parse_numstat(output: str) -> NumstatTotals:
    """Sum ``added\\tremoved\\tpath`` lines.

    Any line with at least three tab-separated fields counts as one file.
    Non-numeric counts (``-`` for binary files) add nothing to the line totals.
    """
    if not output:
        return NumstatTotals()

    added = removed = files = 0
    for line in output.splitlines():
        parts = line.split("\t")
        if len(parts) < 3:
            continue
        a = _as_int(parts[0])
        r = _as_int(parts[1])
        if a is not None:
            added += a
        if r is not None:
            removed += r
        files += 1
    return NumstatTotals(added=added, removed=removed, files=files)


def build_git_state(branch: str, status: str, unstaged: str, staged: str) -> GitState:
    """Combine raw command outputs into a GitState."""
    if not branch:
        return NO_REPOSITORY

    dirty = any(line.strip() for line in status.splitlines())
    u = parse_numstat(unstaged)
    s = parse_numstat(staged)
    return GitState(
        branch=branch,
        dirty=dirty,
        lines_added=u.added + s.added,
        lines_removed=u.removed + s.removed,
        files_changed=u.files + s.files,
    )


class GitStateFetcher:
    """Cached, coalesced git state lookups keyed by working directory."""

    def __init__(
        self,
        *,
        cache: TTLCache[GitState] | None = None,
        single_flight: SingleFlight[GitState] | None = None,
        runner: BatchRunner = batch_execute,
        timeout: float = DEFAULT_TIMEOUT_S,
        commands: Sequence[Sequence[str]] = GIT_COMMANDS,
    ) -> None:
        self._cache = cache if cache is not None else TTLCache(ttl=GIT_CACHE_TTL_S, max_size=GIT_CACHE_MAX_SIZE)
        self._single_flight = single_flight if single_flight is not None else SingleFlight()
        self._runner = runner
        self._timeout = timeout
        self._commands = tuple(commands)

    @property
    def cache(self) -> TTLCache[GitState]:
        return self._cache

    async def _fetch_uncached(self, workdir: str) -> GitState:
        branch, status, unstaged, staged = await self._runner(
            self._commands, cwd=workdir, timeout=self._timeout
        )
        state = build_git_state(branch, status, unstaged, staged)
        logger.debug("git state for %s: %s", workdir, state)
        return state

    async def fetch(self, cwd: str | None = None) -> GitState:
        workdir = cwd or os.getcwd()

        cached = self._cache.get(workdir)
        if cached is not MISSING:
            return cached

        state = await self._single_flight.execute(workdir, lambda: self._fetch_uncached(workdir))
        self._cache.set(workdir, state)
        return state

    async def is_repository(self, cwd: str | None = None) -> bool:
        state = await self.fetch(cwd)
        return state.is_repository

    def clear(self) -> None:
        self._cache.clear()
