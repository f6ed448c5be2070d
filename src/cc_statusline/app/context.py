"""Input record joined with the data fetched for one render."""

from __future__ import annotations

from dataclasses import dataclass, field

from cc_statusline.app.session_log import SessionLogAggregate
from cc_statusline.app.vcs import NO_REPOSITORY, GitState
from cc_statusline.core.input_record import StatusInput

DEFAULT_CONTEXT_WINDOW = 200_000


@dataclass(frozen=True)
class EnrichedInput:
    data: StatusInput
    git: GitState = NO_REPOSITORY
    session: SessionLogAggregate = field(default_factory=SessionLogAggregate.empty)

    @property
    def context_window(self) -> int:
        """Context window size reported by Claude Code, else the 200k default."""
        window = self.data.raw.get("context_window")
        if isinstance(window, dict):
            size = window.get("context_window_size")
            if isinstance(size, int) and not isinstance(size, bool) and size > 0:
                return size
        return DEFAULT_CONTEXT_WINDOW
