"""The JSON record Claude Code pipes to a status line command.

Only the fields the widgets read are lifted into attributes; everything
else rides along untouched in ``raw``.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field


@dataclass(frozen=True)
class StatusInput:
    cwd: str = ""
    transcript_path: str = ""
    session_id: str = ""
    model_id: str = "unknown"
    model_display_name: str = ""
    cost_usd: float | None = None
    duration_ms: float | None = None
    raw: dict = field(default_factory=dict)

    @property
    def workdir(self) -> str:
        return self.cwd or os.getcwd()


def _section(data: dict, key: str) -> dict:
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def _number(*candidates: object) -> float | None:
    for value in candidates:
        if isinstance(value, bool):
            continue
        if isinstance(value, (int, float)):
            return float(value)
    return None


def _text(value: object, default: str = "") -> str:
    return value if isinstance(value, str) and value else default


def from_dict(data: dict) -> StatusInput:
    model = _section(data, "model")
    workspace = _section(data, "workspace")
    cost = _section(data, "cost")
    return StatusInput(
        cwd=_text(data.get("cwd")) or _text(workspace.get("current_dir")),
        transcript_path=_text(data.get("transcript_path")),
        session_id=_text(data.get("session_id")),
        model_id=_text(model.get("id"), "unknown"),
        model_display_name=_text(model.get("display_name")),
        # Older Claude Code builds used api_cost / duration_ms.
        cost_usd=_number(cost.get("total_cost_usd"), cost.get("api_cost")),
        duration_ms=_number(cost.get("total_duration_ms"), cost.get("duration_ms")),
        raw=data,
    )


def parse_input(raw_text: str) -> StatusInput | None:
    """Parse stdin text. None for empty input or anything that is not a JSON object."""
    if not raw_text or not raw_text.strip():
        return None
    try:
        data = json.loads(raw_text)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None
    return from_dict(data)


def demo_input() -> StatusInput:
    """Stand-in record for --demo and for runs without usable stdin."""
    return from_dict(
        {
            "session_id": "demo-session",
            "transcript_path": "",
            "cwd": os.getcwd(),
            "model": {"id": "claude-sonnet-4-5-20250929", "display_name": "Sonnet 4.5"},
            "workspace": {"current_dir": os.getcwd(), "project_dir": os.getcwd()},
            "cost": {"total_cost_usd": 0.0523, "total_duration_ms": 754_000},
        }
    )
