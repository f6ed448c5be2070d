"""Pytest configuration and shared fixtures for cc-statusline tests."""

import json
import shutil

import pytest

from cc_statusline.app.context import EnrichedInput
from cc_statusline.core.input_record import from_dict
from cc_statusline.io import logging_setup, settings


# ---------------------------------------------------------------------------
# Time
# ---------------------------------------------------------------------------

class FakeClock:
    """Manually advanced monotonic clock for TTL tests."""

    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Point config and log locations at tmp_path and clear width overrides."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("CC_STATUSLINE_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.delenv("CC_STATUSLINE_LOG_FILE", raising=False)
    monkeypatch.delenv("CC_STATUSLINE_LOG_LEVEL", raising=False)
    monkeypatch.delenv("STATUSLINE_COLS", raising=False)
    monkeypatch.delenv("COLUMNS", raising=False)


# ---------------------------------------------------------------------------
# Data builders
# ---------------------------------------------------------------------------

def assistant_line(input_tokens=0, output_tokens=0, cache_creation=0, cache_read=0):
    return json.dumps(
        {
            "type": "assistant",
            "message": {
                "usage": {
                    "input_tokens": input_tokens,
                    "output_tokens": output_tokens,
                    "cache_creation_input_tokens": cache_creation,
                    "cache_read_input_tokens": cache_read,
                }
            },
        }
    )


def todo_line(statuses):
    todos = [{"content": f"task {i}", "status": s} for i, s in enumerate(statuses)]
    return json.dumps(
        {
            "type": "assistant",
            "message": {
                "content": [
                    {"type": "tool_use", "name": "TodoWrite", "input": {"todos": todos}},
                ]
            },
        }
    )


@pytest.fixture
def write_log(tmp_path):
    """Write JSONL lines to a transcript file and return its path as str."""

    def _write(lines, name="session.jsonl"):
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture
def make_input(tmp_path):
    """StatusInput factory with a cwd inside tmp_path."""

    def _make(**overrides):
        data = {
            "session_id": "s-1",
            "cwd": str(tmp_path),
            "transcript_path": "",
            "model": {"id": "claude-sonnet-4-5-20250929"},
            "cost": {"total_cost_usd": 1.5, "total_duration_ms": 330_000},
        }
        data.update(overrides)
        return from_dict(data)

    return _make


@pytest.fixture
def make_ctx(make_input):
    def _make(git=None, session=None, **overrides):
        kwargs = {"data": make_input(**overrides)}
        if git is not None:
            kwargs["git"] = git
        if session is not None:
            kwargs["session"] = session
        return EnrichedInput(**kwargs)

    return _make


requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logging_setup.reset()


@pytest.fixture
def write_settings():
    """Write a settings JSON document where the settings reader looks for it."""

    def _write(data, path=None):
        path = path or settings.get_config_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        text = data if isinstance(data, str) else json.dumps(data)
        path.write_text(text, encoding="utf-8")
        return path

    return _write
