"""Settings file reader for cc-statusline.

Reads a JSON settings file at XDG_CONFIG_HOME/cc-statusline/settings.json.
Top-level keys:
    theme    palette id (see cc_statusline.colors.PALETTES)
    widgets  {widget_id: {"enabled": bool, "order": int}}

The file is edited by hand; nothing here writes it. A missing file means
"all defaults". A file that exists but cannot be parsed is a SettingsError:
silently ignoring it would hide the user's configuration.
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class SettingsError(Exception):
    """The settings file exists but is not a readable JSON object."""


def get_config_path() -> Path:
    """Return path to settings file.

    Uses XDG_CONFIG_HOME (default ~/.config) / cc-statusline / settings.json.
    """
    config_home = os.environ.get("XDG_CONFIG_HOME") or os.path.expanduser("~/.config")
    return Path(config_home) / "cc-statusline" / "settings.json"


def load_settings(path: Optional[Path] = None) -> dict:
    """Load settings from JSON file. Returns empty dict when the file is absent."""
    path = path or get_config_path()
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.debug("no settings file at %s; using defaults", path)
        return {}
    except OSError as exc:
        raise SettingsError(f"cannot read {path}: {exc}") from exc

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SettingsError(f"invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise SettingsError(f"{path} must contain a JSON object, got {type(data).__name__}")
    return data


def load_setting(key: str, default=None, path: Optional[Path] = None):
    """Load a single setting by key. Returns default if absent."""
    return load_settings(path).get(key, default)


def load_theme(path: Optional[Path] = None) -> Optional[str]:
    """Load saved palette id, or None if unset."""
    theme = load_setting("theme", path=path)
    return theme if isinstance(theme, str) and theme else None


def load_widget_configs(path: Optional[Path] = None) -> dict[str, dict]:
    """Per-widget overrides keyed by widget id. Non-object entries are ignored."""
    widgets = load_setting("widgets", {}, path)
    if not isinstance(widgets, dict):
        raise SettingsError(f"'widgets' must be a JSON object, got {type(widgets).__name__}")
    return {wid: cfg for wid, cfg in widgets.items() if isinstance(cfg, dict)}
