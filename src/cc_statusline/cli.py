"""CLI entry point for cc-statusline.

Claude Code pipes one JSON record to stdin per redraw and prints whatever
we write to stdout as the status line.
"""

import argparse
import asyncio
import logging
import sys

import cc_statusline.io.logging_setup
import cc_statusline.io.settings
import cc_statusline.io.terminal
from cc_statusline.app.renderer import StatusServices, render_status_line
from cc_statusline.app.widgets import WIDGETS, resolve_config
from cc_statusline.colors import PALETTES, get_palette
from cc_statusline.core.input_record import StatusInput, demo_input, parse_input

logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {value!r}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cc-statusline",
        description="Powerline status line for Claude Code (reads the status JSON from stdin)",
    )
    parser.add_argument("--demo", action="store_true", help="Render sample data instead of reading stdin")
    parser.add_argument(
        "--width",
        type=_positive_int,
        default=None,
        help="Terminal width in cells (default: $STATUSLINE_COLS, $COLUMNS, /dev/tty, else 80)",
    )
    parser.add_argument("--list-widgets", action="store_true", help="List widgets and whether they are enabled")
    parser.add_argument("--list-themes", action="store_true", help="List colour themes")
    return parser


def read_input(stream=None) -> StatusInput:
    """Parse the status record from stdin, falling back to demo data."""
    stream = stream if stream is not None else sys.stdin
    if stream is None or stream.isatty():
        return demo_input()
    data = parse_input(stream.read())
    if data is None:
        logger.debug("stdin was empty or not a JSON object; using demo input")
        return demo_input()
    return data


def list_widgets(widget_configs: dict) -> str:
    lines = []
    for spec in WIDGETS:
        cfg = resolve_config(spec, widget_configs)
        mark = "[x]" if cfg.enabled else "[ ]"
        lines.append(f"{mark} {spec.id:<8} {spec.name} - {spec.description}")
    return "\n".join(lines)


def list_themes(current: str | None) -> str:
    active = get_palette(current).id
    return "\n".join(
        f"{'*' if palette.id == active else ' '} {palette.id:<16} {palette.name}"
        for palette in PALETTES.values()
    )


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    cc_statusline.io.logging_setup.configure()

    try:
        theme = cc_statusline.io.settings.load_theme()
        widget_configs = cc_statusline.io.settings.load_widget_configs()
    except cc_statusline.io.settings.SettingsError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.list_widgets:
        print(list_widgets(widget_configs))
        return 0
    if args.list_themes:
        print(list_themes(theme))
        return 0

    data = demo_input() if args.demo else read_input()
    width = args.width or cc_statusline.io.terminal.detect_cols()
    output = asyncio.run(
        render_status_line(
            data,
            StatusServices.create(),
            width=width,
            palette=get_palette(theme),
            widget_configs=widget_configs,
        )
    )
    sys.stdout.write(output + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
