"""Render LogEntry objects for the terminal.

Text mode echoes the original line, optionally prefixed by its file line
number. JSON mode writes one wire-shape object per line (jq friendly).
Color mode shows the parsed fields with the level highlighted.
"""

import json
from typing import Callable

from logview.models import LogEntry

LEVEL_COLORS = {
    "debug": "\033[36m",
    "info": "\033[32m",
    "warning": "\033[33m",
    "error": "\033[31m",
}
RESET = "\033[0m"
NO_TIMESTAMP = "-"


def format_text(entry: LogEntry) -> str:
    return entry.raw


def format_numbered(entry: LogEntry) -> str:
    """The raw line behind a right-aligned line number, like `cat -n`."""
    return f"{entry.line_number:>6}  {entry.raw}"


def format_json(entry: LogEntry) -> str:
    return json.dumps(entry.to_dict(), ensure_ascii=False)


def format_color(entry: LogEntry) -> str:
    fields = entry.to_dict()
    label = f"{LEVEL_COLORS.get(entry.level, '')}{entry.level.upper():<7}{RESET}"
    return f"{fields['lineNumber']:>6} {fields['timestamp'] or NO_TIMESTAMP} {label} {fields['message']}"


def get_formatter(
    output_format: str = "text", color: bool = False, line_numbers: bool = False
) -> Callable[[LogEntry], str]:
    """Pick the renderer for the CLI flags. JSON ignores color and line numbers."""
    if output_format == "json":
        return format_json
    if color:
        return format_color
    if line_numbers:
        return format_numbered
    return format_text
