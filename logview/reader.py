"""Windowed log file reading: forward pages, backward (newest-first) pages, tail.

Every call reads the whole file fresh and keeps no state between calls.
Line numbers are 1-based positions among all lines of the file; blank lines
take a number but are never returned.
"""

import bisect
import logging
import os

from logview.filters import LogQuery, build_filter_chain
from logview.models import LogEntry, ReadWindow
from logview.parser import parse_line

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 500
DEFAULT_TAIL_LINES = 100
LOG_FILE_SUFFIXES = (".log", ".out", ".err")


def load_lines(path: str) -> list[str] | None:
    """Read a file into a list of lines. Returns None if it can't be read.

    A missing file is routine (the process hasn't logged yet); any other
    failure is logged as an error. Undecodable bytes are replaced.
    """
    if not os.path.exists(path):
        logger.debug("Log file %s does not exist", path)
        return None
    try:
        with open(path, "r", encoding="utf-8", errors="replace", newline="") as f:
            content = f.read()
    except OSError as e:
        logger.error("Failed to read %s: %s", path, e)
        return None
    return [line[:-1] if line.endswith("\r") else line for line in content.split("\n")]


def index_lines(lines: list[str]) -> list[tuple[int, str]]:
    """Return (line_number, text) for every non-empty line."""
    return [(i + 1, line) for i, line in enumerate(lines) if line.strip()]


def read_forward(
    path: str,
    start_line: int = 0,
    max_lines: int = DEFAULT_PAGE_SIZE,
    query: LogQuery | None = None,
    template="default",
) -> ReadWindow:
    """Read up to max_lines matching entries starting at 0-based line index start_line.

    To continue, pass the newest_line_loaded of the previous window as the
    next start_line.
    """
    lines = load_lines(path)
    if lines is None:
        return ReadWindow()

    total = sum(1 for line in lines if line.strip())
    matches = build_filter_chain(query)
    entries: list[LogEntry] = []
    last_scanned = max(start_line, 0) - 1

    for i in range(max(start_line, 0), len(lines)):
        if len(entries) >= max_lines:
            break
        line = lines[i]
        last_scanned = i
        if not line.strip():
            continue
        entry = parse_line(template, line, i + 1)
        if matches(entry):
            entries.append(entry)

    has_more = any(line.strip() for line in lines[last_scanned + 1:])

    return ReadWindow(
        entries=entries,
        total_lines=total,
        has_more=has_more,
        oldest_line_loaded=entries[0].line_number if entries else 0,
        newest_line_loaded=entries[-1].line_number if entries else 0,
    )


def read_backward(
    path: str,
    limit: int = DEFAULT_PAGE_SIZE,
    before_line: int | None = None,
    query: LogQuery | None = None,
    template="default",
) -> ReadWindow:
    """Read up to limit matching entries walking back from the end of the file.

    With before_line, only lines numbered strictly below it are considered;
    pass the previous window's oldest_line_loaded to load the next older page.
    The returned entries are in chronological order.
    """
    lines = load_lines(path)
    if lines is None:
        return ReadWindow()

    indexed = index_lines(lines)
    if not indexed:
        return ReadWindow()

    if before_line is None:
        end = len(indexed)
    else:
        end = bisect.bisect_left([number for number, _ in indexed], before_line)

    matches = build_filter_chain(query)
    collected: list[LogEntry] = []
    for number, line in reversed(indexed[:end]):
        if len(collected) >= limit:
            break
        entry = parse_line(template, line, number)
        if matches(entry):
            collected.append(entry)

    if not collected:
        return ReadWindow(total_lines=len(indexed))

    # collected runs newest -> oldest
    newest = collected[0].line_number
    oldest = collected[-1].line_number
    collected.reverse()

    return ReadWindow(
        entries=collected,
        total_lines=len(indexed),
        has_more=oldest != indexed[0][0],
        oldest_line_loaded=oldest,
        newest_line_loaded=newest,
    )


def tail_lines(path: str, lines: int = DEFAULT_TAIL_LINES, template="default") -> list[LogEntry]:
    """Return the last N non-empty lines of a file as entries, oldest first."""
    content = load_lines(path)
    if content is None or lines <= 0:
        return []
    indexed = index_lines(content)
    return [parse_line(template, line, number) for number, line in indexed[-lines:]]


def list_log_files(path: str) -> list[str]:
    """List log files under a directory, or the path itself if it is a file."""
    if os.path.isfile(path):
        return [path]
    if not os.path.isdir(path):
        return []
    try:
        names = sorted(os.listdir(path))
    except OSError as e:
        logger.error("Failed to list %s: %s", path, e)
        return []
    return [
        os.path.join(path, name)
        for name in names
        if name.endswith(LOG_FILE_SUFFIXES) and os.path.isfile(os.path.join(path, name))
    ]
