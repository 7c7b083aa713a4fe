"""New-line detection for polling-based tailing.

The caller keeps the cursor (the non-empty line count it has already seen)
and passes it back on every poll; nothing is remembered here between calls.
"""

import logging

from logview.filters import LogQuery, build_filter_chain
from logview.models import LogEntry, TailResult
from logview.parser import parse_line
from logview.reader import load_lines

logger = logging.getLogger(__name__)


def tail_diff(
    path: str,
    template="default",
    last_line_number: int = 0,
    fetch_entries: bool = False,
    query: LogQuery | None = None,
) -> TailResult:
    """Count the non-empty lines added since last_line_number.

    With fetch_entries, also parse and return those lines oldest first,
    keeping only entries that pass query. The count ignores the query.
    Feed the returned total_lines back in as the next last_line_number.
    """
    lines = load_lines(path)
    if lines is None:
        return TailResult()

    last_line_number = max(last_line_number, 0)
    total = sum(1 for line in lines if line.strip())
    new_count = max(0, total - last_line_number)

    if not fetch_entries or new_count == 0:
        return TailResult(new_count=new_count, total_lines=total)

    matches = build_filter_chain(query)
    entries: list[LogEntry] = []
    position = 0
    for i, line in enumerate(lines):
        if not line.strip():
            continue
        position += 1
        if position <= last_line_number:
            continue
        entry = parse_line(template, line, i + 1)
        if matches(entry):
            entries.append(entry)

    logger.debug("%s: %d new line(s) after %d", path, new_count, last_line_number)
    return TailResult(new_count=new_count, total_lines=total, entries=entries)
