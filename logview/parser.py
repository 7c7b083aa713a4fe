"""Turn one raw log line into a LogEntry using the source's template."""

import logging

from logview.models import DEFAULT_LEVEL, LogEntry
from logview.templates import get_parser, resolve_template

logger = logging.getLogger(__name__)


def parse_line(template, raw_line: str, line_number: int) -> LogEntry:
    """Parse a single line. Never raises.

    Lines no template recognizes come back as info-level entries whose
    message is the whole line, so every input line stays representable.
    """
    parser = get_parser(resolve_template(template))
    try:
        parsed = parser.parse(raw_line)
    except Exception as e:
        logger.debug("Template %s failed on line %d: %s", template, line_number, e)
        return LogEntry(
            timestamp=None,
            level=DEFAULT_LEVEL,
            message=raw_line,
            line_number=line_number,
            raw=raw_line,
        )

    return LogEntry(
        timestamp=parsed.timestamp,
        level=parsed.level,
        message=parsed.message,
        line_number=line_number,
        raw=raw_line,
    )
