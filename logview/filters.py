"""Filter predicates for log entries: level, search, date range."""

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Callable

from logview.models import LogEntry

logger = logging.getLogger(__name__)

ALL_LEVELS = "all"

_ISO_RE = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})[T ](\d{2}):(\d{2}):(\d{2})"
    r"(?:[.,](\d+))?"
    r"\s*(?:Z|[+-]\d{2}:?\d{2})?$"
)

_SYSLOG_RE = re.compile(r"^([A-Za-z]{3})\s+(\d{1,2})\s+(\d{2}:\d{2}:\d{2})$")


@dataclass(frozen=True)
class LogQuery:
    search: str | None = None
    level: str = ALL_LEVELS
    start_date: str | date | None = None
    end_date: str | date | None = None


def parse_timestamp(text: str) -> datetime | None:
    """Parse any timestamp shape the templates extract into a naive datetime.

    Zone designators are dropped rather than converted, so comparisons run
    on the wall-clock time written in the log. Syslog stamps carry no year;
    the current year is assumed. Returns None for anything else.
    """
    text = text.strip()
    m = _ISO_RE.match(text)
    if m:
        year, month, day, hour, minute, second, fraction = m.groups()
        micros = int((fraction or "0")[:6].ljust(6, "0"))
        try:
            return datetime(
                int(year), int(month), int(day),
                int(hour), int(minute), int(second), micros,
            )
        except ValueError:
            return None

    m = _SYSLOG_RE.match(text)
    if m:
        month, day, clock = m.groups()
        year = datetime.now().year
        try:
            return datetime.strptime(f"{year} {month} {day} {clock}", "%Y %b %d %H:%M:%S")
        except ValueError:
            return None

    return None


def _to_bound(value, end: bool) -> datetime | None:
    """Turn a date-range bound into an inclusive datetime.

    Date-only values cover the whole calendar day: a start bound begins at
    00:00:00, an end bound runs through 23:59:59.999999.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime.combine(value, time.max if end else time.min)

    text = str(value).strip()
    try:
        day = datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError:
        parsed = parse_timestamp(text)
        if parsed is None:
            logger.warning("Ignoring unparseable date bound %r", value)
        return parsed
    return datetime.combine(day, time.max if end else time.min)


def filter_by_level(entry: LogEntry, level: str) -> bool:
    """True if the entry has exactly this level, or level is 'all'."""
    level = level.lower()
    return level == ALL_LEVELS or entry.level == level


def filter_by_search(entry: LogEntry, keyword: str) -> bool:
    """True if keyword appears anywhere in the raw line (case-insensitive)."""
    return keyword.lower() in entry.raw.lower()


def filter_by_date_range(entry: LogEntry, start: datetime | None, end: datetime | None) -> bool:
    """True if the entry's timestamp falls within [start, end].

    Entries without a timestamp, or whose timestamp does not parse, always
    pass.
    """
    if entry.timestamp is None:
        return True
    moment = parse_timestamp(entry.timestamp)
    if moment is None:
        return True
    if start is not None and moment < start:
        return False
    if end is not None and moment > end:
        return False
    return True


def build_filter_chain(query: LogQuery | None) -> Callable[[LogEntry], bool]:
    """Combine the active filters of a query into a single callable.

    Returns a function that ANDs all active predicates together.
    """
    if query is None:
        return lambda entry: True

    predicates = []

    if query.level and query.level.lower() != ALL_LEVELS:
        level = query.level
        predicates.append(lambda entry, l=level: filter_by_level(entry, l))

    if query.search:
        keyword = query.search
        predicates.append(lambda entry, k=keyword: filter_by_search(entry, k))

    start = _to_bound(query.start_date, end=False)
    end = _to_bound(query.end_date, end=True)
    if start is not None or end is not None:
        predicates.append(lambda entry, s=start, e=end: filter_by_date_range(entry, s, e))

    if not predicates:
        return lambda entry: True

    def combined(entry: LogEntry) -> bool:
        return all(p(entry) for p in predicates)

    return combined
