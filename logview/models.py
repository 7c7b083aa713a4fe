"""Result types shared by the parser, readers and tail differ."""

from dataclasses import dataclass, field
from typing import Any

LEVELS = ("error", "warning", "info", "debug")
DEFAULT_LEVEL = "info"


@dataclass(frozen=True)
class LogEntry:
    timestamp: str | None
    level: str
    message: str
    line_number: int
    raw: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "level": self.level,
            "message": self.message,
            "lineNumber": self.line_number,
            "raw": self.raw,
        }


@dataclass
class ReadWindow:
    """One page of entries plus the cursors needed to fetch the next one.

    Entries are always in chronological (ascending line number) order.
    ``oldest_line_loaded``/``newest_line_loaded`` are 0 for an empty window.
    """

    entries: list[LogEntry] = field(default_factory=list)
    total_lines: int = 0
    has_more: bool = False
    oldest_line_loaded: int = 0
    newest_line_loaded: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "entries": [e.to_dict() for e in self.entries],
            "totalLines": self.total_lines,
            "hasMore": self.has_more,
            "oldestLineLoaded": self.oldest_line_loaded,
            "newestLineLoaded": self.newest_line_loaded,
        }


@dataclass
class TailResult:
    new_count: int = 0
    total_lines: int = 0
    entries: list[LogEntry] | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "newCount": self.new_count,
            "totalLines": self.total_lines,
        }
        if self.entries is not None:
            result["entries"] = [e.to_dict() for e in self.entries]
        return result
