"""Log templates: one parsing strategy per supported log dialect.

A template is picked per log source and applied to every line of it:

  default  - generic timestamp prefix + keyword level detection
  laravel  - ``[timestamp] env.LEVEL: message`` (Monolog line format)
  fastapi  - uvicorn, Python ``logging`` and JSON-per-line output

Dispatch is a closed branch over the ``Template`` enum, so adding a dialect
means adding a member and a parser class here.
"""

import json
import logging
import re
from dataclasses import dataclass
from enum import Enum

from logview.models import DEFAULT_LEVEL

logger = logging.getLogger(__name__)


class Template(str, Enum):
    DEFAULT = "default"
    LARAVEL = "laravel"
    FASTAPI = "fastapi"


@dataclass(frozen=True)
class ParsedLine:
    timestamp: str | None
    level: str
    message: str


def resolve_template(value) -> Template:
    """Coerce a Template, template name or None into a Template.

    Unknown names fall back to DEFAULT with a warning.
    """
    if isinstance(value, Template):
        return value
    if not value:
        return Template.DEFAULT
    try:
        return Template(str(value).strip().lower())
    except ValueError:
        logger.warning("Unknown log template %r, using default", value)
        return Template.DEFAULT


# ---------------------------------------------------------------------------
# default
# ---------------------------------------------------------------------------

# Priority order matters: first match wins.
_TIMESTAMP_PATTERNS = (
    # 2024-12-10T08:00:01.123+02:00
    re.compile(r"^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d+)?(?:Z|[+-]\d{2}:\d{2})?)"),
    # 2024-12-10 08:00:01[.123], not followed by comma millis
    re.compile(r"^(\d{4}-\d{2}-\d{2}\s+\d{2}:\d{2}:\d{2}(?:\.\d+)?)(?!,\d)"),
    # 2024-12-10 08:00:01,123
    re.compile(r"^(\d{4}-\d{2}-\d{2}\s+\d{2}:\d{2}:\d{2},\d+)"),
    # Dec 10 08:00:01
    re.compile(r"^([A-Z][a-z]{2}\s+\d{1,2}\s+\d{2}:\d{2}:\d{2})", re.IGNORECASE),
)

_LEVEL_MARKER_RE = re.compile(
    r"^(?:[|-]\s*)?"
    r"(?:\[(?i:error|err|warn|warning|info|notice|debug|trace|fatal|critical)\]"
    r"|(?:ERROR|WARNING|WARN|INFO|NOTICE|DEBUG|TRACE|FATAL|CRITICAL)\b)"
    r"[\s:|-]*"
)


def _keyword_level(line: str) -> str:
    lower = line.lower()
    if any(k in lower for k in ("error", "exception", "fatal", "critical")):
        return "error"
    if "warn" in lower:
        return "warning"
    if "debug" in lower or "trace" in lower:
        return "debug"
    return DEFAULT_LEVEL


class DefaultParser:
    def parse(self, line: str) -> ParsedLine:
        level = _keyword_level(line)
        for pattern in _TIMESTAMP_PATTERNS:
            m = pattern.match(line)
            if not m:
                continue
            rest = line[m.end():].strip()
            stripped = _LEVEL_MARKER_RE.sub("", rest, count=1).strip()
            return ParsedLine(timestamp=m.group(1), level=level, message=stripped or rest)
        return ParsedLine(timestamp=None, level=level, message=line)


# ---------------------------------------------------------------------------
# laravel
# ---------------------------------------------------------------------------

_LARAVEL_RE = re.compile(
    r"^\[(?P<timestamp>\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}:\d{2}[^\]]*)\]\s+"
    r"(?P<env>[\w-]+)\.(?P<level>[A-Za-z]+):\s*"
    r"(?P<message>.*)$"
)

# "#0 /var/www/app/vendor/..." lines following an exception
_STACK_FRAME_RE = re.compile(r"^\s*#\d+")

# Monolog severities (RFC 5424 names)
_LARAVEL_LEVELS = {
    "emergency": "error",
    "alert": "error",
    "critical": "error",
    "error": "error",
    "warning": "warning",
    "notice": "info",
    "info": "info",
    "debug": "debug",
}


class LaravelParser:
    def parse(self, line: str) -> ParsedLine:
        m = _LARAVEL_RE.match(line)
        if m:
            return ParsedLine(
                timestamp=m.group("timestamp"),
                level=_LARAVEL_LEVELS.get(m.group("level").lower(), DEFAULT_LEVEL),
                message=m.group("message").strip(),
            )

        # Continuation lines: exception bodies and stack frames
        lower = line.lower()
        if "exception" in lower or "error" in lower or "fatal" in lower:
            return ParsedLine(timestamp=None, level="error", message=line)
        if _STACK_FRAME_RE.match(line):
            return ParsedLine(timestamp=None, level="error", message=line)
        return ParsedLine(timestamp=None, level=DEFAULT_LEVEL, message=line)


# ---------------------------------------------------------------------------
# fastapi
# ---------------------------------------------------------------------------

# INFO:     127.0.0.1:52340 - "GET /health HTTP/1.1" 200 OK
_UVICORN_RE = re.compile(r"^(INFO|WARNING|ERROR|DEBUG|CRITICAL):\s+(.*)$", re.IGNORECASE)

# 2024-12-10 08:00:01,234 - app.db - WARNING - slow query
_PY_LOGGING_RE = re.compile(
    r"^(?P<timestamp>\d{4}-\d{2}-\d{2}[ T]\d{2}:\d{2}:\d{2}(?:[.,]\d+)?)\s+-\s+"
    r"(?P<logger>\S+)\s+-\s+"
    r"(?P<level>[A-Za-z]+)\s+-\s+"
    r"(?P<message>.*)$"
)

_JSON_TIMESTAMP_KEYS = ("timestamp", "time", "asctime")
_JSON_MESSAGE_KEYS = ("message", "msg", "event")
_JSON_LEVEL_KEYS = ("level", "levelname")


def _python_level(name: str) -> str:
    name = name.lower()
    if name in ("fatal", "critical", "error"):
        return "error"
    if name in ("warn", "warning"):
        return "warning"
    if name == "debug":
        return "debug"
    return DEFAULT_LEVEL


def _first_present(data: dict, keys):
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


class FastApiParser:
    def parse(self, line: str) -> ParsedLine:
        return (
            self._parse_uvicorn(line)
            or self._parse_python_logging(line)
            or self._parse_json(line)
            or self._parse_fallback(line)
        )

    def _parse_uvicorn(self, line: str) -> ParsedLine | None:
        m = _UVICORN_RE.match(line)
        if not m:
            return None
        level = m.group(1).lower()
        if level == "critical":
            level = "error"
        return ParsedLine(timestamp=None, level=level, message=m.group(2).strip())

    def _parse_python_logging(self, line: str) -> ParsedLine | None:
        m = _PY_LOGGING_RE.match(line)
        if not m:
            return None
        return ParsedLine(
            timestamp=m.group("timestamp"),
            level=_python_level(m.group("level")),
            message=m.group("message").strip(),
        )

    def _parse_json(self, line: str) -> ParsedLine | None:
        stripped = line.strip()
        if not stripped.startswith("{"):
            return None
        try:
            data = json.loads(stripped)
        except (ValueError, RecursionError):
            return None
        if not isinstance(data, dict):
            return None

        timestamp = _first_present(data, _JSON_TIMESTAMP_KEYS)
        message = _first_present(data, _JSON_MESSAGE_KEYS)
        level = _first_present(data, _JSON_LEVEL_KEYS)

        if message is None:
            message = line
        elif not isinstance(message, str):
            message = json.dumps(message)

        return ParsedLine(
            timestamp=str(timestamp) if timestamp is not None else None,
            level=_python_level(str(level)) if level is not None else DEFAULT_LEVEL,
            message=message,
        )

    def _parse_fallback(self, line: str) -> ParsedLine:
        lower = line.lower()
        if "error" in lower or "exception" in lower or "traceback" in lower:
            level = "error"
        elif "warning" in lower:
            level = "warning"
        elif "debug" in lower:
            level = "debug"
        else:
            level = DEFAULT_LEVEL
        return ParsedLine(timestamp=None, level=level, message=line)


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

_DEFAULT_PARSER = DefaultParser()
_LARAVEL_PARSER = LaravelParser()
_FASTAPI_PARSER = FastApiParser()


def get_parser(template: Template):
    """Return the parser instance for a template."""
    if template is Template.DEFAULT:
        return _DEFAULT_PARSER
    if template is Template.LARAVEL:
        return _LARAVEL_PARSER
    if template is Template.FASTAPI:
        return _FASTAPI_PARSER
    raise ValueError(f"Unsupported template: {template!r}")
