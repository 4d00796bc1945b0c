"""
Render log entries into single output lines

Timestamps and colours are left to the sink; the formatters only turn the
redacted payload into text.
"""

import dataclasses
import json
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from pathlib import PurePath
from typing import Any, Dict, List, Literal, Union
from uuid import UUID

from .entry import LogEntry
from .exceptions import ConfigurationError

FormatterType = Literal["plain", "json"]


def sanitize_text(text: str) -> str:
    """Replace CR and LF so a value cannot forge extra log lines"""
    return text.replace("\r", " ").replace("\n", " ")


def _describe_exception(exc: BaseException) -> str:
    message = str(exc)
    return f"{type(exc).__name__}: {message}" if message else type(exc).__name__


def _json_default(obj: Any) -> Any:
    """Fallback conversion for values json cannot encode natively"""
    if isinstance(obj, (datetime, date, time)):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (Decimal, UUID, PurePath)):
        return str(obj)
    if isinstance(obj, (set, frozenset)):
        return list(obj)
    if isinstance(obj, bytes):
        return obj.decode("utf-8", errors="replace")
    if isinstance(obj, BaseException):
        return _describe_exception(obj)
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: getattr(obj, f.name) for f in dataclasses.fields(obj)}
    return str(obj)


def _dumps(value: Any) -> str:
    return json.dumps(
        value, separators=(",", ":"), default=_json_default, ensure_ascii=False
    )


def render_value(value: Any) -> str:
    """Render one payload value as text"""
    if isinstance(value, str):
        return value
    if isinstance(value, BaseException):
        return _describe_exception(value)
    if isinstance(value, (dict, list, tuple)):
        try:
            return _dumps(value)
        except (TypeError, ValueError):
            # Cyclic structures survive redaction; repr marks the cycle
            return repr(value)
    return str(value)


class PlainTextFormatter:
    """Format entries as ``[LABEL] value value ...``"""

    def __init__(self, sanitize_newlines: bool = True):
        self.sanitize_newlines = sanitize_newlines

    def format(self, entry: LogEntry) -> str:
        label = entry.label or entry.severity.name
        parts = []
        for value in entry.payload:
            text = render_value(value)
            if self.sanitize_newlines:
                text = sanitize_text(text)
            parts.append(text)
        return f"[{label}] {' '.join(parts)}"


class JSONFormatter:
    """Format entries as one compact JSON object per line"""

    def __init__(self, sanitize_newlines: bool = True):
        # JSON encoding escapes control characters already
        self.sanitize_newlines = sanitize_newlines

    def format(self, entry: LogEntry) -> str:
        log_entry: Dict[str, Any] = {
            "level": entry.severity.label,
            "label": entry.label,
            "timestamp": entry.timestamp,
            "payload": list(entry.payload),
        }
        try:
            return _dumps(log_entry)
        except (TypeError, ValueError):
            log_entry["payload"] = [render_value(value) for value in entry.payload]
            return _dumps(log_entry)


EntryFormatter = Union[PlainTextFormatter, JSONFormatter]

_FORMATTERS = {"plain": PlainTextFormatter, "json": JSONFormatter}


def create_formatter(
    formatter_type: FormatterType = "plain", sanitize_newlines: bool = True
) -> EntryFormatter:
    """Build the formatter named by ``formatter_type``"""
    try:
        formatter_cls = _FORMATTERS[formatter_type]
    except KeyError:
        raise ConfigurationError(
            f"Unknown formatter type {formatter_type!r}, expected one of {sorted(_FORMATTERS)}"
        ) from None
    return formatter_cls(sanitize_newlines=sanitize_newlines)


def available_formatters() -> List[str]:
    return sorted(_FORMATTERS)
