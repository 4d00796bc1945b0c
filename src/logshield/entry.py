"""
Log entry record passed through the pipeline
"""

import time
from dataclasses import dataclass, field
from typing import Any, Tuple

from .levels import Severity


def now_ms() -> int:
    """Current wall-clock time in milliseconds since the epoch"""
    return time.time_ns() // 1_000_000


@dataclass(frozen=True)
class LogEntry:
    """A single admitted, redacted log call"""

    severity: Severity
    payload: Tuple[Any, ...] = ()
    label: str = ""
    timestamp: int = field(default_factory=now_ms)
