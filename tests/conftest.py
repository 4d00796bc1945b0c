"""
Shared fixtures for logshield tests
"""

import threading
from typing import List, Tuple

import pytest

from logshield import BufferConfig, LoggerConfig, Severity


class RecordingSink:
    """Sink that keeps every written line in memory"""

    def __init__(self):
        self.records: List[Tuple[Severity, str]] = []
        self.closed = False
        self._lock = threading.Lock()

    def write(self, severity: Severity, line: str) -> None:
        with self._lock:
            self.records.append((severity, line))

    @property
    def lines(self) -> List[str]:
        return [line for _, line in self.records]

    def close(self) -> None:
        self.closed = True


class FailingSink:
    """Sink whose every write raises"""

    def __init__(self, error: Exception = None):
        self.error = error or IOError("disk full")
        self.attempts = 0

    def write(self, severity: Severity, line: str) -> None:
        self.attempts += 1
        raise self.error


def make_config(**overrides) -> LoggerConfig:
    """Logger config with a timer that never fires during a test"""
    buffer_overrides = overrides.pop("buffer", {})
    buffer = BufferConfig(flush_interval_ms=60_000, **buffer_overrides)
    overrides.setdefault("register_atexit", False)
    return LoggerConfig(buffer=buffer, **overrides)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def failing_sink():
    return FailingSink()


@pytest.fixture
def config_factory():
    return make_config
