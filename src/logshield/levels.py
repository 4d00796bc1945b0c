"""
Log severities with a fixed total ordering
"""

import logging
from enum import IntEnum
from typing import Union

from .exceptions import ConfigurationError


class Severity(IntEnum):
    """Closed set of severities, ordered by increasing urgency

    Values line up with the stdlib ``logging`` numbers so a severity can be
    handed to a ``logging.Logger`` without translation.
    """

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    FATAL = logging.CRITICAL

    @property
    def label(self) -> str:
        return self.name.lower()


_ALIASES = {
    "debug": Severity.DEBUG,
    "info": Severity.INFO,
    "warn": Severity.WARNING,
    "warning": Severity.WARNING,
    "error": Severity.ERROR,
    "fatal": Severity.FATAL,
    "critical": Severity.FATAL,
}

SeverityLike = Union[Severity, str, int]


def is_severity_name(value: object) -> bool:
    """Check whether a string names a severity (case-insensitive)"""
    return isinstance(value, str) and value.lower() in _ALIASES


def parse_severity(value: SeverityLike) -> Severity:
    """Resolve a severity name, number or member to a Severity"""
    if isinstance(value, Severity):
        return value

    if isinstance(value, str):
        try:
            return _ALIASES[value.strip().lower()]
        except KeyError:
            raise ConfigurationError(f"Unknown log level: {value!r}") from None

    if isinstance(value, int) and not isinstance(value, bool):
        try:
            return Severity(value)
        except ValueError:
            raise ConfigurationError(f"Unknown log level: {value!r}") from None

    raise ConfigurationError(f"Unknown log level: {value!r}")
