"""
Sinks that durably write formatted log lines

The pipeline only needs ``write(severity, line)``; rotation, timestamps and
console handling belong to the sink.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import List, Optional, Protocol, TextIO, Union

from .exceptions import ConfigurationError
from .levels import Severity, SeverityLike, parse_severity

DEFAULT_LINE_FORMAT = "[%(asctime)s] %(message)s"

_INVALID_PATH_CHARS = frozenset('<>|?*\0')


class Sink(Protocol):
    """Destination for formatted log lines"""

    def write(self, severity: Severity, line: str) -> None:
        ...


def validate_log_path(
    path: Union[str, os.PathLike], base_dir: Optional[Union[str, os.PathLike]] = None
) -> Path:
    """Check that a log file path is safe to write to

    Args:
        path: File path, relative paths are taken from ``base_dir``
        base_dir: Directory the log file must stay inside (default: cwd)

    Returns:
        The resolved absolute path

    Raises:
        ConfigurationError: On forbidden characters or a path that escapes
            ``base_dir``
    """
    text = os.fspath(path)
    if not text:
        raise ConfigurationError("Log path must not be empty")

    bad_chars = sorted(set(text) & _INVALID_PATH_CHARS)
    if bad_chars:
        raise ConfigurationError(f"Log path contains invalid characters: {bad_chars!r}")

    base = Path(base_dir if base_dir is not None else os.getcwd()).resolve()
    resolved = (base / text).resolve()
    if resolved != base and base not in resolved.parents:
        raise ConfigurationError(f"Log path must be within {base}")

    return resolved


class StreamSink:
    """Write lines to a text stream, ``sys.stderr`` by default"""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream

    def write(self, severity: Severity, line: str) -> None:
        stream = self.stream or sys.stderr
        stream.write(line + "\n")
        if hasattr(stream, "flush"):
            stream.flush()

    def close(self) -> None:
        pass


class LoggingSink:
    """Sink backed by a stdlib ``logging.Logger``

    Writes to the console and, when ``log_file_path`` is given, to a file
    rotated at midnight. Each sink gets its own child of ``name`` so two
    sinks built with the same name never share handlers.
    """

    def __init__(
        self,
        name: str = "logshield.output",
        log_file_path: Optional[Union[str, os.PathLike]] = None,
        level: SeverityLike = Severity.DEBUG,
        console: bool = True,
        stream: Optional[TextIO] = None,
        line_format: str = DEFAULT_LINE_FORMAT,
        backup_count: int = 14,
        base_dir: Optional[Union[str, os.PathLike]] = None,
    ):
        self.name = name
        self.logger = logging.getLogger(f"{name}.{id(self):x}")
        self.logger.setLevel(int(parse_severity(level)))
        self.logger.propagate = False

        self.formatter = logging.Formatter(line_format)
        self.backup_count = backup_count
        self.base_dir = base_dir
        self.log_file_path: Optional[Path] = None
        self._console_handler: Optional[logging.Handler] = None
        self._file_handler: Optional[logging.Handler] = None

        if log_file_path:
            self.set_log_file_path(log_file_path)

        if console:
            self._console_handler = logging.StreamHandler(stream or sys.stdout)
            self._add_handler(self._console_handler)

    @property
    def handlers(self) -> List[logging.Handler]:
        return [h for h in (self._console_handler, self._file_handler) if h is not None]

    def _add_handler(self, handler: logging.Handler) -> None:
        handler.setFormatter(self.formatter)
        self.logger.addHandler(handler)

    def _remove_handler(self, handler: Optional[logging.Handler]) -> None:
        if handler is None:
            return
        self.logger.removeHandler(handler)
        handler.close()

    def set_log_file_path(self, log_file_path: Union[str, os.PathLike]) -> None:
        """Validate the path and swap the file handler over to it"""
        path = validate_log_path(log_file_path, self.base_dir)
        path.parent.mkdir(parents=True, exist_ok=True)

        handler = logging.handlers.TimedRotatingFileHandler(
            path, when="midnight", backupCount=self.backup_count, encoding="utf-8"
        )
        self._remove_handler(self._file_handler)
        self._file_handler = handler
        self._add_handler(handler)
        self.log_file_path = path

    def write(self, severity: Severity, line: str) -> None:
        self.logger.log(int(severity), line)

    def close(self) -> None:
        self._remove_handler(self._console_handler)
        self._remove_handler(self._file_handler)
        self._console_handler = None
        self._file_handler = None
