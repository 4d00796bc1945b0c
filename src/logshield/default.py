"""
Process-wide default logger
"""

import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .config import LoggerConfig, get_default_config
from .diagnostics import diagnostics
from .logger import Logger
from .sinks import Sink, StreamSink


@dataclass
class LoggerResult:
    """Outcome of ``create_logger``"""

    logger: Logger
    degraded: bool = False
    error: Optional[Exception] = None


def create_logger(
    config: Optional[LoggerConfig] = None,
    sink: Optional[Sink] = None,
    name: str = "logshield",
) -> LoggerResult:
    """Build a logger, falling back to a stderr logger if construction fails

    Bad configuration (an unwritable log path, for instance) does not leave
    the caller without a logger: a degraded one with default settings that
    writes to stderr is returned instead, together with the error.
    """
    try:
        return LoggerResult(logger=Logger(name, config=config, sink=sink))
    except Exception as e:
        diagnostics.warning("Falling back to stderr logger: %s", e)
        fallback = Logger(name, config=LoggerConfig(), sink=StreamSink())
        return LoggerResult(logger=fallback, degraded=True, error=e)


_default_logger: Optional[Logger] = None
_default_result: Optional[LoggerResult] = None
_lock = threading.Lock()


def get_default_logger() -> Logger:
    """Get the default logger, creating it on first use"""
    global _default_logger, _default_result
    with _lock:
        if _default_logger is None:
            _default_result = create_logger(get_default_config())
            _default_logger = _default_result.logger
        return _default_logger


def set_default_logger(logger: Logger) -> None:
    """Replace the default logger; the previous one is left untouched"""
    global _default_logger, _default_result
    with _lock:
        _default_logger = logger
        _default_result = LoggerResult(logger=logger)


def configure_default_logger(
    config: LoggerConfig, sink: Optional[Sink] = None
) -> LoggerResult:
    """Destroy the current default logger and build a new one from ``config``"""
    global _default_logger, _default_result
    with _lock:
        previous = _default_logger
        _default_result = create_logger(config, sink)
        _default_logger = _default_result.logger
        result = _default_result
    if previous is not None:
        previous.destroy()
    return result


def reset_default_logger() -> None:
    """Destroy the default logger; the next ``get_default_logger()`` rebuilds it"""
    global _default_logger, _default_result
    with _lock:
        previous = _default_logger
        _default_logger = None
        _default_result = None
    if previous is not None:
        previous.destroy()


def default_logger_status() -> Dict[str, Any]:
    result = _default_result
    return {
        "initialized": result is not None,
        "failed": result is not None and result.error is not None,
        "using_fallback": result is not None and result.degraded,
        "error": str(result.error) if result is not None and result.error else None,
    }
