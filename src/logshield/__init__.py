"""
LogShield

Buffered, sampled logging with automatic redaction of sensitive fields.
"""

__version__ = "0.1.0"

from .buffer import BufferConfig, LogBuffer
from .config import LoggerConfig, get_default_config, set_default_config
from .default import (
    LoggerResult,
    configure_default_logger,
    create_logger,
    default_logger_status,
    get_default_logger,
    reset_default_logger,
    set_default_logger,
)
from .entry import LogEntry
from .exceptions import ConfigurationError, LogShieldError, SinkError
from .filtering import FilterEngine, FilterResult, LevelFilter, LogFilter, Sampler
from .formatter import (
    FormatterType,
    JSONFormatter,
    PlainTextFormatter,
    create_formatter,
)
from .levels import Severity, parse_severity
from .logger import Logger
from .redaction import TOO_DEEP, MaskResult, Redactor, mask_value, redact
from .sinks import LoggingSink, Sink, StreamSink, validate_log_path

__all__ = [
    # Core logger
    "Logger",
    "Severity",
    "parse_severity",
    "LogEntry",
    # Configuration
    "LoggerConfig",
    "BufferConfig",
    "get_default_config",
    "set_default_config",
    # Default logger
    "LoggerResult",
    "create_logger",
    "get_default_logger",
    "set_default_logger",
    "configure_default_logger",
    "reset_default_logger",
    "default_logger_status",
    # Pipeline components
    "LogBuffer",
    "FilterEngine",
    "FilterResult",
    "LogFilter",
    "LevelFilter",
    "Sampler",
    "Redactor",
    "MaskResult",
    "TOO_DEEP",
    "mask_value",
    "redact",
    # Formatting and sinks
    "FormatterType",
    "PlainTextFormatter",
    "JSONFormatter",
    "create_formatter",
    "Sink",
    "StreamSink",
    "LoggingSink",
    "validate_log_path",
    # Errors
    "LogShieldError",
    "ConfigurationError",
    "SinkError",
]
