import os
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional

from .buffer import BufferConfig
from .formatter import FormatterType, available_formatters
from .levels import Severity, SeverityLike, parse_severity


@dataclass
class LoggerConfig:
    """Configuration for the logging pipeline"""

    min_level: SeverityLike = Severity.INFO
    sensitive_fields: Iterable[str] = ()
    buffer: BufferConfig = field(default_factory=BufferConfig)
    sample_rates: Dict[str, float] = field(default_factory=dict)
    formatter_type: FormatterType = "plain"
    log_file_path: Optional[str] = None
    max_redaction_depth: Optional[int] = 10
    sanitize_newlines: bool = True
    register_atexit: bool = True  # Drain the buffer at interpreter exit

    def __post_init__(self):
        self.min_level = parse_severity(self.min_level)
        self.sensitive_fields = tuple(self.sensitive_fields)

    @classmethod
    def _parse_bool_env(cls, key: str, default: str = "false") -> bool:
        """Parse boolean from environment variable"""
        return os.getenv(key, default).lower() == "true"

    @classmethod
    def _parse_list_env(cls, key: str) -> tuple:
        """Parse a comma-separated list from environment variable"""
        raw = os.getenv(key, "")
        return tuple(item.strip() for item in raw.split(",") if item.strip())

    @classmethod
    def _create_buffer_config_from_env(cls) -> BufferConfig:
        """Create buffer configuration from environment variables"""
        return BufferConfig(
            max_entries=int(os.getenv("LOGSHIELD_BUFFER_SIZE", "100")),
            flush_interval_ms=int(os.getenv("LOGSHIELD_FLUSH_INTERVAL_MS", "1000")),
            immediate_flush_at_or_above=os.getenv("LOGSHIELD_FLUSH_LEVEL", "error"),
            enabled=cls._parse_bool_env("LOGSHIELD_BUFFER", "true"),
        )

    @classmethod
    def from_env(cls) -> "LoggerConfig":
        """Create configuration from environment variables"""
        formatter_type = os.getenv("LOGSHIELD_FORMATTER", "plain").lower()
        if formatter_type not in available_formatters():
            formatter_type = "plain"

        return cls(
            min_level=os.getenv("LOGSHIELD_LEVEL", "info"),
            sensitive_fields=cls._parse_list_env("LOGSHIELD_SENSITIVE_FIELDS"),
            buffer=cls._create_buffer_config_from_env(),
            formatter_type=formatter_type,
            log_file_path=os.getenv("LOGSHIELD_PATH") or None,
        )


_default_config: Optional[LoggerConfig] = None


def get_default_config() -> LoggerConfig:
    """Get the default configuration instance"""
    global _default_config
    if _default_config is None:
        _default_config = LoggerConfig.from_env()
    return _default_config


def set_default_config(config: Optional[LoggerConfig]) -> None:
    """Set the default configuration instance"""
    global _default_config
    _default_config = config
