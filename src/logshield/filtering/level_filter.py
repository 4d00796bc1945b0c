"""
Level-based log filtering
"""

from typing import Optional

from ..levels import Severity, SeverityLike, parse_severity
from .base import FilterResult, LogFilter


class LevelFilter(LogFilter):
    """Filter logs based on a minimum severity"""

    def __init__(self, min_level: SeverityLike = Severity.INFO):
        self._min_level = parse_severity(min_level)

    @property
    def min_level(self) -> Severity:
        return self._min_level

    def set_min_level(self, level: SeverityLike) -> None:
        """Replace the threshold; invalid names raise ConfigurationError"""
        self._min_level = parse_severity(level)

    def should_log(self, severity: Severity) -> bool:
        return severity >= self._min_level

    def evaluate(
        self, severity: Severity, sample_key: Optional[str] = None
    ) -> FilterResult:
        should_log = self.should_log(severity)
        return FilterResult(
            should_log=should_log,
            reason=f"level_filter: {severity.label} {'>=' if should_log else '<'} {self._min_level.label}",
        )
