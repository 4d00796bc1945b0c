"""
Base classes for log filtering system
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..levels import Severity


@dataclass
class FilterResult:
    """Result of log filtering operation"""

    should_log: bool
    reason: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


class LogFilter(ABC):
    """Abstract base class for log filters"""

    @abstractmethod
    def evaluate(
        self, severity: Severity, sample_key: Optional[str] = None
    ) -> FilterResult:
        """Determine if an entry of this severity / log site should be processed"""
        pass
