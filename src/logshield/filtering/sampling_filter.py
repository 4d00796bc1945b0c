"""
Deterministic counter-based sampling for high-frequency log sites
"""

import math
import threading
from typing import Any, Dict, Optional

from ..exceptions import ConfigurationError
from ..levels import Severity
from .base import FilterResult, LogFilter

# Counters reset after this many sampling periods
COUNTER_RESET_PERIODS = 100


class Sampler(LogFilter):
    """Admit one in every ``floor(1 / rate)`` calls per sampling key

    The admission pattern is stateful and reproducible rather than random:
    with a rate of 0.5 the 2nd, 4th, 6th... calls for a key are admitted.
    Keys without a configured rate are always admitted.
    """

    def __init__(self, sample_rates: Optional[Dict[str, float]] = None):
        self._rates: Dict[str, float] = {}
        self._counters: Dict[str, int] = {}
        self._lock = threading.Lock()

        for key, rate in (sample_rates or {}).items():
            self.set_sample_rate(key, rate)

    def set_sample_rate(self, key: str, rate: float) -> None:
        """Configure the rate for a key; must be within [0, 1]"""
        if (
            isinstance(rate, bool)
            or not isinstance(rate, (int, float))
            or math.isnan(rate)
            or rate < 0
            or rate > 1
        ):
            raise ConfigurationError(
                f"Sample rate must be between 0 and 1, got {rate!r} for {key!r}"
            )
        if rate > 0 and not math.isfinite(1 / rate):
            raise ConfigurationError(
                f"Sample rate {rate!r} for {key!r} is too small; use 0 to drop every call"
            )
        with self._lock:
            self._rates[key] = float(rate)

    def remove_sample_rate(self, key: str) -> None:
        with self._lock:
            self._rates.pop(key, None)
            self._counters.pop(key, None)

    def get_sample_rate(self, key: str) -> Optional[float]:
        return self._rates.get(key)

    def should_sample(self, key: str) -> bool:
        rate = self._rates.get(key)

        if rate is None or rate == 1.0:
            return True
        if rate == 0.0:
            return False

        threshold = math.floor(1 / rate)
        with self._lock:
            counter = self._counters.get(key, 0) + 1
            admitted = counter % threshold == 0
            if counter >= threshold * COUNTER_RESET_PERIODS:
                counter = 0
            self._counters[key] = counter

        return admitted

    def evaluate(
        self, severity: Severity, sample_key: Optional[str] = None
    ) -> FilterResult:
        if sample_key is None:
            return FilterResult(should_log=True, reason="sampler: no sampling key")

        should_log = self.should_sample(sample_key)
        return FilterResult(
            should_log=should_log,
            reason=f"sampler: {sample_key} {'admitted' if should_log else 'skipped'}",
            metadata={"sample_rate": self._rates.get(sample_key, 1.0)},
        )

    def reset(self) -> None:
        """Reset all counters, keeping configured rates"""
        with self._lock:
            self._counters.clear()

    def get_stats(self) -> Dict[str, Dict[str, Any]]:
        with self._lock:
            return {
                key: {"sample_rate": rate, "counter": self._counters.get(key, 0)}
                for key, rate in self._rates.items()
            }
