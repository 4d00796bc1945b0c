"""
Filtering engine that applies the level filter and sampler in sequence
"""

import threading
from collections import defaultdict
from typing import Any, Dict, List, Optional, Tuple

from ..levels import Severity
from .base import FilterResult, LogFilter


class FilterEngine:
    """Apply filters in order, stopping at the first rejection

    Counters are updated under a lock so metrics stay exact when several
    threads log at once.
    """

    def __init__(self, filters: List[LogFilter], collect_metrics: bool = True):
        self.filters = filters
        self.collect_metrics = collect_metrics
        self.metrics: Dict[str, int] = defaultdict(int)
        self._filter_stats: Dict[str, Dict[str, int]] = defaultdict(
            lambda: defaultdict(int)
        )
        self._lock = threading.Lock()

    def should_log(
        self, severity: Severity, sample_key: Optional[str] = None
    ) -> FilterResult:
        """Apply all filters and return final decision"""
        outcomes: List[Tuple[str, bool]] = []
        rejection: Optional[FilterResult] = None

        for i, filter_obj in enumerate(self.filters):
            result = filter_obj.evaluate(severity, sample_key)
            outcomes.append((f"{filter_obj.__class__.__name__}_{i}", result.should_log))
            if not result.should_log:
                rejection = result
                break

        with self._lock:
            self.metrics["total_evaluated"] += 1
            self.metrics["filtered_out" if rejection is not None else "passed_through"] += 1
            if self.collect_metrics:
                for filter_name, passed in outcomes:
                    stats = self._filter_stats[filter_name]
                    stats["total"] += 1
                    stats["passed" if passed else "rejected"] += 1

        if rejection is not None:
            return rejection
        return FilterResult(should_log=True, reason="all_filters_passed")

    def get_metrics(self) -> Dict[str, Any]:
        """Get filtering metrics"""
        with self._lock:
            total_evaluated = self.metrics.get("total_evaluated", 0)
            passed_through = self.metrics.get("passed_through", 0)
            filtered_out = self.metrics.get("filtered_out", 0)
            filter_stats = {
                name: dict(stats) for name, stats in self._filter_stats.items()
            }

        return {
            "summary": {
                "total_evaluated": total_evaluated,
                "passed_through": passed_through,
                "filtered_out": filtered_out,
            },
            "filter_stats": filter_stats,
            "pass_rate": passed_through / max(1, total_evaluated),
        }

    def reset_metrics(self):
        """Reset all metrics"""
        with self._lock:
            self.metrics.clear()
            self._filter_stats.clear()
