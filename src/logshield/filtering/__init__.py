"""
Level filtering and sampling for the logging pipeline
"""

from .base import FilterResult, LogFilter
from .engine import FilterEngine
from .level_filter import LevelFilter
from .sampling_filter import Sampler

__all__ = [
    "FilterResult",
    "LogFilter",
    "LevelFilter",
    "Sampler",
    "FilterEngine",
]
