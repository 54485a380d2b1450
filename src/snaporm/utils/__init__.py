"""
Utility helpers shared across snaporm packages.
"""

from .logging import configure_logging, get_logger, time_call
from .performance import PerformanceTracker, resolve_slow_query_ms

__all__ = [
    "PerformanceTracker",
    "configure_logging",
    "get_logger",
    "resolve_slow_query_ms",
    "time_call",
]
