"""
Policy enums: how sources are combined, how hot reload runs, and the
time units a reload period is expressed in.
"""

from enum import Enum


class LoadType(Enum):
    """Rule for resolving multiple configured sources."""
    FIRST = "first"
    MERGE = "merge"


class HotReloadType(Enum):
    """Hot reload mode."""
    SYNC = "sync"
    ASYNC = "async"


class TimeUnit(Enum):
    """Time units, valued by their length in seconds."""
    MICROSECONDS = 1e-6
    MILLISECONDS = 1e-3
    SECONDS = 1.0
    MINUTES = 60.0
    HOURS = 3600.0
    DAYS = 86400.0

    def to_seconds(self, value: float) -> float:
        return value * self.value
