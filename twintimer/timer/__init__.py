"""Timer package."""

from .engine import TimerEngine
from .activity_log import ActivityLog, DAY_WINDOW_MS
from .clock import Scheduler, SegmentClock
from .duration import format_duration, parse_duration
from .state import (
    Segment,
    TimerState,
    DayLog,
    CycleEntry,
    SkippedWorkEntry,
    PendingSkippedWork,
    CompletedByTimer,
    DEFAULT_WORK_SECONDS,
    DEFAULT_BREAK_SECONDS,
    MAX_DURATION_SECONDS,
)

__all__ = [
    "TimerEngine",
    "ActivityLog",
    "DAY_WINDOW_MS",
    "Scheduler",
    "SegmentClock",
    "format_duration",
    "parse_duration",
    "Segment",
    "TimerState",
    "DayLog",
    "CycleEntry",
    "SkippedWorkEntry",
    "PendingSkippedWork",
    "CompletedByTimer",
    "DEFAULT_WORK_SECONDS",
    "DEFAULT_BREAK_SECONDS",
    "MAX_DURATION_SECONDS",
]
