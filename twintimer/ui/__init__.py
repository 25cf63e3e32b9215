"""UI package."""

from .segment_panel import SegmentPanel
from .log_panel import LogPanel, describe_entry

__all__ = [
    "SegmentPanel",
    "LogPanel",
    "describe_entry",
]
