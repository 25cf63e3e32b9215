"""TwinTimer: a two-segment work/break timer with a daily activity log."""

__version__ = "0.1.0"
