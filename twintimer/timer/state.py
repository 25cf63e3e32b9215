"""Plain data for the TwinTimer core.

``TimerState`` is the countdown side (two segments, running flag, mute).
``DayLog`` is the activity side (day window, committed entries, and the
single pending slot for a work segment that still waits for its break).

Pending resolution
------------------
At most one work segment can be waiting for its break to finish.  Which
kind of wait it is lives in one slot so the two cases can never coexist:

    None                 nothing to resolve
    PendingSkippedWork   work was skipped part-way (elapsed, duration)
    CompletedByTimer     work ran down to zero on its own
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Union


# ── constants ─────────────────────────────────────────────────────────────

DEFAULT_WORK_SECONDS = 25 * 60
DEFAULT_BREAK_SECONDS = 5 * 60
MAX_DURATION_SECONDS = 55 * 60
DURATION_CAP_THRESHOLD = 60 * 60  # anything above this becomes MAX_DURATION_SECONDS


# ── enums ─────────────────────────────────────────────────────────────────


class Segment(Enum):
    WORK = "work"
    BREAK = "break"

    @property
    def other(self) -> "Segment":
        return Segment.BREAK if self is Segment.WORK else Segment.WORK


# ── timer state ───────────────────────────────────────────────────────────


@dataclass
class TimerState:
    """Countdown values for both segments.  Mutated only by TimerEngine."""

    work_duration: int = DEFAULT_WORK_SECONDS
    break_duration: int = DEFAULT_BREAK_SECONDS
    work_remaining: int = DEFAULT_WORK_SECONDS
    break_remaining: int = DEFAULT_BREAK_SECONDS
    current_segment: Segment = Segment.WORK
    is_running: bool = False
    muted: bool = False
    last_saved_at: int | None = None  # epoch ms, only while running

    @classmethod
    def fresh(cls, work_duration: int, break_duration: int) -> "TimerState":
        return cls(
            work_duration=work_duration,
            break_duration=break_duration,
            work_remaining=work_duration,
            break_remaining=break_duration,
        )

    def duration_of(self, segment: Segment) -> int:
        if segment is Segment.WORK:
            return self.work_duration
        return self.break_duration

    def remaining_of(self, segment: Segment) -> int:
        if segment is Segment.WORK:
            return self.work_remaining
        return self.break_remaining

    def elapsed_of(self, segment: Segment) -> int:
        return self.duration_of(segment) - self.remaining_of(segment)

    def set_remaining(self, segment: Segment, seconds: int) -> None:
        """Store *seconds* for *segment*, clamped into ``[0, duration]``."""
        seconds = max(0, min(seconds, self.duration_of(segment)))
        if segment is Segment.WORK:
            self.work_remaining = seconds
        else:
            self.break_remaining = seconds

    def set_duration(self, segment: Segment, seconds: int) -> None:
        """Set both duration and remaining for *segment*."""
        if segment is Segment.WORK:
            self.work_duration = seconds
            self.work_remaining = seconds
        else:
            self.break_duration = seconds
            self.break_remaining = seconds

    def reset(self, segment: Segment) -> None:
        self.set_remaining(segment, self.duration_of(segment))

    @property
    def active_remaining(self) -> int:
        return self.remaining_of(self.current_segment)

    def swap(self) -> Segment:
        """Flip to the other segment with both countdowns full.

        Returns the segment that was left.
        """
        left = self.current_segment
        self.reset(Segment.WORK)
        self.reset(Segment.BREAK)
        self.current_segment = left.other
        return left


# ── pending resolution ────────────────────────────────────────────────────


@dataclass(frozen=True)
class PendingSkippedWork:
    work_elapsed: int
    work_duration: int


@dataclass(frozen=True)
class CompletedByTimer:
    work_duration: int


PendingResolution = Union[PendingSkippedWork, CompletedByTimer, None]


# ── log entries ───────────────────────────────────────────────────────────


def _new_entry_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class CycleEntry:
    """A work segment that ran to zero, plus the break taken after it."""

    completed_at: int
    work_duration: int
    break_duration: int
    intended_break_duration: int
    omit_break: bool = False
    entry_id: str = field(default_factory=_new_entry_id)

    @property
    def work_seconds(self) -> int:
        return self.work_duration

    @property
    def break_seconds(self) -> int:
        return self.break_duration


@dataclass(frozen=True)
class SkippedWorkEntry:
    """A work segment cut short by skip, plus the break taken after it."""

    completed_at: int
    work_elapsed: int
    work_duration: int
    break_elapsed: int
    intended_break_duration: int
    omit_break: bool = False
    entry_id: str = field(default_factory=_new_entry_id)

    @property
    def work_seconds(self) -> int:
        return self.work_elapsed

    @property
    def break_seconds(self) -> int:
        return self.break_elapsed


LogEntry = Union[CycleEntry, SkippedWorkEntry]


@dataclass
class DayLog:
    day_started_at: int | None = None
    entries: list[LogEntry] = field(default_factory=list)
    pending: PendingResolution = None
