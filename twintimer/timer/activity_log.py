"""Day-scoped activity log.

Entries are only ever appended by resolving the pending slot once the
break that follows a work segment ends (or is skipped).  A "day" is a
rolling 24 h window anchored at the first segment start, not a calendar
day.
"""

from __future__ import annotations

import logging

from .state import (
    CompletedByTimer,
    CycleEntry,
    DayLog,
    LogEntry,
    PendingSkippedWork,
    Segment,
    SkippedWorkEntry,
    TimerState,
)


DAY_WINDOW_MS = 24 * 60 * 60 * 1000

log = logging.getLogger("twintimer.activity_log")


class ActivityLog:
    """Wraps a :class:`DayLog` with the commit / resolve rules."""

    def __init__(self, day_log: DayLog | None = None) -> None:
        self._data = day_log if day_log is not None else DayLog()

    # ── queries ───────────────────────────────────────────────────────

    @property
    def data(self) -> DayLog:
        return self._data

    @property
    def day_started_at(self) -> int | None:
        return self._data.day_started_at

    @property
    def pending(self):
        return self._data.pending

    @property
    def entries(self) -> list[LogEntry]:
        """Entries in insertion (write) order."""
        return list(self._data.entries)

    def sorted_entries(self) -> list[LogEntry]:
        """Entries for display, most recent first."""
        return sorted(self._data.entries, key=lambda e: e.completed_at, reverse=True)

    def total_work_seconds(self) -> int:
        return sum(e.work_seconds for e in self._data.entries)

    def total_break_seconds(self) -> int:
        return sum(e.break_seconds for e in self._data.entries if not e.omit_break)

    def __len__(self) -> int:
        return len(self._data.entries)

    # ── day window ────────────────────────────────────────────────────

    def is_expired(self, now: int) -> bool:
        started = self._data.day_started_at
        return started is not None and now - started >= DAY_WINDOW_MS

    def ensure_day_window(self, now: int) -> bool:
        """Open a new window if none is open or the current one expired.

        Returns True when a new window was opened (prior entries and the
        pending slot are dropped in that case).
        """
        if self._data.day_started_at is not None and not self.is_expired(now):
            return False
        if self._data.entries or self._data.pending is not None:
            log.info("day_window_reset entries=%s", len(self._data.entries))
        self._data.day_started_at = now
        self._data.entries = []
        self._data.pending = None
        return True

    def expire_if_stale(self, now: int) -> bool:
        """Drop the whole log if its window is 24 h old or more."""
        if not self.is_expired(now):
            return False
        log.info("day_window_expired entries=%s", len(self._data.entries))
        self._data.day_started_at = None
        self._data.entries = []
        self._data.pending = None
        return True

    # ── pending slot ──────────────────────────────────────────────────

    def mark_completed_by_timer(self, work_duration: int) -> None:
        self._data.pending = CompletedByTimer(work_duration=work_duration)

    def stash_skipped_work(self, work_elapsed: int, work_duration: int) -> None:
        self._data.pending = PendingSkippedWork(
            work_elapsed=work_elapsed, work_duration=work_duration,
        )

    def resolve_after_break(
        self,
        break_elapsed: int,
        intended_break_duration: int,
        now: int,
        *,
        omit_break: bool = False,
    ) -> LogEntry | None:
        """Commit the entry for whatever work segment is pending.

        No-op (returns None) when nothing is pending.
        """
        pending = self._data.pending
        if isinstance(pending, PendingSkippedWork):
            entry: LogEntry = SkippedWorkEntry(
                completed_at=now,
                work_elapsed=pending.work_elapsed,
                work_duration=pending.work_duration,
                break_elapsed=break_elapsed,
                intended_break_duration=intended_break_duration,
                omit_break=omit_break,
            )
        elif isinstance(pending, CompletedByTimer):
            entry = CycleEntry(
                completed_at=now,
                work_duration=pending.work_duration,
                break_duration=break_elapsed,
                intended_break_duration=intended_break_duration,
                omit_break=omit_break,
            )
        else:
            return None
        self._commit(entry, now)
        return entry

    def flush_break_to_log_if_elapsed(
        self, state: TimerState, now: int,
    ) -> LogEntry | None:
        """Resolve the pending slot using the break time actually taken.

        Only applies while the break segment is active.  A break that is
        paused and never started is logged with ``omit_break`` set.
        """
        if state.current_segment is not Segment.BREAK:
            return None
        if self._data.pending is None:
            return None
        elapsed = state.elapsed_of(Segment.BREAK)
        if elapsed <= 0 and not state.is_running:
            return self.resolve_after_break(
                0, state.break_duration, now, omit_break=True,
            )
        return self.resolve_after_break(elapsed, state.break_duration, now)

    # ── mutation ──────────────────────────────────────────────────────

    def remove_entry(self, entry_id: str) -> bool:
        """Delete one entry by id.  Returns False if it was not found."""
        kept = [e for e in self._data.entries if e.entry_id != entry_id]
        if len(kept) == len(self._data.entries):
            return False
        self._data.entries = kept
        return True

    def clear(self) -> None:
        self._data.entries = []

    def _commit(self, entry: LogEntry, now: int) -> None:
        self.ensure_day_window(now)
        self._data.entries = self._data.entries + [entry]
        self._data.pending = None
        log.info(
            "log_entry_committed kind=%s work=%s break=%s",
            type(entry).__name__, entry.work_seconds, entry.break_seconds,
        )
