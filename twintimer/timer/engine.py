"""Timer state machine for TwinTimer.

Segments
--------
WORK    counts down the configured work time.
BREAK   counts down the configured break time.

Exactly one segment is active; the other keeps its own countdown.  When
the active one reaches zero the engine swaps to the other and keeps
running.

Commands
--------
start / stop / toggle     run or pause the active countdown
skip                      swap now, logging partial work where it applies
restart(segment)          stop and refill one segment
set_duration              change one segment's length (also refills it)
apply_preset              stop, set both lengths, back to WORK
toggle_mute               advisory flag for the sound layer
clear_log / remove_log_entry
resync                    catch up after the app was suspended

Every command ends with :meth:`save`, so the stored snapshot is never
behind what the UI sees.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from PyQt6.QtCore import QObject, pyqtSignal

from .activity_log import ActivityLog
from .clock import Scheduler, SegmentClock
from .duration import cap_duration
from .persistence import elapsed_seconds, encode_record, restore_snapshot
from .state import (
    DEFAULT_BREAK_SECONDS,
    DEFAULT_WORK_SECONDS,
    LogEntry,
    PendingResolution,
    Segment,
    TimerState,
)


log = logging.getLogger("twintimer.engine")


def _wall_clock_ms() -> int:
    return int(time.time() * 1000)


def _valid_amount(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 1


# ── engine ────────────────────────────────────────────────────────────────


class TimerEngine(QObject):
    """Two-segment countdown with persistence and a day-scoped log.

    Signals
    -------
    tick(segment: Segment, remaining: int)
        Emitted whenever the active countdown changes.
    state_changed(state: TimerState)
        Emitted after every command.
    segment_finished(segment: Segment)
        Emitted when a segment reaches zero (by tick or resync), with the
        segment that just ended.
    log_changed()
        Emitted when an entry is committed, removed, or the log cleared.
    """

    tick = pyqtSignal(object, int)
    state_changed = pyqtSignal(object)
    segment_finished = pyqtSignal(object)
    log_changed = pyqtSignal()

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        db_enabled: bool = True,
        scheduler: Scheduler | None = None,
        now_ms: Callable[[], int] | None = None,
        work_duration: int = DEFAULT_WORK_SECONDS,
        break_duration: int = DEFAULT_BREAK_SECONDS,
    ) -> None:
        super().__init__(parent)

        self._db_enabled: bool = db_enabled
        self._now: Callable[[], int] = now_ms or _wall_clock_ms
        self._scheduler: Scheduler = scheduler or SegmentClock(self)

        self._state = TimerState.fresh(
            cap_duration(max(1, work_duration)),
            cap_duration(max(1, break_duration)),
        )
        self._log = ActivityLog()

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def activity_log(self) -> ActivityLog:
        return self._log

    @property
    def current_segment(self) -> Segment:
        return self._state.current_segment

    @property
    def is_running(self) -> bool:
        return self._state.is_running

    @property
    def muted(self) -> bool:
        return self._state.muted

    @property
    def day_started_at(self) -> int | None:
        return self._log.day_started_at

    @property
    def pending(self) -> PendingResolution:
        return self._log.pending

    @property
    def percent_complete(self) -> float:
        """0.0 → 1.0 progress through the active segment."""
        segment = self._state.current_segment
        duration = self._state.duration_of(segment)
        if duration <= 0:
            return 0.0
        return max(0.0, min(1.0, self._state.elapsed_of(segment) / duration))

    def remaining(self, segment: Segment) -> int:
        return self._state.remaining_of(segment)

    def duration(self, segment: Segment) -> int:
        return self._state.duration_of(segment)

    def log_entries(self) -> list[LogEntry]:
        """Logged cycles, most recent first."""
        return self._log.sorted_entries()

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(self) -> None:
        """Run the active segment.  No-op if already running."""
        if self._state.is_running:
            return
        if self._log.ensure_day_window(self._now()):
            self.log_changed.emit()
        self._state.is_running = True
        self._scheduler.start(self.on_tick)
        log.info("timer_started segment=%s", self._state.current_segment.value)
        self._commit()

    def stop(self) -> None:
        """Pause the countdown.  No-op if not running."""
        if not self._state.is_running:
            return
        self._halt()
        log.info("timer_stopped segment=%s", self._state.current_segment.value)
        self._commit()

    def toggle(self) -> None:
        if self._state.is_running:
            self.stop()
        else:
            self.start()

    def skip(self) -> None:
        """Swap segments immediately, running or not.

        Leaving a break resolves the pending work entry with the break
        time actually taken.  Leaving work stashes it for that
        resolution, unless it was skipped within its first second.
        """
        state = self._state
        now = self._now()
        if state.current_segment is Segment.BREAK:
            if self._log.flush_break_to_log_if_elapsed(state, now) is not None:
                self.log_changed.emit()
        else:
            elapsed = state.elapsed_of(Segment.WORK)
            if elapsed >= 1:
                if state.work_remaining <= 1:
                    self._log.mark_completed_by_timer(state.work_duration)
                else:
                    self._log.stash_skipped_work(elapsed, state.work_duration)
        left = state.swap()
        log.info("segment_skipped segment=%s", left.value)
        self.tick.emit(state.current_segment, state.active_remaining)
        self._commit()

    def restart(self, segment: Segment) -> None:
        """Stop the timer and refill *segment*.

        The clock stops even when *segment* is not the active one.
        """
        self._halt()
        self._state.reset(segment)
        self.tick.emit(self._state.current_segment, self._state.active_remaining)
        self._commit()

    def set_duration(self, segment: Segment, seconds: int) -> None:
        """Change *segment*'s length and refill it.  Values < 1 are ignored."""
        if not _valid_amount(seconds):
            log.warning("duration_rejected segment=%s value=%r", segment.value, seconds)
            return
        self._state.set_duration(segment, cap_duration(seconds))
        self.tick.emit(self._state.current_segment, self._state.active_remaining)
        self._commit()

    def apply_preset(self, work_minutes: int, break_minutes: int) -> None:
        """Stop, load both lengths from minutes, and go back to WORK."""
        if not (_valid_amount(work_minutes) and _valid_amount(break_minutes)):
            log.warning("preset_rejected work=%r break=%r", work_minutes, break_minutes)
            return
        self._halt()
        self._state.set_duration(Segment.WORK, cap_duration(work_minutes * 60))
        self._state.set_duration(Segment.BREAK, cap_duration(break_minutes * 60))
        self._state.current_segment = Segment.WORK
        log.info("preset_applied work=%s break=%s", work_minutes, break_minutes)
        self.tick.emit(Segment.WORK, self._state.work_remaining)
        self._commit()

    def toggle_mute(self) -> None:
        self._state.muted = not self._state.muted
        self._commit()

    def clear_log(self) -> None:
        self._log.clear()
        self.log_changed.emit()
        self._commit()

    def remove_log_entry(self, entry_id: str) -> None:
        if not self._log.remove_entry(entry_id):
            log.warning("log_entry_not_found id=%s", entry_id)
            return
        self.log_changed.emit()
        self._commit()

    # ══════════════════════════════════════════════════════════════════
    #  TICK / RESYNC
    # ══════════════════════════════════════════════════════════════════

    def on_tick(self) -> None:
        """One second of the active segment.  Called by the clock."""
        self._advance_one_second()
        self._commit()

    def resync(self) -> None:
        """Catch up on wall-clock time after the app was suspended.

        Only one segment end is resolved (with log entry and
        ``segment_finished``); any further time is absorbed by the
        refilled countdown.  The clock is re-armed afterwards.
        """
        state = self._state
        if not state.is_running or state.last_saved_at is None:
            return
        elapsed = elapsed_seconds(state.last_saved_at, self._now())
        if elapsed <= 0:
            return
        segment = state.current_segment
        remaining = state.remaining_of(segment)
        log.info("resync segment=%s elapsed=%s remaining=%s", segment.value, elapsed, remaining)
        if elapsed >= remaining:
            state.set_remaining(segment, 1)
            self._advance_one_second()
        else:
            state.set_remaining(segment, remaining - elapsed)
            self.tick.emit(segment, state.remaining_of(segment))
        self._scheduler.stop()
        self._scheduler.start(self.on_tick)
        self._commit()

    def _advance_one_second(self) -> None:
        state = self._state
        segment = state.current_segment
        remaining = state.remaining_of(segment)
        if remaining <= 0:
            return
        state.set_remaining(segment, remaining - 1)
        if remaining - 1 > 0:
            self.tick.emit(segment, remaining - 1)
            return
        self._finish_segment(segment)

    def _finish_segment(self, segment: Segment) -> None:
        state = self._state
        if segment is Segment.WORK:
            self._log.mark_completed_by_timer(state.work_duration)
        else:
            entry = self._log.resolve_after_break(
                state.break_duration, state.break_duration, self._now(),
            )
            if entry is not None:
                self.log_changed.emit()
        state.swap()
        log.info("segment_finished segment=%s", segment.value)
        self.segment_finished.emit(segment)
        self.tick.emit(state.current_segment, state.active_remaining)

    # ══════════════════════════════════════════════════════════════════
    #  PERSISTENCE
    # ══════════════════════════════════════════════════════════════════

    def save(self) -> None:
        """Write the snapshot (stamps ``last_saved_at`` while running)."""
        record = encode_record(self._state, self._log.data, self._now())
        if not self._db_enabled:
            return
        from ..database.store import write_state

        write_state(record)

    def restore(self) -> bool:
        """Load the stored snapshot, catching up on elapsed time.

        Returns False (and keeps the current state) when nothing usable
        is stored.
        """
        if not self._db_enabled:
            return False
        from ..database.store import read_state

        data = read_state()
        if data is None:
            return False
        restored = restore_snapshot(data, self._now())
        if restored is None:
            return False
        self._scheduler.stop()
        self._state, self._log = restored
        if self._state.is_running:
            self._scheduler.start(self.on_tick)
        log.info(
            "state_restored segment=%s running=%s entries=%s",
            self._state.current_segment.value, self._state.is_running, len(self._log),
        )
        self.log_changed.emit()
        self.tick.emit(self._state.current_segment, self._state.active_remaining)
        self._commit()
        return True

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL
    # ══════════════════════════════════════════════════════════════════

    def _halt(self) -> None:
        self._scheduler.stop()
        self._state.is_running = False

    def _commit(self) -> None:
        self.save()
        self.state_changed.emit(self._state)
