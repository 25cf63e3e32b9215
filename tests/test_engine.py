"""Tests for the TwinTimer state machine.

Covers: start/stop, ticking and segment swaps, skip resolution, restart,
durations and presets, mute, day window on start, resync after
suspension, and the remaining-within-duration invariant under random
command sequences.
"""

import random

import pytest

from twintimer.timer.engine import TimerEngine
from twintimer.timer.state import (
    CompletedByTimer,
    CycleEntry,
    PendingSkippedWork,
    Segment,
    SkippedWorkEntry,
)
from twintimer.timer.activity_log import DAY_WINDOW_MS

from helpers import SignalCollector, run_ticks


# ═══════════════════════════════════════════════════════════════════════════
#  START / STOP
# ═══════════════════════════════════════════════════════════════════════════


class TestStartStop:

    def test_initial_state(self, engine_no_db):
        s = engine_no_db.state
        assert s.current_segment == Segment.WORK
        assert s.is_running is False
        assert s.work_remaining == s.work_duration == 1500
        assert s.break_remaining == s.break_duration == 300
        assert engine_no_db.day_started_at is None

    def test_start_arms_scheduler(self, engine_no_db, scheduler):
        engine_no_db.start()
        assert engine_no_db.is_running
        assert scheduler.is_active

    def test_start_is_noop_when_running(self, engine_no_db, scheduler):
        engine_no_db.start()
        engine_no_db.start()
        assert scheduler.starts == 1

    def test_stop_cancels_scheduler(self, engine_no_db, scheduler):
        engine_no_db.start()
        engine_no_db.stop()
        assert not engine_no_db.is_running
        assert not scheduler.is_active

    def test_stop_is_noop_when_stopped(self, engine_no_db, scheduler):
        c = SignalCollector()
        engine_no_db.state_changed.connect(c)
        engine_no_db.stop()
        assert len(c) == 0
        assert scheduler.stops == 0

    def test_toggle(self, engine_no_db):
        engine_no_db.toggle()
        assert engine_no_db.is_running
        engine_no_db.toggle()
        assert not engine_no_db.is_running

    def test_start_opens_day_window(self, engine_no_db, clock):
        engine_no_db.start()
        assert engine_no_db.day_started_at == clock.now

    def test_start_after_expired_window_clears_log(self, engine_no_db, scheduler, clock):
        engine_no_db.set_duration(Segment.WORK, 2)
        engine_no_db.set_duration(Segment.BREAK, 2)
        run_ticks(engine_no_db, scheduler, 4)
        assert len(engine_no_db.log_entries()) == 1

        engine_no_db.stop()
        clock.advance(ms=DAY_WINDOW_MS)
        engine_no_db.start()
        assert engine_no_db.log_entries() == []
        assert engine_no_db.day_started_at == clock.now

    def test_state_changed_emitted_per_command(self, engine_no_db):
        c = SignalCollector()
        engine_no_db.state_changed.connect(c)
        engine_no_db.start()
        engine_no_db.stop()
        engine_no_db.toggle_mute()
        assert len(c) == 3
        assert c.last is engine_no_db.state


# ═══════════════════════════════════════════════════════════════════════════
#  TICK / SEGMENT SWAP
# ═══════════════════════════════════════════════════════════════════════════


class TestTicking:

    def test_tick_decrements_active_only(self, engine_no_db, scheduler):
        run_ticks(engine_no_db, scheduler, 3)
        assert engine_no_db.remaining(Segment.WORK) == 1497
        assert engine_no_db.remaining(Segment.BREAK) == 300

    def test_tick_signal(self, engine_no_db, scheduler):
        c = SignalCollector()
        engine_no_db.tick.connect(c)
        run_ticks(engine_no_db, scheduler, 1)
        assert c.last == (Segment.WORK, 1499)

    def test_tick_at_zero_is_noop(self, engine_no_db):
        engine_no_db.state.work_remaining = 0
        engine_no_db.on_tick()
        assert engine_no_db.remaining(Segment.WORK) == 0
        assert engine_no_db.current_segment == Segment.WORK
        assert engine_no_db.pending is None

    def test_short_cycle_swaps_once_and_resolves(self, qapp, clock, scheduler):
        engine = TimerEngine(
            db_enabled=False, scheduler=scheduler, now_ms=clock,
            work_duration=5, break_duration=5,
        )
        swaps = SignalCollector()
        engine.segment_finished.connect(swaps)

        run_ticks(engine, scheduler, 4)
        assert engine.current_segment == Segment.WORK
        assert engine.pending is None

        scheduler.fire(1)
        assert engine.current_segment == Segment.BREAK
        assert swaps.items == [Segment.WORK]
        assert engine.pending == CompletedByTimer(work_duration=5)

        scheduler.fire(5)
        assert engine.current_segment == Segment.WORK
        assert swaps.items == [Segment.WORK, Segment.BREAK]
        assert engine.pending is None
        assert len(engine.log_entries()) == 1

    def test_full_pomodoro_logs_one_cycle(self, engine_no_db, scheduler):
        run_ticks(engine_no_db, scheduler, 1500)
        assert engine_no_db.current_segment == Segment.BREAK
        assert engine_no_db.remaining(Segment.BREAK) == 300
        assert engine_no_db.remaining(Segment.WORK) == 1500
        assert engine_no_db.is_running

        scheduler.fire(300)
        assert engine_no_db.current_segment == Segment.WORK
        entries = engine_no_db.log_entries()
        assert len(entries) == 1
        entry = entries[0]
        assert isinstance(entry, CycleEntry)
        assert entry.work_duration == 1500
        assert entry.break_duration == 300
        assert entry.intended_break_duration == 300
        assert entry.omit_break is False

    def test_break_end_without_pending_logs_nothing(self, engine_no_db, scheduler):
        engine_no_db.skip()  # straight to break, nothing elapsed
        run_ticks(engine_no_db, scheduler, 300)
        assert engine_no_db.current_segment == Segment.WORK
        assert engine_no_db.log_entries() == []

    def test_log_changed_on_commit(self, qapp, clock, scheduler):
        engine = TimerEngine(
            db_enabled=False, scheduler=scheduler, now_ms=clock,
            work_duration=2, break_duration=2,
        )
        c = SignalCollector()
        engine.log_changed.connect(c)
        run_ticks(engine, scheduler, 2)
        assert len(c) == 1  # day window opened on start
        scheduler.fire(2)
        assert len(c) == 2

    def test_percent_complete(self, engine_no_db, scheduler):
        run_ticks(engine_no_db, scheduler, 750)
        assert engine_no_db.percent_complete == pytest.approx(0.5)


# ═══════════════════════════════════════════════════════════════════════════
#  SKIP
# ═══════════════════════════════════════════════════════════════════════════


class TestSkip:

    def test_skip_immediately_records_nothing(self, engine_no_db):
        engine_no_db.start()
        engine_no_db.skip()
        assert engine_no_db.current_segment == Segment.BREAK
        assert engine_no_db.pending is None
        assert engine_no_db.log_entries() == []

    def test_skip_partial_work_stashes_pending(self, engine_no_db, scheduler):
        run_ticks(engine_no_db, scheduler, 600)
        engine_no_db.skip()
        assert engine_no_db.pending == PendingSkippedWork(work_elapsed=600, work_duration=1500)
        assert engine_no_db.current_segment == Segment.BREAK
        assert engine_no_db.remaining(Segment.WORK) == 1500
        assert engine_no_db.remaining(Segment.BREAK) == 300

    def test_skipped_work_resolved_by_full_break(self, engine_no_db, scheduler):
        run_ticks(engine_no_db, scheduler, 600)
        engine_no_db.skip()
        scheduler.fire(300)
        entries = engine_no_db.log_entries()
        assert len(entries) == 1
        entry = entries[0]
        assert isinstance(entry, SkippedWorkEntry)
        assert entry.work_elapsed == 600
        assert entry.work_duration == 1500
        assert entry.break_elapsed == 300
        assert entry.intended_break_duration == 300
        assert engine_no_db.pending is None

    def test_skip_with_one_second_left_counts_as_completed(self, engine_no_db, scheduler):
        run_ticks(engine_no_db, scheduler, 1499)
        engine_no_db.skip()
        assert engine_no_db.pending == CompletedByTimer(work_duration=1500)

    def test_skip_keeps_running_flag(self, engine_no_db, scheduler):
        engine_no_db.start()
        engine_no_db.skip()
        assert engine_no_db.is_running
        assert scheduler.is_active

    def test_skip_while_paused_stays_paused(self, engine_no_db):
        engine_no_db.skip()
        assert not engine_no_db.is_running
        assert engine_no_db.current_segment == Segment.BREAK

    def test_skip_break_logs_actual_break_time(self, engine_no_db, scheduler):
        run_ticks(engine_no_db, scheduler, 1500 + 120)
        engine_no_db.skip()
        entry = engine_no_db.log_entries()[0]
        assert isinstance(entry, CycleEntry)
        assert entry.break_duration == 120
        assert entry.intended_break_duration == 300
        assert entry.omit_break is False
        assert engine_no_db.current_segment == Segment.WORK

    def test_skip_untouched_paused_break_omits_break(self, engine_no_db, scheduler):
        run_ticks(engine_no_db, scheduler, 1500)
        engine_no_db.stop()
        engine_no_db.skip()
        entry = engine_no_db.log_entries()[0]
        assert entry.omit_break is True
        assert entry.break_seconds == 0

    def test_skip_untouched_running_break_keeps_break(self, engine_no_db, scheduler):
        run_ticks(engine_no_db, scheduler, 1500)
        engine_no_db.skip()
        entry = engine_no_db.log_entries()[0]
        assert entry.omit_break is False
        assert entry.break_seconds == 0

    def test_skip_break_with_nothing_pending(self, engine_no_db):
        engine_no_db.skip()
        engine_no_db.skip()
        assert engine_no_db.current_segment == Segment.WORK
        assert engine_no_db.log_entries() == []


# ═══════════════════════════════════════════════════════════════════════════
#  RESTART / DURATIONS / PRESETS / MUTE
# ═══════════════════════════════════════════════════════════════════════════


class TestRestart:

    def test_restart_active_segment(self, engine_no_db, scheduler):
        run_ticks(engine_no_db, scheduler, 100)
        engine_no_db.restart(Segment.WORK)
        assert engine_no_db.remaining(Segment.WORK) == 1500
        assert not engine_no_db.is_running
        assert not scheduler.is_active

    def test_restart_of_inactive_segment_still_stops_timer(self, engine_no_db, scheduler):
        run_ticks(engine_no_db, scheduler, 100)
        engine_no_db.restart(Segment.BREAK)
        assert not engine_no_db.is_running
        assert not scheduler.is_active
        assert engine_no_db.current_segment == Segment.WORK
        assert engine_no_db.remaining(Segment.WORK) == 1400

    def test_restart_keeps_log_and_pending(self, engine_no_db, scheduler):
        run_ticks(engine_no_db, scheduler, 600)
        engine_no_db.skip()
        engine_no_db.restart(Segment.BREAK)
        assert isinstance(engine_no_db.pending, PendingSkippedWork)


class TestDurations:

    def test_set_duration_sets_both_values(self, engine_no_db, scheduler):
        run_ticks(engine_no_db, scheduler, 10)
        engine_no_db.set_duration(Segment.WORK, 600)
        assert engine_no_db.duration(Segment.WORK) == 600
        assert engine_no_db.remaining(Segment.WORK) == 600
        assert engine_no_db.is_running

    @pytest.mark.parametrize("bad", [0, -5, True, "10"])
    def test_set_duration_rejects_invalid(self, engine_no_db, bad):
        engine_no_db.set_duration(Segment.BREAK, bad)
        assert engine_no_db.duration(Segment.BREAK) == 300

    def test_set_duration_caps_over_an_hour(self, engine_no_db):
        engine_no_db.set_duration(Segment.WORK, 4000)
        assert engine_no_db.duration(Segment.WORK) == 3300

    def test_set_duration_keeps_values_up_to_an_hour(self, engine_no_db):
        engine_no_db.set_duration(Segment.WORK, 3600)
        assert engine_no_db.duration(Segment.WORK) == 3600

    def test_apply_preset(self, engine_no_db, scheduler):
        run_ticks(engine_no_db, scheduler, 1510)
        assert engine_no_db.current_segment == Segment.BREAK
        engine_no_db.apply_preset(50, 10)
        s = engine_no_db.state
        assert s.current_segment == Segment.WORK
        assert (s.work_duration, s.work_remaining) == (3000, 3000)
        assert (s.break_duration, s.break_remaining) == (600, 600)
        assert not s.is_running
        assert not scheduler.is_active

    def test_apply_preset_leaves_log(self, engine_no_db, scheduler):
        run_ticks(engine_no_db, scheduler, 1800)
        engine_no_db.apply_preset(15, 3)
        assert len(engine_no_db.log_entries()) == 1

    def test_apply_preset_rejects_zero(self, engine_no_db):
        engine_no_db.apply_preset(0, 5)
        assert engine_no_db.duration(Segment.WORK) == 1500

    def test_toggle_mute(self, engine_no_db):
        engine_no_db.toggle_mute()
        assert engine_no_db.muted is True
        engine_no_db.toggle_mute()
        assert engine_no_db.muted is False


# ═══════════════════════════════════════════════════════════════════════════
#  LOG COMMANDS
# ═══════════════════════════════════════════════════════════════════════════


class TestLogCommands:

    def _two_cycles(self, engine, scheduler, clock):
        engine.set_duration(Segment.WORK, 3)
        engine.set_duration(Segment.BREAK, 2)
        engine.start()
        for _ in range(2):
            scheduler.fire(5)
            clock.advance(60)

    def test_log_entries_newest_first(self, engine_no_db, scheduler, clock):
        self._two_cycles(engine_no_db, scheduler, clock)
        entries = engine_no_db.log_entries()
        assert len(entries) == 2
        assert entries[0].completed_at > entries[1].completed_at

    def test_remove_log_entry(self, engine_no_db, scheduler, clock):
        self._two_cycles(engine_no_db, scheduler, clock)
        newest = engine_no_db.log_entries()[0]
        engine_no_db.remove_log_entry(newest.entry_id)
        remaining = engine_no_db.log_entries()
        assert len(remaining) == 1
        assert remaining[0].entry_id != newest.entry_id

    def test_remove_unknown_entry_is_ignored(self, engine_no_db, scheduler, clock):
        self._two_cycles(engine_no_db, scheduler, clock)
        c = SignalCollector()
        engine_no_db.log_changed.connect(c)
        engine_no_db.remove_log_entry("nope")
        assert len(engine_no_db.log_entries()) == 2
        assert len(c) == 0

    def test_clear_log_keeps_day_window(self, engine_no_db, scheduler, clock):
        self._two_cycles(engine_no_db, scheduler, clock)
        started = engine_no_db.day_started_at
        engine_no_db.clear_log()
        assert engine_no_db.log_entries() == []
        assert engine_no_db.day_started_at == started


# ═══════════════════════════════════════════════════════════════════════════
#  RESYNC
# ═══════════════════════════════════════════════════════════════════════════


class TestResync:

    def test_resync_subtracts_elapsed(self, engine_no_db, clock):
        engine_no_db.start()
        clock.advance(10)
        engine_no_db.resync()
        assert engine_no_db.remaining(Segment.WORK) == 1490

    def test_resync_floors_partial_seconds(self, engine_no_db, clock):
        engine_no_db.start()
        clock.advance(ms=2999)
        engine_no_db.resync()
        assert engine_no_db.remaining(Segment.WORK) == 1498

    def test_resync_rearms_clock(self, engine_no_db, scheduler, clock):
        engine_no_db.start()
        clock.advance(5)
        engine_no_db.resync()
        assert scheduler.is_active
        assert scheduler.starts == 2

    def test_resync_when_stopped_is_noop(self, engine_no_db, clock):
        clock.advance(100)
        engine_no_db.resync()
        assert engine_no_db.remaining(Segment.WORK) == 1500

    def test_resync_with_clock_skew_is_noop(self, engine_no_db, scheduler, clock):
        engine_no_db.start()
        clock.advance(-30)
        engine_no_db.resync()
        assert engine_no_db.remaining(Segment.WORK) == 1500
        assert scheduler.starts == 1

    def test_resync_across_break_end_commits_cycle(self, qapp, clock, scheduler):
        engine = TimerEngine(
            db_enabled=False, scheduler=scheduler, now_ms=clock,
            work_duration=5, break_duration=300,
        )
        finished = SignalCollector()
        engine.segment_finished.connect(finished)
        run_ticks(engine, scheduler, 5)
        assert engine.current_segment == Segment.BREAK

        clock.advance(400)
        engine.resync()
        assert engine.current_segment == Segment.WORK
        assert engine.remaining(Segment.WORK) == 5
        assert finished.items == [Segment.WORK, Segment.BREAK]
        entry = engine.log_entries()[0]
        assert isinstance(entry, CycleEntry)
        assert entry.break_duration == 300
        assert engine.is_running

    def test_resync_resolves_only_one_segment_end(self, qapp, clock, scheduler):
        engine = TimerEngine(
            db_enabled=False, scheduler=scheduler, now_ms=clock,
            work_duration=60, break_duration=60,
        )
        engine.start()
        clock.advance(60 * 10)
        engine.resync()
        assert engine.current_segment == Segment.BREAK
        assert engine.remaining(Segment.BREAK) == 60
        assert engine.pending == CompletedByTimer(work_duration=60)
        assert engine.log_entries() == []


# ═══════════════════════════════════════════════════════════════════════════
#  INVARIANTS
# ═══════════════════════════════════════════════════════════════════════════


class TestInvariants:

    def test_remaining_within_duration_under_random_commands(
        self, qapp, clock, scheduler,
    ):
        engine = TimerEngine(
            db_enabled=False, scheduler=scheduler, now_ms=clock,
            work_duration=7, break_duration=4,
        )
        rng = random.Random(1234)
        commands = [
            lambda: scheduler.fire(rng.randint(1, 9)),
            engine.start,
            engine.stop,
            engine.skip,
            lambda: engine.restart(rng.choice(list(Segment))),
            lambda: engine.set_duration(rng.choice(list(Segment)), rng.randint(1, 12)),
            lambda: engine.apply_preset(rng.randint(1, 3), rng.randint(1, 2)),
            lambda: (clock.advance(rng.randint(0, 40)), engine.resync()),
        ]
        for _ in range(2000):
            rng.choice(commands)()
            s = engine.state
            assert 0 <= s.work_remaining <= s.work_duration
            assert 0 <= s.break_remaining <= s.break_duration
            assert s.is_running == scheduler.is_active
