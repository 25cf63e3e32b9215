"""Snapshot encoding and wall-clock catch-up.

The persisted record is a flat JSON object with camelCase keys::

    workRemainingSeconds, breakRemainingSeconds,
    workDuration, breakDuration,
    currentMode ("work" | "break"), isRunning,          <- required
    muted, dayStartedAt, completedCycles,
    workSegmentCompletedByTimer, pendingSkippedWork,
    lastSavedAt                                          <- optional

A record missing any required key, or carrying the wrong type for one,
is rejected as a whole.  Optional keys fall back to defaults one by one.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from .activity_log import ActivityLog
from .duration import cap_duration
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


log = logging.getLogger("twintimer.persistence")

_REQUIRED_INTS = (
    "workRemainingSeconds",
    "breakRemainingSeconds",
    "workDuration",
    "breakDuration",
)


def _is_int(value: Any) -> bool:
    # bool is an int subclass; a stored ``true`` is not a duration
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    # json.loads accepts Infinity and NaN, neither of which is a timestamp
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


# ═══════════════════════════════════════════════════════════════════════
#  ENCODE
# ═══════════════════════════════════════════════════════════════════════


def encode_entry(entry: LogEntry) -> dict:
    if isinstance(entry, SkippedWorkEntry):
        return {
            "id": entry.entry_id,
            "type": "skippedWork",
            "completedAt": entry.completed_at,
            "workElapsed": entry.work_elapsed,
            "workDuration": entry.work_duration,
            "breakElapsed": entry.break_elapsed,
            "intendedBreakDuration": entry.intended_break_duration,
            "omitBreak": entry.omit_break,
        }
    return {
        "id": entry.entry_id,
        "type": "cycle",
        "completedAt": entry.completed_at,
        "workDuration": entry.work_duration,
        "breakDuration": entry.break_duration,
        "intendedBreakDuration": entry.intended_break_duration,
        "omitBreak": entry.omit_break,
    }


def encode_record(state: TimerState, day_log: DayLog, now: int) -> dict:
    """Build the persisted record.

    While running, ``lastSavedAt`` is stamped with *now* (and mirrored
    into ``state.last_saved_at``); while stopped it is left out.
    """
    pending = day_log.pending
    record: dict[str, Any] = {
        "workRemainingSeconds": state.work_remaining,
        "breakRemainingSeconds": state.break_remaining,
        "workDuration": state.work_duration,
        "breakDuration": state.break_duration,
        "currentMode": state.current_segment.value,
        "isRunning": state.is_running,
        "muted": state.muted,
        "dayStartedAt": day_log.day_started_at,
        "completedCycles": [encode_entry(e) for e in day_log.entries],
        "workSegmentCompletedByTimer": isinstance(pending, CompletedByTimer),
        "pendingSkippedWork": (
            {
                "workElapsedSeconds": pending.work_elapsed,
                "workDuration": pending.work_duration,
            }
            if isinstance(pending, PendingSkippedWork)
            else None
        ),
    }
    if state.is_running:
        state.last_saved_at = now
        record["lastSavedAt"] = now
    else:
        state.last_saved_at = None
    return record


# ═══════════════════════════════════════════════════════════════════════
#  DECODE
# ═══════════════════════════════════════════════════════════════════════


def decode_entry(data: Any) -> LogEntry | None:
    """Rebuild one log entry.  Returns None if it is malformed."""
    if not isinstance(data, dict) or not _is_number(data.get("completedAt")):
        return None
    entry_id = data.get("id")
    extra = {"entry_id": entry_id} if isinstance(entry_id, str) and entry_id else {}
    omit = data.get("omitBreak") is True
    completed_at = int(data["completedAt"])

    kind = data.get("type")
    if kind == "skippedWork":
        keys = ("workElapsed", "workDuration", "breakElapsed", "intendedBreakDuration")
        if not all(_is_int(data.get(k)) for k in keys):
            return None
        return SkippedWorkEntry(
            completed_at=completed_at,
            work_elapsed=data["workElapsed"],
            work_duration=data["workDuration"],
            break_elapsed=data["breakElapsed"],
            intended_break_duration=data["intendedBreakDuration"],
            omit_break=omit,
            **extra,
        )
    if kind in ("cycle", None):
        keys = ("workDuration", "breakDuration", "intendedBreakDuration")
        if not all(_is_int(data.get(k)) for k in keys):
            return None
        return CycleEntry(
            completed_at=completed_at,
            work_duration=data["workDuration"],
            break_duration=data["breakDuration"],
            intended_break_duration=data["intendedBreakDuration"],
            omit_break=omit,
            **extra,
        )
    return None


def _decode_pending(data: dict, work_duration: int):
    skipped = data.get("pendingSkippedWork")
    if (
        isinstance(skipped, dict)
        and _is_int(skipped.get("workElapsedSeconds"))
        and _is_int(skipped.get("workDuration"))
    ):
        return PendingSkippedWork(
            work_elapsed=skipped["workElapsedSeconds"],
            work_duration=skipped["workDuration"],
        )
    if data.get("workSegmentCompletedByTimer") is True:
        return CompletedByTimer(work_duration=work_duration)
    return None


def decode_record(data: Any) -> tuple[TimerState, DayLog] | None:
    """Validate and rebuild a persisted record.

    Returns None (caller keeps its defaults) when any required field is
    missing or mistyped.
    """
    if not isinstance(data, dict):
        log.warning("state_rejected reason=not_an_object")
        return None
    for key in _REQUIRED_INTS:
        if not _is_int(data.get(key)):
            log.warning("state_rejected reason=bad_field field=%s", key)
            return None
    if data.get("currentMode") not in ("work", "break"):
        log.warning("state_rejected reason=bad_field field=currentMode")
        return None
    if not isinstance(data.get("isRunning"), bool):
        log.warning("state_rejected reason=bad_field field=isRunning")
        return None
    if data["workDuration"] < 1 or data["breakDuration"] < 1:
        log.warning("state_rejected reason=non_positive_duration")
        return None

    state = TimerState(
        work_duration=cap_duration(data["workDuration"]),
        break_duration=cap_duration(data["breakDuration"]),
        current_segment=Segment(data["currentMode"]),
        is_running=data["isRunning"],
        muted=data.get("muted") is True,
    )
    state.set_remaining(Segment.WORK, data["workRemainingSeconds"])
    state.set_remaining(Segment.BREAK, data["breakRemainingSeconds"])
    last_saved = data.get("lastSavedAt")
    if state.is_running and _is_number(last_saved):
        state.last_saved_at = int(last_saved)

    day_started = data.get("dayStartedAt")
    raw_entries = data.get("completedCycles")
    entries: list[LogEntry] = []
    if isinstance(raw_entries, list):
        for raw in raw_entries:
            entry = decode_entry(raw)
            if entry is None:
                log.warning("log_entry_dropped reason=malformed")
                continue
            entries.append(entry)

    day_log = DayLog(
        day_started_at=int(day_started) if _is_number(day_started) else None,
        entries=entries,
        pending=_decode_pending(data, state.work_duration),
    )
    return state, day_log


# ═══════════════════════════════════════════════════════════════════════
#  CATCH-UP
# ═══════════════════════════════════════════════════════════════════════


def elapsed_seconds(last_saved_at: int | None, now: int) -> int:
    """Whole seconds since *last_saved_at*; clock skew counts as zero."""
    if last_saved_at is None:
        return 0
    return max(0, (now - last_saved_at) // 1000)


def catch_up_on_load(state: TimerState, now: int) -> Segment | None:
    """Fast-forward a running state by the time spent unsaved.

    Applies at most one segment swap and records nothing in the log.
    Returns the segment that finished, if any.
    """
    if not state.is_running or state.last_saved_at is None:
        return None
    elapsed = elapsed_seconds(state.last_saved_at, now)
    if elapsed <= 0:
        return None
    segment = state.current_segment
    state.set_remaining(segment, state.remaining_of(segment) - elapsed)
    if state.remaining_of(segment) > 0:
        return None
    log.info("catch_up_swap segment=%s elapsed=%s", segment.value, elapsed)
    return state.swap()


def restore_snapshot(data: Any, now: int) -> tuple[TimerState, ActivityLog] | None:
    """Decode *data* and apply day expiry plus load-time catch-up."""
    decoded = decode_record(data)
    if decoded is None:
        return None
    state, day_log = decoded
    activity = ActivityLog(day_log)
    activity.expire_if_stale(now)
    catch_up_on_load(state, now)
    return state, activity
