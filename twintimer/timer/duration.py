"""Free-form duration input → whole seconds.

Accepted forms (case-insensitive, spaces allowed between parts)::

    "25"      25 minutes
    "5m"      5 minutes
    "90s"     90 seconds
    "4m30s"   4 minutes 30 seconds
    "4:30"    4 minutes 30 seconds   (":30" and "4:" work too)

Anything over an hour is capped to 55 minutes.
"""

from __future__ import annotations

import re

from .state import DURATION_CAP_THRESHOLD, MAX_DURATION_SECONDS


_MIN_SEC_RE = re.compile(r"^(\d+)\s*m\s*(\d+)\s*s$", re.IGNORECASE)
_INT_RE = re.compile(r"^\s*(\d+)\s*$")


def _to_int(text: str, *, empty_ok: bool = False) -> int | None:
    if empty_ok and not text.strip():
        return 0
    match = _INT_RE.match(text)
    return int(match.group(1)) if match else None


def cap_duration(seconds: int) -> int:
    """Apply the one-hour cap used for every user-supplied duration."""
    if seconds > DURATION_CAP_THRESHOLD:
        return MAX_DURATION_SECONDS
    return seconds


def parse_duration(text: str) -> int | None:
    """Parse *text* into seconds.  Returns None for invalid input."""
    trimmed = str(text).strip()
    if not trimmed:
        return None
    lower = trimmed.lower()

    match = _MIN_SEC_RE.match(trimmed)
    if match:
        minutes, secs = int(match.group(1)), int(match.group(2))
        if secs > 59:
            return None
        seconds = minutes * 60 + secs
    elif lower.endswith("s") and "m" not in lower:
        value = _to_int(trimmed[:-1])
        if value is None:
            return None
        seconds = value
    elif lower.endswith("m"):
        value = _to_int(trimmed[:-1])
        if value is None:
            return None
        seconds = value * 60
    elif ":" in trimmed:
        min_part, _, sec_part = trimmed.partition(":")
        minutes = _to_int(min_part, empty_ok=True)
        secs = _to_int(sec_part, empty_ok=True)
        if minutes is None or secs is None or secs > 59:
            return None
        seconds = minutes * 60 + secs
    else:
        value = _to_int(trimmed)
        if value is None:
            return None
        seconds = value * 60

    return cap_duration(seconds)


def format_duration(seconds: int) -> str:
    """``125`` → ``"02:05"``."""
    m, s = divmod(max(0, int(seconds)), 60)
    return f"{m:02d}:{s:02d}"
