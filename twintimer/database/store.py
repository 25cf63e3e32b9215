"""Best-effort JSON key/value storage on top of :mod:`.db`.

Reads and writes never raise: a broken or unavailable database only
costs durability, the timer itself keeps running in memory.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError

from .db import get_session
from .models import StateSlot


STATE_KEY = "timer_state"

log = logging.getLogger("twintimer.store")


def read_state(key: str = STATE_KEY):
    """Return the decoded JSON stored under *key*, or None."""
    try:
        with get_session() as db:
            row = db.get(StateSlot, key)
            payload = row.payload if row is not None else None
    except (SQLAlchemyError, OSError) as exc:
        log.warning("state_read_failed key=%s error=%s", key, exc)
        return None
    if payload is None:
        return None
    try:
        return json.loads(payload)
    except ValueError as exc:
        log.warning("state_payload_invalid key=%s error=%s", key, exc)
        return None


def write_state(payload: dict, key: str = STATE_KEY) -> bool:
    """Store *payload* under *key*.  Returns False if the write failed."""
    try:
        text = json.dumps(payload, separators=(",", ":"))
        with get_session() as db:
            row = db.get(StateSlot, key)
            if row is None:
                db.add(StateSlot(key=key, payload=text, updated_at=datetime.now(timezone.utc)))
            else:
                row.payload = text
                row.updated_at = datetime.now(timezone.utc)
    except (SQLAlchemyError, OSError, TypeError, ValueError) as exc:
        log.warning("state_write_failed key=%s error=%s", key, exc)
        return False
    return True
