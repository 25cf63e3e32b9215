"""Database package."""

from .db import configure_engine, get_session, init_db
from .models import StateSlot
from .store import STATE_KEY, read_state, write_state

__all__ = [
    "configure_engine",
    "get_session",
    "init_db",
    "StateSlot",
    "STATE_KEY",
    "read_state",
    "write_state",
]
