"""SQLite engine and session handling for the state store.

The on-disk database lives next to settings.json.  Tests swap it for an
in-memory one with :func:`configure_engine`.
"""

import logging
from pathlib import Path
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session as OrmSession
from sqlalchemy.pool import StaticPool

from .models import Base

APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "TwinTimer"
DB_PATH = APP_SUPPORT_DIR / "twintimer.db"

log = logging.getLogger("twintimer.db")

_engine = None
_SessionFactory = None


def _build_engine(url: str):
    kwargs = {"connect_args": {"check_same_thread": False}, "echo": False}
    if url.endswith(":memory:"):
        # every session must see the same in-memory database
        kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


def _current_engine():
    global _engine
    if _engine is None:
        APP_SUPPORT_DIR.mkdir(parents=True, exist_ok=True)
        _engine = _build_engine(f"sqlite:///{DB_PATH}")
    return _engine


def configure_engine(url: str) -> None:
    """Point the store at *url* instead of the file under APP_SUPPORT_DIR."""
    global _engine, _SessionFactory
    if _engine is not None:
        _engine.dispose()
    _engine = _build_engine(url)
    _SessionFactory = sessionmaker(bind=_engine, expire_on_commit=False)


def init_db() -> bool:
    """Create the state table.  Returns False if storage is unavailable.

    A failure here is logged and the app carries on without durability;
    reads and writes in :mod:`.store` fail soft the same way.
    """
    try:
        Base.metadata.create_all(_current_engine())
    except (SQLAlchemyError, OSError) as exc:
        log.warning("db_init_failed path=%s error=%s", DB_PATH, exc)
        return False
    return True


@contextmanager
def get_session():
    """Yield a session; commit on success, rollback on error."""
    global _SessionFactory
    if _SessionFactory is None:
        _SessionFactory = sessionmaker(bind=_current_engine(), expire_on_commit=False)
    session: OrmSession = _SessionFactory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
