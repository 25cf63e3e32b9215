"""Shared pytest fixtures for TwinTimer tests."""

import os
import sys
import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtWidgets import QApplication

from twintimer.database.db import configure_engine, init_db
from twintimer.timer.engine import TimerEngine

from helpers import FakeClock, ManualScheduler


@pytest.fixture(scope="session")
def qapp():
    """A single QApplication instance shared across the entire test run."""
    app = QApplication.instance() or QApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def test_db():
    """Point every test at a fresh in-memory SQLite database."""
    configure_engine("sqlite:///:memory:")
    init_db()
    yield


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def engine(qapp, clock, scheduler):
    """Fresh 25/5 TimerEngine writing to the test database."""
    return TimerEngine(
        parent=None,
        db_enabled=True,
        scheduler=scheduler,
        now_ms=clock,
        work_duration=25 * 60,
        break_duration=5 * 60,
    )


@pytest.fixture
def engine_no_db(qapp, clock, scheduler):
    """Fresh 25/5 TimerEngine with persistence off (pure state-machine tests)."""
    return TimerEngine(
        parent=None,
        db_enabled=False,
        scheduler=scheduler,
        now_ms=clock,
        work_duration=25 * 60,
        break_duration=5 * 60,
    )
