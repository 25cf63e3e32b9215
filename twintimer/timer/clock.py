"""Segment clock: the once-per-second tick source.

The engine only needs something that can start and stop a periodic
callback, so it depends on the :class:`Scheduler` protocol.  The real
implementation rides a ``QTimer`` on the Qt event loop, which keeps
ticks serialized with every other command.
"""

from __future__ import annotations

from typing import Callable, Protocol

from PyQt6.QtCore import QObject, QTimer


TICK_INTERVAL_MS = 1000


class Scheduler(Protocol):
    @property
    def is_active(self) -> bool: ...

    def start(self, callback: Callable[[], None]) -> None: ...

    def stop(self) -> None: ...


class SegmentClock(QObject):
    """``QTimer``-backed :class:`Scheduler` firing every second."""

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        interval_ms: int = TICK_INTERVAL_MS,
    ) -> None:
        super().__init__(parent)
        self._callback: Callable[[], None] | None = None
        self._qt_timer = QTimer(self)
        self._qt_timer.setInterval(interval_ms)
        self._qt_timer.timeout.connect(self._fire)

    @property
    def is_active(self) -> bool:
        return self._qt_timer.isActive()

    def start(self, callback: Callable[[], None]) -> None:
        """Begin ticking.  No-op if already ticking."""
        if self._qt_timer.isActive():
            return
        self._callback = callback
        self._qt_timer.start()

    def stop(self) -> None:
        """Cancel the schedule.  No-op if not ticking."""
        if not self._qt_timer.isActive():
            return
        self._qt_timer.stop()

    def _fire(self) -> None:
        if self._callback is not None:
            self._callback()
