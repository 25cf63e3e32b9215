"""Shared test helpers for TwinTimer."""

from twintimer.timer.engine import TimerEngine


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


class ManualScheduler:
    """Scheduler whose ticks are fired by the test instead of a QTimer."""

    def __init__(self):
        self._callback = None
        self._active = False
        self.starts = 0
        self.stops = 0

    @property
    def is_active(self) -> bool:
        return self._active

    def start(self, callback) -> None:
        if self._active:
            return
        self._callback = callback
        self._active = True
        self.starts += 1

    def stop(self) -> None:
        if not self._active:
            return
        self._active = False
        self.stops += 1

    def fire(self, count: int = 1) -> None:
        """Deliver up to *count* ticks; stops early if the schedule is cancelled."""
        for _ in range(count):
            if not self._active:
                return
            self._callback()


class FakeClock:
    """Injectable epoch-milliseconds source."""

    START = 1_700_000_000_000

    def __init__(self, now: int = START):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: float = 0, ms: int = 0) -> None:
        self.now += int(seconds * 1000) + ms


def run_ticks(engine: TimerEngine, scheduler: ManualScheduler, count: int) -> None:
    """Start the engine if needed and deliver *count* ticks."""
    engine.start()
    scheduler.fire(count)
