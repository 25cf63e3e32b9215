"""One segment card (work or break): editable time field + restart.

The time field doubles as the duration input.  On commit the text goes
through :func:`parse_duration`; anything it rejects is thrown away and
the field snaps back to the current countdown.
"""

from __future__ import annotations

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QFrame, QVBoxLayout, QLabel, QLineEdit, QPushButton, QWidget,
)

from ..timer.duration import format_duration, parse_duration
from ..timer.state import Segment


SEGMENT_TITLES: dict[Segment, str] = {
    Segment.WORK:  "WORK",
    Segment.BREAK: "BREAK",
}


class SegmentPanel(QFrame):
    """Countdown display for a single segment."""

    duration_entered = pyqtSignal(object, int)   # segment, seconds
    restart_requested = pyqtSignal(object)       # segment

    def __init__(self, segment: Segment, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._segment = segment
        self._remaining = 0
        self._build_ui()

    @property
    def segment(self) -> Segment:
        return self._segment

    # ── build ─────────────────────────────────────────────────────────────

    def _build_ui(self) -> None:
        self.setObjectName("segmentCard")
        layout = QVBoxLayout(self)
        layout.setContentsMargins(16, 12, 16, 12)
        layout.setSpacing(6)
        layout.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self._title = QLabel(SEGMENT_TITLES[self._segment], self)
        self._title.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._title)

        self._time_edit = QLineEdit(self)
        self._time_edit.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._time_edit.setToolTip('Type e.g. "25", "4:30", "90s" or "4m30s"')
        self._time_edit.setStyleSheet("font-size: 36px; font-weight: 600;")
        self._time_edit.editingFinished.connect(self._on_edit_finished)
        layout.addWidget(self._time_edit)

        self._restart_btn = QPushButton("Restart", self)
        self._restart_btn.setObjectName("secondaryButton")
        self._restart_btn.clicked.connect(
            lambda: self.restart_requested.emit(self._segment)
        )
        layout.addWidget(self._restart_btn)

    # ── display ───────────────────────────────────────────────────────────

    def set_remaining(self, seconds: int) -> None:
        self._remaining = seconds
        # Don't clobber what the user is typing
        if not self._time_edit.hasFocus():
            self._time_edit.setText(format_duration(seconds))

    def set_active(self, active: bool) -> None:
        self.setProperty("active", active)
        weight = "700" if active else "400"
        self._title.setStyleSheet(f"font-weight: {weight};")
        self._title.setText(
            f"▶ {SEGMENT_TITLES[self._segment]}" if active
            else SEGMENT_TITLES[self._segment]
        )

    def time_text(self) -> str:
        return self._time_edit.text()

    # ── slots ─────────────────────────────────────────────────────────────

    def _on_edit_finished(self) -> None:
        seconds = parse_duration(self._time_edit.text())
        if seconds is None or seconds < 1:
            self._time_edit.setText(format_duration(self._remaining))
            return
        self.duration_entered.emit(self._segment, seconds)
