"""Activity log panel: today's cycles, newest first.

Each row has a small delete button; the header shows the window's work
and break totals and a "Clear" button.
"""

from __future__ import annotations

from datetime import datetime

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QFrame,
)

from ..timer.duration import format_duration
from ..timer.state import LogEntry, SkippedWorkEntry


def describe_entry(entry: LogEntry) -> str:
    """One-line summary of a log entry, e.g. ``14:05  Work 25:00 · Break 05:00``."""
    stamp = datetime.fromtimestamp(entry.completed_at / 1000).strftime("%H:%M")
    if isinstance(entry, SkippedWorkEntry):
        work = f"Work {format_duration(entry.work_elapsed)}/{format_duration(entry.work_duration)}"
        brk = (
            f"Break {format_duration(entry.break_elapsed)}"
            f"/{format_duration(entry.intended_break_duration)}"
        )
    else:
        work = f"Work {format_duration(entry.work_duration)}"
        brk = f"Break {format_duration(entry.break_duration)}"
        if entry.break_duration != entry.intended_break_duration:
            brk += f"/{format_duration(entry.intended_break_duration)}"
    if entry.omit_break:
        return f"{stamp}  {work}"
    return f"{stamp}  {work} · {brk}"


class LogPanel(QWidget):
    """Displays the day window's logged cycles."""

    remove_requested = pyqtSignal(str)
    clear_requested = pyqtSignal()

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._row_widgets: list[QWidget] = []
        self._build_ui()

    # ── build ─────────────────────────────────────────────────────────

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 8, 0, 0)
        layout.setSpacing(6)

        header_row = QHBoxLayout()
        self._header = QLabel("Today")
        header_row.addWidget(self._header)
        header_row.addStretch(1)
        self._clear_btn = QPushButton("Clear")
        self._clear_btn.setObjectName("secondaryButton")
        self._clear_btn.clicked.connect(lambda: self.clear_requested.emit())
        header_row.addWidget(self._clear_btn)
        layout.addLayout(header_row)

        self._rows_container = QVBoxLayout()
        self._rows_container.setSpacing(4)
        layout.addLayout(self._rows_container)

        self._empty_label = QLabel("No cycles logged yet")
        self._empty_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._empty_label)
        layout.addStretch(1)

    # ── refresh ───────────────────────────────────────────────────────

    def set_entries(
        self,
        entries: list[LogEntry],
        total_work: int = 0,
        total_break: int = 0,
    ) -> None:
        """Rebuild the rows from *entries* (already in display order)."""
        for w in self._row_widgets:
            w.setParent(None)
            w.deleteLater()
        self._row_widgets.clear()

        for entry in entries:
            row = self._make_row(entry)
            self._rows_container.addWidget(row)
            self._row_widgets.append(row)

        self._empty_label.setVisible(not entries)
        self._clear_btn.setEnabled(bool(entries))
        if entries:
            self._header.setText(
                f"Today: work {format_duration(total_work)}, "
                f"break {format_duration(total_break)}"
            )
        else:
            self._header.setText("Today")

    def row_count(self) -> int:
        return len(self._row_widgets)

    def _make_row(self, entry: LogEntry) -> QWidget:
        row = QFrame(self)
        row.setObjectName("logRow")
        h = QHBoxLayout(row)
        h.setContentsMargins(8, 2, 4, 2)

        label = QLabel(describe_entry(entry), row)
        h.addWidget(label, 1)

        delete_btn = QPushButton("✕", row)
        delete_btn.setFixedWidth(28)
        delete_btn.setToolTip("Remove this entry")
        entry_id = entry.entry_id
        delete_btn.clicked.connect(lambda: self.remove_requested.emit(entry_id))
        h.addWidget(delete_btn)
        return row
