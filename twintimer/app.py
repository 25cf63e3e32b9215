"""Main application window for TwinTimer."""

from __future__ import annotations

from PyQt6.QtCore import Qt, QTimer
from PyQt6.QtGui import QAction, QKeySequence
from PyQt6.QtWidgets import (
    QApplication, QMainWindow, QWidget, QVBoxLayout, QHBoxLayout,
    QLabel, QPushButton, QFrame, QScrollArea,
)

from .timer.engine import TimerEngine
from .timer.state import Segment, TimerState
from .ui.segment_panel import SegmentPanel
from .ui.log_panel import LogPanel
from .settings import Settings, load_settings, save_settings
from .audio.sounds import SoundManager


class TwinTimerApp(QMainWindow):
    """Main application window."""

    def __init__(
        self,
        *,
        engine: TimerEngine | None = None,
        settings: Settings | None = None,
        sounds: SoundManager | None = None,
    ) -> None:
        super().__init__()
        self.setWindowTitle("TwinTimer")
        self.setMinimumSize(360, 480)

        # ── geometry save timer ───────────────────────────────────────
        self._geometry_save_timer = QTimer(self)
        self._geometry_save_timer.setSingleShot(True)
        self._geometry_save_timer.setInterval(500)
        self._geometry_save_timer.timeout.connect(self._save_geometry)

        # ── settings ──────────────────────────────────────────────────
        self._settings: Settings = settings or load_settings()

        # ── engine ────────────────────────────────────────────────────
        if engine is None:
            engine = TimerEngine(
                parent=self,
                work_duration=self._settings.work_duration,
                break_duration=self._settings.break_duration,
            )
            engine.restore()
        self._engine = engine

        # ── sound ─────────────────────────────────────────────────────
        self._sounds = sounds or SoundManager(parent=self)
        self._sounds.set_volume(self._settings.sound_volume)
        self._sounds.set_enabled(self._settings.sound_enabled)
        self._sounds.set_muted(self._engine.muted)

        self._build_ui()
        self._connect_signals()
        self._setup_shortcuts()
        self._restore_geometry()
        self._apply_always_on_top(self._settings.always_on_top)

        self._on_state_changed(self._engine.state)
        self._refresh_log()

    # ══════════════════════════════════════════════════════════════════
    #  BUILD
    # ══════════════════════════════════════════════════════════════════

    def _build_ui(self) -> None:
        central = QWidget(self)
        self.setCentralWidget(central)
        root = QVBoxLayout(central)
        root.setContentsMargins(20, 16, 20, 16)
        root.setSpacing(12)

        self._status_label = QLabel("", central)
        self._status_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        root.addWidget(self._status_label)

        # ── segment cards ────────────────────────────────────────────
        seg_row = QHBoxLayout()
        seg_row.setSpacing(12)
        self._panels: dict[Segment, SegmentPanel] = {}
        for segment in (Segment.WORK, Segment.BREAK):
            panel = SegmentPanel(segment, central)
            self._panels[segment] = panel
            seg_row.addWidget(panel)
        root.addLayout(seg_row)

        # ── main controls ────────────────────────────────────────────
        btn_row = QHBoxLayout()
        btn_row.setSpacing(12)
        btn_row.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self._start_stop_btn = QPushButton("Start", central)
        self._start_stop_btn.setObjectName("primaryButton")

        self._skip_btn = QPushButton("Skip", central)
        self._skip_btn.setObjectName("secondaryButton")

        self._mute_btn = QPushButton("Mute", central)
        self._mute_btn.setObjectName("secondaryButton")
        self._mute_btn.setCheckable(True)

        btn_row.addWidget(self._start_stop_btn)
        btn_row.addWidget(self._skip_btn)
        btn_row.addWidget(self._mute_btn)
        root.addLayout(btn_row)

        # ── presets ──────────────────────────────────────────────────
        preset_row = QHBoxLayout()
        preset_row.setSpacing(8)
        preset_row.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._preset_buttons: list[QPushButton] = []
        for work_min, break_min in self._settings.valid_presets():
            btn = QPushButton(f"{work_min}/{break_min}", central)
            btn.setObjectName("presetButton")
            btn.setToolTip(f"{work_min} min work, {break_min} min break")
            btn.clicked.connect(
                lambda _checked=False, w=work_min, b=break_min: self._on_preset(w, b)
            )
            preset_row.addWidget(btn)
            self._preset_buttons.append(btn)
        root.addLayout(preset_row)

        # ── activity log ─────────────────────────────────────────────
        divider = QFrame(central)
        divider.setFrameShape(QFrame.Shape.HLine)
        root.addWidget(divider)

        scroll = QScrollArea(central)
        scroll.setWidgetResizable(True)
        scroll.setFrameShape(QFrame.Shape.NoFrame)
        self._log_panel = LogPanel()
        scroll.setWidget(self._log_panel)
        root.addWidget(scroll, 1)

    def _connect_signals(self) -> None:
        self._start_stop_btn.clicked.connect(self._on_start_stop)
        self._skip_btn.clicked.connect(self._on_skip)
        self._mute_btn.clicked.connect(self._on_mute)

        for panel in self._panels.values():
            panel.duration_entered.connect(self._engine.set_duration)
            panel.restart_requested.connect(self._engine.restart)

        self._log_panel.remove_requested.connect(self._engine.remove_log_entry)
        self._log_panel.clear_requested.connect(self._engine.clear_log)

        self._engine.tick.connect(self._on_tick)
        self._engine.state_changed.connect(self._on_state_changed)
        self._engine.log_changed.connect(self._refresh_log)
        self._engine.segment_finished.connect(self._sounds.on_segment_finished)

        app = QApplication.instance()
        if app is not None:
            app.applicationStateChanged.connect(self._on_application_state_changed)

    # ══════════════════════════════════════════════════════════════════
    #  SLOTS
    # ══════════════════════════════════════════════════════════════════

    def _on_start_stop(self) -> None:
        self._sounds.play("click")
        self._engine.toggle()

    def _on_skip(self) -> None:
        self._sounds.play("click")
        self._engine.skip()

    def _on_mute(self) -> None:
        self._engine.toggle_mute()

    def _on_preset(self, work_minutes: int, break_minutes: int) -> None:
        self._sounds.play("click")
        self._engine.apply_preset(work_minutes, break_minutes)

    def _on_tick(self, segment: Segment, remaining: int) -> None:
        self._panels[segment].set_remaining(remaining)

    def _on_state_changed(self, state: TimerState) -> None:
        for segment, panel in self._panels.items():
            panel.set_remaining(state.remaining_of(segment))
            panel.set_active(segment is state.current_segment)

        if state.is_running:
            self._status_label.setText("Timer is running")
            self._start_stop_btn.setText("Stop")
        else:
            self._status_label.setText("Timer is paused")
            self._start_stop_btn.setText("Start")

        self._mute_btn.setChecked(state.muted)
        self._mute_btn.setText("Unmute" if state.muted else "Mute")
        self._sounds.set_muted(state.muted)

    def _refresh_log(self) -> None:
        log = self._engine.activity_log
        self._log_panel.set_entries(
            self._engine.log_entries(),
            log.total_work_seconds(),
            log.total_break_seconds(),
        )

    def _on_application_state_changed(self, state: Qt.ApplicationState) -> None:
        """Back in the foreground → catch up on time spent suspended."""
        if (
            state == Qt.ApplicationState.ApplicationActive
            and self._settings.resync_on_activate
        ):
            self._engine.resync()

    # ══════════════════════════════════════════════════════════════════
    #  WINDOW STATE (geometry, always-on-top)
    # ══════════════════════════════════════════════════════════════════

    def _restore_geometry(self) -> None:
        """Restore window position and size from settings."""
        s = self._settings
        if s.window_x is not None and s.window_y is not None:
            self.move(s.window_x, s.window_y)
        if s.window_width and s.window_height:
            self.resize(s.window_width, s.window_height)

    def _save_geometry(self) -> None:
        """Persist current window geometry to settings."""
        if not self.isVisible():
            return
        pos = self.pos()
        size = self.size()
        self._settings.window_x = pos.x()
        self._settings.window_y = pos.y()
        self._settings.window_width = size.width()
        self._settings.window_height = size.height()
        save_settings(self._settings)

    def _schedule_geometry_save(self) -> None:
        """Debounce geometry saves: restart 500ms timer on each move/resize."""
        if hasattr(self, "_geometry_save_timer"):
            self._geometry_save_timer.start()

    def _apply_always_on_top(self, on_top: bool) -> None:
        """Apply or remove WindowStaysOnTopHint."""
        if not on_top:
            return
        self.setWindowFlags(self.windowFlags() | Qt.WindowType.WindowStaysOnTopHint)

    # ══════════════════════════════════════════════════════════════════
    #  KEYBOARD SHORTCUTS
    # ══════════════════════════════════════════════════════════════════

    def _setup_shortcuts(self) -> None:
        """Ctrl+Right skips, Ctrl+M mutes (Space handled via keyPressEvent)."""
        skip = QAction("Skip", self)
        skip.setShortcut(QKeySequence("Ctrl+Right"))
        skip.triggered.connect(self._on_skip)
        self.addAction(skip)

        mute = QAction("Mute", self)
        mute.setShortcut(QKeySequence("Ctrl+M"))
        mute.triggered.connect(self._on_mute)
        self.addAction(mute)

    # ══════════════════════════════════════════════════════════════════
    #  WINDOW EVENTS
    # ══════════════════════════════════════════════════════════════════

    def closeEvent(self, event) -> None:  # type: ignore[override]
        self._save_geometry()
        self._engine.save()
        event.accept()

    def resizeEvent(self, event) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        self._schedule_geometry_save()

    def moveEvent(self, event) -> None:  # type: ignore[override]
        super().moveEvent(event)
        self._schedule_geometry_save()

    def keyPressEvent(self, event) -> None:  # type: ignore[override]
        """Space starts/stops unless a time field is being edited."""
        if event.key() == Qt.Key.Key_Space and not event.modifiers():
            self._on_start_stop()
            event.accept()
            return
        super().keyPressEvent(event)
