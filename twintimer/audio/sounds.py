"""Sound synthesis and playback using numpy + QSoundEffect.

All sounds are generated programmatically as WAV files using sine-wave
synthesis.  Files are cached to disk so subsequent app launches are
instant.

Sound names
-----------
- ``segment_end``: long 440 Hz tone when a work segment runs out
- ``ding_dong``:   fast two-note trill when a break runs out
- ``click``:       short 700 Hz blip for buttons
"""

from __future__ import annotations

import io
import logging
import wave
from pathlib import Path

import numpy as np

from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtMultimedia import QSoundEffect

from ..timer.state import Segment


# ── paths ────────────────────────────────────────────────────────────────

APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "TwinTimer"
SOUNDS_DIR = APP_SUPPORT_DIR / "sounds"

SOUND_NAMES = (
    "segment_end",
    "ding_dong",
    "click",
)

SAMPLE_RATE = 44100

OVERTONE_RATIO = 2.37
TRILL_NOTES = (1046.0, 659.0)  # high, low
TRILL_NOTE_SECONDS = 0.045
TRILL_GAP_SECONDS = 0.020
TRILL_LENGTH_SECONDS = 1.5

log = logging.getLogger("twintimer.audio")


# ═══════════════════════════════════════════════════════════════════════════
#  WAV SYNTHESIS HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def _sine(freq: float, duration_s: float) -> np.ndarray:
    """Pure sine wave at *freq* Hz for *duration_s* seconds."""
    t = np.linspace(0, duration_s, int(SAMPLE_RATE * duration_s), endpoint=False)
    return np.sin(2 * np.pi * freq * t)


def _exp_decay(length: int, start: float, end: float) -> np.ndarray:
    """Exponential gain ramp from *start* to *end* over *length* samples."""
    if length <= 0:
        return np.zeros(0)
    return start * (end / start) ** np.linspace(0.0, 1.0, length)


def _beep(frequency: float, duration_s: float) -> np.ndarray:
    """Sine tone with a quieter, shorter overtone, both decaying."""
    base = _sine(frequency, duration_s)
    base = base * _exp_decay(len(base), 0.06, 0.004)

    over_dur = duration_s * 0.6
    overtone = _sine(frequency * OVERTONE_RATIO, over_dur)
    overtone = overtone * _exp_decay(len(overtone), 0.025, 0.001)

    mixed = base.copy()
    mixed[: len(overtone)] += overtone
    # raw gains are very quiet at 16-bit PCM
    return mixed * 8.0


def _to_wav_bytes(samples: np.ndarray) -> bytes:
    """Convert a float64 numpy array (-1..1) to 16-bit PCM WAV bytes."""
    # Clip and scale
    samples = np.clip(samples, -1.0, 1.0)
    int_samples = (samples * 32767).astype(np.int16)

    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(SAMPLE_RATE)
        wf.writeframes(int_samples.tobytes())
    return buf.getvalue()


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND GENERATORS
# ═══════════════════════════════════════════════════════════════════════════


def _generate_segment_end() -> bytes:
    """Work over: one long A4 with a bell-like overtone."""
    return _to_wav_bytes(_beep(440.0, 1.15))


def _generate_ding_dong() -> bytes:
    """Break over: alternating high/low trill for 1.5 s."""
    cycle = TRILL_NOTE_SECONDS + TRILL_GAP_SECONDS
    count = int(TRILL_LENGTH_SECONDS / cycle)
    gap = np.zeros(int(SAMPLE_RATE * TRILL_GAP_SECONDS))
    parts: list[np.ndarray] = []
    for i in range(count):
        parts.append(_beep(TRILL_NOTES[i % 2], TRILL_NOTE_SECONDS))
        parts.append(gap)
    return _to_wav_bytes(np.concatenate(parts))


def _generate_click() -> bytes:
    """Button click: short 700 Hz blip."""
    return _to_wav_bytes(_beep(700.0, 0.15))


# Map sound names to generator functions
_GENERATORS: dict[str, callable] = {
    "segment_end": _generate_segment_end,
    "ding_dong": _generate_ding_dong,
    "click": _generate_click,
}

# Which sound marks the end of which segment
SEGMENT_END_SOUNDS: dict[Segment, str] = {
    Segment.WORK: "segment_end",
    Segment.BREAK: "ding_dong",
}


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND MANAGER
# ═══════════════════════════════════════════════════════════════════════════


class SoundManager(QObject):
    """Manages sound synthesis, caching, and playback.

    Usage::

        mgr = SoundManager(parent=self)
        mgr.set_volume(70)
        mgr.play("segment_end")

    ``muted`` mirrors the timer's mute flag; ``enabled`` is the settings
    switch.  Either one silences playback.
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        sounds_dir: Path | None = None,
    ) -> None:
        super().__init__(parent)
        self._enabled = True
        self._muted = False
        self._volume = 0.7  # 0.0–1.0
        self._sounds_dir = sounds_dir or SOUNDS_DIR
        self._effects: dict[str, QSoundEffect] = {}

        try:
            self._ensure_wav_files()
        except OSError as exc:
            log.warning("sound_cache_unavailable dir=%s error=%s", self._sounds_dir, exc)
            self._enabled = False
            return
        self._load_effects()

    # ── public API ────────────────────────────────────────────────────

    def set_volume(self, level: int) -> None:
        """Set volume (0-100).  Updates all loaded effects."""
        self._volume = max(0, min(level, 100)) / 100.0
        for effect in self._effects.values():
            effect.setVolume(self._volume)

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    def set_muted(self, muted: bool) -> None:
        self._muted = muted

    def play(self, name: str) -> None:
        """Play a sound by name.  No-op if disabled, muted or name unknown."""
        if not self._enabled or self._muted:
            return
        effect = self._effects.get(name)
        if effect is not None:
            effect.play()

    def on_segment_finished(self, segment: Segment) -> None:
        """Slot for ``TimerEngine.segment_finished``."""
        self.play(SEGMENT_END_SOUNDS[segment])

    @property
    def volume(self) -> int:
        """Current volume as 0-100 integer."""
        return round(self._volume * 100)

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def muted(self) -> bool:
        return self._muted

    # ── internal ──────────────────────────────────────────────────────

    def _ensure_wav_files(self) -> None:
        """Generate any missing WAV files to the cache directory."""
        self._sounds_dir.mkdir(parents=True, exist_ok=True)
        for name, gen_fn in _GENERATORS.items():
            path = self._sounds_dir / f"{name}.wav"
            if not path.exists():
                path.write_bytes(gen_fn())

    def _load_effects(self) -> None:
        """Create QSoundEffect instances from cached WAV files."""
        for name in SOUND_NAMES:
            path = self._sounds_dir / f"{name}.wav"
            if path.exists():
                effect = QSoundEffect(self)
                effect.setSource(QUrl.fromLocalFile(str(path)))
                effect.setVolume(self._volume)
                self._effects[name] = effect
