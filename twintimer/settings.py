"""Application settings with JSON persistence.

Settings are stored at:
    ~/Library/Application Support/TwinTimer/settings.json

Usage::

    settings = load_settings()
    settings.sound_volume = 50
    save_settings(settings)

Timer countdowns and the activity log are not settings; they live in the
database snapshot (see ``twintimer.database.store``).  The durations here
only seed a first run.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict, field, fields
from pathlib import Path


# Same app-support directory as db.py
APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "TwinTimer"
SETTINGS_PATH = APP_SUPPORT_DIR / "settings.json"

log = logging.getLogger("twintimer.settings")


def _default_presets() -> list[list[int]]:
    return [[25, 5], [50, 10], [15, 3]]


@dataclass
class Settings:
    """All user-configurable preferences."""

    # ── timer ─────────────────────────────────────────────────────────
    work_duration: int = 25 * 60           # seconds
    break_duration: int = 5 * 60
    presets: list[list[int]] = field(default_factory=_default_presets)  # [work_min, break_min]
    resync_on_activate: bool = True

    # ── audio ─────────────────────────────────────────────────────────
    sound_enabled: bool = True
    sound_volume: int = 70                 # 0-100

    # ── logging ───────────────────────────────────────────────────────
    log_level: str = "INFO"

    # ── window ────────────────────────────────────────────────────────
    window_x: int | None = None
    window_y: int | None = None
    window_width: int = 420
    window_height: int = 640
    always_on_top: bool = False

    def valid_presets(self) -> list[tuple[int, int]]:
        """Presets that are a pair of positive minute counts."""
        result = []
        if not isinstance(self.presets, list):
            return result
        for item in self.presets:
            if (
                isinstance(item, (list, tuple))
                and len(item) == 2
                and all(isinstance(v, int) and not isinstance(v, bool) and v > 0 for v in item)
            ):
                result.append((item[0], item[1]))
        return result


def _accepts(default, value) -> bool:
    """True if *value* has the same JSON type as the field default."""
    if default is None:
        # optional window coordinates
        return value is None or (isinstance(value, int) and not isinstance(value, bool))
    return type(value) is type(default)


def load_settings() -> Settings:
    """Load settings from disk, falling back to defaults."""
    try:
        if SETTINGS_PATH.exists():
            data = json.loads(SETTINGS_PATH.read_text(encoding="utf-8"))
            # Only use keys that exist in the dataclass
            valid_keys = {f.name for f in fields(Settings)}
            filtered = {k: v for k, v in data.items() if k in valid_keys}
            defaults = Settings()
            for key in list(filtered):
                if not _accepts(getattr(defaults, key), filtered[key]):
                    log.warning("settings_value_ignored key=%s value=%r", key, filtered[key])
                    del filtered[key]
            return Settings(**filtered)
    except (OSError, ValueError, TypeError, AttributeError) as exc:
        log.warning("settings_load_failed path=%s error=%s", SETTINGS_PATH, exc)
    return Settings()


def save_settings(settings: Settings) -> None:
    """Write settings to disk as JSON."""
    APP_SUPPORT_DIR.mkdir(parents=True, exist_ok=True)
    SETTINGS_PATH.write_text(
        json.dumps(asdict(settings), indent=2) + "\n",
        encoding="utf-8",
    )
