from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from PySide6.QtCore import QSettings

APP_NAME = "notedesk"
APP_DIR = Path.home() / f".{APP_NAME}"
LOG_DIR = APP_DIR / "logs"
LOG_PATH = LOG_DIR / f"{APP_NAME}.log"

NOTE_EXTENSION = ".md"
NEW_NOTE_PREFIX = "New Note"
NEW_NOTE_TIME_FORMAT = "%Y-%m-%d %H-%M-%S"

AUTOSAVE_DEBOUNCE_MS = 2000
PREVIEW_DEBOUNCE_MS = 350


@dataclass(frozen=True)
class SettingsKeys:
    WORKSPACE_DIR: str = "workspace/dir"
    UI_GEOMETRY: str = "ui/geometry"
    UI_LEFT_WIDTH: str = "ui/left_pane_width"
    PREVIEW_VISIBLE: str = "preview/visible"
    PREVIEW_MODE: str = "preview/mode"


def get_str(settings: QSettings, key: str, default: str) -> str:
    try:
        val = settings.value(key, default)
        return str(val) if val is not None else default
    except Exception:
        return default


def get_int(settings: QSettings, key: str, default: int) -> int:
    try:
        return int(settings.value(key, default))
    except Exception:
        return default


def get_bool(settings: QSettings, key: str, default: bool) -> bool:
    # QSettings on some platforms hands back "true"/"false" strings
    try:
        val = settings.value(key, default)
    except Exception:
        return default
    if isinstance(val, bool):
        return val
    if isinstance(val, str):
        low = val.strip().lower()
        if low in ("true", "1", "yes", "on"):
            return True
        if low in ("false", "0", "no", "off"):
            return False
        return default
    try:
        return bool(int(val))
    except Exception:
        return default


def safe_set_setting(settings: QSettings, key: str, value) -> None:
    """Best-effort запись в QSettings без падений UI."""
    try:
        settings.setValue(key, value)
    except Exception:
        pass
