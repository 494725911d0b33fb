from __future__ import annotations

from typing import Protocol

from PySide6.QtCore import QObject, QTimer

from notedesk.core.models import Note
from notedesk.logging_setup import log
from notedesk.settings import AUTOSAVE_DEBOUNCE_MS


class NoteSaver(Protocol):
    def save_note(self, note: Note) -> bool: ...


class AutoSaveScheduler(QObject):
    """
    Debounced auto-save: one single-shot QTimer, one pending snapshot.

    schedule(note) restarts the window; when it elapses the latest snapshot is
    saved once. Scheduling a different note drops the previous pending save
    without writing it; callers that must not lose it call flush() first.
    """

    def __init__(
        self,
        store: NoteSaver,
        *,
        parent: QObject | None = None,
        delay_ms: int = AUTOSAVE_DEBOUNCE_MS,
    ):
        super().__init__(parent)
        self._store = store
        self._pending: Note | None = None

        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(int(delay_ms))
        self._timer.timeout.connect(self._on_timeout)

    @property
    def pending_note(self) -> Note | None:
        return self._pending

    @property
    def is_pending(self) -> bool:
        return self._pending is not None

    def schedule(self, note: Note) -> None:
        """Fire-and-forget: never blocks, never raises."""
        try:
            previous = self._pending
            if previous is not None and previous.note_id != note.note_id:
                log.info(
                    "Autosave dropped: switched from %s to %s before timer fired",
                    previous.path, note.path,
                )
            self._pending = note.snapshot()
            self._timer.start()
        except Exception:
            log.exception("Failed to schedule autosave for %s", getattr(note, "path", note))

    def cancel(self) -> None:
        self._stop_timer()
        self._pending = None

    def flush(self) -> bool:
        """Save the pending snapshot right now (note switch, close, ...)."""
        self._stop_timer()
        return self._save_pending()

    def _stop_timer(self) -> None:
        try:
            if self._timer.isActive():
                self._timer.stop()
        except Exception:
            log.exception("Failed to stop autosave timer")

    def _on_timeout(self) -> None:
        self._save_pending()

    def _save_pending(self) -> bool:
        note, self._pending = self._pending, None
        if note is None:
            return False
        try:
            return bool(self._store.save_note(note))
        except Exception:
            log.exception("Autosave failed: %s", note.path)
            return False
