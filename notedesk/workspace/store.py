from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path

from PySide6.QtCore import QObject, Signal

from notedesk.core.errors import DirectoryUnreadable, FileUnreadable, WorkspaceError
from notedesk.core.filenames import (
    clean_entry_name,
    initial_note_text,
    new_note_filename,
    note_filename_for,
)
from notedesk.core.models import DirectoryEntry, Note
from notedesk.logging_setup import log
from notedesk.vault import fs


def _normalize(path: Path | str) -> Path:
    return Path(os.path.abspath(os.path.expanduser(str(path))))


def _sort_notes(notes: list[Note]) -> list[Note]:
    # most recently modified first; name keeps equal timestamps stable
    by_name = sorted(notes, key=lambda n: n.filename.casefold())
    return sorted(by_name, key=lambda n: n.last_modified, reverse=True)


class WorkspaceStore(QObject):
    """
    Состояние рабочей папки: корень, текущая директория, заметки и записи
    текущей директории, выбранная заметка.

    Единственное место, которое трогает файловую систему для CRUD заметок и
    папок. Все операции синхронные и выполняются в UI-потоке. Ошибки не
    пробрасываются наружу: они логируются, эмитится operationFailed, а
    состояние остаётся прежним.
    """

    workspaceChanged = Signal(object)     # Path | None
    directoryChanged = Signal(object)     # Path | None
    notesChanged = Signal(object)         # tuple[Note, ...]
    entriesChanged = Signal(object)       # tuple[DirectoryEntry, ...]
    selectionChanged = Signal(object)     # Note | None
    operationFailed = Signal(str, str)    # error kind, message

    def __init__(self, parent: QObject | None = None):
        super().__init__(parent)
        self._root: Path | None = None
        self._current: Path | None = None
        self._notes: list[Note] = []
        self._entries: list[DirectoryEntry] = []
        self._selected: Note | None = None
        # notes trashed in this session; a late auto-save must not resurrect them
        self._trashed_ids: set[str] = set()

    # ───────────────────────── observable state ─────────────────────────

    @property
    def workspace_root(self) -> Path | None:
        return self._root

    @property
    def current_directory(self) -> Path | None:
        return self._current

    @property
    def notes(self) -> tuple[Note, ...]:
        return tuple(self._notes)

    @property
    def entries(self) -> tuple[DirectoryEntry, ...]:
        return tuple(self._entries)

    @property
    def selected_note(self) -> Note | None:
        return self._selected

    @property
    def has_workspace(self) -> bool:
        return self._root is not None

    def find_note(self, note_id: str) -> Note | None:
        for n in self._notes:
            if n.note_id == note_id:
                return n
        return None

    def breadcrumb_trail(self) -> list[Path]:
        """Ancestors from the workspace root down to the current directory, inclusive."""
        if self._root is None or self._current is None:
            return []
        trail = [self._root]
        p = self._root
        for part in self._current.relative_to(self._root).parts:
            p = p / part
            trail.append(p)
        return trail

    # ───────────────────────── workspace / navigation ─────────────────────────

    def set_workspace_root(self, path: Path | str) -> bool:
        """
        Open `path` as the workspace. The caller has already obtained read
        access; an unreadable path leaves the previous workspace untouched.
        """
        root = _normalize(path)
        if not fs.is_readable_directory(root):
            self._fail(DirectoryUnreadable(f"Not a readable directory: {root}", path=root))
            return False

        loaded = self._load(root)
        if loaded is None:
            return False

        log.info("Workspace opened: %s", root)
        self._root = root
        self._selected = None
        self._trashed_ids.clear()
        self._commit(root, *loaded)
        self.workspaceChanged.emit(self._root)
        self.selectionChanged.emit(None)
        return True

    def clear_workspace(self) -> None:
        if self._root is None:
            return
        log.info("Workspace closed: %s", self._root)
        self._root = None
        self._current = None
        self._notes = []
        self._entries = []
        had_selection = self._selected is not None
        self._selected = None
        self._trashed_ids.clear()

        self.workspaceChanged.emit(None)
        self.directoryChanged.emit(None)
        self.entriesChanged.emit(self.entries)
        self.notesChanged.emit(self.notes)
        if had_selection:
            self.selectionChanged.emit(None)

    def refresh(self) -> bool:
        """Re-list the current directory and re-read its notes (replace-all)."""
        if self._current is None:
            return False
        loaded = self._load(self._current)
        if loaded is None:
            return False
        self._commit(self._current, *loaded)
        return True

    def navigate_into(self, entry: DirectoryEntry) -> bool:
        if self._current is None or not entry.is_directory:
            return False
        target = _normalize(entry.path)
        if not self._is_within_root(target):
            log.warning("navigate_into refused: %s is outside %s", target, self._root)
            return False
        return self._enter(target)

    def navigate_up(self) -> bool:
        if self._root is None or self._current is None or self._current == self._root:
            return False
        parent = self._current.parent
        if not self._is_within_root(parent):
            log.warning("navigate_up refused: %s is outside %s", parent, self._root)
            return False
        return self._enter(parent)

    def navigate_to(self, path: Path | str) -> bool:
        """Breadcrumb jump. Any directory inside the workspace is accepted."""
        if self._root is None:
            return False
        target = _normalize(path)
        if not self._is_within_root(target):
            log.warning("navigate_to refused: %s is outside %s", target, self._root)
            return False
        return self._enter(target)

    # ───────────────────────── note / folder CRUD ─────────────────────────

    def create_note(self, *, now: datetime | None = None) -> Note | None:
        if self._current is None:
            return None

        now = now or datetime.now()
        path = self._current / new_note_filename(now)
        text = initial_note_text(path.stem)

        try:
            fs.create_text_file(path, text)
        except WorkspaceError as e:
            self._fail(e)
            return None

        note = Note(path=path, content=text, last_modified=now)
        log.info("Note created: %s", path)

        self._notes.insert(0, note)
        self._selected = note
        self._reload_entries()
        self.notesChanged.emit(self.notes)
        self.selectionChanged.emit(note)
        return note

    def create_folder(self, name: str) -> Path | None:
        if self._current is None:
            return None
        try:
            clean = clean_entry_name(name)
            path = self._current / clean
            fs.create_directory(path)
        except WorkspaceError as e:
            self._fail(e)
            return None

        log.info("Folder created: %s", path)
        self._reload_entries()
        return path

    def save_note(self, note: Note) -> bool:
        """
        Write `note.content` and replace the in-memory note with the same id.
        On failure the in-memory note is left as it was.
        """
        if note.note_id in self._trashed_ids:
            log.info("Save skipped: note was moved to trash: %s", note.path)
            return False

        stored_idx = self._index_of(note)
        # a rename since the snapshot was taken wins over the snapshot's path
        target = self._notes[stored_idx].path if stored_idx is not None else note.path

        try:
            fs.atomic_write_text(target, note.content)
        except WorkspaceError as e:
            self._fail(e)
            return False

        log.debug("Note saved: %s (chars=%d)", target, len(note.content))

        if stored_idx is not None:
            saved = note.with_path(target)
            saved.update_content(note.content)
            self._notes[stored_idx] = saved
            self.notesChanged.emit(self.notes)
        return True

    def rename_note(self, note: Note, new_base_name: str) -> Note | None:
        try:
            filename = note_filename_for(new_base_name)
        except WorkspaceError as e:
            self._fail(e)
            return None

        stored_idx = self._index_of(note)
        old_path = self._notes[stored_idx].path if stored_idx is not None else note.path
        new_path = old_path.parent / filename
        if new_path == old_path:
            log.info("Rename skipped: name unchanged (%s)", old_path.name)
            return None

        try:
            fs.move_file(old_path, new_path)
        except WorkspaceError as e:
            self._fail(e)
            return None

        log.info("Note renamed: %s -> %s", old_path.name, new_path.name)

        renamed = note.with_path(new_path)
        if stored_idx is not None:
            self._notes[stored_idx] = renamed

        selection_moved = self._selected is not None and self._selected.note_id == note.note_id
        if selection_moved:
            # keep the editor's in-memory text, only the path changes
            self._selected = self._selected.with_path(new_path)

        self._reload_entries()
        self.notesChanged.emit(self.notes)
        if selection_moved:
            self.selectionChanged.emit(self._selected)
        return renamed

    def delete_note(self, note: Note) -> bool:
        """Move the note's file to the OS trash. Never a permanent delete."""
        stored_idx = self._index_of(note)
        path = self._notes[stored_idx].path if stored_idx is not None else note.path

        try:
            fs.move_to_trash(path)
        except WorkspaceError as e:
            self._fail(e)
            return False

        log.info("Note moved to trash: %s", path)
        self._trashed_ids.add(note.note_id)

        if stored_idx is not None:
            del self._notes[stored_idx]

        was_selected = self._selected is not None and self._selected.note_id == note.note_id
        if was_selected:
            self._selected = None

        self._reload_entries()
        self.notesChanged.emit(self.notes)
        if was_selected:
            self.selectionChanged.emit(None)
        return True

    def select(self, note: Note | None) -> None:
        if note is None:
            if self._selected is not None:
                self._selected = None
                self.selectionChanged.emit(None)
            return

        idx = self._index_of(note)
        if idx is None:
            log.warning("select ignored: note is not in the current directory: %s", note.path)
            return
        self._selected = self._notes[idx]
        self.selectionChanged.emit(self._selected)

    # ───────────────────────── internal ─────────────────────────

    def _is_within_root(self, path: Path) -> bool:
        if self._root is None:
            return False
        return path == self._root or self._root in path.parents

    def _index_of(self, note: Note) -> int | None:
        for i, n in enumerate(self._notes):
            if n.note_id == note.note_id:
                return i
        return None

    def _enter(self, directory: Path) -> bool:
        loaded = self._load(directory)
        if loaded is None:
            return False
        log.debug("Directory entered: %s", directory)
        self._commit(directory, *loaded)
        return True

    def _load(self, directory: Path) -> tuple[list[DirectoryEntry], list[Note]] | None:
        """
        List `directory` and read its notes. None if the directory itself
        cannot be listed; unreadable notes are skipped one by one.
        """
        try:
            entries = fs.list_directory(directory)
        except DirectoryUnreadable as e:
            self._fail(e)
            return None

        known_ids = {n.path: n.note_id for n in self._notes}
        notes: list[Note] = []
        skipped = 0
        for entry in entries:
            if not entry.is_markdown_note:
                continue
            try:
                text, mtime = fs.read_note_file(entry.path)
            except FileUnreadable:
                skipped += 1
                log.warning("Note skipped (unreadable): %s", entry.path, exc_info=True)
                continue
            note = Note(path=entry.path, content=text, last_modified=mtime)
            if entry.path in known_ids:
                note.note_id = known_ids[entry.path]
            notes.append(note)

        log.debug(
            "Directory loaded: %s entries=%d notes=%d skipped=%d",
            directory, len(entries), len(notes), skipped,
        )
        return entries, _sort_notes(notes)

    def _commit(self, directory: Path, entries: list[DirectoryEntry], notes: list[Note]) -> None:
        moved = directory != self._current
        self._current = directory
        self._entries = entries
        self._notes = notes
        if moved:
            self.directoryChanged.emit(self._current)
        self.entriesChanged.emit(self.entries)
        self.notesChanged.emit(self.notes)

    def _reload_entries(self) -> None:
        if self._current is None:
            return
        try:
            self._entries = fs.list_directory(self._current)
        except DirectoryUnreadable:
            # the mutation itself succeeded; the listing just stays stale
            log.warning("Entries refresh failed: %s", self._current, exc_info=True)
            return
        self.entriesChanged.emit(self.entries)

    def _fail(self, err: WorkspaceError) -> None:
        log.warning("%s: %s", err.kind, err)
        self.operationFailed.emit(err.kind, str(err))
