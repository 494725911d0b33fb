from __future__ import annotations

from pathlib import Path

from PySide6.QtCore import Qt, QTimer, QSettings
from PySide6.QtGui import QAction
from PySide6.QtWidgets import (
    QMainWindow, QWidget, QHBoxLayout, QVBoxLayout, QLabel,
    QListWidget, QListWidgetItem, QPlainTextEdit, QFileDialog,
    QSplitter, QStackedWidget, QStyle, QTabWidget, QToolButton,
)
from PySide6.QtWebEngineWidgets import QWebEngineView

from notedesk.core.models import DirectoryEntry, Note
from notedesk.logging_setup import log
from notedesk.services.markdown_renderer import MarkdownRenderer
from notedesk.settings import (
    APP_NAME,
    PREVIEW_DEBOUNCE_MS,
    SettingsKeys,
    get_bool,
    get_int,
    get_str,
    safe_set_setting,
)
from notedesk.ui.dialogs import ask_text, confirm_trash, show_failure
from notedesk.ui.qt_utils import blocked_signals
from notedesk.workspace.autosave import AutoSaveScheduler
from notedesk.workspace.store import WorkspaceStore

_ROLE_PAYLOAD = Qt.UserRole


class MainWindow(QMainWindow):
    """
    Тонкий UI поверх WorkspaceStore: вся работа с файлами идёт через store,
    окно только отображает его состояние и переводит действия пользователя
    в вызовы store / autosave.
    """

    def __init__(self, *, workspace: Path | None = None):
        super().__init__()
        self.setWindowTitle(APP_NAME)

        self._settings = QSettings(APP_NAME, APP_NAME)
        self.store = WorkspaceStore(self)
        self.autosave = AutoSaveScheduler(self.store, parent=self)
        self.renderer = MarkdownRenderer(
            mode=get_str(self._settings, SettingsKeys.PREVIEW_MODE, "markdown")
        )

        # --- left: breadcrumbs + folder / notes lists ---
        self.crumbs = QWidget()
        self._crumbs_layout = QHBoxLayout(self.crumbs)
        self._crumbs_layout.setContentsMargins(0, 0, 0, 0)

        self.entries_list = QListWidget()
        self.notes_list = QListWidget()
        self.tabs = QTabWidget()
        self.tabs.addTab(self.entries_list, "Folder")
        self.tabs.addTab(self.notes_list, "Notes")

        left = QWidget()
        left_layout = QVBoxLayout(left)
        left_layout.setContentsMargins(8, 8, 8, 8)
        left_layout.addWidget(self.crumbs)
        left_layout.addWidget(self.tabs)

        # --- right: title + editor / preview ---
        self.title_label = QLabel("No Note Selected")
        self.editor = QPlainTextEdit()
        self.editor.setEnabled(False)
        self.preview = QWebEngineView()
        self.stack = QStackedWidget()
        self.stack.addWidget(self.editor)
        self.stack.addWidget(self.preview)

        right = QWidget()
        right_layout = QVBoxLayout(right)
        right_layout.setContentsMargins(8, 8, 8, 8)
        right_layout.addWidget(self.title_label)
        right_layout.addWidget(self.stack)

        self.splitter = QSplitter(Qt.Horizontal)
        self.splitter.addWidget(left)
        self.splitter.addWidget(right)
        self.splitter.setStretchFactor(0, 1)
        self.splitter.setStretchFactor(1, 3)
        self.setCentralWidget(self.splitter)

        self.preview_timer = QTimer(self)
        self.preview_timer.setSingleShot(True)
        self.preview_timer.setInterval(PREVIEW_DEBOUNCE_MS)
        self.preview_timer.timeout.connect(self._render_preview)

        self._build_menu()
        self._restore_ui_state()

        # store -> UI
        self.store.directoryChanged.connect(lambda *_: self._rebuild_breadcrumbs())
        self.store.entriesChanged.connect(self._show_entries)
        self.store.notesChanged.connect(self._show_notes)
        self.store.selectionChanged.connect(self._show_selection)
        self.store.operationFailed.connect(
            lambda kind, message: show_failure(self, kind=kind, message=message)
        )

        # UI -> store
        self.entries_list.itemActivated.connect(self._on_entry_activated)
        self.entries_list.itemClicked.connect(self._on_entry_clicked)
        self.notes_list.itemClicked.connect(self._on_note_clicked)
        self.editor.textChanged.connect(self._on_text_changed)

        self._startup_open(workspace)

    # ───────────────────────── startup / shutdown ─────────────────────────

    def _startup_open(self, workspace: Path | None) -> None:
        if workspace is None:
            remembered = get_str(self._settings, SettingsKeys.WORKSPACE_DIR, "")
            workspace = Path(remembered) if remembered else None
        if workspace is not None and self.store.set_workspace_root(workspace):
            return
        log.info("No workspace to reopen; waiting for the user to pick one")

    def _restore_ui_state(self) -> None:
        try:
            geo = self._settings.value(SettingsKeys.UI_GEOMETRY)
            if geo:
                self.restoreGeometry(geo)
            else:
                self.resize(1100, 700)
            left = get_int(self._settings, SettingsKeys.UI_LEFT_WIDTH, 0)
            if left > 0:
                self.splitter.setSizes([left, max(1, self.width() - left)])
        except Exception:
            log.exception("Failed to restore UI state from QSettings")

        if get_bool(self._settings, SettingsKeys.PREVIEW_VISIBLE, False):
            self._act_preview.setChecked(True)
            self._toggle_preview(True)

    def closeEvent(self, event):  # type: ignore[override]
        # pending edits must reach the disk before the window goes away
        self.autosave.flush()
        safe_set_setting(self._settings, SettingsKeys.UI_GEOMETRY, self.saveGeometry())
        safe_set_setting(self._settings, SettingsKeys.UI_LEFT_WIDTH, self.splitter.sizes()[0])
        super().closeEvent(event)

    # ───────────────────────── menu ─────────────────────────

    def _build_menu(self) -> None:
        filem = self.menuBar().addMenu("File")

        def add(menu, text, slot, shortcut=None, checkable=False) -> QAction:
            act = QAction(text, self, checkable=checkable)
            if shortcut:
                act.setShortcut(shortcut)
            act.triggered.connect(slot)
            menu.addAction(act)
            return act

        add(filem, "Open Workspace Folder…", self.choose_workspace, "Ctrl+O")
        filem.addSeparator()
        add(filem, "New Note", self.create_note, "Ctrl+N")
        add(filem, "New Folder…", self.create_folder, "Ctrl+Shift+N")
        add(filem, "Rename Note…", self.rename_selected, "F2")
        add(filem, "Move Note to Trash", self.delete_selected, "Ctrl+Backspace")
        filem.addSeparator()
        add(filem, "Save", self.save_now, "Ctrl+S")

        navm = self.menuBar().addMenu("Go")
        add(navm, "Enclosing Folder", self.go_up, "Alt+Up")
        add(navm, "Reload", self.store.refresh, "F5")

        viewm = self.menuBar().addMenu("View")
        self._act_preview = add(viewm, "Preview", self._toggle_preview, "Ctrl+E", checkable=True)
        self._act_blocks = add(
            viewm, "Simple Preview (no Markdown extensions)", self._toggle_block_mode, checkable=True
        )
        self._act_blocks.setChecked(self.renderer.mode == "blocks")

    # ───────────────────────── actions ─────────────────────────

    def choose_workspace(self) -> None:
        self.autosave.flush()
        start = str(self.store.workspace_root or Path.home())
        path = QFileDialog.getExistingDirectory(self, "Select Notes Workspace", start)
        if not path:
            log.info("Workspace selection cancelled")
            return
        if self.store.set_workspace_root(path):
            safe_set_setting(self._settings, SettingsKeys.WORKSPACE_DIR, str(self.store.workspace_root))

    def create_note(self) -> None:
        self.autosave.flush()
        self.store.create_note()

    def create_folder(self) -> None:
        if not self.store.has_workspace:
            return
        name = ask_text(self, title="New Folder", label="Folder name:")
        if name:
            self.store.create_folder(name)

    def rename_selected(self) -> None:
        note = self.store.selected_note
        if note is None:
            return
        name = ask_text(self, title="Rename Note", label="New name:", text=note.title)
        if not name:
            return
        self.autosave.flush()
        self.store.rename_note(note, name)

    def delete_selected(self) -> None:
        note = self.store.selected_note
        if note is None or not confirm_trash(self, filename=note.filename):
            return
        self.autosave.cancel()
        self.store.delete_note(note)

    def save_now(self) -> None:
        note = self.store.selected_note
        if note is None:
            return
        self.autosave.cancel()
        self.store.save_note(note)

    def go_up(self) -> None:
        self.autosave.flush()
        self.store.navigate_up()

    def _toggle_preview(self, checked: bool) -> None:
        if checked:
            self._render_preview()
        self.stack.setCurrentWidget(self.preview if checked else self.editor)
        safe_set_setting(self._settings, SettingsKeys.PREVIEW_VISIBLE, bool(checked))

    def _toggle_block_mode(self, checked: bool) -> None:
        self.renderer.set_mode("blocks" if checked else "markdown")
        safe_set_setting(self._settings, SettingsKeys.PREVIEW_MODE, self.renderer.mode)
        self._render_preview()

    # ───────────────────────── store -> widgets ─────────────────────────

    def _rebuild_breadcrumbs(self) -> None:
        while self._crumbs_layout.count():
            item = self._crumbs_layout.takeAt(0)
            if item.widget() is not None:
                item.widget().deleteLater()

        trail = self.store.breadcrumb_trail()
        for i, path in enumerate(trail):
            if i:
                self._crumbs_layout.addWidget(QLabel("›"))
            btn = QToolButton()
            btn.setText(path.name or str(path))
            btn.setAutoRaise(True)
            btn.clicked.connect(lambda _=False, p=path: self._jump_to(p))
            self._crumbs_layout.addWidget(btn)
        self._crumbs_layout.addStretch(1)

    def _jump_to(self, path: Path) -> None:
        self.autosave.flush()
        self.store.navigate_to(path)

    def _show_entries(self, entries: tuple[DirectoryEntry, ...]) -> None:
        dir_icon = self.style().standardIcon(QStyle.SP_DirIcon)
        file_icon = self.style().standardIcon(QStyle.SP_FileIcon)
        with blocked_signals(self.entries_list):
            self.entries_list.clear()
            for entry in entries:
                item = QListWidgetItem(dir_icon if entry.is_directory else file_icon, entry.name)
                item.setData(_ROLE_PAYLOAD, entry)
                if not entry.is_directory and not entry.is_markdown_note:
                    item.setFlags(item.flags() & ~Qt.ItemIsSelectable)
                self.entries_list.addItem(item)

    def _show_notes(self, notes: tuple[Note, ...]) -> None:
        with blocked_signals(self.notes_list):
            self.notes_list.clear()
            for note in notes:
                item = QListWidgetItem(note.title)
                item.setToolTip(note.last_modified.strftime("%Y-%m-%d %H:%M:%S"))
                item.setData(_ROLE_PAYLOAD, note.note_id)
                self.notes_list.addItem(item)

    def _show_selection(self, note: Note | None) -> None:
        with blocked_signals(self.editor):
            if note is None:
                self.editor.clear()
            elif note.content != self.editor.toPlainText():
                self.editor.setPlainText(note.content)
        self.editor.setEnabled(note is not None)
        self.title_label.setText(note.title if note is not None else "No Note Selected")
        if self._act_preview.isChecked():
            self._render_preview()

    # ───────────────────────── widgets -> store ─────────────────────────

    def _on_entry_activated(self, item: QListWidgetItem) -> None:
        entry = item.data(_ROLE_PAYLOAD)
        if isinstance(entry, DirectoryEntry) and entry.is_directory:
            self.autosave.flush()
            self.store.navigate_into(entry)

    def _on_entry_clicked(self, item: QListWidgetItem) -> None:
        entry = item.data(_ROLE_PAYLOAD)
        if not isinstance(entry, DirectoryEntry) or not entry.is_markdown_note:
            return
        for note in self.store.notes:
            if note.path == entry.path:
                self._open_note(note)
                return

    def _on_note_clicked(self, item: QListWidgetItem) -> None:
        note = self.store.find_note(item.data(_ROLE_PAYLOAD))
        if note is not None:
            self._open_note(note)

    def _open_note(self, note: Note) -> None:
        current = self.store.selected_note
        if current is not None and current.note_id == note.note_id:
            return
        self.autosave.flush()
        self.store.select(note)

    def _on_text_changed(self) -> None:
        note = self.store.selected_note
        if note is None:
            return
        note.update_content(self.editor.toPlainText())
        self.autosave.schedule(note)
        if self._act_preview.isChecked():
            self.preview_timer.start()

    def _render_preview(self) -> None:
        note = self.store.selected_note
        self.preview.setHtml(self.renderer.render_page(note.content if note else ""))
