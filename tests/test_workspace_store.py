import os
from datetime import datetime
from pathlib import Path

import pytest

from notedesk.core.errors import DirectoryUnreadable
from notedesk.core.models import DirectoryEntry, Note
from notedesk.workspace.store import WorkspaceStore


def names(entries):
    return [e.name for e in entries]


def open_store(root):
    store = WorkspaceStore()
    assert store.set_workspace_root(root)
    return store


def record_failures(store):
    failures = []
    store.operationFailed.connect(lambda kind, msg: failures.append(kind))
    return failures


def set_mtime(path, ts):
    os.utime(path, (ts, ts))


# ───────────────────────── opening / listing ─────────────────────────


def test_open_scenario(workspace):
    store = open_store(workspace)

    assert store.workspace_root == workspace
    assert store.current_directory == workspace
    assert names(store.entries) == ["sub", "a.md"]
    assert [e.is_directory for e in store.entries] == [True, False]
    assert [(n.filename, n.content) for n in store.notes] == [("a.md", "hello")]
    assert store.selected_note is None


def test_navigate_into_and_back_up(workspace):
    store = open_store(workspace)
    sub = store.entries[0]

    assert store.navigate_into(sub)
    assert store.current_directory == workspace / "sub"
    assert store.entries == ()
    assert store.notes == ()

    assert store.navigate_up()
    assert store.current_directory == workspace
    assert names(store.entries) == ["sub", "a.md"]
    assert [n.content for n in store.notes] == ["hello"]


def test_entries_sorted_dirs_first_case_insensitive(tmp_path):
    (tmp_path / "b_dir").mkdir()
    (tmp_path / "A_dir").mkdir()
    for name in ("c.md", "B.md", "a.txt"):
        (tmp_path / name).write_text("x", encoding="utf-8")

    store = open_store(tmp_path)

    assert names(store.entries) == ["A_dir", "b_dir", "a.txt", "B.md", "c.md"]
    assert len(store.entries) == 5
    assert sorted(n.filename for n in store.notes) == ["B.md", "c.md"]


def test_dot_files_are_listed(workspace):
    (workspace / ".hidden.md").write_text("secret", encoding="utf-8")
    (workspace / ".git").mkdir()

    store = open_store(workspace)

    assert names(store.entries) == [".git", "sub", ".hidden.md", "a.md"]
    assert sorted(n.filename for n in store.notes) == [".hidden.md", "a.md"]


def test_atomic_write_leftovers_not_listed(workspace):
    (workspace / (".a.md.tmp-" + "0" * 32)).write_text("partial", encoding="utf-8")

    store = open_store(workspace)

    assert names(store.entries) == ["sub", "a.md"]
    assert [n.filename for n in store.notes] == ["a.md"]


def test_notes_sorted_most_recent_first(tmp_path):
    for name in ("old.md", "newest.md", "middle.md"):
        (tmp_path / name).write_text(name, encoding="utf-8")
    set_mtime(tmp_path / "old.md", 1_000_000)
    set_mtime(tmp_path / "middle.md", 2_000_000)
    set_mtime(tmp_path / "newest.md", 3_000_000)

    store = open_store(tmp_path)

    assert [n.filename for n in store.notes] == ["newest.md", "middle.md", "old.md"]
    assert store.notes[0].last_modified == datetime.fromtimestamp(3_000_000)


def test_unreadable_note_is_skipped(workspace):
    (workspace / "broken.md").write_bytes(b"\xff\xfe\xfa not utf-8")

    store = open_store(workspace)

    assert [n.filename for n in store.notes] == ["a.md"]
    assert "broken.md" in names(store.entries)


def test_open_unreadable_root_keeps_previous_state(workspace, tmp_path):
    store = open_store(workspace)
    failures = record_failures(store)

    assert not store.set_workspace_root(tmp_path / "does-not-exist")
    assert not store.set_workspace_root(workspace / "a.md")

    assert failures == ["DirectoryUnreadable", "DirectoryUnreadable"]
    assert store.workspace_root == workspace
    assert names(store.entries) == ["sub", "a.md"]


def test_set_workspace_root_clears_selection(workspace, tmp_path):
    store = open_store(workspace)
    store.select(store.notes[0])
    other = tmp_path / "other"
    other.mkdir()

    assert store.set_workspace_root(other)
    assert store.selected_note is None
    assert store.current_directory == other


def test_clear_workspace(workspace):
    store = open_store(workspace)
    store.select(store.notes[0])

    store.clear_workspace()

    assert store.workspace_root is None
    assert store.current_directory is None
    assert store.notes == () and store.entries == ()
    assert store.selected_note is None
    assert not store.has_workspace


def test_refresh_listing_failure_leaves_state(workspace, monkeypatch):
    store = open_store(workspace)
    failures = record_failures(store)
    before = store.entries

    def boom(directory, **kwargs):
        raise DirectoryUnreadable("nope", path=directory)

    monkeypatch.setattr("notedesk.workspace.store.fs.list_directory", boom)

    assert not store.refresh()
    assert store.entries == before
    assert failures == ["DirectoryUnreadable"]


def test_refresh_keeps_note_identity(workspace):
    store = open_store(workspace)
    note_id = store.notes[0].note_id
    (workspace / "a.md").write_text("changed on disk", encoding="utf-8")

    store.refresh()

    assert store.notes[0].note_id == note_id
    assert store.notes[0].content == "changed on disk"


def test_signals_emitted_on_open(workspace):
    store = WorkspaceStore()
    seen = []
    store.workspaceChanged.connect(lambda p: seen.append(("workspace", p)))
    store.directoryChanged.connect(lambda p: seen.append(("directory", p)))
    store.entriesChanged.connect(lambda e: seen.append(("entries", len(e))))
    store.notesChanged.connect(lambda n: seen.append(("notes", len(n))))

    store.set_workspace_root(workspace)

    assert ("workspace", workspace) in seen
    assert ("directory", workspace) in seen
    assert ("entries", 2) in seen
    assert ("notes", 1) in seen


# ───────────────────────── navigation ─────────────────────────


def test_navigate_up_at_root_is_noop(workspace):
    store = open_store(workspace)
    seen = []
    store.directoryChanged.connect(seen.append)
    store.entriesChanged.connect(seen.append)
    entries, notes = store.entries, store.notes

    assert not store.navigate_up()

    assert store.current_directory == workspace
    assert store.entries == entries
    assert [n.note_id for n in store.notes] == [n.note_id for n in notes]
    assert seen == []


def test_navigate_into_file_is_noop(workspace):
    store = open_store(workspace)
    file_entry = store.entries[1]

    assert not store.navigate_into(file_entry)
    assert store.current_directory == workspace


def test_breadcrumb_trail(workspace):
    (workspace / "sub" / "deeper").mkdir()
    store = open_store(workspace)
    assert store.breadcrumb_trail() == [workspace]

    store.navigate_into(store.entries[0])
    store.navigate_into(store.entries[0])

    assert store.current_directory == workspace / "sub" / "deeper"
    assert store.breadcrumb_trail() == [workspace, workspace / "sub", workspace / "sub" / "deeper"]


def test_breadcrumb_trail_without_workspace():
    assert WorkspaceStore().breadcrumb_trail() == []


def test_navigate_to_ancestor(workspace):
    (workspace / "sub" / "deeper").mkdir()
    store = open_store(workspace)
    store.navigate_to(workspace / "sub" / "deeper")

    assert store.navigate_to(workspace)
    assert store.current_directory == workspace
    assert names(store.entries) == ["sub", "a.md"]


def test_navigate_to_outside_root_refused(workspace, tmp_path):
    store = open_store(workspace)
    store.navigate_into(store.entries[0])

    assert not store.navigate_to(tmp_path)
    assert not store.navigate_to(workspace / ".." / "..")
    assert store.current_directory == workspace / "sub"


def test_navigate_into_entry_escaping_root_refused(workspace, tmp_path):
    (tmp_path / "outside").mkdir()
    store = open_store(workspace)
    escaping = DirectoryEntry(path=workspace / "sub" / ".." / ".." / "outside", is_directory=True)

    assert not store.navigate_into(escaping)
    assert store.current_directory == workspace
    assert store.breadcrumb_trail() == [workspace]


def test_navigate_into_unreadable_directory_keeps_state(workspace, monkeypatch):
    store = open_store(workspace)
    sub = store.entries[0]

    def boom(directory, **kwargs):
        raise DirectoryUnreadable("nope", path=directory)

    monkeypatch.setattr("notedesk.workspace.store.fs.list_directory", boom)

    assert not store.navigate_into(sub)
    assert store.current_directory == workspace
    assert names(store.entries) == ["sub", "a.md"]


# ───────────────────────── create ─────────────────────────


def test_create_note(workspace):
    store = open_store(workspace)
    now = datetime(2024, 3, 5, 7, 8, 9)

    note = store.create_note(now=now)

    assert note is not None
    assert note.filename == "New Note 2024-03-05 07-08-09.md"
    assert note.path.parent == workspace
    assert note.path.read_text(encoding="utf-8") == "# New Note 2024-03-05 07-08-09\n\n"
    assert store.notes[0] is note
    assert store.selected_note is note
    assert "New Note 2024-03-05 07-08-09.md" in names(store.entries)


def test_create_note_same_second_collides(workspace):
    store = open_store(workspace)
    failures = record_failures(store)
    now = datetime(2024, 3, 5, 7, 8, 9)
    first = store.create_note(now=now)
    first.path.write_text("edited", encoding="utf-8")
    count = len(store.notes)

    assert store.create_note(now=now) is None

    assert failures == ["CreateCollision"]
    assert len(store.notes) == count
    assert store.selected_note is first
    assert first.path.read_text(encoding="utf-8") == "edited"


def test_create_note_without_workspace():
    assert WorkspaceStore().create_note() is None


def test_create_folder(workspace):
    store = open_store(workspace)

    path = store.create_folder("  Projects ")

    assert path == workspace / "Projects"
    assert path.is_dir()
    assert names(store.entries) == ["Projects", "sub", "a.md"]


@pytest.mark.parametrize("name, kind", [
    ("", "InvalidName"),
    ("a/b", "InvalidName"),
    ("sub", "CreateCollision"),
])
def test_create_folder_failures(workspace, name, kind):
    store = open_store(workspace)
    failures = record_failures(store)
    before = names(store.entries)

    assert store.create_folder(name) is None
    assert failures == [kind]
    assert names(store.entries) == before


# ───────────────────────── save ─────────────────────────


def test_create_save_refresh_round_trip(workspace):
    store = open_store(workspace)
    note = store.create_note(now=datetime(2024, 3, 5, 7, 8, 9))

    note.update_content("# Changed\n\nbody")
    assert store.save_note(note)
    store.refresh()

    reloaded = [n for n in store.notes if n.path == note.path]
    assert len(reloaded) == 1
    assert reloaded[0].content == "# Changed\n\nbody"
    assert reloaded[0].note_id == note.note_id


def test_save_replaces_note_by_id(workspace):
    store = open_store(workspace)
    snap = store.notes[0].snapshot()
    snap.update_content("new text")

    assert store.save_note(snap)

    assert store.notes[0].content == "new text"
    assert store.notes[0].note_id == snap.note_id
    assert (workspace / "a.md").read_text(encoding="utf-8") == "new text"


def test_save_failure_leaves_memory(workspace):
    store = open_store(workspace)
    failures = record_failures(store)
    stray = Note(path=workspace / "missing-dir" / "x.md", content="data")

    assert not store.save_note(stray)
    assert failures == ["WriteFailed"]
    assert [n.content for n in store.notes] == ["hello"]


def test_save_does_not_leave_temp_files(workspace):
    store = open_store(workspace)
    note = store.notes[0]
    note.update_content("v2")
    store.save_note(note)

    assert sorted(p.name for p in workspace.iterdir()) == ["a.md", "sub"]


# ───────────────────────── rename ─────────────────────────


def test_rename_then_refresh(workspace):
    store = open_store(workspace)
    note = store.notes[0]
    store.select(note)

    renamed = store.rename_note(note, "foo")

    assert renamed is not None
    assert renamed.path == workspace / "foo.md"
    assert renamed.note_id == note.note_id
    assert store.selected_note.path == workspace / "foo.md"

    store.refresh()
    assert "a.md" not in names(store.entries)
    assert "foo.md" in names(store.entries)
    assert [(n.filename, n.content) for n in store.notes] == [("foo.md", "hello")]
    assert not (workspace / "a.md").exists()


def test_rename_keeps_md_suffix(workspace):
    store = open_store(workspace)
    renamed = store.rename_note(store.notes[0], "bar.md")
    assert renamed.filename == "bar.md"


def test_rename_onto_existing_fails(workspace):
    (workspace / "b.md").write_text("other", encoding="utf-8")
    store = open_store(workspace)
    failures = record_failures(store)
    note = next(n for n in store.notes if n.filename == "a.md")

    assert store.rename_note(note, "b") is None

    assert failures == ["MoveFailed"]
    assert (workspace / "a.md").read_text(encoding="utf-8") == "hello"
    assert (workspace / "b.md").read_text(encoding="utf-8") == "other"
    assert sorted(n.filename for n in store.notes) == ["a.md", "b.md"]


def test_rename_invalid_name(workspace):
    store = open_store(workspace)
    failures = record_failures(store)

    assert store.rename_note(store.notes[0], "   ") is None
    assert store.rename_note(store.notes[0], "../escape") is None
    assert failures == ["InvalidName", "InvalidName"]
    assert (workspace / "a.md").exists()


def test_rename_to_same_name_is_noop(workspace):
    store = open_store(workspace)
    failures = record_failures(store)

    assert store.rename_note(store.notes[0], "a") is None
    assert failures == []
    assert (workspace / "a.md").exists()


def test_pending_save_after_rename_follows_new_path(workspace):
    store = open_store(workspace)
    note = store.notes[0]
    stale = note.snapshot()
    store.rename_note(note, "foo")

    stale.update_content("typed before rename")
    assert store.save_note(stale)

    assert not (workspace / "a.md").exists()
    assert (workspace / "foo.md").read_text(encoding="utf-8") == "typed before rename"
    assert store.notes[0].path == workspace / "foo.md"


# ───────────────────────── delete ─────────────────────────


def test_delete_moves_to_trash(workspace, fake_trash):
    store = open_store(workspace)
    note = store.notes[0]
    store.select(note)

    assert store.delete_note(note)

    assert store.notes == ()
    assert "a.md" not in names(store.entries)
    assert store.selected_note is None
    assert not (workspace / "a.md").exists()
    assert (fake_trash / "a.md").read_text(encoding="utf-8") == "hello"


def test_delete_keeps_other_selection(workspace, fake_trash):
    (workspace / "b.md").write_text("b", encoding="utf-8")
    store = open_store(workspace)
    a = next(n for n in store.notes if n.filename == "a.md")
    b = next(n for n in store.notes if n.filename == "b.md")
    store.select(b)

    store.delete_note(a)

    assert store.selected_note is b


def test_save_after_delete_does_not_resurrect(workspace, fake_trash):
    store = open_store(workspace)
    note = store.notes[0]
    pending = note.snapshot()
    store.delete_note(note)

    assert not store.save_note(pending)
    assert not (workspace / "a.md").exists()


def test_reopening_workspace_forgets_trashed_notes(workspace, fake_trash):
    store = open_store(workspace)
    note = store.notes[0]
    pending = note.snapshot()
    store.delete_note(note)

    assert store.set_workspace_root(workspace)
    pending.update_content("written after reopen")
    assert store.save_note(pending)
    assert (workspace / "a.md").read_text(encoding="utf-8") == "written after reopen"


def test_clear_workspace_forgets_trashed_notes(workspace, fake_trash):
    store = open_store(workspace)
    pending = store.notes[0].snapshot()
    store.delete_note(store.notes[0])

    store.clear_workspace()
    store.set_workspace_root(workspace)

    assert store.save_note(pending)
    assert (workspace / "a.md").read_text(encoding="utf-8") == "hello"


def test_delete_failure_leaves_state(workspace, monkeypatch):
    def refuse(path):
        raise PermissionError("trash unavailable")

    monkeypatch.setattr("notedesk.vault.fs.send2trash", refuse)
    store = open_store(workspace)
    failures = record_failures(store)
    note = store.notes[0]
    store.select(note)

    assert not store.delete_note(note)

    assert failures == ["MoveFailed"]
    assert store.notes[0] is note
    assert store.selected_note is note
    assert (workspace / "a.md").exists()


# ───────────────────────── select ─────────────────────────


def test_select_and_clear(workspace):
    store = open_store(workspace)
    seen = []
    store.selectionChanged.connect(seen.append)
    note = store.notes[0]

    store.select(note.snapshot())
    assert store.selected_note is note

    store.select(None)
    assert store.selected_note is None
    assert seen == [note, None]


def test_select_foreign_note_ignored(workspace):
    store = open_store(workspace)
    store.select(Note(path=Path("/elsewhere/x.md")))
    assert store.selected_note is None
