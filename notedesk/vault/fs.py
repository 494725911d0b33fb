# notedesk/vault/fs.py

from __future__ import annotations

import os
import re
import uuid
from datetime import datetime
from pathlib import Path

from send2trash import send2trash

from notedesk.core.errors import (
    CreateCollision,
    DirectoryUnreadable,
    FileUnreadable,
    MoveFailed,
    WriteFailed,
)
from notedesk.core.models import DirectoryEntry

# ".<name>.tmp-<uuid hex>" left behind by atomic_write_text
TEMP_FILE_RE = re.compile(r"^\..+\.tmp-[0-9a-f]{32}$")

# ───────────────────────── listing / reading ─────────────────────────


def _sort_key(entry: DirectoryEntry) -> tuple[int, str, str]:
    # directories first, then case-insensitive name; raw name breaks ties
    return (0 if entry.is_directory else 1, entry.name.casefold(), entry.name)


def list_directory(directory: Path) -> list[DirectoryEntry]:
    """
    Children of `directory`, directories first, each group sorted by name
    (case-insensitive). Dot-files are listed; only our own atomic-write temp
    files are skipped. Raises DirectoryUnreadable.
    """
    directory = Path(directory)
    entries: list[DirectoryEntry] = []
    try:
        with os.scandir(directory) as it:
            for de in it:
                if TEMP_FILE_RE.match(de.name):
                    continue
                try:
                    is_dir = de.is_dir()
                except OSError:
                    is_dir = False
                entries.append(DirectoryEntry(path=directory / de.name, is_directory=is_dir))
    except OSError as e:
        raise DirectoryUnreadable(f"Cannot list directory: {directory}: {e}", path=directory) from e

    entries.sort(key=_sort_key)
    return entries


def read_note_file(path: Path) -> tuple[str, datetime]:
    """Return (text, mtime). Raises FileUnreadable."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
        mtime = datetime.fromtimestamp(path.stat().st_mtime)
    except (OSError, UnicodeDecodeError) as e:
        raise FileUnreadable(f"Cannot read note: {path}: {e}", path=path) from e
    return text, mtime


def is_readable_directory(path: Path) -> bool:
    path = Path(path)
    return path.is_dir() and os.access(path, os.R_OK | os.X_OK)


# ───────────────────────── writing ─────────────────────────


def atomic_write_text(path: Path, text: str, *, encoding: str = "utf-8") -> None:
    """
    Atomic-ish file write:
    - write to temp file in same directory
    - fsync
    - replace()

    Prevents partial writes on crash/power loss. Raises WriteFailed.
    """
    path = Path(path)
    parent = path.parent

    tmp_name = f".{path.name}.tmp-{uuid.uuid4().hex}"
    tmp_path = parent / tmp_name

    f = None
    try:
        f = open(tmp_path, "w", encoding=encoding, newline="")
        f.write(text)
        f.flush()
        os.fsync(f.fileno())
        f.close()
        f = None

        tmp_path.replace(path)

    except OSError as e:
        raise WriteFailed(f"Cannot write: {path}: {e}", path=path) from e

    finally:
        try:
            if f is not None:
                f.close()
        except OSError:
            pass

        try:
            if tmp_path.exists():
                tmp_path.unlink()
        except OSError:
            pass


def create_text_file(path: Path, text: str, *, encoding: str = "utf-8") -> None:
    """
    Write a brand-new file. Never overwrites: an existing target raises
    CreateCollision, any other failure WriteFailed.
    """
    path = Path(path)
    try:
        with open(path, "x", encoding=encoding, newline="") as f:
            f.write(text)
    except FileExistsError as e:
        raise CreateCollision(f"Already exists: {path}", path=path) from e
    except OSError as e:
        raise WriteFailed(f"Cannot create: {path}: {e}", path=path) from e


def create_directory(path: Path) -> None:
    path = Path(path)
    try:
        path.mkdir()
    except FileExistsError as e:
        raise CreateCollision(f"Already exists: {path}", path=path) from e
    except OSError as e:
        raise WriteFailed(f"Cannot create folder: {path}: {e}", path=path) from e


# ───────────────────────── moving ─────────────────────────


def move_file(src: Path, dst: Path) -> None:
    """Same-directory rename. Refuses to overwrite. Raises MoveFailed."""
    src, dst = Path(src), Path(dst)
    # exists() is case-insensitive on macOS/Windows: allow a case-only rename
    if dst.exists() and not _same_file(src, dst):
        raise MoveFailed(f"Target already exists: {dst}", path=dst)
    try:
        src.rename(dst)
    except OSError as e:
        raise MoveFailed(f"Cannot move {src} -> {dst}: {e}", path=src) from e


def _same_file(a: Path, b: Path) -> bool:
    try:
        return os.path.samefile(a, b)
    except OSError:
        return False


def move_to_trash(path: Path) -> None:
    """OS-native trash / recycle bin. Never unlinks. Raises MoveFailed."""
    path = Path(path)
    if not path.exists():
        raise MoveFailed(f"Nothing to trash: {path}", path=path)
    try:
        send2trash(str(path))
    except OSError as e:
        raise MoveFailed(f"Cannot move to trash: {path}: {e}", path=path) from e
