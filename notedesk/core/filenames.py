# notedesk/core/filenames.py

from __future__ import annotations

import re
import unicodedata
from datetime import datetime

from notedesk.core.errors import InvalidName
from notedesk.settings import NEW_NOTE_PREFIX, NEW_NOTE_TIME_FORMAT, NOTE_EXTENSION


WINDOWS_RESERVED_NAMES = {
    "con", "prn", "aux", "nul",
    *(f"com{i}" for i in range(1, 10)),
    *(f"lpt{i}" for i in range(1, 10)),
}

SEPARATORS_RE = re.compile(r"[/\\]")
WHITESPACE_RE = re.compile(r"\s+")

MAX_FILENAME_LENGTH = 255


def clean_entry_name(name: str | None) -> str:
    """
    Validate a user-typed file/folder name for a same-directory create or rename.

    Unlike a title slug, the name is never rewritten into something else:
    it is normalized (NFKC, control chars dropped, whitespace collapsed and
    trimmed) and then either accepted or rejected with InvalidName.
    """
    if name is None:
        raise InvalidName("Name is empty")

    # 1. Unicode normalization (visual equality → binary equality)
    s = unicodedata.normalize("NFKC", str(name))

    # 2. Remove control characters
    s = "".join(ch for ch in s if unicodedata.category(ch)[0] != "C")

    # 3. Trim and normalize whitespace
    s = WHITESPACE_RE.sub(" ", s).strip()

    if not s or s in (".", ".."):
        raise InvalidName(f"Invalid name: {name!r}")

    # 4. Same-directory only
    if SEPARATORS_RE.search(s):
        raise InvalidName(f"Name must not contain path separators: {name!r}")

    # 5. Windows reserved device names
    base = s.split(".", 1)[0].strip().lower()
    if base in WINDOWS_RESERVED_NAMES:
        raise InvalidName(f"Reserved name: {name!r}")

    if len(s) > MAX_FILENAME_LENGTH:
        raise InvalidName(f"Name is too long ({len(s)} chars)")

    return s


def note_filename_for(base_name: str | None) -> str:
    """'foo' -> 'foo.md', 'foo.md' stays as is (case-insensitive check)."""
    s = clean_entry_name(base_name)
    if not s.lower().endswith(NOTE_EXTENSION):
        s = f"{s}{NOTE_EXTENSION}"
    return s


def new_note_filename(now: datetime | None = None) -> str:
    """`New Note <YYYY-MM-DD HH-mm-ss>.md`, local time, second precision."""
    ts = (now or datetime.now()).strftime(NEW_NOTE_TIME_FORMAT)
    return f"{NEW_NOTE_PREFIX} {ts}{NOTE_EXTENSION}"


def initial_note_text(title: str) -> str:
    return f"# {title}\n\n"
